"""Rich summary output for finished downloads."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..downloader import DownloadResult
from ..parser import extract_author
from .constants import EMOJI_MAP, STYLES


def build_chain_table(result: DownloadResult) -> Table:
    """One row per chapter: position, title, author and localized images."""
    table = Table(show_header=True, box=None, padding=(0, 1))
    table.add_column("#", style="dim", justify="right", no_wrap=True)
    table.add_column("Title", style=STYLES["story_title"])
    table.add_column("Author", style="white")
    table.add_column("Images", justify="right")

    for index, chapter in enumerate(result.chapters):
        author = extract_author(chapter.source.body_html) or "-"
        table.add_row(
            f"{index:02d}",
            escape(chapter.title),
            escape(author),
            str(len(chapter.images)),
        )
    return table


def show_summary(console: Console, result: DownloadResult) -> None:
    """Print the chain table and where the files went."""
    panel = Panel(
        build_chain_table(result),
        title=f"[{STYLES['success']}]{EMOJI_MAP['chain']} Story Chain[/]",
        border_style="green",
        padding=(1, 2),
    )
    console.print()
    console.print(panel)
    console.print(
        f"[bold green]{EMOJI_MAP['complete']} Download complete![/bold green] "
        f"{len(result.files)} file(s), {result.image_count} image(s) in "
        f"[green]{escape(str(result.output_dir))}[/green]"
    )
