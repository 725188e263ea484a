"""
Click-based CLI commands for chyoa-downloader.

This module provides the command-line interface:
- Downloading a chapter and its ancestor chain
- Connectivity and cookie diagnostics
- Saved-session management
"""

import asyncio
import sys
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from .. import __version__
from ..auth import AuthManager, SessionStore
from ..client import HttpPageSource, ProbeResult
from ..display import EMOJI_MAP, STYLES, get_valid_log_levels, setup_rich_logger, show_summary
from ..downloader import ChyoaDownloader
from ..models import ChyoaConfig, LayoutMode
from ..utils.exceptions import ConfigError, FetchError


# Initialize Rich console for pretty output
console = Console()

LOGGER_NAME = "chyoa_downloader"


# Custom Click types
class ChapterURLType(click.ParamType):
    """Custom Click type for validating chapter URLs."""

    name = "chapter_url"

    def convert(self, value: str, param: click.Parameter | None, ctx: click.Context | None) -> str:
        """Validate that the value looks like a chapter URL."""
        if not value.startswith(("http://", "https://")):
            self.fail(
                f"{value!r} is not a valid URL (must start with http:// or https://)", param, ctx
            )
        if "/chapter/" not in value:
            # Warn but don't fail - story landing pages may still have a chapter body
            console.print(
                f"[yellow]Warning:[/yellow] {escape(value)} does not look like a chapter URL. "
                f"This may or may not work.",
                style="yellow",
            )
        return value


CHAPTER_URL = ChapterURLType()


def _error(message: str) -> None:
    console.print(f"[{STYLES['error']}]Error:[/] {escape(message)}", style="red")


def _load_config(**overrides: Any) -> ChyoaConfig:
    """Build the configuration from environment/.env plus explicit overrides."""
    try:
        return ChyoaConfig(**{k: v for k, v in overrides.items() if v is not None})
    except ValidationError as e:
        _error(f"Invalid configuration:\n{e}")
        sys.exit(1)


def _confirm(message: str) -> bool:
    return click.confirm(message, default=True)


def _pause(message: str) -> None:
    click.prompt(message, default="", show_default=False, prompt_suffix=" ")


@click.group(invoke_without_command=True)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """
    chyoa-download - Download CHYOA chapters and their ancestors as Markdown.

    Follows "Previous Chapter" links from the given chapter back to the
    beginning of the story and saves every chapter, with its images.

    \b
    Authentication:
    - Pages are loaded in a real browser to get past Cloudflare
    - Log in interactively when asked, or pass a cookie header with -c
    - The session is saved and reused for 24 hours

    \b
    Examples:
      # Download a chapter and its ancestors
      chyoa-download download "https://chyoa.com/chapter/example.12345"

      # Everything in one Markdown file
      chyoa-download download "https://chyoa.com/chapter/example.12345" --single-file

      # JSON export with images embedded as base64
      chyoa-download download "https://chyoa.com/chapter/example.12345" --json-file --embed-images
    """
    # If no subcommand is given, show help
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        ctx.exit()


@cli.command()
@click.argument("url", type=CHAPTER_URL)
@click.option(
    "--cookie",
    "-c",
    default=None,
    help='Session cookie header for authentication, e.g. "laravel_session=...; other=...".',
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Base directory for downloaded stories.  [default: downloaded_stories]",
)
@click.option(
    "--no-browser",
    is_flag=True,
    default=False,
    help="Use direct HTTP requests instead of a browser (usually blocked by Cloudflare).",
)
@click.option(
    "--no-convert",
    is_flag=True,
    default=False,
    help="Keep original image formats instead of converting to WebP.",
)
@click.option(
    "--embed-images",
    is_flag=True,
    default=False,
    help="Embed images as base64 data URIs instead of saving them to files.",
)
@click.option(
    "--single-file",
    is_flag=True,
    default=False,
    help="Save all chapters to a single Markdown file.",
)
@click.option(
    "--json-file",
    is_flag=True,
    default=False,
    help="Export chapters as JSON (mutually exclusive with --single-file).",
)
@click.option(
    "--no-interactive",
    is_flag=True,
    default=False,
    help="Never offer an interactive login; continue unauthenticated instead.",
)
@click.option(
    "--log-level",
    type=click.Choice(get_valid_log_levels(), case_sensitive=False),
    default=None,
    help="Set the logging level for detailed output.  [default: INFO]",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write log output to this file.",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    default=False,
    help="Suppress all output except errors.",
)
def download(
    url: str,
    cookie: str | None,
    output_dir: Path | None,
    no_browser: bool,
    no_convert: bool,
    embed_images: bool,
    single_file: bool,
    json_file: bool,
    no_interactive: bool,
    log_level: str | None,
    log_file: Path | None,
    quiet: bool,
) -> None:
    """
    Download a chapter and all of its ancestors.

    \b
    Output:
    - <output-dir>/<story title>/NN_<chapter>.md, one per chapter (default)
    - <title>_complete.md with --single-file
    - <title>_chapters.json with --json-file
    - images/ next to them unless --embed-images is given
    """
    # Conflicting layout flags are rejected before anything else happens
    try:
        layout = LayoutMode.from_flags(single_file, json_file)
    except ConfigError as e:
        _error(str(e))
        sys.exit(1)

    config = _load_config(
        output_dir=output_dir,
        use_browser=False if no_browser else None,
        convert_images=False if no_convert else None,
        embed_images=True if embed_images else None,
        log_level=log_level,
        log_file=log_file,
    )
    logger = setup_rich_logger(LOGGER_NAME, config.log_level, log_file=config.log_file, quiet=quiet)

    if config.use_browser:
        logger.debug("Using a browser to get past Cloudflare protection")
    else:
        logger.info("Using direct HTTP requests (may be blocked by Cloudflare)")

    store = SessionStore(config.session_file, config.session_max_age_hours)
    auth = AuthManager(store, cookie=cookie, confirm=_confirm, pause=_pause)
    downloader = ChyoaDownloader(config, layout, auth=auth, interactive=not no_interactive)

    try:
        result = asyncio.run(downloader.download(url))
    except FetchError as e:
        logger.debug("Download failed", exc_info=True)
        _error(str(e))
        sys.exit(1)

    if not quiet:
        show_summary(console, result)


def _print_probe(result: ProbeResult) -> None:
    console.print(f"Response status: {result.status_code}")
    console.print(f"Response length: {result.length} characters")
    console.print(f"Cloudflare challenge: {'YES' if result.challenged else 'NO'}")


@cli.command()
def test_connectivity() -> None:
    """Check that the site answers plain HTTP requests (no download)."""
    config = _load_config()

    async def probe() -> ProbeResult:
        async with HttpPageSource(config) as source:
            return await source.probe(config.base_url)

    console.print(f"Testing connectivity to {escape(config.base_url)}...")
    try:
        result = asyncio.run(probe())
    except FetchError as e:
        _error(str(e))
        sys.exit(1)
    _print_probe(result)


@cli.command()
@click.option("--cookie", "-c", required=True, help="Cookie header to test.")
def test_cookies(cookie: str) -> None:
    """Check whether a cookie header is accepted on the profile page."""
    config = _load_config()

    async def probe() -> ProbeResult:
        async with HttpPageSource(config, cookie) as source:
            return await source.probe(f"{config.base_url}/user/profile")

    console.print(f"{EMOJI_MAP['session']} Testing authentication cookies...")
    try:
        result = asyncio.run(probe())
    except FetchError as e:
        _error(str(e))
        sys.exit(1)
    _print_probe(result)

    if result.ok:
        console.print("[bold green]✓ Cookies appear to be working![/bold green]")
    elif result.challenged:
        console.print(
            "[bold red]✗ Still being challenged by Cloudflare.[/bold red] "
            "Try refreshing your cookies or waiting longer."
        )
    else:
        console.print(
            f"[bold yellow]⚠ Unexpected response ({result.status_code}).[/bold yellow] "
            "Your cookies might be expired or invalid."
        )


@cli.command()
def clear_session() -> None:
    """Delete the saved browser session."""
    config = _load_config()
    store = SessionStore(config.session_file, config.session_max_age_hours)
    if store.clear():
        console.print("[bold green]✓ Cleared saved session[/bold green]")
    else:
        console.print("No saved session to clear")


@cli.command()
def version() -> None:
    """Display the version of chyoa-downloader."""
    console.print(f"[bold cyan]chyoa-downloader[/bold cyan] version {__version__}")


# Entry point for the CLI
def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
