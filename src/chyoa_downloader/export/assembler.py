"""
Export Assembler - writes a rendered chapter chain to disk.
"""

import logging
from pathlib import Path

from ..models import ExportConfig, LayoutMode, LocalizedChapter, RenderedChapter
from ..parser import extract_author, extract_authors
from ..render import MarkdownRenderer
from ..utils.text import sanitize_filename


logger = logging.getLogger(__name__)


class ExportAssembler:
    """
    Writes localized chapters as Markdown or JSON.

    This class handles:
    - One Markdown file per chapter (``00_title.md``, ``01_title.md``, ...)
    - A single combined Markdown file with a metadata header
    - A JSON document nesting each chapter under its parent
    """

    def __init__(self, config: ExportConfig, renderer: MarkdownRenderer | None = None):
        """
        Initialize the assembler.

        Args:
            config: Export configuration (output directory and layout)
            renderer: Markdown renderer (default: MarkdownRenderer())
        """
        self.config = config
        self.output_dir = Path(config.output_dir)
        self.renderer = renderer or MarkdownRenderer()

    def export(self, chapters: list[LocalizedChapter]) -> list[Path]:
        """
        Write the chain in the configured layout.

        Args:
            chapters: Localized chapters, oldest ancestor first

        Returns:
            Paths of the files written
        """
        if not chapters:
            logger.warning("Nothing to export")
            return []

        self.output_dir.mkdir(parents=True, exist_ok=True)

        if self.config.layout is LayoutMode.JSON:
            return [self._write_json(chapters)]
        if self.config.layout is LayoutMode.COMBINED:
            return [self._write_combined(chapters)]
        return [self._write_chapter(chapter, index) for index, chapter in enumerate(chapters)]

    def _write(self, filename: str, content: str) -> Path:
        path = self.output_dir / filename
        path.write_text(content, encoding="utf-8")
        logger.info("Saved: %s", filename)
        return path

    def _write_chapter(self, chapter: LocalizedChapter, index: int) -> Path:
        """Write one chapter as ``NN_<title>.md``."""
        markdown = self.renderer.render(chapter.body_html)
        author = extract_author(chapter.source.body_html)
        author_line = f"**Author:** {author}\n" if author else ""

        content = (
            f"# {chapter.title}\n\n"
            f"{author_line}**Source URL:** {chapter.url}\n\n"
            f"---\n\n"
            f"{markdown}\n"
        )
        filename = f"{index:02d}_{sanitize_filename(chapter.title)}.md"
        return self._write(filename, content)

    def _write_combined(self, chapters: list[LocalizedChapter]) -> Path:
        """Write every chapter into ``<first title>_complete.md``."""
        logger.info("Combining %d stories into a single file", len(chapters))

        authors: dict[str, None] = {}
        sections = []
        last = len(chapters) - 1
        for index, chapter in enumerate(chapters):
            markdown = self.renderer.render(chapter.body_html)
            for name in extract_authors(chapter.source.body_html):
                authors.setdefault(name, None)

            separator = "\n---\n\n" if index < last else ""
            sections.append(
                f"# Chapter {index + 1}: {chapter.title}\n\n"
                f"**Source URL:** {chapter.url}\n\n"
                f"---\n\n"
                f"{markdown}\n\n"
                f"{separator}"
            )

        main_title = chapters[0].title
        authors_line = f"**Authors:** {', '.join(authors)}\n" if authors else ""
        source_urls = "\n".join(f"- {chapter.url}" for chapter in chapters)
        header = (
            f"# {main_title} - Complete Story\n\n"
            f"{authors_line}**Total Chapters:** {len(chapters)}\n"
            f"**Source URLs:**\n{source_urls}\n\n"
            f"---\n\n"
        )

        filename = f"{sanitize_filename(main_title)}_complete.md"
        return self._write(filename, header + "".join(sections))

    def build_rendered_chain(self, chapters: list[LocalizedChapter]) -> RenderedChapter | None:
        """Render each chapter and link them, oldest ancestor at the head."""
        rendered = [
            RenderedChapter(
                title=chapter.title,
                author=extract_author(chapter.source.body_html),
                content=self.renderer.render(chapter.body_html),
            )
            for chapter in chapters
        ]
        return RenderedChapter.link(rendered)

    def _write_json(self, chapters: list[LocalizedChapter]) -> Path:
        """Write ``<first title>_chapters.json`` holding only the root node."""
        head = self.build_rendered_chain(chapters)
        if head is None:
            document = "[]\n"
        else:
            logger.info("Saving %d chapters as JSON", head.length())
            document = f"[\n{head.to_json()}\n]\n"

        filename = f"{sanitize_filename(chapters[0].title)}_chapters.json"
        return self._write(filename, document)
