"""HTML to Markdown conversion for chapter bodies."""

import re
from typing import Any

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from ..utils.exceptions import RenderError
from ..utils.text import collapse_whitespace, unescape_basic_entities


_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]*>")
_EXTRA_NEWLINES_RE = re.compile(r"\n\s*\n\s*\n+")
# An image immediately followed by a capitalized sentence lost its paragraph break
_IMAGE_THEN_SENTENCE_RE = re.compile(r"!\[([^\]]*)\]\(([^)]*)\)\s*([A-Z])")


class MarkdownRenderer:
    """Renders chapter body HTML as Markdown.

    The conversion is deliberately small: images, bold/italic and
    paragraphs survive, hyperlinks are reduced to their text and every
    other tag is stripped.

    Example:
        renderer = MarkdownRenderer()
        renderer.render("<p>a &amp; b</p>")  # "a & b"
    """

    def render(self, body_html: str) -> str:
        """Convert ``body_html`` to Markdown.

        Image ``src`` values are used as they appear, so localized
        references must already be in the HTML.

        Args:
            body_html: Chapter body HTML (a fragment)

        Returns:
            Markdown text; empty for empty or whitespace-only input

        Raises:
            RenderError: If the HTML parser rejects the markup outright
        """
        if not body_html or not body_html.strip():
            return ""

        try:
            soup = BeautifulSoup(body_html, "lxml")
        except ParserRejectedMarkup as e:
            raise RenderError(f"Could not parse chapter HTML: {e}") from e

        self._replace_images(soup)
        self._replace_emphasis(soup)
        self._unwrap_links(soup)

        markdown = self._render_paragraphs(soup)
        if not markdown.strip():
            markdown = collapse_whitespace(soup.get_text())

        return self._tidy(markdown)

    @staticmethod
    def _replace_images(soup: Any) -> None:
        for img in soup.find_all("img"):
            src = img.get("src")
            if not src:
                continue
            alt = img.get("alt") or ""
            img.replace_with(f"![{alt}]({src})")

    @staticmethod
    def _replace_emphasis(soup: Any) -> None:
        # Nested markup is flattened to text, not rendered recursively
        for tag in soup.find_all(["strong", "b"]):
            tag.replace_with(f"**{tag.get_text()}**")
        for tag in soup.find_all(["em", "i"]):
            tag.replace_with(f"*{tag.get_text()}*")

    @staticmethod
    def _unwrap_links(soup: Any) -> None:
        for link in soup.find_all("a"):
            link.replace_with(link.get_text())

    @staticmethod
    def _render_paragraphs(soup: Any) -> str:
        paragraphs = []
        for p in soup.find_all("p"):
            inner = p.decode_contents()
            if not inner.strip():
                continue
            text = _BR_RE.sub(" ", inner)
            text = _TAG_RE.sub("", text)
            text = collapse_whitespace(unescape_basic_entities(text))
            if text:
                paragraphs.append(text + "\n\n")
        return "".join(paragraphs)

    @staticmethod
    def _tidy(markdown: str) -> str:
        markdown = _EXTRA_NEWLINES_RE.sub("\n\n", markdown)
        markdown = _IMAGE_THEN_SENTENCE_RE.sub(r"![\1](\2)\n\n\3", markdown)
        return markdown.strip()


def html_to_markdown(body_html: str) -> str:
    """Convert chapter body HTML to Markdown with the default renderer."""
    return MarkdownRenderer().render(body_html)
