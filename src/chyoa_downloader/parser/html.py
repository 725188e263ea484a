"""HTML parser for CHYOA chapter pages."""

import re
from typing import Any

from bs4 import BeautifulSoup

from ..models import Chapter
from ..utils.text import (
    BASE_URL,
    chapter_id,
    is_valid_story_image,
    make_absolute_url,
    sanitize_title,
)


# Constants
TITLE_SELECTORS = ("h1.chapter-title", ".chapter-title", "h1", ".story-title")
CONTENT_SELECTOR = ".chapter-content"
PAGE_TITLE_SUFFIX = " - CHYOA"
DEFAULT_TITLE = "Untitled Story"
PARENT_LINK_TEXT = "Previous Chapter"
CHAPTER_PATH = "/chapter/"
AUTHOR_LINK_SELECTOR = "a[href*='/user/']"


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def extract_authors(body_html: str) -> list[str]:
    """Names of all user-profile links in a chapter body, first-seen order, no repeats."""
    if not body_html.strip():
        return []
    authors: dict[str, None] = {}
    for link in _soup(body_html).select(AUTHOR_LINK_SELECTOR):
        name = link.get_text().strip()
        if name:
            authors.setdefault(name, None)
    return list(authors)


def extract_author(body_html: str) -> str | None:
    """Text of the first user-profile link in a chapter body."""
    authors = extract_authors(body_html)
    return authors[0] if authors else None


class ChapterExtractor:
    """Extracts a Chapter from a CHYOA chapter page."""

    def __init__(self, base_url: str = BASE_URL):
        """Initialize the extractor.

        Args:
            base_url: Site root used to resolve relative links
        """
        self.base_url = base_url

    def _extract_title(self, soup: BeautifulSoup) -> str:
        """Extract the chapter title.

        Tries the heading selectors in order, then the page title with the
        site suffix removed. A leading ``Chapter N`` label is dropped.

        Args:
            soup: BeautifulSoup parsed page

        Returns:
            Sanitized title, or ``Untitled Story`` if nothing usable is found
        """
        title = ""
        for selector in TITLE_SELECTORS:
            element = soup.select_one(selector)
            if element is not None:
                title = element.get_text().strip()
                if title:
                    break

        if not title and soup.title is not None:
            title = soup.title.get_text().replace(PAGE_TITLE_SUFFIX, "").strip()

        title = re.sub(r"Chapter \d+", "", title, count=1).strip()
        return sanitize_title(title) or DEFAULT_TITLE

    def _extract_content(self, soup: BeautifulSoup) -> Any:
        """Return the chapter content container, or None if the page has none.

        Only this container counts as chapter content; navigation and
        comments live outside it.
        """
        return soup.select_one(CONTENT_SELECTOR)

    def _extract_images(self, content: Any) -> list[str]:
        """Collect story image URLs and make every ``<img src>`` absolute.

        The rewrite lets later stages find image references in the body by
        exact string match.

        Args:
            content: Chapter content container (modified in place)

        Returns:
            Absolute URLs of real story images, in document order
        """
        images: list[str] = []
        for img in content.find_all("img"):
            src = img.get("src")
            if not src or not isinstance(src, str):
                continue
            absolute_url = make_absolute_url(src, self.base_url)
            img["src"] = absolute_url
            if is_valid_story_image(src):
                images.append(absolute_url)
        return images

    def _extract_parent_url(self, soup: BeautifulSoup, url: str) -> str | None:
        """Find the "Previous Chapter" link pointing at a different chapter.

        Args:
            soup: BeautifulSoup parsed page
            url: URL the page was loaded from

        Returns:
            Absolute parent URL, or None for a root chapter
        """
        current_id = chapter_id(url)
        for link in soup.find_all("a", href=True):
            href = link["href"]
            if not isinstance(href, str) or CHAPTER_PATH not in href or href == url:
                continue
            if link.get_text().strip() != PARENT_LINK_TEXT:
                continue
            link_id = chapter_id(href)
            if link_id and link_id != current_id:
                return make_absolute_url(href, self.base_url)
        return None

    def parse(self, html: str, url: str) -> Chapter:
        """Parse a chapter page.

        Args:
            html: Full page HTML
            url: URL the page was loaded from

        Returns:
            Chapter with title, body HTML, image URLs and parent link
        """
        soup = _soup(html)

        title = self._extract_title(soup)
        parent_url = self._extract_parent_url(soup, url)

        content = self._extract_content(soup)
        if content is None:
            body_html = ""
            images: list[str] = []
        else:
            images = self._extract_images(content)
            body_html = content.decode_contents()

        return Chapter(
            url=url,
            title=title,
            body_html=body_html,
            image_urls=images,
            parent_url=parent_url,
        )
