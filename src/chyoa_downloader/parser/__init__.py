"""HTML and content parsing for chyoa-downloader."""

from .html import ChapterExtractor, extract_author, extract_authors


__all__ = ["ChapterExtractor", "extract_author", "extract_authors"]
