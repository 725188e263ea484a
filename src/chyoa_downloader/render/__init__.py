"""Markdown rendering for chapter bodies."""

from .markdown import MarkdownRenderer, html_to_markdown


__all__ = ["MarkdownRenderer", "html_to_markdown"]
