"""Markdown and JSON export for chyoa-downloader."""

from .assembler import ExportAssembler


__all__ = ["ExportAssembler"]
