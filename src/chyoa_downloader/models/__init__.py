"""Data models for chyoa-downloader."""

from .chapter import Chapter, LocalImage, LocalizedChapter, RenderedChapter
from .config import ChyoaConfig, ExportConfig, ImageMode, LayoutMode
from .session import SessionData


__all__ = [
    "Chapter",
    "ChyoaConfig",
    "ExportConfig",
    "ImageMode",
    "LayoutMode",
    "LocalImage",
    "LocalizedChapter",
    "RenderedChapter",
    "SessionData",
]
