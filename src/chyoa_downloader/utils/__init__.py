"""Shared helpers for chyoa-downloader."""

from .exceptions import (
    AuthenticationError,
    ChyoaDownloaderError,
    ConfigError,
    FetchError,
    ImageError,
    RenderError,
)


__all__ = [
    "AuthenticationError",
    "ChyoaDownloaderError",
    "ConfigError",
    "FetchError",
    "ImageError",
    "RenderError",
]
