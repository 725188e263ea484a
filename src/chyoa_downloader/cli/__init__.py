"""
chyoa-downloader CLI module.

This module provides a Click-based command-line interface for chyoa-downloader.
"""

from .commands import cli, main


__all__ = ["cli", "main"]
