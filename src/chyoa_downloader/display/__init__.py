"""
Rich-based display system for chyoa-downloader.

This module provides terminal output using the Rich library:
console logging and the end-of-run summary.
"""

from .constants import EMOJI_MAP, STYLES
from .rich_display import build_chain_table, show_summary
from .rich_logger import get_valid_log_levels, setup_rich_logger


__all__ = [
    "EMOJI_MAP",
    "STYLES",
    "build_chain_table",
    "get_valid_log_levels",
    "setup_rich_logger",
    "show_summary",
]
