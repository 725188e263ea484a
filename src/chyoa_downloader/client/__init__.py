"""Page sources for loading chapter pages and images."""

from .base import PageSource
from .browser import BrowserSession
from .http import HttpPageSource, ProbeResult


__all__ = ["BrowserSession", "HttpPageSource", "PageSource", "ProbeResult"]
