"""Shared pieces of the page sources (HTTP and browser)."""

import asyncio
import random
from typing import Protocol


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Markers of the Cloudflare interstitial page
CHALLENGE_MARKERS = ("Just a moment...", "__cf_chl_", "challenge-platform")

# Real chapter pages are much larger than the bare login form
LOGIN_PAGE_MAX_LENGTH = 10000


class PageSource(Protocol):
    """Anything that can load a page and fetch raw bytes with the run's session."""

    async def get_html(self, url: str) -> str: ...

    async def get_bytes(self, url: str) -> bytes: ...


def is_challenge_page(html: str) -> bool:
    """Check whether ``html`` is a bot-challenge page instead of content."""
    return any(marker in html for marker in CHALLENGE_MARKERS)


def looks_like_login_page(html: str) -> bool:
    return "login" in html and "password" in html and len(html) < LOGIN_PAGE_MAX_LENGTH


async def random_delay(minimum: float, maximum: float) -> None:
    """Sleep for a random duration in ``[minimum, maximum]`` seconds."""
    if maximum <= 0:
        return
    await asyncio.sleep(random.uniform(minimum, maximum))


def status_error_message(status: int, url: str) -> str | None:
    """Describe an HTTP error status, or None for success statuses."""
    if status == 401:
        return f"Authentication required (401) for {url}. Check your session cookie."
    if status == 403:
        return (
            "Access forbidden (403). This might be due to Cloudflare protection, "
            "an invalid session cookie, or content restrictions."
        )
    if status == 404:
        return f"Story not found (404): {url}. Please check the URL."
    if status >= 500:
        return f"Server error ({status}) fetching {url}"
    if status >= 400:
        return f"HTTP error {status} fetching {url}"
    return None
