"""Async HTTP page source for the CHYOA site."""

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..models import ChyoaConfig
from ..utils.exceptions import FetchError, ImageError
from .base import (
    DEFAULT_USER_AGENT,
    is_challenge_page,
    looks_like_login_page,
    random_delay,
    status_error_message,
)


logger = logging.getLogger(__name__)

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8"


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a single diagnostic request."""

    url: str
    status_code: int
    length: int
    challenged: bool

    @property
    def ok(self) -> bool:
        return self.status_code == 200 and not self.challenged


class HttpPageSource:
    """Async HTTP page source using plain requests and a cookie header.

    This is the lightweight alternative to the browser session. It is
    usually stopped by Cloudflare, but works where the site lets it through.

    Example:
        async with HttpPageSource(config, cookie_header) as source:
            html = await source.get_html("https://chyoa.com/chapter/Intro.1")
    """

    def __init__(self, config: ChyoaConfig, cookie_header: str | None = None):
        """Initialize the async HTTP client.

        Args:
            config: Application configuration
            cookie_header: Optional ``name=value; ...`` cookie header for authentication
        """
        self._config = config
        headers = {
            "User-Agent": DEFAULT_USER_AGENT,
            "Accept": HTML_ACCEPT,
            "Accept-Language": "en-US,en;q=0.5",
            "Upgrade-Insecure-Requests": "1",
            "Referer": config.base_url,
        }
        if cookie_header:
            headers["Cookie"] = cookie_header
        self._client = httpx.AsyncClient(
            timeout=config.timeout,
            follow_redirects=True,
            headers=headers,
        )

    async def __aenter__(self) -> "HttpPageSource":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client and cleanup resources."""
        await self._client.aclose()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type((httpx.NetworkError, httpx.TimeoutException)),
        reraise=True,
    )
    async def _request(self, url: str, **kwargs: Any) -> httpx.Response:
        """GET ``url``, retrying transient transport errors."""
        return await self._client.get(url, **kwargs)

    async def get_html(self, url: str) -> str:
        """Load a chapter page and return its HTML.

        Args:
            url: Page URL

        Returns:
            Page HTML

        Raises:
            FetchError: On network errors, bot challenges, login redirects
                and HTTP error statuses
        """
        await random_delay(self._config.delay_min, self._config.delay_max)

        try:
            response = await self._request(url)
        except httpx.HTTPError as e:
            raise FetchError(f"Network error fetching {url}: {e}") from e

        html = response.text

        if is_challenge_page(html):
            raise FetchError(
                "Blocked by Cloudflare protection. Use the browser mode or fresh cookies."
            )

        status = response.status_code
        if status == 403 and "login" in html and "password" in html:
            raise FetchError(
                "Authentication required (403). "
                "Please provide valid credentials or check your session cookie."
            )
        message = status_error_message(status, url)
        if message:
            raise FetchError(message)

        if looks_like_login_page(html):
            raise FetchError(
                "Redirected to login page. Please provide valid authentication credentials."
            )

        logger.debug("Fetched %s (%d characters)", url, len(html))
        return html

    async def get_bytes(self, url: str) -> bytes:
        """Download raw bytes (images).

        Raises:
            ImageError: On network errors, error statuses or empty bodies
        """
        try:
            response = await self._request(url)
        except httpx.HTTPError as e:
            raise ImageError(f"Network error fetching {url}: {e}") from e

        if response.is_error:
            raise ImageError(f"Failed to load {url}: HTTP {response.status_code}")
        if not response.content:
            raise ImageError(f"Empty response body for {url}")
        return response.content

    async def probe(self, url: str) -> ProbeResult:
        """Request ``url`` once and report status, size and challenge state."""
        try:
            response = await self._request(url)
        except httpx.HTTPError as e:
            raise FetchError(f"Network error fetching {url}: {e}") from e
        html = response.text
        return ProbeResult(
            url=url,
            status_code=response.status_code,
            length=len(html),
            challenged="Just a moment..." in html,
        )
