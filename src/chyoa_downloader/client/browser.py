"""Playwright-backed page source sharing one authenticated browser page."""

import logging
from typing import Any
from urllib.parse import urlparse

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from ..models import ChyoaConfig
from ..utils.exceptions import AuthenticationError, FetchError, ImageError
from .base import DEFAULT_USER_AGENT, random_delay, status_error_message


logger = logging.getLogger(__name__)

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
]
VIEWPORT = {"width": 1366, "height": 768}

# Milliseconds
SETTLE_DELAY = 2000
CHALLENGE_WAIT = 10000
IMAGE_TIMEOUT = 15000


def parse_cookie_header(header: str, domain: str) -> list[dict[str, str]]:
    """Split a ``name=value; name2=value2`` header into Playwright cookies.

    Pairs without a name or a value are dropped.
    """
    cookies = []
    for pair in header.split(";"):
        name, _, value = pair.strip().partition("=")
        name, value = name.strip(), value.strip()
        if name and value:
            cookies.append({"name": name, "value": value, "domain": domain, "path": "/"})
    return cookies


def cookie_domain(base_url: str) -> str:
    """Cookie domain covering the site and its subdomains."""
    host = urlparse(base_url).hostname or ""
    return f".{host.removeprefix('www.')}"


class BrowserSession:
    """One Chromium browser, context and page used for the whole run.

    The session is the only route to the site: chapter pages and images are
    both loaded through the same page so they share cookies and any
    Cloudflare clearance.

    Example:
        async with BrowserSession(config) as session:
            await session.apply_cookies("laravel_session=abc")
            html = await session.get_html(url)
    """

    def __init__(self, config: ChyoaConfig, headless: bool | None = None):
        """Initialize the session without launching anything.

        Args:
            config: Application configuration
            headless: Override ``config.headless``
        """
        self._config = config
        self.headless = config.headless if headless is None else headless
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    async def __aenter__(self) -> "BrowserSession":
        try:
            await self.start()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser not initialized")
        return self._page

    async def start(self) -> None:
        """Launch the browser and open a page.

        Raises:
            FetchError: If Chromium cannot be launched
        """
        logger.debug("Starting browser (headless=%s)", self.headless)
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless, args=BROWSER_ARGS
            )
            self._context = await self._browser.new_context(
                user_agent=DEFAULT_USER_AGENT,
                viewport=VIEWPORT,  # type: ignore[arg-type]
            )
            self._context.set_default_navigation_timeout(self._config.timeout * 1000)
            self._page = await self._context.new_page()
        except PlaywrightError as e:
            raise FetchError(
                f"Could not start the browser: {e}. "
                "Run 'playwright install chromium' if it is not installed."
            ) from e

    async def close(self) -> None:
        """Close the browser; safe to call more than once."""
        if self._browser is not None:
            logger.debug("Closing browser")
            await self._browser.close()
        if self._playwright is not None:
            await self._playwright.stop()
        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None

    async def restart(self, headless: bool) -> None:
        """Relaunch the browser (e.g. visibly for a manual login), keeping cookies.

        If the new browser cannot be launched, the previous mode is
        restored so the session stays usable.

        Raises:
            AuthenticationError: If the relaunch fails or cookies cannot be carried over
        """
        previous = self.headless
        try:
            cookies = await self._context.cookies() if self._context is not None else []
        except PlaywrightError as e:
            raise AuthenticationError(f"Could not read browser cookies: {e}") from e
        await self.close()
        self.headless = headless
        try:
            await self.start()
        except FetchError as e:
            await self.close()
            self.headless = previous
            await self.start()
            raise AuthenticationError(str(e)) from e
        if cookies and self._context is not None:
            try:
                await self._context.add_cookies(cookies)  # type: ignore[arg-type]
            except PlaywrightError as e:
                raise AuthenticationError(f"Could not restore browser cookies: {e}") from e

    async def apply_cookies(self, header: str) -> int:
        """Install cookies from a header string and reload the site.

        Returns:
            Number of cookies installed

        Raises:
            AuthenticationError: If the site cannot be loaded or the cookies are rejected
        """
        cookies = parse_cookie_header(header, cookie_domain(self._config.base_url))
        if not cookies:
            return 0
        try:
            await self.page.goto(self._config.base_url, wait_until="networkidle")
            await self.page.context.add_cookies(cookies)  # type: ignore[arg-type]
            logger.info("Set %d authentication cookies", len(cookies))
            await self.page.reload(wait_until="networkidle")
        except PlaywrightError as e:
            raise AuthenticationError(f"Could not apply session cookies: {e}") from e
        return len(cookies)

    async def cookie_header(self) -> str:
        """Current browser cookies as a ``name=value; ...`` header."""
        try:
            cookies = await self.page.context.cookies()
        except PlaywrightError as e:
            raise AuthenticationError(f"Could not read browser cookies: {e}") from e
        return "; ".join(f"{cookie['name']}={cookie['value']}" for cookie in cookies)

    async def is_authenticated(self) -> bool:
        """Check the home page for a profile link and no login link."""
        try:
            await self.page.goto(self._config.base_url, wait_until="networkidle")
            profile_link = await self.page.query_selector('a[href*="/user/"]')
            login_link = await self.page.query_selector('a[href*="/login"]')
        except PlaywrightError as e:
            logger.warning("Error checking authentication: %s", e)
            return False
        return profile_link is not None and login_link is None

    async def open_login_page(self) -> None:
        try:
            await self.page.goto(f"{self._config.base_url}/auth/login", wait_until="networkidle")
        except PlaywrightError as e:
            raise AuthenticationError(f"Could not open the login page: {e}") from e

    async def get_html(self, url: str) -> str:
        """Load ``url`` in the page and return the rendered HTML.

        Raises:
            FetchError: On navigation failures, error statuses, or a
                Cloudflare challenge that does not clear
        """
        await random_delay(self._config.delay_min, self._config.delay_max)
        logger.debug("Fetching with browser: %s", url)

        try:
            response = await self.page.goto(url, wait_until="networkidle")
            if response is None:
                raise FetchError(f"Failed to load page: {url}")

            await self.page.wait_for_timeout(SETTLE_DELAY)

            if "Just a moment" in await self.page.title():
                logger.info("Waiting for Cloudflare challenge to complete...")
                await self.page.wait_for_timeout(CHALLENGE_WAIT)
                if "Just a moment" in await self.page.title():
                    raise FetchError(
                        "Cloudflare challenge did not complete. "
                        "The page may require manual verification."
                    )
                # The challenge redirects back to the page, so the first status is stale
            else:
                message = status_error_message(response.status, url)
                if message:
                    raise FetchError(message)

            html = await self.page.content()
        except PlaywrightError as e:
            raise FetchError(f"Browser navigation failed for {url}: {e}") from e

        if "Just a moment..." in html or "__cf_chl_" in html:
            raise FetchError(
                "Still being challenged by Cloudflare after waiting. "
                "Try using fresh cookies or waiting longer."
            )

        logger.debug("Loaded page (%d characters)", len(html))
        return html

    async def get_bytes(self, url: str) -> bytes:
        """Load ``url`` with the session's cookies and return the response body.

        Raises:
            ImageError: On navigation failures, error statuses or empty bodies
        """
        try:
            response = await self.page.goto(url, wait_until="networkidle", timeout=IMAGE_TIMEOUT)
            if response is None or not response.ok:
                status = response.status if response is not None else "unknown"
                raise ImageError(f"Failed to load {url}: HTTP {status}")
            body = await response.body()
        except PlaywrightError as e:
            raise ImageError(f"Browser failed to load {url}: {e}") from e

        if not body:
            raise ImageError(f"Empty image body for {url}")
        return body
