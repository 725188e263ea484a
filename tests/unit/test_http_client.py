"""Tests for the async HTTP page source."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest
import respx

from chyoa_downloader.client import HttpPageSource
from chyoa_downloader.client.base import is_challenge_page, random_delay, status_error_message
from chyoa_downloader.utils.exceptions import FetchError, ImageError


URL = "https://chyoa.com/chapter/The-Start.1"
IMG = "https://chyoa.com/images/a.png"

# Real pages are large; pad so they do not look like a bare login form
CHAPTER_HTML = "<html><body>" + "<p>story</p>" * 2000 + "</body></html>"


@pytest.fixture
def cookie_header():
    return "laravel_session=abc123; XSRF-TOKEN=xyz"


class TestHttpPageSourceInit:
    """Tests for client setup."""

    @pytest.mark.asyncio
    async def test_default_headers(self, config):
        async with HttpPageSource(config) as source:
            headers = source._client.headers
            assert "Mozilla" in headers["User-Agent"]
            assert headers["Referer"] == "https://chyoa.com"
            assert "Cookie" not in headers

    @pytest.mark.asyncio
    async def test_cookie_header_set(self, config, cookie_header):
        async with HttpPageSource(config, cookie_header) as source:
            assert source._client.headers["Cookie"] == cookie_header


class TestGetHtml:
    """Tests for HttpPageSource.get_html."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_success(self, config):
        respx.get(URL).mock(return_value=httpx.Response(200, text=CHAPTER_HTML))

        async with HttpPageSource(config) as source:
            assert await source.get_html(URL) == CHAPTER_HTML

    @pytest.mark.asyncio
    @respx.mock
    async def test_cookie_sent(self, config, cookie_header):
        route = respx.get(URL).mock(return_value=httpx.Response(200, text=CHAPTER_HTML))

        async with HttpPageSource(config, cookie_header) as source:
            await source.get_html(URL)

        assert route.calls.last.request.headers["Cookie"] == cookie_header

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "message"),
        [
            (401, "Authentication required"),
            (403, "Access forbidden"),
            (404, "not found"),
            (500, "Server error"),
            (418, "HTTP error 418"),
        ],
    )
    async def test_error_statuses(self, config, status, message):
        with respx.mock:
            respx.get(URL).mock(return_value=httpx.Response(status, text="<html>oops</html>"))

            async with HttpPageSource(config) as source:
                with pytest.raises(FetchError, match=message):
                    await source.get_html(URL)

    @pytest.mark.asyncio
    @respx.mock
    async def test_forbidden_login_page(self, config):
        html = "<form>login password</form>"
        respx.get(URL).mock(return_value=httpx.Response(403, text=html))

        async with HttpPageSource(config) as source:
            with pytest.raises(FetchError, match=r"Authentication required \(403\)"):
                await source.get_html(URL)

    @pytest.mark.asyncio
    @respx.mock
    async def test_cloudflare_challenge(self, config):
        html = "<html><title>Just a moment...</title></html>"
        respx.get(URL).mock(return_value=httpx.Response(503, text=html))

        async with HttpPageSource(config) as source:
            with pytest.raises(FetchError, match="Cloudflare"):
                await source.get_html(URL)

    @pytest.mark.asyncio
    @respx.mock
    async def test_login_redirect(self, config):
        html = "<form action='/login'><input name='password'></form>"
        respx.get(URL).mock(return_value=httpx.Response(200, text=html))

        async with HttpPageSource(config) as source:
            with pytest.raises(FetchError, match="login page"):
                await source.get_html(URL)

    @pytest.mark.asyncio
    @respx.mock
    async def test_network_error(self, config):
        respx.get(URL).mock(side_effect=httpx.ConnectError("boom"))

        async with HttpPageSource(config) as source:
            with pytest.raises(FetchError, match="Network error"):
                await source.get_html(URL)


class TestGetBytes:
    """Tests for HttpPageSource.get_bytes."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_success(self, config, png_bytes):
        respx.get(IMG).mock(return_value=httpx.Response(200, content=png_bytes))

        async with HttpPageSource(config) as source:
            assert await source.get_bytes(IMG) == png_bytes

    @pytest.mark.asyncio
    @respx.mock
    async def test_error_status(self, config):
        respx.get(IMG).mock(return_value=httpx.Response(404))

        async with HttpPageSource(config) as source:
            with pytest.raises(ImageError, match="HTTP 404"):
                await source.get_bytes(IMG)

    @pytest.mark.asyncio
    @respx.mock
    async def test_empty_body(self, config):
        respx.get(IMG).mock(return_value=httpx.Response(200, content=b""))

        async with HttpPageSource(config) as source:
            with pytest.raises(ImageError, match="Empty"):
                await source.get_bytes(IMG)


class TestProbe:
    """Tests for the diagnostic probe."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_probe_ok(self, config):
        respx.get("https://chyoa.com/").mock(return_value=httpx.Response(200, text="<html/>"))

        async with HttpPageSource(config) as source:
            result = await source.probe("https://chyoa.com/")

        assert result.status_code == 200
        assert result.length == len("<html/>")
        assert result.ok

    @pytest.mark.asyncio
    @respx.mock
    async def test_probe_challenged(self, config):
        html = "<title>Just a moment...</title>"
        respx.get("https://chyoa.com/").mock(return_value=httpx.Response(403, text=html))

        async with HttpPageSource(config) as source:
            result = await source.probe("https://chyoa.com/")

        assert result.challenged
        assert not result.ok


class TestHelpers:
    """Tests for shared page-source helpers."""

    def test_challenge_markers(self):
        assert is_challenge_page("<script src='/cdn-cgi/challenge-platform/x'></script>")
        assert not is_challenge_page("<p>story</p>")

    def test_success_status_has_no_message(self):
        assert status_error_message(200, URL) is None
        assert status_error_message(302, URL) is None


class TestPacing:
    """Tests for the random delay between page loads."""

    @pytest.fixture
    def paced_config(self, config):
        return config.model_copy(update={"delay_min": 1, "delay_max": 2})

    @pytest.mark.asyncio
    @respx.mock
    async def test_delay_before_each_page(self, paced_config):
        respx.get(URL).mock(return_value=httpx.Response(200, text=CHAPTER_HTML))

        with patch("chyoa_downloader.client.base.asyncio.sleep", new_callable=AsyncMock) as sleep:
            async with HttpPageSource(paced_config) as source:
                await source.get_html(URL)
                await source.get_html(URL)

        assert sleep.await_count == 2
        for call in sleep.await_args_list:
            assert 1 <= call.args[0] <= 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_no_delay_for_images(self, paced_config):
        respx.get(IMG).mock(return_value=httpx.Response(200, content=b"\x89PNG"))

        with patch("chyoa_downloader.client.base.asyncio.sleep", new_callable=AsyncMock) as sleep:
            async with HttpPageSource(paced_config) as source:
                await source.get_bytes(IMG)

        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_zero_range_skips_sleep(self):
        with patch("chyoa_downloader.client.base.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await random_delay(0, 0)
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fixed_delay(self):
        with patch("chyoa_downloader.client.base.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await random_delay(3, 3)
        sleep.assert_awaited_once_with(3)
