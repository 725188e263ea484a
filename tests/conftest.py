"""Shared pytest fixtures and configuration for chyoa-downloader tests."""

import io
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from PIL import Image

from chyoa_downloader.models import ChyoaConfig
from chyoa_downloader.utils.exceptions import FetchError, ImageError


BASE = "https://chyoa.com"


def chapter_url(title: str, chapter_id: int) -> str:
    return f"{BASE}/chapter/{title}.{chapter_id}"


def make_page(
    title: str,
    body: str = "<p>Some story text.</p>",
    parent_url: str | None = None,
) -> str:
    """Render a minimal CHYOA chapter page."""
    nav = f'<a href="{parent_url}">Previous Chapter</a>' if parent_url else ""
    return f"""
    <!DOCTYPE html>
    <html>
    <head><title>{title} - CHYOA</title></head>
    <body>
        <header><a href="/auth/login">Login</a></header>
        <h1 class="chapter-title">{title}</h1>
        <div class="chapter-content">{body}</div>
        <div class="controls">{nav}<a href="/chapter/Next.999">Next Chapter</a></div>
    </body>
    </html>
    """


class FakePageSource:
    """In-memory page source recording every request."""

    def __init__(
        self,
        pages: dict[str, str] | None = None,
        images: dict[str, bytes] | None = None,
    ):
        self.pages = pages or {}
        self.images = images or {}
        self.html_requests: list[str] = []
        self.byte_requests: list[str] = []
        self.closed = False

    async def __aenter__(self) -> "FakePageSource":
        return self

    async def __aexit__(self, *args: Any) -> None:
        self.closed = True

    async def get_html(self, url: str) -> str:
        self.html_requests.append(url)
        if url not in self.pages:
            raise FetchError(f"Story not found (404): {url}. Please check the URL.")
        return self.pages[url]

    async def get_bytes(self, url: str) -> bytes:
        self.byte_requests.append(url)
        if url not in self.images:
            raise ImageError(f"Failed to load {url}: HTTP 404")
        return self.images[url]


@pytest.fixture
def page_factory() -> Callable[..., str]:
    """Builds chapter page HTML."""
    return make_page


@pytest.fixture
def url_factory() -> Callable[[str, int], str]:
    """Builds chapter URLs."""
    return chapter_url


@pytest.fixture
def fake_source_class() -> type[FakePageSource]:
    """The in-memory page source class."""
    return FakePageSource


@pytest.fixture
def png_bytes() -> bytes:
    """A small real PNG image."""
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color="red").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def config(tmp_path: Path) -> ChyoaConfig:
    """Configuration writing under a temporary directory, with no pacing delay."""
    return ChyoaConfig(
        output_dir=tmp_path / "stories",
        session_file=tmp_path / "session.json",
        delay_min=0,
        delay_max=0,
        use_browser=False,
        timeout=10,
    )


@pytest.fixture
def sample_chapter_html() -> str:
    """Sample chapter page with images, author link and navigation."""
    return """
    <!DOCTYPE html>
    <html>
    <head><title>The Beginning - CHYOA</title></head>
    <body>
        <div class="meta"><a href="/user/outsider">Outsider</a></div>
        <h1 class="chapter-title">The Beginning</h1>
        <div class="chapter-content">
            <p>Written by <a href="https://chyoa.com/user/alice">alice</a></p>
            <p>It was a <b>dark</b> and stormy night.</p>
            <img src="/images/stories/pic.jpg" alt="A picture">
            <img src="/data/avatars/l/1.jpg">
            <img src="https://chyoa.com/assets/img/default.jpg">
        </div>
        <nav>
            <img src="/images/nav.png">
            <a href="https://chyoa.com/chapter/Prologue.100">Previous Chapter</a>
        </nav>
    </body>
    </html>
    """


def pytest_collection_modifyitems(config, items):
    """Auto-mark tests based on location."""
    for item in items:
        # Auto-mark integration tests
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        # Auto-mark unit tests
        elif "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
