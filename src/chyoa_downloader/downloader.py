"""Download orchestration: session -> chain -> images -> export."""

import logging
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from pathlib import Path

from .auth import AuthManager
from .chain import ChainWalker
from .client import BrowserSession, HttpPageSource, PageSource
from .export import ExportAssembler
from .fetcher import ContentFetcher
from .images import ImageLocalizer
from .models import ChyoaConfig, LayoutMode, LocalizedChapter
from .parser import ChapterExtractor
from .utils.text import sanitize_filename


logger = logging.getLogger(__name__)


@dataclass
class DownloadResult:
    """What a finished download produced."""

    output_dir: Path
    chapters: list[LocalizedChapter] = field(default_factory=list)
    files: list[Path] = field(default_factory=list)

    @property
    def image_count(self) -> int:
        return sum(len(chapter.images) for chapter in self.chapters)


class ChyoaDownloader:
    """Downloads a chapter and its ancestors in one sequential run.

    A single page source (browser or plain HTTP) is created per run, shared
    by every chapter and image fetch, and closed however the run ends.
    """

    def __init__(
        self,
        config: ChyoaConfig,
        layout: LayoutMode = LayoutMode.SEPARATE,
        auth: AuthManager | None = None,
        interactive: bool = True,
    ):
        """Initialize the downloader.

        Args:
            config: Application configuration
            layout: Resolved export layout
            auth: Authentication manager (browser mode); supplies cookies in HTTP mode
            interactive: Whether a manual login may be offered
        """
        self.config = config
        self.layout = layout
        self.auth = auth
        self.interactive = interactive

    def _open_source(self) -> AbstractAsyncContextManager[PageSource]:
        if self.config.use_browser:
            return BrowserSession(self.config)
        cookie = None
        if self.auth is not None:
            cookie = self.auth.cookie or self.auth.store.load()
        return HttpPageSource(self.config, cookie)

    async def download(self, url: str) -> DownloadResult:
        """Download ``url`` and its ancestor chain.

        Raises:
            FetchError: If any chapter page cannot be fetched
        """
        logger.info("Download starting for: %s", url)
        async with self._open_source() as source:
            if isinstance(source, BrowserSession) and self.auth is not None:
                await self.auth.authenticate(source, interactive=self.interactive)
            return await self.run(source, url)

    async def run(self, source: PageSource, url: str) -> DownloadResult:
        """Walk, localize and export using an already open page source."""
        fetcher = ContentFetcher(source, ChapterExtractor(self.config.base_url))
        chain = await ChainWalker(fetcher).walk(url)
        logger.info("Found %d stories in the chain", len(chain))

        output_dir = self.config.output_dir / sanitize_filename(chain[-1].title)
        export_config = self.config.export_config(output_dir, self.layout)
        output_dir.mkdir(parents=True, exist_ok=True)
        if not export_config.embed_images:
            export_config.images_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Saving to: %s", output_dir)

        localizer = ImageLocalizer(source, export_config)
        localized: list[LocalizedChapter] = []
        for index, chapter in enumerate(chain, start=1):
            logger.info("Downloading story %d/%d: %s", index, len(chain), chapter.title)
            localized.append(await localizer.localize(chapter))

        files = ExportAssembler(export_config).export(localized)
        logger.info("Download completed!")
        return DownloadResult(output_dir=output_dir, chapters=localized, files=files)
