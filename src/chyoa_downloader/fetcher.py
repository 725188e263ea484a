"""Chapter fetching: page source + extraction rules."""

import logging

from .client.base import PageSource
from .models import Chapter
from .parser import ChapterExtractor
from .utils.exceptions import FetchError


logger = logging.getLogger(__name__)


class ContentFetcher:
    """Loads chapter pages through a page source and parses them.

    No caching: every call performs a fresh page load.
    """

    def __init__(self, source: PageSource, extractor: ChapterExtractor | None = None):
        self.source = source
        self.extractor = extractor or ChapterExtractor()

    async def fetch(self, url: str) -> Chapter:
        """Fetch and parse one chapter.

        Raises:
            FetchError: If the page cannot be loaded
        """
        try:
            html = await self.source.get_html(url)
        except FetchError as e:
            logger.error("Error fetching story data from %s: %s", url, e)
            raise
        chapter = self.extractor.parse(html, url)
        logger.debug(
            "Parsed %r (%d images, parent=%s)",
            chapter.title,
            len(chapter.image_urls),
            chapter.parent_url,
        )
        return chapter
