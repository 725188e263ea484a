"""Ancestor-chain traversal."""

import logging

from .fetcher import ContentFetcher
from .models import Chapter


logger = logging.getLogger(__name__)


class ChainWalker:
    """Follows "Previous Chapter" links back to the root chapter."""

    def __init__(self, fetcher: ContentFetcher):
        self.fetcher = fetcher

    async def walk(self, start_url: str) -> list[Chapter]:
        """Fetch ``start_url`` and all of its ancestors.

        Stops at a chapter without a parent, or when a parent link leads
        back to an already visited URL. Fetch errors propagate.

        Args:
            start_url: URL of the target chapter

        Returns:
            Chapters ordered oldest ancestor first, target last
        """
        visited: set[str] = set()
        chain: list[Chapter] = []
        current_url: str | None = start_url

        while current_url is not None:
            if current_url in visited:
                logger.info("Cycle detected at: %s. Stopping story chain traversal.", current_url)
                break
            visited.add(current_url)

            logger.info("Fetching story data from: %s", current_url)
            chapter = await self.fetcher.fetch(current_url)
            chain.append(chapter)
            current_url = chapter.parent_url

        chain.reverse()
        return chain
