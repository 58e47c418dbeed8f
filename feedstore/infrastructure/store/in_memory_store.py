"""In-memory reference implementation of the FeedStore interface."""

import logging
from datetime import datetime
from typing import Optional

from feedstore.domain.exceptions import FeedStoreError
from feedstore.domain.interfaces.feed_store import FeedStore
from feedstore.domain.models.feed import CachedFeed, FeedInput
from feedstore.domain.models.retrieval import Empty, Found, RetrievalResult

logger = logging.getLogger(__name__)


class InMemoryFeedStore(FeedStore):
    """Keeps the slot in process memory. Never fails; lost on exit."""

    def __init__(self):
        self._cache: Optional[CachedFeed] = None
        logger.info("InMemoryFeedStore initialized.")

    async def retrieve(self) -> RetrievalResult:
        if self._cache is None:
            logger.debug("In-memory slot is empty.")
            return Empty()
        logger.debug(f"In-memory slot hit: {len(self._cache.feed)} records")
        return Found.from_cache(self._cache)

    async def insert(self, feed: FeedInput, timestamp: datetime) -> Optional[FeedStoreError]:
        self._cache = CachedFeed(feed=feed, timestamp=timestamp)
        logger.debug(f"Stored {len(self._cache.feed)} records in memory.")
        return None

    async def delete_cached_feed(self) -> Optional[FeedStoreError]:
        self._cache = None
        logger.debug("Cleared in-memory slot.")
        return None
