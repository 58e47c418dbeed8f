"""Interface for single-slot feed cache storage.

Defines the contract every storage backend (in-memory, file snapshot,
embedded database) implements, so callers and the contract test suite
depend only on these three operations.
"""

import abc
from datetime import datetime
from typing import Optional

from feedstore.domain.exceptions import FeedStoreError
from feedstore.domain.models.feed import FeedInput
from feedstore.domain.models.retrieval import RetrievalResult


class FeedStore(abc.ABC):
    """Abstract Base Class for the cached feed slot."""

    @abc.abstractmethod
    async def retrieve(self) -> RetrievalResult:
        """Reads the slot asynchronously without modifying it.

        Returns:
            `Empty()` if nothing is cached (including storage that was never
            created), `Found(feed, timestamp)` with the last inserted values,
            or `Failure(error)` if the storage exists but cannot be read.
            Storage failures are never raised.
        """
        pass

    @abc.abstractmethod
    async def insert(self, feed: FeedInput, timestamp: datetime) -> Optional[FeedStoreError]:
        """Replaces the slot contents with `feed` and `timestamp`.

        Args:
            feed: The ordered records to cache. May be empty.
            timestamp: The insertion time to store alongside the feed.

        Returns:
            None on success, otherwise the error. On error the slot is left
            exactly as it was.
        """
        pass

    @abc.abstractmethod
    async def delete_cached_feed(self) -> Optional[FeedStoreError]:
        """Clears the slot. Deleting an empty slot succeeds.

        Returns:
            None on success, otherwise the error. On error the slot is left
            exactly as it was.
        """
        pass
