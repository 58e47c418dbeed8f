"""FeedStore implementation backed by a `diskcache` embedded database.

The snapshot is kept as encoded JSON text under one fixed slot key in a
SQLite-backed `diskcache.Cache` directory. The cache is opened per
operation and closed again, so a store instance holds no handle between
calls.
"""

import asyncio
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import diskcache as dc

from feedstore.domain.exceptions import (
    CorruptedCacheError,
    DeletionError,
    FeedStoreError,
    InsertionError,
    RetrievalError,
)
from feedstore.domain.interfaces.feed_store import FeedStore
from feedstore.domain.models.common import DEFAULT_SLOT_KEY, SlotKey, StoreLocation
from feedstore.domain.models.feed import CachedFeed, FeedInput
from feedstore.domain.models.retrieval import Empty, Failure, Found, RetrievalResult
from feedstore.infrastructure.store.codec import decode_cached_feed, encode_cached_feed

logger = logging.getLogger(__name__)

# Seconds diskcache waits on a locked database before raising Timeout
DEFAULT_DB_TIMEOUT = 1

# Errors opening or using the database
STORAGE_ERRORS = (OSError, sqlite3.Error, dc.Timeout)


class DiskCacheFeedStore(FeedStore):
    """Persists the slot in a diskcache directory at `location`."""

    def __init__(
        self,
        location: Union[str, Path],
        slot_key: SlotKey = DEFAULT_SLOT_KEY,
        timeout: float = DEFAULT_DB_TIMEOUT,
    ):
        self.location = StoreLocation(Path(location))
        self.slot_key = slot_key
        self.timeout = timeout
        logger.info(f"DiskCacheFeedStore initialized at: {self.location} (slot={slot_key})")

    def _open(self) -> dc.Cache:
        return dc.Cache(str(self.location), timeout=self.timeout)

    async def retrieve(self) -> RetrievalResult:
        try:
            payload = await asyncio.to_thread(self._read)
        except RetrievalError as e:
            logger.warning(f"Failed to read feed cache database {self.location}: {e}")
            return Failure(e)
        if payload is None:
            logger.debug(f"Feed cache database {self.location} holds no feed.")
            return Empty()

        try:
            cache = decode_cached_feed(payload)
        except CorruptedCacheError as e:
            logger.warning(f"Feed cache database {self.location} holds a corrupted slot: {e}")
            return Failure(e)
        return Found.from_cache(cache)

    async def insert(self, feed: FeedInput, timestamp: datetime) -> Optional[FeedStoreError]:
        payload = encode_cached_feed(CachedFeed(feed=feed, timestamp=timestamp))
        try:
            await asyncio.to_thread(self._write, payload)
        except InsertionError as e:
            logger.error(f"Failed to write feed cache database {self.location}: {e}")
            return e
        logger.debug(f"Stored feed snapshot in {self.location} under '{self.slot_key}'")
        return None

    async def delete_cached_feed(self) -> Optional[FeedStoreError]:
        try:
            await asyncio.to_thread(self._clear)
        except DeletionError as e:
            logger.error(f"Failed to clear feed cache database {self.location}: {e}")
            return e
        return None

    # --- Blocking operations, run in a worker thread ---

    def _read(self) -> Optional[str]:
        # Never create the database just to look at it
        if not self.location.exists():
            return None
        try:
            with self._open() as cache:
                return cache.get(self.slot_key, default=None)
        except STORAGE_ERRORS as e:
            raise RetrievalError(f"Cannot open feed cache database {self.location}: {e}") from e

    def _write(self, payload: str) -> None:
        try:
            self.location.parent.mkdir(parents=True, exist_ok=True)
            with self._open() as cache:
                with cache.transact():
                    cache.set(self.slot_key, payload)
        except STORAGE_ERRORS + (ValueError,) as e:
            raise InsertionError(f"Cannot write feed cache database {self.location}: {e}") from e

    def _clear(self) -> None:
        if not self.location.exists():
            logger.debug(f"No feed cache database to clear at {self.location}")
            return
        try:
            with self._open() as cache:
                with cache.transact():
                    removed = cache.delete(self.slot_key)
        except STORAGE_ERRORS as e:
            raise DeletionError(f"Cannot clear feed cache database {self.location}: {e}") from e
        logger.debug(f"Cleared feed cache database {self.location} (had feed: {removed})")
