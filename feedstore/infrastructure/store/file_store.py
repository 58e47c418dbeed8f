"""FeedStore implementation backed by a single JSON snapshot file.

Uses `aiofiles` for async reads and writes and `os.replace` for the
atomic swap of a fully written temporary file over the snapshot.
"""

import asyncio
import logging
import os
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import aiofiles

from feedstore.domain.exceptions import (
    CorruptedCacheError,
    DeletionError,
    FeedStoreError,
    InsertionError,
    RetrievalError,
)
from feedstore.domain.interfaces.feed_store import FeedStore
from feedstore.domain.models.common import StoreLocation
from feedstore.domain.models.feed import CachedFeed, FeedInput
from feedstore.domain.models.retrieval import Empty, Failure, Found, RetrievalResult
from feedstore.infrastructure.store.codec import decode_cached_feed, encode_cached_feed

logger = logging.getLogger(__name__)


class FileFeedStore(FeedStore):
    """Persists the slot as one JSON file at `location`."""

    def __init__(self, location: Union[str, Path]):
        self.location = StoreLocation(Path(location))
        logger.info(f"FileFeedStore initialized at: {self.location}")

    async def retrieve(self) -> RetrievalResult:
        try:
            payload = await self._read_snapshot()
        except RetrievalError as e:
            logger.warning(f"Failed to read feed snapshot {self.location}: {e}")
            return Failure(e)
        if payload is None:
            logger.debug(f"No feed snapshot at {self.location}")
            return Empty()

        try:
            cache = decode_cached_feed(payload)
        except CorruptedCacheError as e:
            logger.warning(f"Feed snapshot {self.location} is corrupted: {e}")
            return Failure(e)
        return Found.from_cache(cache)

    async def insert(self, feed: FeedInput, timestamp: datetime) -> Optional[FeedStoreError]:
        payload = encode_cached_feed(CachedFeed(feed=feed, timestamp=timestamp))
        try:
            await self._write_snapshot(payload)
        except InsertionError as e:
            logger.error(f"Failed to write feed snapshot {self.location}: {e}")
            return e
        logger.debug(f"Stored feed snapshot ({len(payload)} chars) at {self.location}")
        return None

    async def delete_cached_feed(self) -> Optional[FeedStoreError]:
        try:
            await asyncio.to_thread(self.location.unlink)
        except (FileNotFoundError, NotADirectoryError):
            logger.debug(f"No feed snapshot to delete at {self.location}")
            return None
        except OSError as e:
            logger.error(f"Failed to delete feed snapshot {self.location}: {e}")
            error = DeletionError(f"Cannot delete feed snapshot {self.location}: {e}")
            error.__cause__ = e
            return error
        logger.debug(f"Deleted feed snapshot at {self.location}")
        return None

    # --- Internal helpers ---

    async def _read_snapshot(self) -> Optional[str]:
        """Returns the raw snapshot text, or None if there is no snapshot."""
        try:
            async with aiofiles.open(self.location, mode='r', encoding='utf-8') as f:
                return await f.read()
        except (FileNotFoundError, NotADirectoryError):
            return None
        except UnicodeDecodeError as e:
            raise CorruptedCacheError(f"Snapshot is not UTF-8 text: {e}") from e
        except OSError as e:
            raise RetrievalError(f"Cannot read feed snapshot {self.location}: {e}") from e

    async def _write_snapshot(self, payload: str) -> None:
        """Writes a temporary sibling file, then swaps it over the snapshot."""
        temp_path = self.location.with_name(f".{self.location.name}.{uuid.uuid4().hex}.tmp")
        try:
            await asyncio.to_thread(self.location.parent.mkdir, parents=True, exist_ok=True)
            async with aiofiles.open(temp_path, mode='w', encoding='utf-8') as f:
                await f.write(payload)
                await f.flush()
            await asyncio.to_thread(os.replace, temp_path, self.location)
        except (OSError, ValueError) as e:
            await asyncio.to_thread(self._discard, temp_path)
            raise InsertionError(f"Cannot write feed snapshot {self.location}: {e}") from e

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.debug(f"Could not remove temporary snapshot {path}: {e}")
