"""JSON encoding of the cached feed snapshot.

Both durable backends persist the same document, so a snapshot written
by one can be inspected (or hand-repaired) with ordinary JSON tools.
"""

import json
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List

from feedstore.domain.exceptions import CorruptedCacheError
from feedstore.domain.models.feed import CachedFeed, FeedImageRecord

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def _encode_record(record: FeedImageRecord) -> Dict[str, Any]:
    return {
        "id": str(record.id),
        "description": record.description,
        "location": record.location,
        "url": record.url,
    }


def _decode_record(raw: Any) -> FeedImageRecord:
    if not isinstance(raw, dict):
        raise CorruptedCacheError(f"Feed record is not an object: {raw!r}")
    try:
        description = raw.get("description")
        location = raw.get("location")
        for name, value in (("description", description), ("location", location)):
            if value is not None and not isinstance(value, str):
                raise CorruptedCacheError(f"Record {name} must be text or null, got {value!r}")
        return FeedImageRecord(
            id=uuid.UUID(raw["id"]),
            description=description,
            location=location,
            url=raw["url"],
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise CorruptedCacheError(f"Invalid feed record {raw!r}: {e}") from e


def encode_cached_feed(cache: CachedFeed) -> str:
    """Serializes a snapshot to a JSON document."""
    document = {
        "version": SNAPSHOT_VERSION,
        "timestamp": cache.timestamp.isoformat(),
        "feed": [_encode_record(record) for record in cache.feed],
    }
    return json.dumps(document)


def decode_feed_records(payload: str) -> List[FeedImageRecord]:
    """Parses a bare JSON array of records (the CLI's import format).

    Raises:
        CorruptedCacheError: If the payload is not a list of valid records.
    """
    try:
        raw_feed = json.loads(payload)
    except json.JSONDecodeError as e:
        raise CorruptedCacheError(f"Feed file is not valid JSON: {e}") from e
    if not isinstance(raw_feed, list):
        raise CorruptedCacheError("Feed file must contain a JSON array of records.")
    return [_decode_record(raw) for raw in raw_feed]


def decode_cached_feed(payload: str) -> CachedFeed:
    """Parses a JSON document back into a snapshot.

    Raises:
        CorruptedCacheError: If the payload is not a well-formed snapshot.
    """
    try:
        document = json.loads(payload)
    except (json.JSONDecodeError, TypeError) as e:
        raise CorruptedCacheError(f"Snapshot is not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise CorruptedCacheError("Snapshot document must be a JSON object.")
    if document.get("version") != SNAPSHOT_VERSION:
        raise CorruptedCacheError(f"Unsupported snapshot version: {document.get('version')!r}")

    raw_feed = document.get("feed")
    if not isinstance(raw_feed, list):
        raise CorruptedCacheError("Snapshot 'feed' must be a list.")
    try:
        timestamp = datetime.fromisoformat(document["timestamp"])
    except (KeyError, TypeError, ValueError) as e:
        raise CorruptedCacheError(f"Invalid snapshot timestamp: {e}") from e

    feed = [_decode_record(raw) for raw in raw_feed]
    logger.debug(f"Decoded snapshot with {len(feed)} records at {timestamp.isoformat()}")
    return CachedFeed(feed=feed, timestamp=timestamp)
