"""Domain models for cached feed data.

Includes the `FeedImageRecord` value object and the `CachedFeed` snapshot
that occupies the store's single slot.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence, Tuple
from urllib.parse import urlparse


def is_valid_url(value: str) -> bool:
    """Checks that a string is an absolute URL (scheme and host present)."""
    if not isinstance(value, str) or not value or value != value.strip():
        return False
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)


@dataclass(frozen=True)
class FeedImageRecord:
    """Value object representing a single image in the feed."""
    id: uuid.UUID
    description: Optional[str]
    location: Optional[str]
    url: str

    def __post_init__(self) -> None:
        if isinstance(self.id, str):
            object.__setattr__(self, "id", uuid.UUID(self.id))
        elif not isinstance(self.id, uuid.UUID):
            raise TypeError(f"Record id must be a UUID, got {type(self.id).__name__}")
        if not is_valid_url(self.url):
            raise ValueError(f"Invalid image URL: {self.url!r}")


@dataclass(frozen=True)
class CachedFeed:
    """Snapshot held in the store slot: the ordered feed plus its insertion time."""
    feed: Tuple[FeedImageRecord, ...] = field(default_factory=tuple)
    timestamp: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        # Freeze whatever sequence we were given, keeping its order
        object.__setattr__(self, "feed", tuple(self.feed))


FeedInput = Sequence[FeedImageRecord]
