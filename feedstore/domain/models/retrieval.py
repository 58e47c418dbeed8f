"""Result shapes delivered by `FeedStore.retrieve`.

A retrieval ends in exactly one of: the slot is empty, the slot holds a
feed, or the storage could not be read.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Tuple, Union

from feedstore.domain.models.feed import CachedFeed, FeedImageRecord


@dataclass(frozen=True)
class Empty:
    """The slot holds nothing (never written, or cleared)."""


@dataclass(frozen=True)
class Found:
    """The slot holds a feed and the timestamp it was inserted with."""
    feed: Tuple[FeedImageRecord, ...]
    timestamp: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "feed", tuple(self.feed))

    @classmethod
    def from_cache(cls, cache: CachedFeed) -> "Found":
        return cls(feed=cache.feed, timestamp=cache.timestamp)


@dataclass(frozen=True, eq=False)
class Failure:
    """Storage exists but could not be read or decoded."""
    error: Exception

    def __eq__(self, other: object) -> bool:
        # Two failures match when they report the same kind of error
        if not isinstance(other, Failure):
            return NotImplemented
        return type(self.error) is type(other.error)

    def __hash__(self) -> int:
        return hash(type(self.error))


RetrievalResult = Union[Empty, Found, Failure]
