"""Value objects and snapshot types for the cached feed."""

from feedstore.domain.models.feed import CachedFeed, FeedImageRecord
from feedstore.domain.models.retrieval import Empty, Failure, Found, RetrievalResult

__all__ = ["CachedFeed", "FeedImageRecord", "Empty", "Failure", "Found", "RetrievalResult"]
