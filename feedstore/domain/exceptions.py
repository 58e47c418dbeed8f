"""Failure taxonomy for feed store operations.

Absence of storage is not an error (it reads as an empty slot). Everything
else a backend can run into maps onto one of these classes and is returned
through the operation's result channel rather than raised to the caller.
"""


class FeedStoreError(Exception):
    """Base class for all feed store failures."""


class RetrievalError(FeedStoreError):
    """Storage exists but could not be read."""


class CorruptedCacheError(RetrievalError):
    """Storage was read but its contents could not be decoded."""


class InsertionError(FeedStoreError):
    """The snapshot could not be persisted. The slot is unchanged."""


class DeletionError(FeedStoreError):
    """The slot could not be cleared. The slot is unchanged."""


class StoreClosedError(FeedStoreError):
    """An operation was submitted to a store that has been closed."""
