"""Builds FeedStore instances from a backend name and location.

Backends are selected at construction time; by default the result is
wrapped in a SerialFeedStore so callers get FIFO operation ordering.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from feedstore.domain.interfaces.feed_store import FeedStore
from feedstore.infrastructure.concurrency.serial_store import SerialFeedStore
from feedstore.infrastructure.config.settings import get_store_backend, get_store_location
from feedstore.infrastructure.store.disk_store import DiskCacheFeedStore
from feedstore.infrastructure.store.file_store import FileFeedStore
from feedstore.infrastructure.store.in_memory_store import InMemoryFeedStore

logger = logging.getLogger(__name__)

_BACKENDS: Dict[str, Callable[[Path], FeedStore]] = {
    "memory": lambda location: InMemoryFeedStore(),
    "file": FileFeedStore,
    "diskcache": DiskCacheFeedStore,
}

AVAILABLE_BACKENDS = tuple(_BACKENDS)


def create_feed_store(
    backend: Optional[str] = None,
    location: Optional[Union[str, Path]] = None,
    serialized: bool = True,
) -> FeedStore:
    """Creates a store for the given (or configured) backend.

    Args:
        backend: 'memory', 'file' or 'diskcache'. Uses configuration if None.
        location: Storage location. Uses configuration (or the backend default) if None.
        serialized: Wrap the backend in a SerialFeedStore.

    Raises:
        ValueError: If the backend name is unknown.
    """
    name = (backend or get_store_backend()).lower()
    if name not in _BACKENDS:
        raise ValueError(f"Unknown feed store backend '{name}'. Choose from: {', '.join(AVAILABLE_BACKENDS)}")

    path = Path(location).expanduser() if location is not None else get_store_location(name)
    store = _BACKENDS[name](path)
    logger.info(f"Created '{name}' feed store (serialized={serialized})")
    return SerialFeedStore(store) if serialized else store
