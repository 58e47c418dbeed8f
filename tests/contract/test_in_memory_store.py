import pytest

from feedstore.infrastructure.concurrency.serial_store import SerialFeedStore
from feedstore.infrastructure.store.factory import create_feed_store
from feedstore.infrastructure.store.in_memory_store import InMemoryFeedStore
from feedstore.testing.contract import FeedStoreContract


class TestInMemoryFeedStore(FeedStoreContract):
    """The reference backend behind the serializing wrapper, as the factory builds it."""

    @pytest.fixture
    def store(self):
        store = create_feed_store(backend="memory")
        assert isinstance(store, SerialFeedStore)
        return store


class TestUnwrappedInMemoryFeedStore(FeedStoreContract):
    """The reference backend never suspends, so it is serial on its own."""

    @pytest.fixture
    def store(self):
        return InMemoryFeedStore()
