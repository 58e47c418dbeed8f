import asyncio
from pathlib import Path

import pytest

from feedstore.domain.exceptions import CorruptedCacheError, DeletionError, InsertionError, RetrievalError
from feedstore.domain.models.retrieval import Empty, Failure, Found
from feedstore.infrastructure.store.factory import create_feed_store
from feedstore.infrastructure.store.file_store import FileFeedStore
from feedstore.testing import specs
from feedstore.testing.contract import (
    FailableDeleteContract,
    FailableInsertContract,
    FailableRetrieveContract,
    FeedStoreContract,
    run,
)


@pytest.fixture
def store_path(tmp_path: Path):
    """Test-specific snapshot location, removed before and after each test."""
    path = tmp_path / "FileFeedStore.json"
    path.unlink(missing_ok=True)
    yield path
    path.unlink(missing_ok=True)


@pytest.fixture
def store(store_path):
    return create_feed_store(backend="file", location=store_path)


class TestFileFeedStore(
    FeedStoreContract,
    FailableRetrieveContract,
    FailableInsertContract,
    FailableDeleteContract,
):
    @pytest.fixture
    def store(self, store_path):
        return create_feed_store(backend="file", location=store_path)

    @pytest.fixture
    def corrupted_store(self, store_path):
        store_path.write_text("invalid data")
        return create_feed_store(backend="file", location=store_path)

    @pytest.fixture
    def unwritable_store(self, tmp_path):
        # A regular file where the snapshot's parent directory should be
        blocker = tmp_path / "not-a-directory"
        blocker.write_text("occupied")
        return create_feed_store(backend="file", location=blocker / "store.json")

    @pytest.fixture
    def undeletable_store(self, tmp_path):
        # A directory cannot be unlinked as a snapshot file
        return create_feed_store(backend="file", location=tmp_path)


def test_retrieve_reports_corruption_without_touching_the_file(store, store_path):
    store_path.write_text("invalid data")

    first = asyncio.run(store.retrieve())
    second = asyncio.run(store.retrieve())

    assert isinstance(first, Failure)
    assert isinstance(first.error, CorruptedCacheError)
    assert first == second
    assert store_path.read_text() == "invalid data"


def test_retrieve_on_directory_is_a_read_failure_not_absence(tmp_path):
    store = FileFeedStore(tmp_path)

    result = asyncio.run(store.retrieve())

    assert isinstance(result, Failure)
    assert isinstance(result.error, RetrievalError)


def test_insert_error_keeps_previously_cached_feed(store, store_path, mocker):
    feed, timestamp = specs.unique_image_feed(), specs.any_timestamp()
    assert asyncio.run(store.insert(feed, timestamp)) is None
    mocker.patch("feedstore.infrastructure.store.file_store.os.replace", side_effect=PermissionError("read-only"))

    run(specs.assert_that_insert_delivers_error_on_insertion_error, store)
    run(specs.assert_that_insert_has_no_side_effects_on_insertion_error, store)

    assert asyncio.run(store.retrieve()) == Found(feed=feed, timestamp=timestamp)
    # The half-written temporary file is cleaned up
    assert sorted(p.name for p in store_path.parent.iterdir()) == [store_path.name]


def test_delete_error_keeps_previously_cached_feed(store, store_path, mocker):
    feed, timestamp = specs.unique_image_feed(), specs.any_timestamp()
    assert asyncio.run(store.insert(feed, timestamp)) is None
    mocker.patch.object(Path, "unlink", side_effect=PermissionError("no delete permission"))

    error = asyncio.run(store.delete_cached_feed())

    assert isinstance(error, DeletionError)
    assert isinstance(error.__cause__, PermissionError)
    run(specs.assert_that_delete_has_no_side_effects_on_deletion_error, store)
    assert asyncio.run(store.retrieve()) == Found(feed=feed, timestamp=timestamp)


def test_insert_error_wraps_the_os_error(tmp_path):
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("occupied")
    store = FileFeedStore(blocker / "store.json")

    error = asyncio.run(store.insert(specs.unique_image_feed(), specs.any_timestamp()))

    assert isinstance(error, InsertionError)
    assert isinstance(error.__cause__, OSError)
    assert asyncio.run(store.retrieve()) == Empty()


def test_insert_creates_missing_parent_directories(tmp_path):
    location = tmp_path / "nested" / "dirs" / "feed.json"
    store = FileFeedStore(location)
    feed, timestamp = specs.unique_image_feed(), specs.any_timestamp()

    assert asyncio.run(store.insert(feed, timestamp)) is None

    assert location.is_file()
    assert asyncio.run(store.retrieve()) == Found(feed=feed, timestamp=timestamp)


def test_snapshot_survives_a_new_store_instance(store_path):
    feed, timestamp = specs.unique_image_feed(), specs.any_timestamp()
    asyncio.run(FileFeedStore(store_path).insert(feed, timestamp))

    result = asyncio.run(FileFeedStore(store_path).retrieve())

    assert result == Found(feed=feed, timestamp=timestamp)


def test_unencodable_write_is_an_insertion_error_and_leaves_no_temp_file(store_path, mocker):
    store = FileFeedStore(store_path)
    mocker.patch(
        "feedstore.infrastructure.store.file_store.os.replace",
        side_effect=UnicodeEncodeError("utf-8", "\ud800", 0, 1, "surrogates not allowed"),
    )

    error = asyncio.run(store.insert(specs.unique_image_feed(), specs.any_timestamp()))

    assert isinstance(error, InsertionError)
    assert isinstance(error.__cause__, UnicodeEncodeError)
    assert list(store_path.parent.iterdir()) == []


def test_bare_store_keeps_lone_surrogates(store_path):
    run(specs.assert_that_insert_keeps_any_unicode_text, FileFeedStore(store_path))
    assert [p.name for p in store_path.parent.iterdir()] == [store_path.name]
