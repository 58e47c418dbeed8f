"""Serializing wrapper that gives any FeedStore strict FIFO ordering.

Every call is queued as a job on an `asyncio.Queue`. A single worker task
runs the jobs one at a time in submission order, resolves each caller's
future, and yields to the event loop before starting the next job so the
caller's continuation runs first. Backends may use threads or async I/O
internally; callers only ever observe one operation at a time.

The worker lives on the event loop that first uses the store. Calls made
from another thread's running loop are handed over to that loop and
queued there, so every caller shares the same order.
"""

import asyncio
import concurrent.futures
import logging
from dataclasses import dataclass, field
from datetime import datetime
from itertools import count
from typing import Any, Awaitable, Callable, Dict, Optional

from feedstore.domain.exceptions import (
    DeletionError,
    FeedStoreError,
    InsertionError,
    RetrievalError,
    StoreClosedError,
)
from feedstore.domain.interfaces.feed_store import FeedStore
from feedstore.domain.models.feed import FeedInput
from feedstore.domain.models.retrieval import Failure, RetrievalResult

logger = logging.getLogger(__name__)

# Maps an operation name to the error used when it fails unexpectedly
_FAILURE_FACTORIES: Dict[str, Callable[[str], Any]] = {
    "retrieve": lambda msg: Failure(RetrievalError(msg)),
    "insert": InsertionError,
    "delete_cached_feed": DeletionError,
}


@dataclass
class _Job:
    """A queued store operation and the future its caller is waiting on."""
    sequence: int
    name: str
    operation: Callable[[], Awaitable[Any]]
    future: asyncio.Future = field(repr=False)


class SerialFeedStore(FeedStore):
    """FeedStore decorator executing operations strictly one after another."""

    def __init__(self, store: FeedStore):
        self._store = store
        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._sequence = count(1)
        self._closed = False
        logger.info(f"SerialFeedStore wrapping {store.__class__.__name__}")

    @property
    def wrapped(self) -> FeedStore:
        return self._store

    @property
    def closed(self) -> bool:
        return self._closed

    # --- FeedStore Interface Implementation ---

    async def retrieve(self) -> RetrievalResult:
        return await self._submit("retrieve", self._store.retrieve)

    async def insert(self, feed: FeedInput, timestamp: datetime) -> Optional[FeedStoreError]:
        return await self._submit("insert", lambda: self._store.insert(feed, timestamp))

    async def delete_cached_feed(self) -> Optional[FeedStoreError]:
        return await self._submit("delete_cached_feed", self._store.delete_cached_feed)

    # --- Submission from other threads ---

    def submit_threadsafe(self, name: str, *args: Any) -> concurrent.futures.Future:
        """Submits an operation from a thread that is not running the store's loop.

        Args:
            name: One of 'retrieve', 'insert', 'delete_cached_feed'.
            *args: Arguments for the operation (feed and timestamp for insert).

        Returns:
            A concurrent future resolved with the operation's result.

        Raises:
            ValueError: If `name` is not a store operation.
            RuntimeError: If the store has not been used from an event loop yet.
        """
        if name not in _FAILURE_FACTORIES:
            raise ValueError(f"Unknown store operation: {name!r}")
        if self._loop is None or self._loop.is_closed():
            raise RuntimeError("SerialFeedStore is not bound to a running event loop.")
        return asyncio.run_coroutine_threadsafe(getattr(self, name)(*args), self._loop)

    # --- Lifecycle ---

    async def aclose(self) -> None:
        """Runs every already-queued operation, then stops the worker."""
        if self._closed:
            return
        self._closed = True
        if self._worker is not None and not self._worker.done():
            if self._bound_elsewhere(asyncio.get_running_loop()):
                await asyncio.wrap_future(asyncio.run_coroutine_threadsafe(self._drain(), self._loop))
            else:
                await self._drain()
        logger.info("SerialFeedStore closed.")

    async def __aenter__(self) -> "SerialFeedStore":
        if not self._bound_elsewhere(asyncio.get_running_loop()):
            self._ensure_worker()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # --- Internals ---

    def _bound_elsewhere(self, loop: asyncio.AbstractEventLoop) -> bool:
        """True while a live worker runs on another thread's event loop."""
        return (
            self._worker is not None
            and not self._worker.done()
            and self._loop is not loop
            and self._loop.is_running()
        )

    def _ensure_worker(self) -> None:
        loop = asyncio.get_running_loop()
        if self._worker is not None and not self._worker.done() and loop is self._loop:
            return
        # First use, or the previous loop has stopped: start a fresh worker
        self._loop = loop
        self._queue = asyncio.Queue()
        self._worker = loop.create_task(self._run(), name="feedstore-serial-worker")
        logger.debug("Started serial store worker.")

    def _submit(self, name: str, operation: Callable[[], Awaitable[Any]]) -> asyncio.Future:
        """Enqueues an operation synchronously, so queue order is call order."""
        if self._closed:
            return self._resolved(name, StoreClosedError(f"Cannot {name}: store is closed."))
        if self._bound_elsewhere(asyncio.get_running_loop()):
            # Enqueued by the owning loop in the order the handoffs arrive
            logger.debug(f"Handing {name} over to the serial worker's event loop")
            relay = asyncio.run_coroutine_threadsafe(self._relay(name, operation), self._loop)
            return asyncio.wrap_future(relay)
        self._ensure_worker()
        job = _Job(
            sequence=next(self._sequence),
            name=name,
            operation=operation,
            future=self._loop.create_future(),
        )
        self._queue.put_nowait(job)
        logger.debug(f"Queued job #{job.sequence} ({name}), {self._queue.qsize()} pending")
        return job.future

    def _resolved(self, name: str, error: FeedStoreError) -> asyncio.Future:
        future = asyncio.get_running_loop().create_future()
        future.set_result(Failure(error) if name == "retrieve" else error)
        return future

    async def _run(self) -> None:
        while True:
            job = await self._queue.get()
            if job is None:
                self._queue.task_done()
                logger.debug("Serial store worker stopping.")
                return
            try:
                result = await self._execute(job)
                if not job.future.done():
                    job.future.set_result(result)
            finally:
                self._queue.task_done()
            # Let the caller's continuation run before the next job starts
            await asyncio.sleep(0)

    async def _execute(self, job: _Job) -> Any:
        logger.debug(f"Running job #{job.sequence} ({job.name})")
        try:
            return await job.operation()
        except Exception as e:
            logger.error(
                f"Unexpected error in job #{job.sequence} ({job.name}) on "
                f"{self._store.__class__.__name__}: {e}",
                exc_info=True,
            )
            failure = _FAILURE_FACTORIES[job.name](f"Unexpected {job.name} failure: {e}")
            error = failure.error if isinstance(failure, Failure) else failure
            error.__cause__ = e
            return failure

    async def _relay(self, name: str, operation: Callable[[], Awaitable[Any]]) -> Any:
        return await self._submit(name, operation)

    async def _drain(self) -> None:
        await self._queue.put(None)
        await self._worker
