"""Main entry point for the feedstore command line tool.

Sets up the Typer CLI application, wires configuration and logging, and
runs store operations against the configured (or overridden) backend.
"""

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import typer
from typing_extensions import Annotated

from feedstore.domain.exceptions import CorruptedCacheError
from feedstore.domain.interfaces.feed_store import FeedStore
from feedstore.domain.models.retrieval import Empty, Failure, Found
from feedstore.infrastructure.cli.display import FeedDisplay
from feedstore.infrastructure.concurrency.serial_store import SerialFeedStore
from feedstore.infrastructure.config.settings import get_config, load_configuration
from feedstore.infrastructure.monitoring.logger_setup import DEFAULT_LOG_FORMAT, setup_logging
from feedstore.infrastructure.store.codec import decode_feed_records
from feedstore.infrastructure.store.factory import AVAILABLE_BACKENDS, create_feed_store

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="feedstore",
    help="Inspect and manage the cached image feed.",
    add_completion=False,
)

BackendOption = Annotated[
    Optional[str],
    typer.Option("--backend", "-b", help=f"Store backend ({', '.join(AVAILABLE_BACKENDS)}). Uses config if not set.")
]
LocationOption = Annotated[
    Optional[Path],
    typer.Option("--location", "-l", help="Store location. Uses config or the backend default if not set.")
]


def run_with_store(
    backend: Optional[str],
    location: Optional[Path],
    action: Callable[[FeedStore], Awaitable[Any]],
) -> Any:
    """Creates the store, runs `action` against it and closes it again."""
    display = FeedDisplay()
    try:
        store = create_feed_store(backend=backend, location=location)
    except ValueError as e:
        display.display_error(str(e))
        raise typer.Exit(code=2)

    async def _run() -> Any:
        try:
            return await action(store)
        finally:
            if isinstance(store, SerialFeedStore):
                await store.aclose()

    return asyncio.run(_run())


@app.command()
def show(backend: BackendOption = None, location: LocationOption = None):
    """Show the cached feed."""
    display = FeedDisplay()
    result = run_with_store(backend, location, lambda store: store.retrieve())
    if isinstance(result, Found):
        display.display_feed(result)
    elif isinstance(result, Empty):
        display.display_info("No cached feed.")
    elif isinstance(result, Failure):
        display.display_error(f"Could not read cached feed: {result.error}")
        raise typer.Exit(code=1)


@app.command()
def insert(
    feed_file: Annotated[Path, typer.Argument(
        exists=True, file_okay=True, dir_okay=False, readable=True,
        help="JSON file holding an array of records (id, description, location, url).",
    )],
    backend: BackendOption = None,
    location: LocationOption = None,
):
    """Replace the cached feed with the records in FEED_FILE."""
    display = FeedDisplay()
    try:
        feed = decode_feed_records(feed_file.read_text(encoding='utf-8'))
    except (CorruptedCacheError, OSError, UnicodeDecodeError) as e:
        display.display_error(f"Invalid feed file {feed_file}: {e}")
        raise typer.Exit(code=1)

    timestamp = datetime.now(timezone.utc)
    error = run_with_store(backend, location, lambda store: store.insert(feed, timestamp))
    if error is not None:
        display.display_error(f"Could not cache feed: {error}")
        raise typer.Exit(code=1)
    display.display_info(f"Cached {len(feed)} record(s) at {timestamp.isoformat()}.")


@app.command()
def clear(backend: BackendOption = None, location: LocationOption = None):
    """Delete the cached feed."""
    display = FeedDisplay()
    error = run_with_store(backend, location, lambda store: store.delete_cached_feed())
    if error is not None:
        display.display_error(f"Could not delete cached feed: {error}")
        raise typer.Exit(code=1)
    display.display_info("Cached feed deleted.")


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """Load configuration and set up logging before any command runs."""
    load_configuration()
    log_level = 'DEBUG' if verbose else get_config('logging.level', 'WARNING')
    setup_logging(
        log_level=log_level,
        log_format=get_config('logging.format', DEFAULT_LOG_FORMAT),
        log_file=get_config('logging.file'),
    )


def cli_entry_point():
    """Function called by the `feedstore` console script."""
    app()


if __name__ == "__main__":
    cli_entry_point()
