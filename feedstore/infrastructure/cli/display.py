"""Console rendering of cached feeds using the rich library."""

import logging
from typing import Optional

from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from feedstore.domain.models.retrieval import Found

logger = logging.getLogger(__name__)


class FeedDisplay:
    """Prints feed store results and status messages to the console."""

    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console()

    @property
    def console(self) -> Console:
        return self._console

    def display_feed(self, found: Found) -> None:
        """Renders a found feed as a table with its timestamp as the title."""
        logger.debug(f"Displaying cached feed with {len(found.feed)} records")
        table = Table(
            title=f"Cached feed ({found.timestamp.isoformat()})",
            show_header=True,
            box=ROUNDED,
            border_style="cyan",
            padding=(0, 1),
        )
        table.add_column("#", style="cyan", justify="right")
        table.add_column("ID", style="dim")
        table.add_column("Description", style="white")
        table.add_column("Location", style="green")
        table.add_column("URL", style="blue")

        for i, record in enumerate(found.feed, 1):
            table.add_row(
                str(i),
                str(record.id),
                record.description or "-",
                record.location or "-",
                record.url,
            )
        self.console.print(table)
        self.console.print(f"{len(found.feed)} record(s)")

    def display_info(self, info_message: str) -> None:
        self.console.print(Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        ))

    def display_error(self, error_message: str) -> None:
        self.console.print(Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        ))
