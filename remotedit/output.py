"""Console output and the running sync log."""

import json
import threading
from datetime import datetime
from typing import Any, Callable, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table


class OutputFormatter:
    """Prints user-facing messages to the terminal.

    Respects ``quiet`` (only errors and warnings are shown) and
    ``json_output`` (informational text is suppressed so that the command's
    JSON document is the only thing on stdout).
    """

    def __init__(
        self,
        json_output: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
    ):
        self.json_output = json_output
        self.quiet = quiet
        self.console = console or Console(highlight=False)
        self.err_console = Console(stderr=True, highlight=False)

    def print(self, message: str) -> None:
        if self.json_output or self.quiet:
            return
        self.console.print(message, markup=False)

    def info(self, message: str) -> None:
        if self.json_output or self.quiet:
            return
        self.console.print(message, markup=False)

    def success(self, message: str) -> None:
        if self.json_output or self.quiet:
            return
        self.console.print(f"[green]{escape(message)}[/green]")

    def warning(self, message: str) -> None:
        if self.json_output:
            return
        self.console.print(f"[yellow]{escape(message)}[/yellow]")

    def error(self, message: str) -> None:
        self.err_console.print(f"[red]Error: {escape(message)}[/red]")

    def output_json(self, data: Any) -> None:
        self.console.print_json(json.dumps(data, default=str))

    def print_summary(self, title: str, items: list[tuple[str, str]]) -> None:
        """Print a two-column summary table.

        Args:
            title: Table title
            items: List of (label, value) rows
        """
        if self.json_output:
            self.output_json({label: value for label, value in items})
            return
        if self.quiet:
            return
        table = Table(title=title, show_header=False)
        table.add_column("Key", style="bold")
        table.add_column("Value")
        for label, value in items:
            table.add_row(label, value)
        self.console.print(table)


class SyncLog:
    """Append-only, timestamped log of sync activity shown to the user.

    Entries are never trimmed here; the consumer decides how much to show.
    Listeners are called with each formatted line as it is appended.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or datetime.now
        self._entries: list[str] = []
        self._listeners: list[Callable[[str], None]] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Callable[[str], None]) -> None:
        self._listeners.append(listener)

    def append(self, message: str) -> str:
        """Append a message and return the formatted line."""
        line = f"[{self._clock().strftime('%H:%M:%S')}] {message}"
        with self._lock:
            self._entries.append(line)
        for listener in list(self._listeners):
            listener(line)
        return line

    @property
    def entries(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
