"""
Human-facing progress output.

The exporter reports each pipeline step as a status line
(``» Creating build root in /tmp/...``). Lines go through a rich
``Console`` bound to stderr unless the caller supplies another one.
"""

from __future__ import annotations

from enum import Enum

from rich.console import Console
from rich.markup import escape


class Status(str, Enum):
    """Verb shown at the start of a status line."""

    CREATING = "Creating"
    DELETING = "Deleting"
    INSTALLING = "Installing"
    INSTALLED = "Installed"
    LINKING = "Linking"
    DETERMINING = "Determining"
    ARCHIVING = "Archiving"
    CREATED = "Created"


_STATUS_STYLE: dict[Status, str] = {
    Status.CREATING: "green",
    Status.DELETING: "yellow",
    Status.INSTALLING: "green",
    Status.INSTALLED: "green",
    Status.LINKING: "cyan",
    Status.DETERMINING: "cyan",
    Status.ARCHIVING: "green",
    Status.CREATED: "bold green",
}


class UI:
    """Thin status printer over a rich console."""

    def __init__(self, console: Console | None = None, *, quiet: bool = False) -> None:
        self.console = console or Console(stderr=True, highlight=False)
        self.quiet = quiet

    def begin(self, message: str) -> None:
        self._print(f"[bold]»[/] [bold]{escape(message)}[/]")

    def status(self, status: Status, message: str) -> None:
        style = _STATUS_STYLE.get(status, "white")
        self._print(f"[{style}]{status.value}[/{style}] {escape(message)}")

    def end(self, message: str) -> None:
        self._print(f"[bold green]★[/] {escape(message)}")

    def _print(self, markup: str) -> None:
        if not self.quiet:
            self.console.print(markup, soft_wrap=True)


__all__ = ["Status", "UI"]
