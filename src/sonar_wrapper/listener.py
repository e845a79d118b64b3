"""Build listener: the log channel a build step reports through."""

from __future__ import annotations

from typing import TextIO

from rich.console import Console


class BuildListener:
    """Writes build messages to a log stream.

    Messages are printed verbatim: no markup, highlighting or wrapping, so
    what reaches the log (and any masking filter behind it) is exactly the
    message text.
    """

    def __init__(self, logger: TextIO):
        self.logger = logger
        self.aborted = False
        self.console = Console(
            file=logger,
            soft_wrap=True,
            highlight=False,
            markup=False,
            emoji=False,
            color_system=None,
        )

    def info(self, message: str) -> None:
        self.console.print(message)

    def error(self, message: str) -> None:
        self.console.print(f"ERROR: {message}")

    def fatal_error(self, message: str) -> None:
        """Report a condition that aborts the step."""
        self.aborted = True
        self.console.print(f"FATAL: {message}")
