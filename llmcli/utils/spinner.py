"""Spinner shown while waiting for the first increment of a reply."""
from __future__ import annotations

from yaspin import yaspin

from .ansi import Printer


class Spinner:
    """Display a small spinner after *prefix* while a request is pending.

    Only animates on a real terminal; otherwise just prints the prefix.
    """

    def __init__(self, printer: Printer, prefix: str = "") -> None:
        self._printer = printer
        self._prefix = prefix
        self._started = False
        self._spinner = yaspin(text="", side="right") if printer.is_terminal else None

    def start(self) -> None:
        if self._started:
            return
        self._printer.console.print(self._prefix, end="")
        self._printer.console.file.flush()
        if self._spinner is not None:
            self._spinner.start()
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        if self._spinner is not None:
            self._spinner.stop()
            self._printer.console.print(f"\r{self._prefix}", end="")
            self._printer.console.file.flush()
        self._started = False

    def __enter__(self) -> "Spinner":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
