"""Colour and styling helpers built on :mod:`rich`."""

from __future__ import annotations

import os
from typing import Optional

from rich.console import Console
from rich.markup import escape

from .readline import readline_safe_prompt


console = Console()


class Ansi:
    """Lightweight collection of style names used throughout the app."""

    BOLD = "bold"

    FG_GREEN = "green"
    FG_CYAN = "cyan"
    FG_MAGENTA = "magenta"
    FG_YELLOW = "yellow"
    FG_RED = "red"

    @staticmethod
    def style(text: str, *codes: str) -> str:
        """Return *text* wrapped in rich markup unless ``NO_COLOR`` is set."""
        if os.getenv("NO_COLOR") is not None:
            return text
        style = " ".join(codes)
        return f"[{style}]{text}[/]"


# Common labels used throughout the application
USER_LABEL = Ansi.style("you", Ansi.FG_GREEN, Ansi.BOLD)
ERROR_LABEL = Ansi.style("Error", Ansi.FG_RED, Ansi.BOLD)


class Printer:
    """Writes the semantic message categories of the REPL to a console.

    Model output and user supplied text are never interpreted as markup.
    """

    def __init__(self, output: Optional[Console] = None) -> None:
        self.console = output or console

    @property
    def is_terminal(self) -> bool:
        return self.console.is_terminal

    def app(self, text: str) -> None:
        self.console.print(Ansi.style(escape(text), Ansi.FG_YELLOW))

    def error(self, text: str) -> None:
        self.console.print(f"{ERROR_LABEL}: {escape(text)}")

    def chatbot_prefix(self, name: str) -> str:
        return f"{Ansi.style(escape(name), Ansi.FG_CYAN, Ansi.BOLD)}: "

    def increment(self, text: str) -> None:
        self.console.out(text, end="", highlight=False)
        self.console.file.flush()

    def end_reply(self) -> None:
        self.console.print()

    def user_prompt(self) -> str:
        return f"{USER_LABEL}> "

    def input(self, prompt: str) -> str:
        """Read a line, handing the styled *prompt* to readline itself.

        Printing the prompt separately would let line editing overwrite it.
        """
        if not self.is_terminal:
            return self.console.input(prompt)
        with self.console.capture() as capture:
            self.console.print(prompt, end="")
        return input(readline_safe_prompt(capture.get()))
