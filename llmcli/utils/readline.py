"""Readline helpers for the interactive prompt."""

import logging
import re
import readline
from pathlib import Path

logger = logging.getLogger(__name__)

HISTORY_LENGTH = 1000

# CSI escape sequences such as "\033[1;32m".
_ANSI_PATTERN = re.compile(r"\033\[[0-9;]*[A-Za-z]")


def readline_safe_prompt(prompt: str) -> str:
    """Wrap ANSI escapes in *prompt* between \\001 and \\002.

    Readline counts every byte of the prompt towards its width unless the
    non-printing parts are marked, which breaks cursor placement and line
    editing once the input wraps.
    """
    if "\033[" not in prompt:
        return prompt
    return _ANSI_PATTERN.sub(lambda m: f"\001{m.group(0)}\002", prompt)


def load_history(path: Path) -> None:
    """Populate readline's history from *path* if it exists."""
    readline.set_history_length(HISTORY_LENGTH)
    if not path.exists():
        return
    try:
        readline.read_history_file(str(path))
    except OSError as exc:
        logger.warning("Could not read history file %s: %s", path, exc)


def save_history(path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        readline.write_history_file(str(path))
    except OSError as exc:
        logger.warning("Could not write history file %s: %s", path, exc)
