from .ansi import (
    Ansi,
    USER_LABEL,
    ERROR_LABEL,
    Printer,
    console,
)
from .readline import load_history, readline_safe_prompt, save_history
from .spinner import Spinner

__all__ = [
    "Ansi",
    "USER_LABEL",
    "ERROR_LABEL",
    "Printer",
    "console",
    "load_history",
    "readline_safe_prompt",
    "save_history",
    "Spinner",
]
