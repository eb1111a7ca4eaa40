"""Slash command parsing and execution."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, cast

from .core.config import Config
from .core.errors import InvalidCommandError, MissingArgumentError, QuitRequested
from .core.session import Session, SessionStore
from .providers import CHATBOT_DESCRIPTIONS, Chatbot, create_chatbot
from .utils import Printer

logger = logging.getLogger(__name__)

COMMAND_SIGIL = "/"


class CommandKind(Enum):
    CLEAR = "clear"
    SYSTEM = "system"
    CHATBOT = "chatbot"
    LIST_CHATBOTS = "list_chatbots"
    MODEL = "model"
    LIST_MODELS = "list_models"
    INFO = "info"
    SAVE = "save"
    LOAD = "load"
    DELETE = "delete"
    SESSIONS = "sessions"
    HELP = "help"
    QUIT = "quit"


# kind -> (short alias, argument placeholder, missing-argument message, help text)
_COMMAND_TABLE: Dict[CommandKind, Tuple[str, Optional[str], Optional[str], str]] = {
    CommandKind.CLEAR: ("c", None, None, "Clear the conversation history (including system prompt)"),
    CommandKind.SYSTEM: ("sys", "<prompt>", "System prompt is required.", "Set the system prompt"),
    CommandKind.CHATBOT: ("cb", "<chatbot>", "Chatbot name is required.", "Change the chatbot"),
    CommandKind.LIST_CHATBOTS: ("lc", None, None, "List all available chatbots"),
    CommandKind.MODEL: ("m", "<model>", "Model name is required.", "Change the chatbot model"),
    CommandKind.LIST_MODELS: ("lm", None, None, "List all available models for current chatbot"),
    CommandKind.INFO: ("i", None, None, "Display current chatbot and model information"),
    CommandKind.SAVE: ("s", "<filename>", "Filename is required.", "Save the session"),
    CommandKind.LOAD: ("l", "<filename>", "Filename is required.", "Load a saved session"),
    CommandKind.DELETE: ("d", "<filename>", "Filename is required.", "Delete a saved session"),
    CommandKind.SESSIONS: ("se", None, None, "List all saved sessions"),
    CommandKind.HELP: ("h", None, None, "List all available commands"),
    CommandKind.QUIT: ("q", None, None, "Exit the application"),
}

_ALIASES: Dict[str, CommandKind] = {}
for _kind, (_short, *_rest) in _COMMAND_TABLE.items():
    _ALIASES[COMMAND_SIGIL + _kind.value] = _kind
    _ALIASES[COMMAND_SIGIL + _short] = _kind


def is_command(line: str) -> bool:
    return line.startswith(COMMAND_SIGIL)


@dataclass(frozen=True)
class Command:
    """A parsed slash command with its (optional) argument."""

    kind: CommandKind
    argument: Optional[str] = None

    @classmethod
    def from_parts(cls, parts: Sequence[str]) -> "Command":
        if not parts:
            raise InvalidCommandError("No command specified.")
        kind = _ALIASES.get(parts[0])
        if kind is None:
            raise InvalidCommandError()

        _short, placeholder, missing, _help = _COMMAND_TABLE[kind]
        if placeholder is None:
            return cls(kind)
        if len(parts) < 2:
            raise MissingArgumentError(missing)
        if kind is CommandKind.SYSTEM:
            return cls(kind, " ".join(parts[1:]))
        return cls(kind, parts[1])

    @classmethod
    def parse(cls, line: str) -> "Command":
        return cls.from_parts(line.split())


def help_lines() -> List[str]:
    lines = ["Available commands:"]
    for kind, (short, placeholder, _missing, text) in _COMMAND_TABLE.items():
        arg = f" {placeholder}" if placeholder else ""
        lines.append(
            f"\t{COMMAND_SIGIL}{kind.value}{arg} or {COMMAND_SIGIL}{short}{arg} - {text}"
        )
    return lines


@dataclass
class CommandContext:
    """State a command may act on; valid for one command execution only.

    ``chatbot`` is replaced (not mutated) by ``/chatbot``; the caller picks
    up the new value after :meth:`CommandInterpreter.execute` returns.
    """

    session: Session
    chatbot: Chatbot
    printer: Printer
    config: Config
    store: SessionStore


class CommandInterpreter:
    """Executes parsed commands. Holds no state between invocations."""

    async def execute(self, command: Command, context: CommandContext) -> None:
        """Run *command* against *context*.

        Raises :class:`CommandError` (or a subtype) on failure and
        :class:`QuitRequested` for ``/quit``.
        """
        handler = getattr(self, f"_do_{command.kind.value}")
        logger.debug("Executing %s", command)
        await handler(command.argument, context)

    # ---------------- Transcript ----------------

    async def _do_clear(self, _arg: Optional[str], ctx: CommandContext) -> None:
        ctx.session.clear()
        ctx.printer.app("Context cleared.")

    async def _do_system(self, prompt: Optional[str], ctx: CommandContext) -> None:
        ctx.session.set_system_prompt(cast(str, prompt))
        ctx.printer.app("System prompt set.")

    # ---------------- Chatbot / model ----------------

    async def _do_chatbot(self, name: Optional[str], ctx: CommandContext) -> None:
        key = cast(str, name)
        # Built before touching the context so a failure leaves it intact.
        new_chatbot = create_chatbot(
            key,
            model=ctx.config.model_for(key),
            api_key=ctx.config.api_key_for(key),
        )
        old_chatbot, ctx.chatbot = ctx.chatbot, new_chatbot
        await old_chatbot.aclose()
        ctx.printer.app(f"Chatbot changed to {new_chatbot.name()}")

    async def _do_list_chatbots(self, _arg: Optional[str], ctx: CommandContext) -> None:
        ctx.printer.app("Available chatbots:")
        for key, description in CHATBOT_DESCRIPTIONS.items():
            ctx.printer.app(f"\t{key} - {description}")

    async def _do_model(self, name: Optional[str], ctx: CommandContext) -> None:
        ctx.chatbot.switch_model(cast(str, name))
        ctx.printer.app(f"Chatbot model changed to {ctx.chatbot.current_model()}")

    async def _do_list_models(self, _arg: Optional[str], ctx: CommandContext) -> None:
        ctx.printer.app("Available models:")
        for model in ctx.chatbot.available_models():
            marker = " <- current" if model == ctx.chatbot.model_id else ""
            ctx.printer.app(f"\t{model}{marker}")

    async def _do_info(self, _arg: Optional[str], ctx: CommandContext) -> None:
        ctx.printer.app(f"Current chatbot: {ctx.chatbot.name()}")
        ctx.printer.app(f"Current model: {ctx.chatbot.current_model()}")
        system_prompt = ctx.session.system_prompt
        if system_prompt is not None:
            ctx.printer.app(f"System prompt: {system_prompt}")

    # ---------------- Persistence ----------------

    async def _do_save(self, filename: Optional[str], ctx: CommandContext) -> None:
        ctx.store.save(cast(str, filename), ctx.session)
        ctx.printer.app(f"Session saved to {filename}.json")

    async def _do_load(self, filename: Optional[str], ctx: CommandContext) -> None:
        ctx.session.replace(ctx.store.load(cast(str, filename)))
        ctx.printer.app(f"Session loaded from {filename}.json")

    async def _do_delete(self, filename: Optional[str], ctx: CommandContext) -> None:
        ctx.store.delete(cast(str, filename))
        ctx.printer.app(f"Session {filename}.json deleted.")

    async def _do_sessions(self, _arg: Optional[str], ctx: CommandContext) -> None:
        sessions = ctx.store.list_sessions()
        if not sessions:
            ctx.printer.error("No saved sessions found.")
            return
        ctx.printer.app("Saved sessions:")
        for name in sessions:
            ctx.printer.app(f"\t{name}")

    # ---------------- Misc ----------------

    async def _do_help(self, _arg: Optional[str], ctx: CommandContext) -> None:
        for line in help_lines():
            ctx.printer.app(line)

    async def _do_quit(self, _arg: Optional[str], ctx: CommandContext) -> None:
        ctx.printer.app("Quitting...")
        raise QuitRequested()
