"""Interactive terminal chat client.

Holds the REPL (:class:`ChatCLI`), argument parsing and the process entry
point. Everything that talks to a model lives in :mod:`llmcli.providers`.
"""
from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

import questionary
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from .commands import Command, CommandContext, CommandInterpreter, is_command
from .core import ChatError, Config, LLMCLIError, QuitRequested, Session, SessionStore
from .providers import CHATBOTS, Chatbot, create_chatbot
from .utils import Ansi, Printer, Spinner, console, load_history, save_history

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# REPL
# ---------------------------------------------------------------------------


class ChatCLI:
    """High-level orchestration class for the interactive REPL.

    Owns the live :class:`Session` and the active :class:`Chatbot`. Each
    line is either a slash command or a chat turn; a turn is fully drained
    before the next line is read.
    """

    def __init__(
        self,
        chatbot: Chatbot,
        session: Optional[Session] = None,
        *,
        config: Optional[Config] = None,
        store: Optional[SessionStore] = None,
        printer: Optional[Printer] = None,
        interactive: Optional[bool] = None,
    ) -> None:
        self.chatbot = chatbot
        self.session = session if session is not None else Session()
        self.config = config or Config()
        self.store = store or SessionStore()
        self.printer = printer or Printer()
        self.interactive = sys.stdin.isatty() if interactive is None else interactive
        self.interpreter = CommandInterpreter()

    # ---------------- Command handling ---------------

    async def handle_command(self, line: str) -> bool:
        """Handle slash commands. Return False to exit REPL."""
        context = CommandContext(
            session=self.session,
            chatbot=self.chatbot,
            printer=self.printer,
            config=self.config,
            store=self.store,
        )
        try:
            command = Command.parse(line)
            await self.interpreter.execute(command, context)
        except QuitRequested:
            return False
        except LLMCLIError as exc:
            self.printer.error(str(exc))
        finally:
            self.chatbot = context.chatbot
        return True

    # ---------------- Chat turns ---------------

    async def send_chat(self, line: str) -> bool:
        """Run one chat turn. Return True if an assistant reply was stored."""
        self.session.add_user_message(line)
        logger.debug("Chat turn with %s (%d messages)", self.chatbot.name(), len(self.session))

        prefix = self.printer.chatbot_prefix(self.chatbot.name())
        accumulator: List[str] = []
        failure: Optional[ChatError] = None

        spinner = Spinner(self.printer, prefix=prefix)
        spinner.start()
        try:
            stream = await self.chatbot.send_message(self.session.messages)
        except ChatError as exc:
            spinner.stop()
            self.printer.end_reply()
            self.printer.error(str(exc))
            return False

        try:
            async with contextlib.aclosing(stream):
                async for increment in stream:
                    spinner.stop()
                    if isinstance(increment, ChatError):
                        failure = increment
                        break
                    self.printer.increment(increment)
                    accumulator.append(increment)
        finally:
            spinner.stop()
            self.printer.end_reply()

        if failure is not None:
            # The question stays in the transcript, the partial answer does not.
            self.printer.error(str(failure))
            return False

        self.session.add_assistant_message("".join(accumulator))
        return True

    # ---------------- Interaction loop ---------------

    def _read_line(self) -> str:
        prompt = self.printer.user_prompt() if self.interactive else ""
        return self.printer.input(prompt)

    def _print_banner(self) -> None:
        console_ = self.printer.console
        console_.print(Panel.fit("LLM Chat CLI", style="bold magenta"))
        console_.print(
            Ansi.style("Type your message and press Enter. Commands start with '/'.", Ansi.FG_YELLOW),
            Ansi.style(
                f"Current chatbot: {self.chatbot.name()} ({self.chatbot.current_model()}).",
                Ansi.FG_YELLOW,
            ),
            Ansi.style("Type /help for help.", Ansi.FG_YELLOW),
            sep="\n",
        )

    async def repl(self) -> None:
        """Run the interactive read–eval–print-loop."""
        if self.interactive:
            self._print_banner()

        while True:
            try:
                line = self._read_line().strip()
            except (EOFError, KeyboardInterrupt):
                if self.interactive:
                    self.printer.console.print("\n[signal caught – exiting]", markup=False)
                break

            if line:
                if is_command(line):
                    if not await self.handle_command(line):
                        break
                else:
                    await self.send_chat(line)

            if not self.interactive:
                break


# ---------------------------------------------------------------------------
# Entrypoint helpers (keeping it separate simplifies __main__ handling)
# ---------------------------------------------------------------------------


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="llmcli",
        description="Interactive CLI for chatting with large language models.",
    )
    parser.add_argument("--config", type=Path, help="Path to the TOML configuration file")
    parser.add_argument("--chatbot", "-c", choices=sorted(CHATBOTS), help="Chatbot to start with")
    parser.add_argument("--model", "-m", help="Model to start with (overrides the config)")
    parser.add_argument("--system", "-s", help="System prompt for the conversation")
    parser.add_argument("--session", "-l", help="Saved session to load at startup")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subcommands = parser.add_subparsers(dest="command")
    subcommands.add_parser("init", help="Initialize configuration")
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


def init_config(path: Optional[Path] = None) -> Path:
    """Ask for the default chatbot, model and API key and write the config."""
    config = Config()
    chatbot_key = questionary.select(
        "Default chatbot:", choices=list(CHATBOTS), default=config.default_chatbot
    ).ask()
    if chatbot_key is None:
        raise KeyboardInterrupt

    chatbot_cls = CHATBOTS[chatbot_key]
    model = questionary.select(
        "Default model:", choices=list(chatbot_cls.MODELS), default=chatbot_cls.DEFAULT_MODEL
    ).ask()
    if model is None:
        raise KeyboardInterrupt

    config.default_chatbot = chatbot_key
    config.default_model = model
    if getattr(chatbot_cls, "API_KEY_ENV", None):
        api_key = questionary.password(
            f"{chatbot_cls.NAME} API key (leave empty to use ${chatbot_cls.API_KEY_ENV}):"
        ).ask()
        if api_key:
            config.api_keys[chatbot_key] = api_key
    return config.save(path)


def build_cli(args: argparse.Namespace, config: Config) -> ChatCLI:
    """Create the startup chatbot and session described by *args*/*config*."""
    chatbot_key = args.chatbot or config.default_chatbot
    model = args.model or config.model_for(chatbot_key)
    chatbot = create_chatbot(chatbot_key, model=model, api_key=config.api_key_for(chatbot_key))

    store = SessionStore()
    session = Session()
    printer = Printer()
    if args.session:
        try:
            session = store.load(args.session)
        except LLMCLIError as exc:
            printer.error(str(exc))

    system_prompt = args.system or config.system_prompt
    if system_prompt:
        session.set_system_prompt(system_prompt)

    return ChatCLI(chatbot, session, config=config, store=store, printer=printer)


async def _run(cli: ChatCLI) -> None:
    try:
        await cli.repl()
    finally:
        await cli.chatbot.aclose()


def run_cli(argv: Optional[List[str]] = None) -> None:  # pragma: no cover
    args = _parse_args(argv)
    _configure_logging(args.verbose)

    if args.command == "init":
        try:
            path = init_config(args.config)
        except KeyboardInterrupt:
            sys.stderr.write("Initialization cancelled.\n")
            sys.exit(1)
        except LLMCLIError as exc:
            sys.stderr.write(f"Error: {exc}\n")
            sys.exit(1)
        console.print(f"Configuration initialized at: {path}")
        return

    try:
        config = Config.load(args.config)
        cli = build_cli(args, config)
    except LLMCLIError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        sys.exit(1)

    history_path = config.history_file
    if cli.interactive:
        load_history(history_path)
    try:
        asyncio.run(_run(cli))
    except KeyboardInterrupt:
        console.print("\n[interrupted]", markup=False)
    finally:
        if cli.interactive:
            save_history(history_path)


if __name__ == "__main__":  # pragma: no cover
    run_cli()
