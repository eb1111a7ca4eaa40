"""Interactive CLI for chatting with large language models.

Features
--------
1. Several chatbots behind one interface: Google Gemini, OpenAI and an offline dummy.
2. Chatbot and model switching mid-conversation with `/chatbot` and `/model`.
3. A system prompt that can be set at startup (`--system`) or with `/system`.
4. Named session snapshots: `/save`, `/load`, `/delete` and `/sessions`.

Run `python -m llmcli` or the `llmcli` console script. Type `/help` inside
the REPL for the full list of commands.
"""
# Re-export useful symbols for convenience
from .core import Config, Message, Role, Session, SessionStore
from .providers import Chatbot, create_chatbot
from .commands import Command, CommandInterpreter
from .cli import ChatCLI, run_cli

__all__ = [
    "Config",
    "Message",
    "Role",
    "Session",
    "SessionStore",
    "Chatbot",
    "create_chatbot",
    "Command",
    "CommandInterpreter",
    "ChatCLI",
    "run_cli",
]
