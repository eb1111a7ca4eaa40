"""Live conversation transcript and its on-disk snapshots."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from .errors import InvalidSessionNameError, SessionError, SessionNotFoundError
from .messages import Message, Role

logger = logging.getLogger(__name__)


class Session:
    """Ordered conversation history owned by the running REPL.

    At most one message carries the system role. Providers only ever read
    ``messages``; mutation happens here, driven by the REPL and commands.
    """

    def __init__(self, messages: Optional[List[Message]] = None) -> None:
        self.messages: List[Message] = list(messages or [])

    def __len__(self) -> int:
        return len(self.messages)

    def add_user_message(self, content: str) -> None:
        self.messages.append(Message(Role.USER, content))

    def add_assistant_message(self, content: str) -> None:
        self.messages.append(Message(Role.ASSISTANT, content))

    @property
    def system_prompt(self) -> Optional[str]:
        for message in self.messages:
            if message.role is Role.SYSTEM:
                return message.content
        return None

    def set_system_prompt(self, content: str) -> None:
        """Replace any existing system message with a new one at the front."""
        self.messages = [m for m in self.messages if m.role is not Role.SYSTEM]
        self.messages.insert(0, Message(Role.SYSTEM, content))

    def clear(self) -> None:
        # Drops the system prompt too.
        self.messages.clear()

    def replace(self, other: "Session") -> None:
        self.messages = list(other.messages)


class SessionStore:
    """Saves, loads, lists and deletes named transcript snapshots.

    Snapshots are JSON files ``<name>.json`` holding ``{"messages": [...]}``.
    The store works on copies: it never keeps a reference to a live session.
    """

    FILENAME_SUFFIX = ".json"
    SESSIONS_DIR = Path.home() / ".llmcli_sessions"

    def __init__(self, directory: Optional[Path] = None) -> None:
        self._directory = directory

    @property
    def directory(self) -> Path:
        if self._directory is not None:
            return self._directory
        env_dir = os.getenv("LLMCLI_SESSION_DIR")
        if env_dir:
            return Path(env_dir)
        return self.SESSIONS_DIR

    def _ensure_dir(self) -> Path:
        directory = self.directory
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise SessionError(f"Failed to create directory: {exc}.") from exc
        return directory

    def path_for(self, name: str) -> Path:
        if not name or name.startswith(".") or "/" in name or "\\" in name:
            raise InvalidSessionNameError(f"Invalid session name: '{name}'.")
        return self._ensure_dir() / f"{name}{self.FILENAME_SUFFIX}"

    def save(self, name: str, session: Session) -> Path:
        path = self.path_for(name)
        data = {"messages": [m.to_dict() for m in session.messages]}
        tmp_path = path.with_suffix(".tmp")
        try:
            tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            raise SessionError(f"Failed to write file: {exc}.") from exc
        logger.debug("Saved %d messages to %s", len(session.messages), path)
        return path

    def load(self, name: str) -> Session:
        path = self.path_for(name)
        if not path.exists():
            raise SessionNotFoundError(f"Session '{name}' does not exist.")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise SessionError(f"Failed to read file: {exc}.") from exc
        except json.JSONDecodeError as exc:
            raise SessionError(f"Failed to deserialize session: {exc}.") from exc

        try:
            messages = [Message.from_dict(item) for item in data["messages"]]
        except (KeyError, TypeError, ValueError) as exc:
            raise SessionError(f"Failed to deserialize session: {exc}.") from exc
        if sum(1 for m in messages if m.role is Role.SYSTEM) > 1:
            raise SessionError(f"Session '{name}' has more than one system message.")
        logger.debug("Loaded %d messages from %s", len(messages), path)
        return Session(messages)

    def delete(self, name: str) -> None:
        path = self.path_for(name)
        if not path.exists():
            raise SessionNotFoundError(f"Session '{name}' does not exist.")
        try:
            path.unlink()
        except OSError as exc:
            raise SessionError(f"Failed to delete file: {exc}.") from exc
        logger.debug("Deleted %s", path)

    def list_sessions(self) -> List[str]:
        directory = self._ensure_dir()
        return sorted(f.stem for f in directory.glob(f"*{self.FILENAME_SUFFIX}"))
