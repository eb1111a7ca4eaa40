"""Conversation message primitives."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class Role(str, Enum):
    """Author of a message in the transcript."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """A single entry of the conversation transcript."""

    role: Role
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        """Build a message from its JSON snapshot form.

        Raises ``ValueError`` for unknown roles and ``KeyError`` / ``TypeError``
        for malformed records; callers translate these into session errors.
        """
        content = data["content"]
        if not isinstance(content, str):
            raise TypeError("message content must be a string")
        role = data["role"]
        # Gemini names the assistant "model".
        if role == "model":
            role = Role.ASSISTANT.value
        return cls(role=Role(role), content=content)
