"""Offline echo backend, handy for trying the CLI without an API key."""

from __future__ import annotations

from typing import Sequence

from ..core.messages import Message, Role
from .base import Chatbot, ResponseStream


class DummyChatbot(Chatbot):
    NAME = "Dummy"
    MODELS = {"1": "Model 1", "2": "Model 2"}
    DEFAULT_MODEL = "1"

    @staticmethod
    def reply_to(messages: Sequence[Message]) -> str:
        if not messages:
            return "Dummy response to empty conversation."
        last = messages[-1]
        if last.role is Role.USER:
            return f'Dummy response to: "{last.content}".'
        return "Dummy response."

    async def send_message(self, messages: Sequence[Message]) -> ResponseStream:
        return self._stream(self.reply_to(messages))

    @staticmethod
    async def _stream(text: str) -> ResponseStream:
        yield text
