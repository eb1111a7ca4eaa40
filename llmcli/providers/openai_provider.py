"""OpenAI backend using the official SDK's async streaming client."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional, Sequence

import openai
from openai import AsyncOpenAI

from ..core.errors import (
    ApiKeyMissingError,
    ChatError,
    ChatNetworkError,
    ChatServerError,
    ChatTimeoutError,
    UnexpectedResponseError,
    UnknownModelError,
)
from ..core.messages import Message, Role
from .base import Chatbot, ResponseStream

logger = logging.getLogger(__name__)


def sdk_error(exc: openai.OpenAIError) -> ChatError:
    """Translate an SDK exception into the chat error taxonomy."""
    # APITimeoutError subclasses APIConnectionError so it is checked first.
    if isinstance(exc, openai.APITimeoutError):
        return ChatTimeoutError()
    if isinstance(exc, openai.APIConnectionError):
        return ChatNetworkError(str(exc))
    if isinstance(exc, openai.APIStatusError):
        return ChatServerError(exc.status_code, exc.message)
    return UnexpectedResponseError()


def build_messages(messages: Sequence[Message]) -> List[Dict[str, str]]:
    """Chat Completions payload with the system prompt sent first."""
    system = [m.to_dict() for m in messages if m.role is Role.SYSTEM]
    rest = [m.to_dict() for m in messages if m.role is not Role.SYSTEM]
    return system + rest


class OpenAIChatbot(Chatbot):
    NAME = "OpenAI"
    MODELS = {
        "gpt-4.1": "GPT-4.1",
        "gpt-4.1-mini": "GPT-4.1 mini",
        "gpt-4o": "GPT-4o",
        "o1": "o1",
        "o3": "o3",
        "o4-mini": "o4-mini",
    }
    DEFAULT_MODEL = "gpt-4o"
    API_KEY_ENV = "OPENAI_API_KEY"

    def __init__(self, model: str, client: AsyncOpenAI) -> None:
        super().__init__(model)
        self._client = client

    @classmethod
    def create(cls, model: Optional[str] = None, api_key: Optional[str] = None) -> "OpenAIChatbot":
        model = model or cls.DEFAULT_MODEL
        if model not in cls.MODELS:
            raise UnknownModelError(f"Unknown model '{model}' for {cls.NAME}.")
        api_key = api_key or os.getenv(cls.API_KEY_ENV)
        if not api_key:
            raise ApiKeyMissingError(
                f"API key missing. Set it in the config file or {cls.API_KEY_ENV}."
            )

        client_kwargs: Dict[str, Any] = {"api_key": api_key}
        base_url = os.getenv("OPENAI_BASE_URL")
        if base_url:
            client_kwargs["base_url"] = base_url
        return cls(model, AsyncOpenAI(**client_kwargs))

    async def send_message(self, messages: Sequence[Message]) -> ResponseStream:
        logger.debug("Chat completion with %s (%d messages)", self._model, len(messages))
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=build_messages(messages),  # type: ignore[arg-type]
                stream=True,
            )
        except openai.OpenAIError as exc:
            raise sdk_error(exc) from exc
        return self._stream(response)

    @staticmethod
    async def _stream(response: Any) -> ResponseStream:
        try:
            async for chunk in response:
                if not chunk.choices:
                    continue
                content = chunk.choices[0].delta.content
                if content:
                    yield content
        except openai.OpenAIError as exc:
            logger.debug("Stream failed: %r", exc)
            yield sdk_error(exc)

    async def aclose(self) -> None:
        await self._client.close()
