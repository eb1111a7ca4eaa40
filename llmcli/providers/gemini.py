"""Google Gemini backend talking to the REST API over httpx."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..core.errors import ApiKeyMissingError, ChatServerError, UnknownModelError
from ..core.messages import Message, Role
from .base import Chatbot, ResponseStream
from .stream import decode_sse_stream, transport_error

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models/"
DEFAULT_TIMEOUT = httpx.Timeout(60.0, connect=10.0)

# Gemini calls the assistant "model".
_WIRE_ROLES = {Role.USER: "user", Role.ASSISTANT: "model"}


def build_request_body(messages: Sequence[Message]) -> Dict[str, Any]:
    """Translate the transcript into a ``generateContent`` request body."""
    body: Dict[str, Any] = {}
    contents: List[Dict[str, Any]] = []
    for message in messages:
        if message.role is Role.SYSTEM:
            body["system_instruction"] = {"parts": [{"text": message.content}]}
            continue
        contents.append(
            {"role": _WIRE_ROLES[message.role], "parts": [{"text": message.content}]}
        )
    body["contents"] = contents
    return body


def extract_candidate_text(payload: Any) -> Optional[str]:
    """Return the text of the first part of the first candidate."""
    text = payload["candidates"][0]["content"]["parts"][0]["text"]
    if not isinstance(text, str):
        raise TypeError("candidate text is not a string")
    return text


class GeminiChatbot(Chatbot):
    NAME = "Gemini"
    MODELS = {
        "gemini-1.5-flash": "Gemini 1.5 Flash",
        "gemini-1.5-pro": "Gemini 1.5 Pro",
        "gemini-2.0-flash": "Gemini 2.0 Flash",
        "gemini-2.5-flash": "Gemini 2.5 Flash",
        "gemini-2.5-pro": "Gemini 2.5 Pro",
    }
    DEFAULT_MODEL = "gemini-1.5-flash"
    API_KEY_ENV = "GEMINI_API_KEY"

    def __init__(
        self,
        model: str,
        api_key: str,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(model)
        self._api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=DEFAULT_TIMEOUT)
        self.url = self._build_url()

    @classmethod
    def create(cls, model: Optional[str] = None, api_key: Optional[str] = None) -> "GeminiChatbot":
        model = model or cls.DEFAULT_MODEL
        if model not in cls.MODELS:
            raise UnknownModelError(f"Unknown model '{model}' for {cls.NAME}.")
        api_key = api_key or os.getenv(cls.API_KEY_ENV)
        if not api_key:
            raise ApiKeyMissingError(
                f"API key missing. Set it in the config file or {cls.API_KEY_ENV}."
            )
        return cls(model, api_key)

    def _build_url(self) -> str:
        return f"{GEMINI_BASE_URL}{self._model}:streamGenerateContent?alt=sse"

    def _on_model_changed(self) -> None:
        self.url = self._build_url()

    async def send_message(self, messages: Sequence[Message]) -> ResponseStream:
        body = build_request_body(messages)
        logger.debug("POST %s (%d messages)", self.url, len(body["contents"]))
        request = self._client.build_request(
            "POST",
            self.url,
            json=body,
            headers={"x-goog-api-key": self._api_key},
        )
        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise transport_error(exc) from exc

        logger.debug("Gemini responded with HTTP %d", response.status_code)
        if not response.is_success:
            try:
                payload = await response.aread()
            except httpx.HTTPError as exc:
                raise transport_error(exc) from exc
            finally:
                await response.aclose()
            raise ChatServerError(
                response.status_code, payload.decode("utf-8", errors="replace").strip()
            )

        return self._stream(response)

    async def _stream(self, response: httpx.Response) -> ResponseStream:
        try:
            async for increment in decode_sse_stream(
                response.aiter_lines(), extract_candidate_text
            ):
                yield increment
        finally:
            await response.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()
