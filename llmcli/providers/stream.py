"""Decoding of Server-Sent-Event response bodies into text increments."""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Callable, Optional

import httpx

from ..core.errors import ChatNetworkError, ChatTimeoutError, UnexpectedResponseError
from .base import ResponseStream

logger = logging.getLogger(__name__)

SSE_DATA_PREFIX = "data: "

TextExtractor = Callable[[Any], Optional[str]]


def transport_error(exc: httpx.HTTPError) -> ChatNetworkError | ChatTimeoutError:
    """Map an httpx failure onto the chat error taxonomy."""
    if isinstance(exc, httpx.TimeoutException):
        return ChatTimeoutError()
    return ChatNetworkError(str(exc) or exc.__class__.__name__)


async def decode_sse_stream(
    lines: AsyncIterator[str],
    extract_text: TextExtractor,
    prefix: str = SSE_DATA_PREFIX,
) -> ResponseStream:
    """Yield the text carried by each ``data:`` frame of an SSE body.

    *extract_text* receives the parsed JSON payload and returns its text; it
    may raise ``KeyError``/``IndexError``/``TypeError`` for payloads that do
    not match the expected schema. A malformed frame yields an
    :class:`UnexpectedResponseError` and decoding carries on. A transport
    failure yields its error and ends the stream.
    """
    try:
        async for line in lines:
            if not line or line.startswith(":"):
                continue
            if not line.startswith(prefix):
                logger.debug("Ignoring frame without %r prefix: %r", prefix, line[:80])
                yield UnexpectedResponseError()
                continue

            try:
                payload = json.loads(line[len(prefix):])
                text = extract_text(payload)
            except (ValueError, KeyError, IndexError, TypeError) as exc:
                logger.debug("Malformed frame (%s): %r", exc, line[:80])
                yield UnexpectedResponseError()
                continue

            if text:
                yield text
    except httpx.HTTPError as exc:
        logger.debug("Transport failed mid-stream: %r", exc)
        yield transport_error(exc)
