"""Registry of the chatbot backends the CLI can talk to."""

from __future__ import annotations

import logging
from typing import Dict, Optional, Type

from ..core.errors import UnknownChatbotError
from .base import Chatbot, ResponseStream, StreamIncrement
from .dummy import DummyChatbot
from .gemini import GeminiChatbot
from .openai_provider import OpenAIChatbot

logger = logging.getLogger(__name__)

# Order is the order shown by /list_chatbots.
CHATBOTS: Dict[str, Type[Chatbot]] = {
    "gemini": GeminiChatbot,
    "openai": OpenAIChatbot,
    "dummy": DummyChatbot,
}

CHATBOT_DESCRIPTIONS: Dict[str, str] = {
    "gemini": "Google Gemini",
    "openai": "OpenAI",
    "dummy": "Dummy",
}


def create_chatbot(
    key: str, model: Optional[str] = None, api_key: Optional[str] = None
) -> Chatbot:
    """Build the chatbot registered under *key*."""
    try:
        chatbot_cls = CHATBOTS[key]
    except KeyError:
        raise UnknownChatbotError(f"Unknown chatbot '{key}'.") from None
    chatbot = chatbot_cls.create(model, api_key)
    logger.debug("Created %s chatbot with model %s", chatbot.name(), chatbot.model_id)
    return chatbot


__all__ = [
    "CHATBOTS",
    "CHATBOT_DESCRIPTIONS",
    "Chatbot",
    "DummyChatbot",
    "GeminiChatbot",
    "OpenAIChatbot",
    "ResponseStream",
    "StreamIncrement",
    "create_chatbot",
]
