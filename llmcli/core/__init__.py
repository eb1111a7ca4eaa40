from .config import Config
from .errors import (
    ChatError,
    ChatbotCreationError,
    CommandError,
    InvalidModelError,
    LLMCLIError,
    QuitRequested,
    SessionError,
)
from .messages import Message, Role
from .session import Session, SessionStore

__all__ = [
    "Config",
    "ChatError",
    "ChatbotCreationError",
    "CommandError",
    "InvalidModelError",
    "LLMCLIError",
    "QuitRequested",
    "SessionError",
    "Message",
    "Role",
    "Session",
    "SessionStore",
]
