"""Exception hierarchy shared by every layer of the CLI.

The ``str()`` of each exception is the message shown to the user.
"""

from __future__ import annotations

from typing import Optional


class LLMCLIError(Exception):
    """Base class for all recoverable and startup errors."""

    message = "Unknown error."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)


# ---------------------------------------------------------------------------
# Provider construction / model selection
# ---------------------------------------------------------------------------


class ChatbotCreationError(LLMCLIError):
    message = "Failed to create chatbot."


class ApiKeyMissingError(ChatbotCreationError):
    message = "API key missing."


class UnknownChatbotError(ChatbotCreationError):
    message = "Unknown chatbot."


class UnknownModelError(ChatbotCreationError):
    message = "Unknown model."


class InvalidModelError(LLMCLIError):
    message = "Invalid model."


# ---------------------------------------------------------------------------
# Chat turn failures
# ---------------------------------------------------------------------------


class ChatError(LLMCLIError):
    message = "Chat request failed."


class ChatTimeoutError(ChatError):
    message = "Timeout."


class ChatNetworkError(ChatError):
    """Transport failure other than a timeout; keeps the transport detail."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Network error: {detail}.")


class ChatServerError(ChatError):
    """Non-success HTTP status returned by the remote service."""

    def __init__(self, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        text = f"Server error ({status_code})"
        if body:
            text += f": {body}"
        super().__init__(text)


class UnexpectedResponseError(ChatError):
    # Schema mismatches are not actionable by the user so the detail is hidden.
    message = "Unexpected response."


# ---------------------------------------------------------------------------
# Commands and persistence
# ---------------------------------------------------------------------------


class CommandError(LLMCLIError):
    message = "Command failed."


class MissingArgumentError(CommandError):
    pass


class InvalidCommandError(CommandError):
    message = "Invalid command."


class SessionError(CommandError):
    message = "Session error."


class SessionNotFoundError(SessionError):
    message = "Session not found."


class InvalidSessionNameError(SessionError):
    message = "Invalid session name."


class ConfigError(LLMCLIError):
    message = "Invalid configuration."


class QuitRequested(Exception):
    """Raised by the ``/quit`` command to unwind the REPL loop."""
