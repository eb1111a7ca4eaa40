"""Common contract implemented by every chatbot backend."""

from __future__ import annotations

import abc
from typing import AsyncGenerator, ClassVar, Dict, List, Optional, Sequence, Union

from ..core.errors import ChatError, InvalidModelError, UnknownModelError
from ..core.messages import Message

# One unit of a streamed reply: a text fragment or the failure that ended it.
StreamIncrement = Union[str, ChatError]
ResponseStream = AsyncGenerator[StreamIncrement, None]


class Chatbot(abc.ABC):
    """A backend with a fixed model catalog that streams chat replies.

    Subclasses declare ``NAME``, ``MODELS`` (id -> label, in display order)
    and ``DEFAULT_MODEL``, and implement :meth:`send_message`.
    """

    NAME: ClassVar[str]
    MODELS: ClassVar[Dict[str, str]]
    DEFAULT_MODEL: ClassVar[str]

    def __init__(self, model: str) -> None:
        self._model = model

    @classmethod
    def create(cls, model: Optional[str] = None, api_key: Optional[str] = None) -> "Chatbot":
        """Validate *model* against the catalog and build an instance."""
        model = model or cls.DEFAULT_MODEL
        if model not in cls.MODELS:
            raise UnknownModelError(f"Unknown model '{model}' for {cls.NAME}.")
        return cls(model)

    def name(self) -> str:
        return self.NAME

    @property
    def model_id(self) -> str:
        return self._model

    def current_model(self) -> str:
        return self.MODELS[self._model]

    def available_models(self) -> List[str]:
        return list(self.MODELS)

    def switch_model(self, new_model: str) -> None:
        """Make *new_model* active; leaves state untouched if it is unknown."""
        if new_model not in self.MODELS:
            raise InvalidModelError(f"Invalid model '{new_model}'.")
        self._model = new_model
        self._on_model_changed()

    def _on_model_changed(self) -> None:
        """Hook for variants that derive request settings from the model."""

    @abc.abstractmethod
    async def send_message(self, messages: Sequence[Message]) -> ResponseStream:
        """Start a reply to *messages*.

        Raises :class:`ChatError` if the request cannot be started. The
        returned stream yields text increments in arrival order; a failure
        after the stream has started is yielded as its last item.
        """

    async def aclose(self) -> None:
        """Release network resources held by the backend."""
