"""Completion Service Port - Abstract interface for LLM completions."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from src.domain.model.chat import StreamEvent


class CompletionStream(ABC):
    """
    Ordered stream of ``StreamEvent`` with an abort control.

    After ``abort()`` the iterator stops yielding. A read that is still
    waiting on the upstream ends at once instead of waiting for more data.
    """

    @abstractmethod
    def __aiter__(self) -> AsyncIterator[StreamEvent]:
        ...

    @abstractmethod
    def abort(self) -> None:
        """Stop delivering events and end any read in progress."""

    @property
    @abstractmethod
    def aborted(self) -> bool:
        ...

    async def aclose(self) -> None:
        """Release the upstream connection. Safe to call more than once."""


class CompletionServicePort(ABC):
    """
    Abstract interface for model completions.

    Implementations may include LiteLLM, a provider SDK, etc.
    """

    @abstractmethod
    async def complete(
        self,
        system: str,
        messages: list[dict[str, str]],
        model: str,
        max_tokens: int = 1024,
    ) -> str:
        """
        Issue a single non-streaming completion.

        Args:
            system: System prompt
            messages: Conversation as ``{"role", "content"}`` dicts
            model: Model identifier
            max_tokens: Maximum tokens in response

        Returns:
            The response text (empty string when the model returned none)
        """

    @abstractmethod
    async def stream(
        self,
        system: str,
        messages: list[dict[str, str]],
        model: str,
        max_tokens: int = 1024,
    ) -> CompletionStream:
        """Open a streaming completion. The request is sent before returning."""
