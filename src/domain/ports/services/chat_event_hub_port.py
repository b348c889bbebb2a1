"""Chat Event Hub Port - out-of-band delivery of chat transport events."""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

ChatEventListener = Callable[[dict[str, Any]], Awaitable[None]]


class ChatEventHubPort(ABC):
    """Routes chat events, keyed by event type and channel cid, to listeners."""

    @abstractmethod
    def on(self, event_type: str, cid: str, listener: ChatEventListener) -> None:
        """Register a listener for ``event_type`` events of channel ``cid``."""

    @abstractmethod
    def off(self, event_type: str, cid: str, listener: ChatEventListener) -> None:
        """Remove a listener. Unknown listeners are ignored."""

    @abstractmethod
    async def dispatch(self, event: dict[str, Any]) -> int:
        """
        Deliver an event to its listeners.

        Returns:
            Number of listeners the event was delivered to
        """
