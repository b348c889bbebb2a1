"""Chat Channel Port - Abstract interface for chat platform channel operations."""

from abc import ABC, abstractmethod
from typing import Any

from src.domain.model.chat import ChatMember


class ChatChannelPort(ABC):
    """
    Abstract interface for one chat channel.

    Implementations wrap a chat platform SDK (Stream Chat, etc.).
    """

    channel_type: str
    channel_id: str

    @property
    def cid(self) -> str:
        """Fully qualified channel id, ``<type>:<id>``."""
        return f"{self.channel_type}:{self.channel_id}"

    @abstractmethod
    async def send_event(self, payload: dict[str, Any], user_id: str) -> None:
        """
        Send a transport-level event (e.g. an AI indicator) to the channel.

        Args:
            payload: Event body, must contain ``type``
            user_id: Member the event is sent on behalf of
        """

    @abstractmethod
    async def query_members(self, filter_conditions: dict[str, Any] | None = None) -> list[ChatMember]:
        """Return channel members matching the filter (all members by default)."""

    @abstractmethod
    async def add_members(self, user_ids: list[str]) -> None:
        """Add users to the channel."""

    @abstractmethod
    async def watch(self) -> None:
        """Ensure the channel exists and load its state."""

    @abstractmethod
    async def send_message(self, text: str, user_id: str, ai_generated: bool = False) -> str:
        """
        Post a new message.

        Returns:
            The created message id
        """

    @abstractmethod
    async def partial_update_message(
        self, message_id: str, set_fields: dict[str, Any], user_id: str
    ) -> None:
        """Mutate fields of an existing message in place."""

    @abstractmethod
    async def recent_messages(self, limit: int) -> list[dict[str, Any]]:
        """Return the latest ``limit`` messages, oldest first."""


class ChatClientPort(ABC):
    """Factory of channel handles for a chat platform account."""

    api_key: str

    @abstractmethod
    def channel(self, channel_type: str, channel_id: str) -> ChatChannelPort:
        """Get a channel handle. Does not perform network I/O."""

    @abstractmethod
    def verify_webhook(self, body: bytes, signature: str) -> bool:
        """Check the signature of an inbound webhook request."""

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying HTTP session."""
