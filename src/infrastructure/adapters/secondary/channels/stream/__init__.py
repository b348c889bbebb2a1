"""Stream Chat channel adapter."""

from src.infrastructure.adapters.secondary.channels.stream.adapter import (
    StreamChatChannel,
    StreamChatClient,
)

__all__ = [
    "StreamChatChannel",
    "StreamChatClient",
]
