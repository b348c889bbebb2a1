"""Chat domain models - members, stream events and indicator payloads."""

from src.domain.model.chat.chat_member import ChatMember
from src.domain.model.chat.stream_event import (
    AIIndicatorState,
    ChatEventType,
    StreamEvent,
    StreamEventType,
)

__all__ = [
    "AIIndicatorState",
    "ChatEventType",
    "ChatMember",
    "StreamEvent",
    "StreamEventType",
]
