"""Completion stream events and chat indicator event types."""

from dataclasses import dataclass
from enum import Enum

from src.domain.shared_kernel import ValueObject


class StreamEventType(str, Enum):
    """Incremental generation events produced by a completion stream."""

    BLOCK_START = "block_start"
    TEXT_DELTA = "text_delta"
    STREAM_END = "stream_end"


class ChatEventType(str, Enum):
    """Chat transport event types exchanged with chat clients."""

    MESSAGE_NEW = "message.new"
    AI_INDICATOR_UPDATE = "ai_indicator.update"
    AI_INDICATOR_CLEAR = "ai_indicator.clear"
    AI_INDICATOR_STOP = "ai_indicator.stop"


class AIIndicatorState(str, Enum):
    """States carried by ``ai_indicator.update`` events."""

    THINKING = "AI_STATE_THINKING"
    GENERATING = "AI_STATE_GENERATING"


@dataclass(frozen=True)
class StreamEvent(ValueObject):
    """One event of a completion stream.

    ``type`` is usually a ``StreamEventType`` value; unknown types are
    carried through as plain strings and ignored by consumers.
    """

    type: str
    delta: str | None = None
