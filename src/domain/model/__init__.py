# flake8: noqa

# Agent domain models
from src.domain.model.agent import AgentProfile, AgentState

# Chat domain models
from src.domain.model.chat import (
    AIIndicatorState,
    ChatEventType,
    ChatMember,
    StreamEvent,
    StreamEventType,
)

__all__ = [
    # Agent
    "AgentProfile",
    "AgentState",
    # Chat
    "AIIndicatorState",
    "ChatEventType",
    "ChatMember",
    "StreamEvent",
    "StreamEventType",
]
