"""AI agent application services."""

from src.application.services.agents.agent_factory import AgentFactory
from src.application.services.agents.agent_lifecycle_service import (
    AgentLifecycleService,
    StartResult,
    normalize_channel_id,
)
from src.application.services.agents.agent_registry import AgentRegistry
from src.application.services.agents.chat_agent import ChatAgent
from src.application.services.agents.streaming_relay import (
    RelayState,
    StreamingResponseRelay,
    should_flush,
)

__all__ = [
    "AgentFactory",
    "AgentLifecycleService",
    "AgentRegistry",
    "ChatAgent",
    "RelayState",
    "StartResult",
    "StreamingResponseRelay",
    "normalize_channel_id",
    "should_flush",
]
