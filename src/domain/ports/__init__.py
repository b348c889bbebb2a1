"""
Domain Ports - Hexagonal architecture interfaces.

Ports define contracts that infrastructure adapters implement.
Domain layer depends on these interfaces, not concrete implementations.
"""

from src.domain.ports.repositories import AgentProfileRepository
from src.domain.ports.services import (
    ChatChannelPort,
    ChatClientPort,
    ChatEventHubPort,
    ChatEventListener,
    CompletionServicePort,
    CompletionStream,
)

__all__ = [
    "AgentProfileRepository",
    "ChatChannelPort",
    "ChatClientPort",
    "ChatEventHubPort",
    "ChatEventListener",
    "CompletionServicePort",
    "CompletionStream",
]
