"""Agent domain models.

This module contains:
- AgentProfile: Persona attributes of an AI agent member
- AgentState: Lifecycle state of a live agent instance
"""

from src.domain.model.agent.agent_profile import AgentProfile
from src.domain.model.agent.agent_state import AgentState

__all__ = [
    "AgentProfile",
    "AgentState",
]
