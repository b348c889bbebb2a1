"""Agent profile repository port."""

from abc import ABC, abstractmethod

from src.domain.model.agent import AgentProfile


class AgentProfileRepository(ABC):
    """Read access to AI agent persona profiles."""

    @abstractmethod
    async def get_profile(self, agent_id: str) -> AgentProfile | None:
        """Return the profile for ``agent_id`` or None when it is absent."""
