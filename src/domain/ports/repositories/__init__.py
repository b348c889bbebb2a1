from src.domain.ports.repositories.agent_profile_repository import AgentProfileRepository

__all__ = [
    "AgentProfileRepository",
]
