"""
SQLAlchemy implementation of AgentProfileRepository.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domain.model.agent import AgentProfile
from src.domain.ports.repositories.agent_profile_repository import AgentProfileRepository
from src.infrastructure.adapters.secondary.persistence.models import AIAgentModel

logger = logging.getLogger(__name__)


class SqlAgentProfileRepository(AgentProfileRepository):
    """Reads agent personas from the ``ai_agents`` table.

    Each lookup runs in its own short-lived session. Store errors are
    logged and reported as a missing profile.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_profile(self, agent_id: str) -> Optional[AgentProfile]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(AIAgentModel).where(AIAgentModel.id == agent_id)
                )
                db_agent = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"[AgentProfiles] Failed to load profile for {agent_id}: {e}")
            return None
        except OSError as e:
            logger.error(f"[AgentProfiles] Profile store unreachable for {agent_id}: {e}")
            return None
        return self._to_domain(agent_id, db_agent)

    def _to_domain(self, agent_id: str, db_agent: Optional[AIAgentModel]) -> Optional[AgentProfile]:
        if db_agent is None:
            return None
        return AgentProfile.from_record(agent_id, db_agent.to_record())
