"""Tests for SqlAgentProfileRepository against an in-memory SQLite database."""

import pytest
from sqlalchemy.exc import OperationalError

from src.infrastructure.adapters.secondary.persistence.models import AIAgentModel
from src.infrastructure.adapters.secondary.persistence.sql_agent_profile_repository import (
    SqlAgentProfileRepository,
)


@pytest.mark.unit
class TestSqlAgentProfileRepository:
    async def test_get_profile(self, test_db, test_session_factory) -> None:
        test_db.add(
            AIAgentModel(
                id="ai-bot-1",
                name=" Leo ",
                gender="Male",
                personality="calm",
                style="playful",
                traits="kind, curious",
                quirks=None,
                bio="Grew up by the sea",
            )
        )
        await test_db.commit()
        repository = SqlAgentProfileRepository(test_session_factory)

        profile = await repository.get_profile("ai-bot-1")

        assert profile is not None
        assert profile.agent_id == "ai-bot-1"
        assert profile.name == "Leo"
        assert profile.gender == "male"
        assert profile.traits == "kind, curious"
        assert profile.quirks is None
        assert profile.system_prompt().startswith("You are a virtual boyfriend named Leo.")

    async def test_missing_fields_fall_back_to_defaults(self, test_db, test_session_factory) -> None:
        test_db.add(AIAgentModel(id="ai-bot-2"))
        await test_db.commit()
        repository = SqlAgentProfileRepository(test_session_factory)

        profile = await repository.get_profile("ai-bot-2")

        assert profile.name == "Assistant"
        assert profile.gender == "female"

    async def test_unknown_agent_returns_none(self, test_session_factory) -> None:
        repository = SqlAgentProfileRepository(test_session_factory)
        assert await repository.get_profile("nobody") is None

    async def test_store_error_returns_none(self) -> None:
        class _BrokenSession:
            async def __aenter__(self):
                raise OperationalError("SELECT", {}, Exception("connection refused"))

            async def __aexit__(self, *exc_info):
                return False

        repository = SqlAgentProfileRepository(lambda: _BrokenSession())

        assert await repository.get_profile("ai-bot-1") is None
