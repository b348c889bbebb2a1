"""Pytest configuration and shared fixtures for testing."""

from typing import AsyncGenerator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.application.services.agents import AgentRegistry
from src.configuration.config import Settings
from src.configuration.di_container import DIContainer
from src.infrastructure.adapters.primary.web.main import create_app
from src.infrastructure.adapters.secondary.persistence.models import Base
from src.infrastructure.channels import ChatEventHub
from src.tests.fakes import FakeChatClient, FakeCompletionService, InMemoryProfileRepository

# --- Database Fixtures ---


@pytest.fixture
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def test_session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_db(test_session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with test_session_factory() as session:
        yield session
        await session.rollback()


# --- Settings / Service Fixtures ---


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        stream_api_key="test-key",
        stream_api_secret="test-secret",
        stream_verify_webhooks=True,
        supabase_db_url="sqlite+aiosqlite:///:memory:",
        anthropic_model="anthropic/claude-test",
        openai_model="openai/gpt-test",
        agent_thinking_delay_seconds=0,
        agent_sweep_interval_seconds=3600,
    )


@pytest.fixture
def chat_client() -> FakeChatClient:
    return FakeChatClient()


@pytest.fixture
def completion_service() -> FakeCompletionService:
    return FakeCompletionService()


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def event_hub() -> ChatEventHub:
    return ChatEventHub()


@pytest.fixture
def registry() -> AgentRegistry:
    return AgentRegistry(sweep_interval=3600)


@pytest.fixture
def container(
    test_settings, chat_client, completion_service, profile_repository, event_hub, registry
) -> DIContainer:
    return DIContainer(
        settings=test_settings,
        chat_client=chat_client,
        completion_service=completion_service,
        profile_repository=profile_repository,
        event_hub=event_hub,
        registry=registry,
    )


@pytest.fixture
def client(container) -> TestClient:
    """HTTP client bound to an app wired with in-memory fakes."""
    app = create_app(container=container)
    with TestClient(app) as test_client:
        yield test_client
