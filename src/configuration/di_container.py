"""Dependency Injection Container for the AI agent bridge.

Builds the long-lived collaborators once per application and hands them to
the web layer. Every collaborator can be overridden, which is how tests
swap in fakes for the chat platform and the model provider.
"""

import asyncio
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from src.application.services.agents import (
    AgentFactory,
    AgentLifecycleService,
    AgentRegistry,
)
from src.configuration.config import Settings, get_settings
from src.domain.ports.repositories.agent_profile_repository import AgentProfileRepository
from src.domain.ports.services.chat_channel_port import ChatClientPort
from src.domain.ports.services.completion_service_port import CompletionServicePort
from src.infrastructure.adapters.secondary.channels.stream import StreamChatClient
from src.infrastructure.adapters.secondary.persistence.database import (
    build_engine,
    build_session_factory,
)
from src.infrastructure.adapters.secondary.persistence.sql_agent_profile_repository import (
    SqlAgentProfileRepository,
)
from src.infrastructure.channels import ChatEventHub
from src.infrastructure.llm.litellm.litellm_completion_service import LiteLLMCompletionService


class DIContainer:
    """Owns the shared services of one application instance."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        chat_client: Optional[ChatClientPort] = None,
        completion_service: Optional[CompletionServicePort] = None,
        profile_repository: Optional[AgentProfileRepository] = None,
        event_hub: Optional[ChatEventHub] = None,
        registry: Optional[AgentRegistry] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._engine: Optional[AsyncEngine] = None

        self._chat_client = chat_client or StreamChatClient(
            api_key=self._settings.stream_api_key,
            api_secret=self._settings.stream_api_secret,
        )
        self._completion_service = completion_service or LiteLLMCompletionService(
            anthropic_api_key=self._settings.anthropic_api_key,
            openai_api_key=self._settings.openai_api_key,
        )
        self._profile_repository = profile_repository or SqlAgentProfileRepository(
            self._session_factory()
        )
        self._event_hub = event_hub or ChatEventHub()
        self._registry = registry or AgentRegistry(
            inactivity_threshold=self._settings.agent_inactivity_threshold_seconds,
            sweep_interval=self._settings.agent_sweep_interval_seconds,
        )
        self._agent_factory = AgentFactory(
            settings=self._settings,
            completion_service=self._completion_service,
            event_hub=self._event_hub,
        )
        self._lifecycle_service = AgentLifecycleService(
            chat_client=self._chat_client,
            registry=self._registry,
            agent_factory=self._agent_factory,
            profile_repository=self._profile_repository,
            completion_service=self._completion_service,
        )

    def _session_factory(self) -> async_sessionmaker[AsyncSession]:
        self._engine = build_engine(self._settings)
        return build_session_factory(self._engine)

    @property
    def settings(self) -> Settings:
        return self._settings

    def chat_client(self) -> ChatClientPort:
        return self._chat_client

    def event_hub(self) -> ChatEventHub:
        return self._event_hub

    def agent_registry(self) -> AgentRegistry:
        return self._registry

    def agent_factory(self) -> AgentFactory:
        return self._agent_factory

    def completion_service(self) -> CompletionServicePort:
        return self._completion_service

    def profile_repository(self) -> AgentProfileRepository:
        return self._profile_repository

    def agent_lifecycle_service(self) -> AgentLifecycleService:
        return self._lifecycle_service

    async def shutdown(self) -> None:
        """Dispose live agents and release network resources.

        Replies still streaming get ``agent_shutdown_timeout_seconds`` to
        finish and are cancelled after that, before the chat client closes.
        """
        agents = [self._registry.get(agent_id) for agent_id in self._registry.agent_ids()]
        await self._registry.stop()
        await asyncio.gather(
            *(
                agent.wait_for_relays(timeout=self._settings.agent_shutdown_timeout_seconds)
                for agent in agents
                if agent is not None
            )
        )
        await self._chat_client.close()
        if self._engine is not None:
            await self._engine.dispose()
