"""Builds ``ChatAgent`` instances for a model platform."""

from __future__ import annotations

import logging

from src.application.services.agents.chat_agent import ChatAgent
from src.configuration.config import Settings
from src.domain.exceptions import MissingPreconditionError
from src.domain.model.agent import AgentProfile
from src.domain.ports.services.chat_channel_port import ChatChannelPort
from src.domain.ports.services.chat_event_hub_port import ChatEventHubPort
from src.domain.ports.services.completion_service_port import CompletionServicePort

logger = logging.getLogger(__name__)

SUPPORTED_PLATFORMS = ("anthropic", "openai")


class AgentFactory:
    """Creates agents wired to the shared completion service and event hub."""

    def __init__(
        self,
        settings: Settings,
        completion_service: CompletionServicePort,
        event_hub: ChatEventHubPort,
    ) -> None:
        self._settings = settings
        self._completion_service = completion_service
        self._event_hub = event_hub

    def resolve_model(self, platform: str) -> str:
        """Map a platform name to its configured model.

        Raises:
            MissingPreconditionError: the platform is not supported
        """
        normalized = (platform or "").strip().lower()
        if normalized == "anthropic":
            return self._settings.anthropic_model
        if normalized == "openai":
            return self._settings.openai_model
        raise MissingPreconditionError(f"Unsupported AI platform: {platform}")

    def create_agent(
        self,
        agent_id: str,
        platform: str,
        channel: ChatChannelPort,
        profile: AgentProfile,
    ) -> ChatAgent:
        model = self.resolve_model(platform)
        logger.info(f"[AgentFactory] Creating {platform} agent {agent_id} for {channel.cid}")
        return ChatAgent(
            agent_id=agent_id,
            channel=channel,
            completion_service=self._completion_service,
            event_hub=self._event_hub,
            system_prompt=profile.system_prompt(),
            model=model,
            max_tokens=self._settings.llm_max_tokens,
            history_limit=self._settings.agent_history_limit,
            thinking_delay=self._settings.agent_thinking_delay_seconds,
        )
