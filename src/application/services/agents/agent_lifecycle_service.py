"""Agent lifecycle service - request-level logic behind the agent HTTP routes.

Resolves the channel's designated agent member, looks up its persona profile
and starts, stops or greets through the ``AgentRegistry``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from src.application.services.agents.agent_factory import AgentFactory
from src.application.services.agents.agent_registry import AgentRegistry
from src.domain.exceptions import (
    AgentBusyError,
    AgentError,
    DownstreamFailureError,
    MissingPreconditionError,
)
from src.domain.model.agent import AgentProfile
from src.domain.ports.repositories.agent_profile_repository import AgentProfileRepository
from src.domain.ports.services.chat_channel_port import ChatChannelPort, ChatClientPort
from src.domain.ports.services.completion_service_port import CompletionServicePort

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_TYPE = "messaging"
DEFAULT_PLATFORM = "anthropic"

WELCOME_PROMPT = (
    "Write a short, friendly welcome message for the user. Make it short. "
    "Do not include any actions, emotes, or asterisks. Provide the direct speech/message. "
    "Use emojis to express emotions instead of action text or emotes. "
    "Keep it natural and friendly."
)


def normalize_channel_id(channel_id: str) -> str:
    """Strip the ``<type>:`` prefix of a cid, e.g. ``messaging:c1`` -> ``c1``."""
    if ":" in channel_id:
        parts = channel_id.split(":")
        if len(parts) > 1 and parts[1]:
            return parts[1]
    return channel_id


@dataclass
class StartResult:
    agent_id: str
    started: bool


class AgentLifecycleService:
    """Starts, stops and greets channel agents."""

    def __init__(
        self,
        chat_client: ChatClientPort,
        registry: AgentRegistry,
        agent_factory: AgentFactory,
        profile_repository: AgentProfileRepository,
        completion_service: CompletionServicePort,
    ) -> None:
        self._chat_client = chat_client
        self._registry = registry
        self._agent_factory = agent_factory
        self._profile_repository = profile_repository
        self._completion_service = completion_service

    async def start_agent(
        self,
        channel_id: str | None,
        channel_type: str = DEFAULT_CHANNEL_TYPE,
        platform: str = DEFAULT_PLATFORM,
    ) -> StartResult:
        """Create the channel's agent instance unless it is live or being created.

        Raises:
            MissingPreconditionError: no channel id, unsupported platform, no agent member
            DownstreamFailureError: chat platform or agent initialization failed
        """
        channel = self._channel_for(channel_id, channel_type)
        self._agent_factory.resolve_model(platform)
        logger.debug(f"[AgentLifecycle] Starting AI Agent for channel {channel.cid}")

        agent_id = await self._resolve_agent_id(channel, "Failed to start AI Agent")
        if agent_id in self._registry:
            logger.info(f"[AgentLifecycle] AI Agent {agent_id} already started")
            return StartResult(agent_id=agent_id, started=False)
        profile = await self._load_profile(agent_id)

        async def factory():
            await channel.watch()
            agent = self._agent_factory.create_agent(agent_id, platform, channel, profile)
            await agent.init()
            return agent

        try:
            await self._registry.create_if_absent(agent_id, factory)
        except AgentBusyError:
            logger.info(f"[AgentLifecycle] AI Agent {agent_id} already started")
            return StartResult(agent_id=agent_id, started=False)
        except AgentError:
            raise
        except Exception as e:
            logger.error(f"[AgentLifecycle] Failed to start AI Agent {agent_id}: {e}")
            raise DownstreamFailureError("Failed to start AI Agent", e) from e
        return StartResult(agent_id=agent_id, started=True)

    async def stop_agent(
        self, channel_id: str | None, channel_type: str = DEFAULT_CHANNEL_TYPE
    ) -> str:
        """Dispose the channel's agent instance if one is live. Returns the agent id."""
        channel = self._channel_for(channel_id, channel_type)
        agent_id = await self._resolve_agent_id(channel, "Failed to stop AI Agent")
        try:
            await self._registry.dispose(agent_id)
        except Exception as e:
            logger.error(f"[AgentLifecycle] Failed to stop AI Agent {agent_id}: {e}")
            raise DownstreamFailureError("Failed to stop AI Agent", e) from e
        return agent_id

    async def send_welcome_message(
        self,
        channel_id: str | None,
        channel_type: str = DEFAULT_CHANNEL_TYPE,
        platform: str = DEFAULT_PLATFORM,
    ) -> str | None:
        """Generate a one-shot greeting in the agent's persona and post it.

        Returns:
            The posted message id, or None when the model returned no text
        """
        channel = self._channel_for(channel_id, channel_type)
        model = self._agent_factory.resolve_model(platform)
        agent_id = await self._resolve_agent_id(channel, "Failed to send AI message")
        profile = await self._load_profile(agent_id)

        try:
            text = await self._completion_service.complete(
                system=profile.system_prompt(),
                messages=[{"role": "user", "content": WELCOME_PROMPT}],
                model=model,
            )
            if not text:
                logger.warning(f"[AgentLifecycle] Empty welcome message for {agent_id}")
                return None
            return await channel.send_message(text=text, user_id=agent_id, ai_generated=True)
        except Exception as e:
            logger.error(f"[AgentLifecycle] Failed to send AI message for {agent_id}: {e}")
            raise DownstreamFailureError("Failed to send AI message", e) from e

    def _channel_for(self, channel_id: str | None, channel_type: str) -> ChatChannelPort:
        if not channel_id:
            raise MissingPreconditionError("Missing required fields")
        return self._chat_client.channel(
            channel_type or DEFAULT_CHANNEL_TYPE, normalize_channel_id(channel_id)
        )

    async def _resolve_agent_id(self, channel: ChatChannelPort, failure_summary: str) -> str:
        try:
            members = await channel.query_members({})
        except Exception as e:
            logger.error(f"[AgentLifecycle] Failed to query members of {channel.cid}: {e}")
            raise DownstreamFailureError(failure_summary, e) from e

        member = next((m for m in members if m.is_ai_agent and m.user_id), None)
        if member is None:
            raise MissingPreconditionError("AI Agent not found in the channel")
        return member.user_id

    async def _load_profile(self, agent_id: str) -> AgentProfile:
        profile = await self._profile_repository.get_profile(agent_id)
        if profile is None:
            logger.warning(
                f"[AgentLifecycle] Failed to fetch agent info for {agent_id}, using default values"
            )
            return AgentProfile.default(agent_id)
        return profile
