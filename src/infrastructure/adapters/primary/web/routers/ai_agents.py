"""AI agent lifecycle API endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.application.services.agents import AgentLifecycleService
from src.application.services.agents.agent_lifecycle_service import (
    DEFAULT_CHANNEL_TYPE,
    DEFAULT_PLATFORM,
)
from src.configuration.di_container import DIContainer
from src.infrastructure.adapters.primary.web.dependencies import (
    get_container,
    get_lifecycle_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ai-agents"])


class AgentChannelRequest(BaseModel):
    """Identifies a chat channel and the model platform of its agent."""

    channel_id: str | None = None
    channel_type: str | None = DEFAULT_CHANNEL_TYPE
    platform: str | None = DEFAULT_PLATFORM


class AgentActionResponse(BaseModel):
    message: str
    data: list[Any] = []


@router.get("/")
async def status_check(container: DIContainer = Depends(get_container)) -> dict[str, Any]:
    """Report liveness and the number of live agents."""
    return {
        "message": "AI Agent Bridge is running",
        "apiKey": container.settings.stream_api_key,
        "activeAgents": len(container.agent_registry()),
    }


@router.post("/start-ai-agent", response_model=AgentActionResponse)
async def start_ai_agent(
    request: AgentChannelRequest,
    service: AgentLifecycleService = Depends(get_lifecycle_service),
) -> AgentActionResponse:
    """Start the agent of a channel. Starting a live agent is a no-op."""
    result = await service.start_agent(
        request.channel_id,
        channel_type=request.channel_type or DEFAULT_CHANNEL_TYPE,
        platform=request.platform or DEFAULT_PLATFORM,
    )
    if not result.started:
        logger.info(f"[AIAgents] Agent {result.agent_id} was already running")
    return AgentActionResponse(message="AI Agent started")


@router.post("/stop-ai-agent", response_model=AgentActionResponse)
async def stop_ai_agent(
    request: AgentChannelRequest,
    service: AgentLifecycleService = Depends(get_lifecycle_service),
) -> AgentActionResponse:
    await service.stop_agent(
        request.channel_id, channel_type=request.channel_type or DEFAULT_CHANNEL_TYPE
    )
    return AgentActionResponse(message="AI Agent stopped")


@router.post("/new-ai-message", response_model=AgentActionResponse)
async def new_ai_message(
    request: AgentChannelRequest,
    service: AgentLifecycleService = Depends(get_lifecycle_service),
) -> AgentActionResponse:
    """Post a one-shot welcome message written in the agent's persona."""
    await service.send_welcome_message(
        request.channel_id,
        channel_type=request.channel_type or DEFAULT_CHANNEL_TYPE,
        platform=request.platform or DEFAULT_PLATFORM,
    )
    return AgentActionResponse(message="AI Agent started")
