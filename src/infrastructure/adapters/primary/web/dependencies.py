from fastapi import Request

from src.application.services.agents import AgentLifecycleService
from src.configuration.di_container import DIContainer


def get_container(request: Request) -> DIContainer:
    """Get the DI container from app state."""
    return request.app.state.container


def get_lifecycle_service(request: Request) -> AgentLifecycleService:
    return request.app.state.container.agent_lifecycle_service()
