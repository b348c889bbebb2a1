"""FastAPI routers for the AI agent bridge."""

from src.infrastructure.adapters.primary.web.routers import ai_agents, webhooks

__all__ = [
    "ai_agents",
    "webhooks",
]
