"""
Domain exceptions for the AI agent bridge.

This module provides the exceptions raised by application services and
mapped to HTTP responses by the web layer.
"""

from src.domain.exceptions.agent_exceptions import (
    AgentBusyError,
    AgentError,
    DownstreamFailureError,
    EventHandlingError,
    MissingPreconditionError,
)

__all__ = [
    "AgentError",
    "AgentBusyError",
    "DownstreamFailureError",
    "EventHandlingError",
    "MissingPreconditionError",
]
