"""
Agent-related domain exceptions.

Exception Hierarchy:
    AgentError (base)
    ├── MissingPreconditionError  - Bad or absent input (no channel id, no agent member)
    ├── DownstreamFailureError    - Chat platform or completion service call failed
    ├── AgentBusyError            - Agent identity is already being created
    └── EventHandlingError        - One stream event could not be processed

Usage:
    from src.domain.exceptions import MissingPreconditionError

    if not channel_id:
        raise MissingPreconditionError("Missing required fields")
"""

from typing import Optional

from src.domain.shared_kernel import DomainException


class AgentError(DomainException):
    """
    Base exception for agent lifecycle and relay errors.

    Attributes:
        message: Human-readable error description
        original_error: The underlying exception (if any)
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message} (caused by: {self.original_error})"
        return self.message


class MissingPreconditionError(AgentError):
    """Raised before any side effect when the request cannot be served."""


class DownstreamFailureError(AgentError):
    """
    Raised when a chat platform or completion service call throws.

    ``summary`` describes the failed operation, ``reason`` carries the
    underlying error message surfaced to the caller.
    """

    def __init__(self, summary: str, original_error: Exception) -> None:
        super().__init__(summary, original_error)
        self.summary = summary

    @property
    def reason(self) -> str:
        return str(self.original_error)


class AgentBusyError(AgentError):
    """Raised when an agent identity is already undergoing creation."""

    def __init__(self, agent_id: str) -> None:
        super().__init__(f"AI Agent {agent_id} is already being started")
        self.agent_id = agent_id


class EventHandlingError(AgentError):
    """Raised while processing a single completion stream event."""

    def __init__(self, event_type: str, original_error: Exception) -> None:
        super().__init__(f"Failed to handle stream event {event_type}", original_error)
        self.event_type = event_type
