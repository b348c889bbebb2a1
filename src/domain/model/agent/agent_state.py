"""Agent instance lifecycle state."""

from enum import Enum


class AgentState(str, Enum):
    """Lifecycle state of a live agent instance.

    CREATED -> ACTIVE (after init) -> DISPOSED (stop or idle eviction)
    """

    CREATED = "created"
    ACTIVE = "active"
    DISPOSED = "disposed"
