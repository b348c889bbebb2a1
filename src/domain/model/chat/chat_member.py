"""Chat channel member value object."""

from dataclasses import dataclass
from typing import Any

from src.domain.shared_kernel import ValueObject


@dataclass(frozen=True)
class ChatMember(ValueObject):
    """A channel member; ``is_ai_agent`` marks the channel's designated agent."""

    user_id: str
    is_ai_agent: bool = False
    name: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ChatMember":
        """Build a member from a chat platform member record."""
        user = payload.get("user") or {}
        return cls(
            user_id=user.get("id") or payload.get("user_id") or "",
            is_ai_agent=bool(user.get("isAIAgent")),
            name=user.get("name"),
        )
