"""Agent profile value object and persona prompt construction."""

from dataclasses import dataclass
from typing import Any

from src.domain.shared_kernel import ValueObject

DEFAULT_AGENT_NAME = "Assistant"
DEFAULT_GENDER = "female"


@dataclass(frozen=True)
class AgentProfile(ValueObject):
    """Persona attributes for an AI agent, as stored in the profile store.

    Every field is optional in the store; missing values fall back to
    defaults so a persona prompt can always be built.
    """

    agent_id: str
    name: str = DEFAULT_AGENT_NAME
    gender: str = DEFAULT_GENDER
    personality: str | None = None
    style: str | None = None
    traits: str | None = None
    quirks: str | None = None
    bio: str | None = None

    @classmethod
    def default(cls, agent_id: str) -> "AgentProfile":
        """Profile used when the store has no row for the agent."""
        return cls(agent_id=agent_id)

    @classmethod
    def from_record(cls, agent_id: str, record: dict[str, Any]) -> "AgentProfile":
        """Build a profile from a raw store record, dropping empty values."""

        def _text(key: str) -> str | None:
            value = record.get(key)
            if value is None:
                return None
            if isinstance(value, (list, tuple)):
                value = ", ".join(str(v) for v in value if v)
            value = str(value).strip()
            return value or None

        return cls(
            agent_id=agent_id,
            name=_text("name") or DEFAULT_AGENT_NAME,
            gender=(_text("gender") or DEFAULT_GENDER).lower(),
            personality=_text("personality"),
            style=_text("style"),
            traits=_text("traits"),
            quirks=_text("quirks"),
            bio=_text("bio"),
        )

    def system_prompt(self) -> str:
        """Build the persona system prompt sent with every completion."""
        role = "girlfriend" if self.gender == "female" else "boyfriend"
        parts = [f"You are a virtual {role} named {self.name}."]
        if self.personality:
            parts.append(f"You have personality: {self.personality}.")
        if self.style:
            parts.append(f"Your style is {self.style}.")
        if self.traits:
            parts.append(f"Your traits are: {self.traits}.")
        if self.quirks:
            parts.append(f"Your quirks are: {self.quirks}.")
        if self.bio:
            parts.append(f"You have a biography: {self.bio}.")
        return " ".join(parts)
