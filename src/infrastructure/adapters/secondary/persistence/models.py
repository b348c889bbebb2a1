from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class AIAgentModel(Base):
    """Persona record of a chat agent, keyed by the agent's chat user id.

    The table lives in the Supabase Postgres database and is maintained
    outside this service; it is only ever read here.
    """

    __tablename__ = "ai_agents"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    gender: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    personality: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    style: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    traits: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    quirks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def to_record(self) -> dict[str, Optional[str]]:
        return {
            "name": self.name,
            "gender": self.gender,
            "personality": self.personality,
            "style": self.style,
            "traits": self.traits,
            "quirks": self.quirks,
            "bio": self.bio,
        }
