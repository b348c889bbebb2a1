"""Chat channel infrastructure."""

from src.infrastructure.channels.event_hub import ChatEventHub, event_cid

__all__ = ["ChatEventHub", "event_cid"]
