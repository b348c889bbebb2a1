"""Chat event hub for routing inbound chat platform events.

Stream Chat delivers channel events (``message.new``, ``ai_indicator.stop``,
...) to the service through its webhook. The hub fans each event out to the
listeners registered for its type and channel cid: agents listen for new
messages, streaming relays listen for stop requests.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any

from src.domain.ports.services.chat_event_hub_port import ChatEventHubPort, ChatEventListener

logger = logging.getLogger(__name__)


def event_cid(event: dict[str, Any]) -> str | None:
    """Extract the channel cid of a chat event."""
    cid = event.get("cid")
    if cid:
        return cid
    channel_type = event.get("channel_type")
    channel_id = event.get("channel_id")
    if channel_type and channel_id:
        return f"{channel_type}:{channel_id}"
    return None


class ChatEventHub(ChatEventHubPort):
    """In-process pub/sub keyed by ``(event_type, cid)``.

    Usage::

        hub = ChatEventHub()
        hub.on("message.new", "messaging:c1", agent.handle_message)
        await hub.dispatch({"type": "message.new", "cid": "messaging:c1", ...})
        hub.off("message.new", "messaging:c1", agent.handle_message)
    """

    def __init__(self) -> None:
        self._listeners: dict[tuple[str, str], list[ChatEventListener]] = defaultdict(list)

    def on(self, event_type: str, cid: str, listener: ChatEventListener) -> None:
        listeners = self._listeners[(event_type, cid)]
        if listener not in listeners:
            listeners.append(listener)

    def off(self, event_type: str, cid: str, listener: ChatEventListener) -> None:
        key = (event_type, cid)
        listeners = self._listeners.get(key)
        if not listeners:
            return
        if listener in listeners:
            listeners.remove(listener)
        if not listeners:
            del self._listeners[key]

    def listener_count(self, event_type: str, cid: str) -> int:
        return len(self._listeners.get((event_type, cid), ()))

    async def dispatch(self, event: dict[str, Any]) -> int:
        """Deliver ``event`` to every matching listener concurrently.

        A failing listener is logged and does not affect the others.
        """
        event_type = event.get("type")
        cid = event_cid(event)
        if not event_type or not cid:
            logger.debug(f"[ChatEventHub] Dropping event without type/cid: {event_type}")
            return 0

        # Copy: listeners may unsubscribe while being called.
        listeners = list(self._listeners.get((event_type, cid), ()))
        if not listeners:
            return 0

        results = await asyncio.gather(
            *(listener(event) for listener in listeners), return_exceptions=True
        )
        for result in results:
            if isinstance(result, Exception):
                logger.error(
                    f"[ChatEventHub] Listener failed for {event_type} on {cid}: {result}",
                    exc_info=result,
                )
        return len(listeners)
