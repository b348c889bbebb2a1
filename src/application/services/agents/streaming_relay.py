"""Streaming response relay.

Drains a completion stream and mirrors it into one chat message:

  1. ``block_start`` (first only): send the "generating" indicator
  2. ``text_delta``: accumulate text, push throttled partial updates
  3. ``stream_end``: push the final text and clear the indicator

A chat client can ask to stop generating at any time; the relay then aborts
the stream, marks the message as no longer generating and clears the
indicator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from src.domain.exceptions import EventHandlingError
from src.domain.model.chat import AIIndicatorState, ChatEventType, StreamEvent, StreamEventType
from src.domain.ports.services.chat_channel_port import ChatChannelPort
from src.domain.ports.services.chat_event_hub_port import ChatEventHubPort
from src.domain.ports.services.completion_service_port import CompletionStream

logger = logging.getLogger(__name__)

FLUSH_EVERY = 15
EAGER_FLUSH_LIMIT = 8


def should_flush(counter: int) -> bool:
    """Partial-update schedule for the ``counter``-th text delta.

    Odd deltas below 8 are flushed for a responsive start, then every 15th.
    """
    return counter % FLUSH_EVERY == 0 or (counter < EAGER_FLUSH_LIMIT and counter % 2 == 1)


class RelayState(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    SETTLED = "settled"


@dataclass
class StreamSession:
    """Per-request relay state. ``text`` only ever grows."""

    message_id: str
    text: str = ""
    counter: int = 0
    state: RelayState = RelayState.IDLE
    cancel_requested: bool = False
    indicator_sent: bool = False

    def append(self, delta: str) -> int:
        self.text += delta
        self.counter += 1
        return self.counter


class StreamingResponseRelay:
    """Relays one completion stream into one chat message.

    Usage::

        relay = StreamingResponseRelay(stream, channel, message_id, hub, agent_id)
        await relay.run()
        relay.dispose()
    """

    def __init__(
        self,
        stream: CompletionStream,
        channel: ChatChannelPort,
        message_id: str,
        event_hub: ChatEventHubPort,
        agent_id: str,
    ) -> None:
        self._stream = stream
        self._channel = channel
        self._event_hub = event_hub
        self._agent_id = agent_id
        self.session = StreamSession(message_id=message_id)
        self._event_hub.on(
            ChatEventType.AI_INDICATOR_STOP.value, channel.cid, self.handle_stop_generating
        )

    @property
    def message_id(self) -> str:
        return self.session.message_id

    @property
    def state(self) -> RelayState:
        return self.session.state

    async def run(self) -> str:
        """Consume the stream until it ends or generation is cancelled.

        Returns:
            The accumulated text
        """
        try:
            async for event in self._stream:
                if self.session.cancel_requested:
                    break
                try:
                    await self.handle(event)
                except Exception as e:
                    error = EventHandlingError(str(event.type), e)
                    logger.error(f"[StreamingRelay] {error}", exc_info=True)
        finally:
            await self._stream.aclose()
        return self.session.text

    def dispose(self) -> None:
        """Detach the stop listener. Does not abort an in-flight stream."""
        self._event_hub.off(
            ChatEventType.AI_INDICATOR_STOP.value, self._channel.cid, self.handle_stop_generating
        )

    async def handle(self, event: StreamEvent) -> None:
        session = self.session
        if session.state == RelayState.SETTLED:
            return

        if event.type == StreamEventType.BLOCK_START:
            session.state = RelayState.GENERATING
            if not session.indicator_sent:
                session.indicator_sent = True
                await self._send_event(
                    {
                        "type": ChatEventType.AI_INDICATOR_UPDATE.value,
                        "ai_state": AIIndicatorState.GENERATING.value,
                        "message_id": session.message_id,
                    }
                )

        elif event.type == StreamEventType.TEXT_DELTA:
            session.state = RelayState.GENERATING
            counter = session.append(event.delta or "")
            if should_flush(counter) and not session.cancel_requested:
                await self._update_message({"text": session.text, "generating": True})
                if session.cancel_requested:
                    # Stop arrived while this update was in flight; it may land last.
                    await self._update_message({"generating": False})

        elif event.type == StreamEventType.STREAM_END:
            session.state = RelayState.SETTLED
            await self._update_message({"text": session.text, "generating": False})
            await self._clear_indicator()

        else:
            logger.debug(f"[StreamingRelay] Ignoring stream event type={event.type}")

    async def handle_stop_generating(self, event: dict[str, Any] | None = None) -> None:
        """Cancel generation on request of a chat client.

        Runs at most once per session and never after the stream settled.
        """
        session = self.session
        if session.cancel_requested or session.state == RelayState.SETTLED:
            return
        session.cancel_requested = True
        logger.info(f"[StreamingRelay] Stop generating message {session.message_id}")

        self._stream.abort()
        await self._update_message({"generating": False})
        await self._clear_indicator()

    async def _update_message(self, set_fields: dict[str, Any]) -> None:
        await self._channel.partial_update_message(
            self.session.message_id, set_fields, self._agent_id
        )

    async def _clear_indicator(self) -> None:
        await self._send_event(
            {
                "type": ChatEventType.AI_INDICATOR_CLEAR.value,
                "message_id": self.session.message_id,
            }
        )

    async def _send_event(self, payload: dict[str, Any]) -> None:
        await self._channel.send_event(payload, self._agent_id)
