"""Conversational agent bound to one chat channel.

On every new user message in its channel the agent:
  1. builds the conversation from the latest channel messages
  2. opens a streaming completion
  3. posts an empty ``ai_generated`` placeholder message and a "thinking" indicator
  4. hands the stream to a ``StreamingResponseRelay`` running in the background
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from src.application.services.agents.streaming_relay import StreamingResponseRelay
from src.domain.model.agent import AgentState
from src.domain.model.chat import AIIndicatorState, ChatEventType
from src.domain.ports.services.chat_channel_port import ChatChannelPort
from src.domain.ports.services.chat_event_hub_port import ChatEventHubPort
from src.domain.ports.services.completion_service_port import CompletionServicePort

logger = logging.getLogger(__name__)


class ChatAgent:
    """One live agent instance, owned by the ``AgentRegistry``."""

    def __init__(
        self,
        agent_id: str,
        channel: ChatChannelPort,
        completion_service: CompletionServicePort,
        event_hub: ChatEventHubPort,
        *,
        system_prompt: str,
        model: str,
        max_tokens: int = 1024,
        history_limit: int = 5,
        thinking_delay: float = 0.75,
    ) -> None:
        self.agent_id = agent_id
        self.channel = channel
        self.state = AgentState.CREATED
        self._completion_service = completion_service
        self._event_hub = event_hub
        self._system_prompt = system_prompt
        self._model = model
        self._max_tokens = max_tokens
        self._history_limit = history_limit
        self._thinking_delay = thinking_delay
        self._last_interaction = time.time()
        self._relays: list[StreamingResponseRelay] = []
        self._relay_tasks: set[asyncio.Task] = set()

    @property
    def last_interaction(self) -> float:
        return self._last_interaction

    @property
    def active_relays(self) -> list[StreamingResponseRelay]:
        return list(self._relays)

    async def init(self) -> None:
        """Start listening for new messages on the channel."""
        self._event_hub.on(ChatEventType.MESSAGE_NEW.value, self.channel.cid, self.handle_message)
        self.state = AgentState.ACTIVE
        logger.info(f"[ChatAgent] Agent {self.agent_id} listening on {self.channel.cid}")

    async def dispose(self) -> None:
        """Stop listening and detach every relay. In-flight streams keep running."""
        if self.state == AgentState.DISPOSED:
            return
        self._event_hub.off(ChatEventType.MESSAGE_NEW.value, self.channel.cid, self.handle_message)
        for relay in self._relays:
            relay.dispose()
        self._relays = []
        self.state = AgentState.DISPOSED
        logger.info(f"[ChatAgent] Agent {self.agent_id} disposed")

    async def handle_message(self, event: dict[str, Any]) -> None:
        """React to a ``message.new`` event of the channel."""
        if self.state != AgentState.ACTIVE:
            return

        message = event.get("message") or {}
        if not message or message.get("ai_generated"):
            logger.debug("[ChatAgent] Skip handling ai generated message")
            return
        text = message.get("text")
        if not text:
            return
        sender_id = (message.get("user") or {}).get("id")
        if sender_id == self.agent_id:
            return

        self._last_interaction = time.time()

        conversation = await self._build_conversation()
        if message.get("parent_id"):
            conversation.append({"role": "user", "content": text})

        stream = await self._completion_service.stream(
            system=self._system_prompt,
            messages=conversation,
            model=self._model,
            max_tokens=self._max_tokens,
        )

        try:
            message_id = await self.channel.send_message(
                text="", user_id=self.agent_id, ai_generated=True
            )
        except Exception:
            await stream.aclose()
            raise
        try:
            await self.channel.send_event(
                {
                    "type": ChatEventType.AI_INDICATOR_UPDATE.value,
                    "ai_state": AIIndicatorState.THINKING.value,
                    "message_id": message_id,
                },
                self.agent_id,
            )
        except Exception as e:
            logger.error(f"[ChatAgent] Failed to send ai indicator update: {e}")

        if self._thinking_delay > 0:
            await asyncio.sleep(self._thinking_delay)

        relay = StreamingResponseRelay(
            stream, self.channel, message_id, self._event_hub, self.agent_id
        )
        self._relays.append(relay)
        task = asyncio.create_task(self._run_relay(relay))
        self._relay_tasks.add(task)
        task.add_done_callback(self._relay_tasks.discard)

    async def wait_for_relays(self, timeout: float | None = None) -> None:
        """Wait for background relays to finish.

        Args:
            timeout: Seconds to wait before cancelling the relays still
                running. ``None`` waits without limit.
        """
        tasks = set(self._relay_tasks)
        if not tasks:
            return
        _, pending = await asyncio.wait(tasks, timeout=timeout)
        if not pending:
            return
        logger.warning(
            f"[ChatAgent] Cancelling {len(pending)} unfinished relay(s) of agent {self.agent_id}"
        )
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    async def _run_relay(self, relay: StreamingResponseRelay) -> None:
        try:
            await relay.run()
        except Exception as e:
            logger.error(f"[ChatAgent] Relay for message {relay.message_id} failed: {e}")
        finally:
            relay.dispose()
            if relay in self._relays:
                self._relays.remove(relay)

    async def _build_conversation(self) -> list[dict[str, str]]:
        history = await self.channel.recent_messages(self._history_limit)
        conversation = []
        for item in history:
            content = (item.get("text") or "").strip()
            if not content:
                continue
            author = (item.get("user") or {}).get("id")
            role = "assistant" if author == self.agent_id else "user"
            conversation.append({"role": role, "content": content})
        return conversation
