"""Stream Chat channel adapter implementation."""

import logging
from typing import Any, Optional

from stream_chat import StreamChatAsync

from src.domain.model.chat import ChatMember
from src.domain.ports.services.chat_channel_port import ChatChannelPort, ChatClientPort

logger = logging.getLogger(__name__)


class StreamChatChannel(ChatChannelPort):
    """One Stream Chat channel, addressed server-side with the account secret.

    Usage:
        client = StreamChatClient(api_key, api_secret)
        channel = client.channel("messaging", "c1")
        message_id = await channel.send_message("", user_id="agent-1", ai_generated=True)
        await channel.partial_update_message(message_id, {"text": "Hi"}, "agent-1")
    """

    def __init__(self, client: StreamChatAsync, channel_type: str, channel_id: str) -> None:
        self.channel_type = channel_type
        self.channel_id = channel_id
        self._client = client
        self._channel = client.channel(channel_type, channel_id)

    async def send_event(self, payload: dict[str, Any], user_id: str) -> None:
        await self._channel.send_event(payload, user_id)

    async def query_members(
        self, filter_conditions: dict[str, Any] | None = None
    ) -> list[ChatMember]:
        members = await self._channel.query_members(filter_conditions or {})
        return [ChatMember.from_payload(member) for member in members]

    async def add_members(self, user_ids: list[str]) -> None:
        await self._channel.add_members(user_ids)

    async def watch(self) -> None:
        await self._channel.query(state=True)
        logger.debug(f"[StreamChat] Loaded channel state for {self.cid}")

    async def send_message(self, text: str, user_id: str, ai_generated: bool = False) -> str:
        message: dict[str, Any] = {"text": text}
        if ai_generated:
            message["ai_generated"] = True
        response = await self._channel.send_message(message, user_id)
        return response["message"]["id"]

    async def partial_update_message(
        self, message_id: str, set_fields: dict[str, Any], user_id: str
    ) -> None:
        await self._client.update_message_partial(message_id, {"set": set_fields}, user_id)

    async def recent_messages(self, limit: int) -> list[dict[str, Any]]:
        response = await self._channel.query(messages={"limit": limit})
        messages = response.get("messages") or []
        return list(messages)[-limit:]


class StreamChatClient(ChatClientPort):
    """Stream Chat account client.

    The SDK opens an aiohttp session on construction, so it is created on
    first use from inside the running event loop.
    """

    def __init__(self, api_key: str, api_secret: str) -> None:
        self.api_key = api_key
        self._api_secret = api_secret
        self._client: Optional[StreamChatAsync] = None

    def _get_client(self) -> StreamChatAsync:
        if self._client is None:
            self._client = StreamChatAsync(api_key=self.api_key, api_secret=self._api_secret)
        return self._client

    def channel(self, channel_type: str, channel_id: str) -> StreamChatChannel:
        return StreamChatChannel(self._get_client(), channel_type, channel_id)

    def verify_webhook(self, body: bytes, signature: str) -> bool:
        """Check the ``X-Signature`` header of a webhook request."""
        return bool(self._get_client().verify_webhook(body, signature))

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
            logger.info("[StreamChat] Client closed")
