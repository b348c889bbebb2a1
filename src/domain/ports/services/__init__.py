from src.domain.ports.services.chat_channel_port import ChatChannelPort, ChatClientPort
from src.domain.ports.services.chat_event_hub_port import ChatEventHubPort, ChatEventListener
from src.domain.ports.services.completion_service_port import (
    CompletionServicePort,
    CompletionStream,
)

__all__ = [
    "ChatChannelPort",
    "ChatClientPort",
    "ChatEventHubPort",
    "ChatEventListener",
    "CompletionServicePort",
    "CompletionStream",
]
