"""
LiteLLM completion service.

Streams chat completions through ``litellm.acompletion`` and translates the
OpenAI-style chunks into relay events:

  - ``block_start`` before the first text of the response
  - ``text_delta`` for every non-empty ``choices[0].delta.content``
  - ``stream_end`` on ``finish_reason`` (or when the upstream runs dry)
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any, Optional

import litellm

from src.domain.model.chat import StreamEvent, StreamEventType
from src.domain.ports.services.completion_service_port import (
    CompletionServicePort,
    CompletionStream,
)

logger = logging.getLogger(__name__)


def _get_attr(obj: Any, key: str, default: Any = None) -> Any:
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


_END_OF_STREAM = object()


async def _next_chunk(iterator: AsyncIterator[Any]) -> Any:
    try:
        return await iterator.__anext__()
    except StopAsyncIteration:
        return _END_OF_STREAM


class LiteLLMCompletionStream(CompletionStream):
    """Wraps a LiteLLM streaming response as a ``CompletionStream``.

    Each upstream read runs as its own task so that ``abort()`` can cancel a
    read that is waiting on the provider and end the iteration at once.
    """

    def __init__(self, response: Any) -> None:
        self._response = response
        self._aborted = False
        self._closed = False
        self._events: Optional[AsyncIterator[StreamEvent]] = None
        self._pending_read: Optional[asyncio.Future] = None

    @property
    def aborted(self) -> bool:
        return self._aborted

    def abort(self) -> None:
        self._aborted = True
        if self._pending_read is not None and not self._pending_read.done():
            self._pending_read.cancel()

    def __aiter__(self) -> AsyncIterator[StreamEvent]:
        if self._events is None:
            self._events = self._translate()
        return self._events

    async def aclose(self) -> None:
        if self._events is not None:
            await self._events.aclose()
        await self._close_response()

    async def _read(self, iterator: AsyncIterator[Any]) -> Any:
        self._pending_read = asyncio.ensure_future(_next_chunk(iterator))
        try:
            return await self._pending_read
        except asyncio.CancelledError:
            if self._aborted:
                return _END_OF_STREAM
            raise
        finally:
            self._pending_read = None

    async def _translate(self) -> AsyncIterator[StreamEvent]:
        started = False
        ended = False
        try:
            iterator = self._response.__aiter__()
            while not self._aborted:
                chunk = await self._read(iterator)
                if chunk is _END_OF_STREAM or self._aborted:
                    break
                choices = _get_attr(chunk, "choices") or []
                if not choices:
                    continue
                choice = choices[0]
                content = _get_attr(_get_attr(choice, "delta"), "content")
                if content:
                    if not started:
                        started = True
                        yield StreamEvent(type=StreamEventType.BLOCK_START.value)
                    yield StreamEvent(type=StreamEventType.TEXT_DELTA.value, delta=content)
                if _get_attr(choice, "finish_reason"):
                    ended = True
                    yield StreamEvent(type=StreamEventType.STREAM_END.value)
                    break
            if not ended and not self._aborted:
                yield StreamEvent(type=StreamEventType.STREAM_END.value)
        finally:
            await self._close_response()

    async def _close_response(self) -> None:
        if self._closed:
            return
        self._closed = True
        close = getattr(self._response, "aclose", None)
        if close is None:
            return
        try:
            await close()
        except Exception as e:
            logger.debug(f"[LiteLLM] Error closing stream: {e}")


class LiteLLMCompletionService(CompletionServicePort):
    """
    Completion service backed by LiteLLM.

    Model identifiers carry the provider prefix (``anthropic/...``,
    ``openai/...``); the matching API key is passed per request.
    """

    def __init__(
        self,
        anthropic_api_key: Optional[str] = None,
        openai_api_key: Optional[str] = None,
    ) -> None:
        self._api_keys = {
            "anthropic": anthropic_api_key,
            "openai": openai_api_key,
        }

    async def complete(
        self,
        system: str,
        messages: list[dict[str, str]],
        model: str,
        max_tokens: int = 1024,
    ) -> str:
        response = await litellm.acompletion(
            **self._build_completion_kwargs(system, messages, model, max_tokens, stream=False)
        )
        if not response.choices:
            raise ValueError("No choices in response")
        message = _get_attr(response.choices[0], "message")
        return _get_attr(message, "content", "") or ""

    async def stream(
        self,
        system: str,
        messages: list[dict[str, str]],
        model: str,
        max_tokens: int = 1024,
    ) -> LiteLLMCompletionStream:
        try:
            response = await litellm.acompletion(
                **self._build_completion_kwargs(system, messages, model, max_tokens, stream=True)
            )
        except Exception as e:
            logger.error(f"LiteLLM streaming error: {e}")
            raise
        return LiteLLMCompletionStream(response)

    def _build_completion_kwargs(
        self,
        system: str,
        messages: list[dict[str, str]],
        model: str,
        max_tokens: int,
        stream: bool,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": model,
            "messages": [{"role": "system", "content": system}, *messages],
            "max_tokens": max_tokens,
            "stream": stream,
        }
        api_key = self._api_keys.get(model.split("/", 1)[0])
        if api_key:
            kwargs["api_key"] = api_key
        return kwargs
