"""Unit tests for LiteLLMCompletionService."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from src.application.services.agents.streaming_relay import StreamingResponseRelay
from src.infrastructure.channels import ChatEventHub
from src.infrastructure.llm.litellm.litellm_completion_service import (
    LiteLLMCompletionService,
    LiteLLMCompletionStream,
)
from src.tests.fakes import AGENT_ID, FakeChannel


def _chunk(content=None, finish_reason=None) -> SimpleNamespace:
    return SimpleNamespace(
        choices=[
            SimpleNamespace(delta=SimpleNamespace(content=content), finish_reason=finish_reason)
        ]
    )


class _FakeResponse:
    """Async iterable standing in for a LiteLLM streaming response."""

    def __init__(self, chunks) -> None:
        self._chunks = list(chunks)
        self.closed = False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for chunk in self._chunks:
            yield chunk

    async def aclose(self) -> None:
        self.closed = True


class _StalledResponse(_FakeResponse):
    """Sends its chunks, then hangs like a provider that stopped sending data."""

    def __init__(self, chunks) -> None:
        super().__init__(chunks)
        self.stalled = asyncio.Event()
        self.cancelled = False

    async def _iterate(self):
        for chunk in self._chunks:
            yield chunk
        self.stalled.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        yield _chunk(finish_reason="stop")


async def _collect(stream) -> list[tuple[str, str | None]]:
    return [(event.type, event.delta) async for event in stream]


@pytest.mark.unit
class TestLiteLLMCompletionStream:
    async def test_translates_chunks(self) -> None:
        response = _FakeResponse(
            [
                _chunk(content=""),
                _chunk(content="Hel"),
                _chunk(content="lo"),
                _chunk(finish_reason="stop"),
            ]
        )

        events = await _collect(LiteLLMCompletionStream(response))

        assert events == [
            ("block_start", None),
            ("text_delta", "Hel"),
            ("text_delta", "lo"),
            ("stream_end", None),
        ]
        assert response.closed

    async def test_emits_stream_end_when_upstream_runs_dry(self) -> None:
        response = _FakeResponse([_chunk(content="Hi"), SimpleNamespace(choices=[])])

        events = await _collect(LiteLLMCompletionStream(response))

        assert events[-1] == ("stream_end", None)
        assert [e for e in events if e[0] == "stream_end"] == [("stream_end", None)]

    async def test_content_with_finish_reason_in_same_chunk(self) -> None:
        response = _FakeResponse([_chunk(content="Bye", finish_reason="stop"), _chunk("late")])

        events = await _collect(LiteLLMCompletionStream(response))

        assert events == [("block_start", None), ("text_delta", "Bye"), ("stream_end", None)]

    async def test_accepts_dict_chunks(self) -> None:
        response = _FakeResponse(
            [{"choices": [{"delta": {"content": "ok"}, "finish_reason": "stop"}]}]
        )

        events = await _collect(LiteLLMCompletionStream(response))

        assert ("text_delta", "ok") in events

    async def test_abort_stops_iteration_and_closes_upstream(self) -> None:
        response = _FakeResponse([_chunk(content="a"), _chunk(content="b"), _chunk(content="c")])
        stream = LiteLLMCompletionStream(response)
        seen = []

        async for event in stream:
            seen.append(event.type)
            if event.type == "text_delta":
                stream.abort()

        await stream.aclose()

        assert stream.aborted
        assert seen == ["block_start", "text_delta"]
        assert response.closed

    async def test_abort_ends_read_waiting_on_stalled_upstream(self) -> None:
        response = _StalledResponse([_chunk(content="hi")])
        stream = LiteLLMCompletionStream(response)
        iterator = stream.__aiter__()
        assert (await iterator.__anext__()).type == "block_start"
        assert (await iterator.__anext__()).delta == "hi"

        pending = asyncio.ensure_future(iterator.__anext__())
        await response.stalled.wait()
        stream.abort()

        with pytest.raises(StopAsyncIteration):
            await asyncio.wait_for(pending, timeout=1.0)
        assert response.cancelled
        assert response.closed

    async def test_stop_generating_unblocks_relay_on_stalled_upstream(self) -> None:
        response = _StalledResponse([_chunk(content="hi")])
        channel = FakeChannel()
        relay = StreamingResponseRelay(
            LiteLLMCompletionStream(response), channel, "msg-1", ChatEventHub(), AGENT_ID
        )

        run = asyncio.create_task(relay.run())
        await response.stalled.wait()
        await relay.handle_stop_generating()

        done, _ = await asyncio.wait({run}, timeout=1.0)

        assert run in done
        assert run.result() == "hi"
        assert response.closed
        assert channel.updates[-1]["set"] == {"generating": False}


@pytest.mark.unit
class TestLiteLLMCompletionService:
    async def test_stream_passes_provider_key_and_system_prompt(self) -> None:
        service = LiteLLMCompletionService(anthropic_api_key="sk-ant", openai_api_key="sk-oai")
        response = _FakeResponse([_chunk(content="Hi"), _chunk(finish_reason="stop")])

        with patch("litellm.acompletion", new=AsyncMock(return_value=response)) as acompletion:
            stream = await service.stream(
                system="persona",
                messages=[{"role": "user", "content": "hello"}],
                model="anthropic/claude-test",
                max_tokens=128,
            )

        kwargs = acompletion.call_args.kwargs
        assert kwargs["model"] == "anthropic/claude-test"
        assert kwargs["api_key"] == "sk-ant"
        assert kwargs["stream"] is True
        assert kwargs["max_tokens"] == 128
        assert kwargs["messages"] == [
            {"role": "system", "content": "persona"},
            {"role": "user", "content": "hello"},
        ]
        assert [e.type async for e in stream] == ["block_start", "text_delta", "stream_end"]

    async def test_complete_returns_message_content(self) -> None:
        service = LiteLLMCompletionService(openai_api_key="sk-oai")
        response = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="Welcome! 🎉"))]
        )

        with patch("litellm.acompletion", new=AsyncMock(return_value=response)) as acompletion:
            text = await service.complete(
                system="persona",
                messages=[{"role": "user", "content": "greet"}],
                model="openai/gpt-test",
            )

        assert text == "Welcome! 🎉"
        assert acompletion.call_args.kwargs["api_key"] == "sk-oai"
        assert acompletion.call_args.kwargs["stream"] is False

    async def test_complete_without_key_omits_api_key(self) -> None:
        service = LiteLLMCompletionService()
        response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=None))])

        with patch("litellm.acompletion", new=AsyncMock(return_value=response)) as acompletion:
            text = await service.complete("persona", [], model="anthropic/claude-test")

        assert text == ""
        assert "api_key" not in acompletion.call_args.kwargs

    async def test_complete_without_choices_raises(self) -> None:
        service = LiteLLMCompletionService()

        with patch(
            "litellm.acompletion", new=AsyncMock(return_value=SimpleNamespace(choices=[]))
        ):
            with pytest.raises(ValueError, match="No choices"):
                await service.complete("persona", [], model="anthropic/claude-test")
