"""End-to-end flow through the HTTP surface with in-memory chat and model fakes."""

import json
import time

import pytest

from src.tests.fakes import AGENT_ID, USER_ID, FakeStream, text_stream_events


def _wait_until(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def _post_event(client, event: dict):
    return client.post(
        "/webhooks/stream", content=json.dumps(event), headers={"X-Signature": "valid"}
    )


@pytest.mark.integration
def test_start_chat_and_stop(client, chat_client, completion_service, registry) -> None:
    deltas = [f"w{i} " for i in range(20)]
    completion_service.streams.append(FakeStream(text_stream_events(deltas)))

    response = client.post("/start-ai-agent", json={"channel_id": "messaging:c1"})
    assert response.status_code == 200
    assert response.json() == {"message": "AI Agent started", "data": []}
    assert client.get("/").json()["activeAgents"] == 1

    duplicate = client.post("/start-ai-agent", json={"channel_id": "messaging:c1"})
    assert duplicate.json() == {"message": "AI Agent started", "data": []}
    assert len(registry) == 1

    channel = chat_client.channels[("messaging", "c1")]
    channel.history = [{"text": "tell me a story", "user": {"id": USER_ID}}]
    _post_event(
        client,
        {
            "type": "message.new",
            "cid": "messaging:c1",
            "message": {"id": "m1", "text": "tell me a story", "user": {"id": USER_ID}},
        },
    )

    final = {"text": "".join(deltas), "generating": False}
    assert _wait_until(lambda: any(u["set"] == final for u in channel.updates))
    assert channel.messages[0]["ai_generated"] is True
    assert channel.messages[0]["user_id"] == AGENT_ID
    assert _wait_until(lambda: channel.event_types()[-1:] == ["ai_indicator.clear"])
    assert channel.event_types() == [
        "ai_indicator.update",
        "ai_indicator.update",
        "ai_indicator.clear",
    ]
    partial_lengths = [
        len(u["set"]["text"].split()) for u in channel.updates if u["set"].get("generating")
    ]
    assert partial_lengths == [1, 3, 5, 7, 15]

    stopped = client.post("/stop-ai-agent", json={"channel_id": "messaging:c1"})
    assert stopped.json() == {"message": "AI Agent stopped", "data": []}
    assert client.get("/").json()["activeAgents"] == 0


@pytest.mark.integration
def test_stop_generating_through_webhook(client, chat_client, completion_service) -> None:
    stream = FakeStream(text_stream_events(["a", "b", "c"]), pause_before=2)
    completion_service.streams.append(stream)
    client.post("/start-ai-agent", json={"channel_id": "c1"})
    channel = chat_client.channels[("messaging", "c1")]

    _post_event(
        client,
        {
            "type": "message.new",
            "cid": "messaging:c1",
            "message": {"id": "m1", "text": "hi", "user": {"id": USER_ID}},
        },
    )
    assert _wait_until(stream.paused.is_set)

    _post_event(client, {"type": "ai_indicator.stop", "cid": "messaging:c1"})
    _post_event(client, {"type": "ai_indicator.stop", "cid": "messaging:c1"})
    client.portal.call(stream.resume.set)

    assert _wait_until(lambda: stream.closed)
    assert stream.aborted
    assert [u["set"] for u in channel.updates if "text" not in u["set"]] == [
        {"generating": False}
    ]
    assert channel.event_types().count("ai_indicator.clear") == 1
