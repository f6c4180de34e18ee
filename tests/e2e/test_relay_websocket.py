"""
Tests E2E du relais: client WebSocket -> dispatcher -> service simulé.
"""
import json

import pytest
from fastapi.testclient import TestClient

from chat_relay.main import create_app


@pytest.fixture
def client(settings, upstream):
    app = create_app(settings=settings, client=upstream.client())
    return TestClient(app)


def frame(**fields):
    message = {"id": 1, "text": "hi", "apikey": "", "keep": 0, "keepText": ""}
    message.update(fields)
    return json.dumps(message)


def test_text_request_skips_leading_blank(client, upstream):
    upstream.stream_lines = ['{"content":"\\n"}', '{"content":"Hello"}']

    with client.websocket_connect("/ws/s1") as ws:
        ws.send_text(frame())
        assert ws.receive_text() == "Hello"

        # La requête suivante prouve qu'aucun autre message n'a suivi "Hello"
        ws.send_text(frame(id=5))
        assert ws.receive_text() == "error: unknown request type"

    assert len(upstream.requests) == 1


def test_continuation_frame(client, upstream):
    upstream.stream_lines = ['data: {"choices":[{"delta":{"content":" Sure."}}]}']

    with client.websocket_connect("/ws/s2") as ws:
        ws.send_text(frame(keep=1, keepText="Human: help?\nAI:", apikey="sk-mine"))
        assert ws.receive_text() == " Sure."

    payload = upstream.payloads[0]
    assert payload["stop"] == ["Human:", "AI:"]
    assert payload["max_tokens"] == 2048
    assert upstream.requests[0].headers["Authorization"] == "Bearer sk-mine"


def test_image_frame(client, upstream):
    with client.websocket_connect("/ws/s3") as ws:
        ws.send_text(frame(id=2, text="a red fox"))
        assert ws.receive_text() == "http://img.test/a.png"


def test_upstream_error_after_output(client, upstream):
    upstream.stream_lines = ['{"content":"Par"}', '{"error":{"message":"boom"}}']

    with client.websocket_connect("/ws/s4") as ws:
        ws.send_text(frame())
        assert ws.receive_text() == "Par"
        assert ws.receive_text() == "error: remote service error, retry later"


def test_invalid_frame_keeps_session_open(client, upstream):
    upstream.stream_lines = ['{"content":"ok"}']

    with client.websocket_connect("/ws/s5") as ws:
        ws.send_text("not json")
        assert ws.receive_text().startswith("error: invalid request")

        ws.send_text(json.dumps({"text": "no kind"}))
        assert ws.receive_text().startswith("error: invalid request: id")

        ws.send_text(frame())
        assert ws.receive_text() == "ok"


def test_snake_case_fields_accepted(client, upstream):
    upstream.stream_lines = ['{"content":"ok"}']

    with client.websocket_connect("/ws/s6") as ws:
        ws.send_text(json.dumps({"kind": 1, "text": "hi", "continuation": False}))
        assert ws.receive_text() == "ok"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["model"] == "test-model"


def test_credit_route(client, upstream):
    response = client.post("/api/credit", json={"apikey": "", "text": "solde"})
    assert response.status_code == 200
    assert response.json() == {"code": 200, "title": None, "html": "4.2"}


def test_binary_frame_keeps_session_open(client, upstream):
    upstream.stream_lines = ['{"content":"ok"}']

    with client.websocket_connect("/ws/s7") as ws:
        ws.send_bytes(frame().encode("utf-8"))
        assert ws.receive_text() == "error: invalid request: text frame expected"

        ws.send_text(frame())
        assert ws.receive_text() == "ok"

    assert len(upstream.requests) == 1


@pytest.mark.parametrize("kind", ["x", None, 1.5, True])
def test_non_integer_kind_is_unknown(client, upstream, kind):
    with client.websocket_connect("/ws/s8") as ws:
        ws.send_text(frame(id=kind))
        assert ws.receive_text() == "error: unknown request type"

    assert upstream.requests == []


def test_numeric_string_kind(client, upstream):
    upstream.stream_lines = ['{"content":"ok"}']

    with client.websocket_connect("/ws/s9") as ws:
        ws.send_text(frame(id="1"))
        assert ws.receive_text() == "ok"


@pytest.mark.parametrize("keep", [2, "yes", -1])
def test_keep_other_than_one_is_single_turn(client, upstream, keep):
    upstream.stream_lines = ['{"content":"ok"}']

    with client.websocket_connect("/ws/s10") as ws:
        ws.send_text(frame(keep=keep, keepText="Human: old\nAI:"))
        assert ws.receive_text() == "ok"

    payload = upstream.payloads[0]
    assert "stop" not in payload
    assert payload["messages"] == [{"role": "user", "content": "hi"}]


def test_keep_one_as_string_enables_continuation(client, upstream):
    upstream.stream_lines = ['{"content":"ok"}']

    with client.websocket_connect("/ws/s11") as ws:
        ws.send_text(frame(keep="1", keepText="Human: old\nAI:"))
        assert ws.receive_text() == "ok"

    assert upstream.payloads[0]["stop"] == ["Human:", "AI:"]
