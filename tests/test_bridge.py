import json
from pathlib import Path

import httpx
import pytest

from linkrelay.relay.messages import DocumentMessage, ErrorMessage, ImageMessage, TextMessage
from linkrelay.transport.bridge import BridgeClient, BridgeError, to_payload


def _client(handler):
    return BridgeClient("http://bridge.local", transport=httpx.MockTransport(handler))


def test_send_text_and_media():
    requests = []

    def handler(request):
        requests.append((request.method, request.url.path, json.loads(request.content)))
        return httpx.Response(200, json={"success": True})

    with _client(handler) as bridge:
        bridge.send("1@s.whatsapp.net", TextMessage("hello"))
        bridge.send("1@s.whatsapp.net", ImageMessage(path=Path("/tmp/1_a.png"), caption="https://example.com/a.png"))

    assert requests[0] == ("POST", "/api/send", {"recipient": "1@s.whatsapp.net", "message": "hello"})
    assert requests[1][2] == {
        "recipient": "1@s.whatsapp.net",
        "message": "https://example.com/a.png",
        "media_path": "/tmp/1_a.png",
        "media_type": "image",
    }


def test_payload_for_document_and_error():
    doc = to_payload("c", DocumentMessage(path=Path("/tmp/1_r.pdf"), filename="r.pdf", mimetype="application/pdf"))
    assert doc["media_type"] == "document"
    assert doc["filename"] == "r.pdf"
    assert doc["mimetype"] == "application/pdf"
    assert to_payload("c", ErrorMessage("❌ Error: x")) == {"recipient": "c", "message": "❌ Error: x"}


def test_mark_read_and_health():
    def handler(request):
        if request.url.path == "/health":
            return httpx.Response(200, json={"status": "connected"})
        assert json.loads(request.content) == {"chat_jid": "c", "message_ids": ["m1"]}
        return httpx.Response(200, json={})

    bridge = _client(handler)
    bridge.mark_read("c", ["m1"])
    assert bridge.health() == {"status": "connected"}
    bridge.close()


def test_errors_become_bridge_errors():
    bridge = _client(lambda request: httpx.Response(503, text="unavailable"))
    with pytest.raises(BridgeError):
        bridge.send("c", TextMessage("x"))
    with pytest.raises(BridgeError):
        bridge.health()

    def refuse(request):
        raise httpx.ConnectError("refused")

    with pytest.raises(BridgeError, match="refused"):
        _client(refuse).health()
