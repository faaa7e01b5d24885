"""REST client for the WhatsApp bridge that owns the session and socket."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import httpx

from ..relay.messages import (
    AudioMessage,
    DocumentMessage,
    ImageMessage,
    RelayOutcome,
    VideoMessage,
)
from ..utils.logging import get_logger


logger = get_logger(__name__)

DEFAULT_BRIDGE_URL = "http://localhost:8080"


class BridgeError(RuntimeError):
    pass


def to_payload(chat_id: str, message: RelayOutcome) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"recipient": chat_id}
    if isinstance(message, (ImageMessage, VideoMessage)):
        payload.update(message=message.caption, media_path=str(message.path), media_type=message.kind)
    elif isinstance(message, AudioMessage):
        payload.update(message="", media_path=str(message.path), media_type="audio", mimetype=message.mimetype)
    elif isinstance(message, DocumentMessage):
        payload.update(
            message="",
            media_path=str(message.path),
            media_type="document",
            mimetype=message.mimetype,
            filename=message.filename,
        )
    else:
        payload["message"] = message.text
    return payload


class BridgeClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BRIDGE_URL,
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "BridgeClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            resp = self._client.request(method, path, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise BridgeError(f"Bridge {method} {path} failed: {e}") from e
        return resp

    def send(self, chat_id: str, message: RelayOutcome) -> None:
        self._request("POST", "/api/send", json=to_payload(chat_id, message))
        logger.debug(f"Sent {message.kind} message to {chat_id}")

    def mark_read(self, chat_id: str, message_ids: Iterable[str]) -> None:
        self._request("POST", "/api/read", json={"chat_jid": chat_id, "message_ids": list(message_ids)})

    def health(self) -> Dict[str, Any]:
        resp = self._request("GET", "/health")
        try:
            data = resp.json()
        except ValueError as e:
            raise BridgeError(f"Bridge health returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise BridgeError("Bridge health returned an unexpected payload")
        return data
