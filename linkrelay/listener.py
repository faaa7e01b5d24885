"""Turns incoming chat events into relay calls."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol

from .relay.handler import LinkRelay
from .utils.logging import get_logger


logger = get_logger(__name__)

LINK_RE = re.compile(
    r"(https?://(?:www\.|(?!www))[a-zA-Z0-9][a-zA-Z0-9-]+[a-zA-Z0-9]\.[^\s]{2,}"
    r"|www\.[a-zA-Z0-9][a-zA-Z0-9-]+[a-zA-Z0-9]\.[^\s]{2,}"
    r"|https?://(?:www\.|(?!www))[a-zA-Z0-9]+\.[^\s]{2,}"
    r"|www\.[a-zA-Z0-9]+\.[^\s]{2,})",
    re.IGNORECASE,
)

# (message shape, field holding its text), in priority order
TEXT_FIELDS = [
    ("conversation", None),
    ("extendedTextMessage", "text"),
    ("imageMessage", "caption"),
    ("videoMessage", "caption"),
]


def find_first_link(text: str) -> Optional[str]:
    m = LINK_RE.search(text)
    return m.group(0) if m else None


def extract_text(content: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Return the first non-empty text among the known message shapes."""
    if not content:
        return None
    for shape, key in TEXT_FIELDS:
        value = content.get(shape)
        if key is not None:
            value = value.get(key) if isinstance(value, Mapping) else None
        if isinstance(value, str) and value:
            return value
    return None


@dataclass
class IncomingMessage:
    chat_id: str
    from_me: bool
    message_id: Optional[str] = None
    content: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, raw: Mapping[str, Any]) -> "IncomingMessage":
        key = raw.get("key") or {}
        return cls(
            chat_id=str(key.get("remoteJid") or ""),
            from_me=bool(key.get("fromMe")),
            message_id=key.get("id"),
            content=dict(raw.get("message") or {}),
        )

    @property
    def text(self) -> Optional[str]:
        return extract_text(self.content)


class ReadReceipts(Protocol):
    def mark_read(self, chat_id: str, message_ids: List[str]) -> None:
        ...


class MessageListener:
    def __init__(self, relay: LinkRelay, receipts: Optional[ReadReceipts] = None) -> None:
        self.relay = relay
        self.receipts = receipts

    def handle_event(self, event: Mapping[str, Any]) -> int:
        """Process a messages-upsert event. Returns how many links were relayed."""
        if event.get("type") != "notify":
            return 0
        relayed = 0
        for raw in event.get("messages") or []:
            if not isinstance(raw, Mapping):
                continue
            if self.handle_message(IncomingMessage.from_payload(raw)):
                relayed += 1
        return relayed

    def handle_message(self, msg: IncomingMessage) -> bool:
        if not msg.chat_id:
            logger.debug("Ignoring message without a chat id")
            return False
        if not msg.from_me and msg.message_id and self.receipts is not None:
            try:
                self.receipts.mark_read(msg.chat_id, [msg.message_id])
            except Exception as e:
                logger.warning(f"Could not send read receipt: {e}")

        text = msg.text
        if not text:
            return False
        link = find_first_link(text)
        if link is None:
            return False
        logger.info(f"Auto-fetching URL: {link}")
        self.relay.relay(link, msg.chat_id)
        return True
