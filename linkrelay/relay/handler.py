"""LinkRelay: fetch a link and post the result back into the chat."""

from __future__ import annotations

from typing import Optional, Protocol

from ..fetchers.base import MAX_CONTENT_SIZE, FetchResult
from ..fetchers.exceptions import AllStrategiesFailed, SizeLimitExceeded
from ..fetchers.manager import Fetcher
from ..scratch import ScratchDirectory
from ..utils.logging import get_logger
from ..utils.size import format_size
from ..utils.url import filename_from_url, normalize_url
from .classify import MAX_TEXT_CHARS, format_text, is_textual, media_kind, mimetype_of, truncate_text
from .messages import (
    AudioMessage,
    DocumentMessage,
    ErrorMessage,
    ImageMessage,
    RelayOutcome,
    TextMessage,
    VideoMessage,
)


logger = get_logger(__name__)


class MessageSender(Protocol):
    def send(self, chat_id: str, message: RelayOutcome) -> None:
        ...


def size_limit_message(size: int, limit: int) -> ErrorMessage:
    return ErrorMessage(f"⚠️ File too large ({format_size(size)}). Maximum size: {format_size(limit)}")


class LinkRelay:
    def __init__(
        self,
        sender: MessageSender,
        fetcher: Fetcher,
        scratch: ScratchDirectory,
        max_bytes: int = MAX_CONTENT_SIZE,
        max_text_chars: int = MAX_TEXT_CHARS,
    ) -> None:
        self.sender = sender
        self.fetcher = fetcher
        self.scratch = scratch
        self.max_bytes = max_bytes
        self.max_text_chars = max_text_chars

    def relay(self, link: str, chat_id: str) -> Optional[RelayOutcome]:
        """Fetch ``link`` and send exactly one message to ``chat_id``.

        Never raises. Returns the message that was sent, or None when even the
        error message could not be delivered.
        """
        try:
            url = normalize_url(link)
            try:
                result = self.fetcher.fetch(url)
            except AllStrategiesFailed as e:
                return self._send_error(chat_id, ErrorMessage(f"❌ Could not fetch: {e}"))
            outcome = self.build_outcome(url, result)
            self.sender.send(chat_id, outcome)
            logger.info(f"Relayed {outcome.kind} message for {url}")
            return outcome
        except SizeLimitExceeded as e:
            logger.warning(f"Content from {link} exceeds the size limit")
            return self._send_error(chat_id, size_limit_message(e.size, e.limit))
        except Exception as e:
            logger.exception(f"Unexpected error while relaying {link}")
            return self._send_error(chat_id, ErrorMessage(f"❌ Error: {e}"))

    def build_outcome(self, url: str, result: FetchResult) -> RelayOutcome:
        declared = result.content_length
        if declared is not None and declared > self.max_bytes:
            raise SizeLimitExceeded(declared, self.max_bytes)

        content_type = result.content_type
        if not is_textual(content_type):
            return self._media_outcome(url, result)

        text = format_text(result.text, content_type)
        return TextMessage(truncate_text(text, self.max_text_chars))

    def _media_outcome(self, url: str, result: FetchResult) -> RelayOutcome:
        content_type = result.content_type
        filename = filename_from_url(url)
        path = self.scratch.write(filename, result.body)
        logger.info(f"Saved {len(result.body)} bytes of {content_type or 'unknown type'} to {path}")

        kind = media_kind(content_type)
        if kind == "image":
            return ImageMessage(path=path, caption=url)
        if kind == "video":
            return VideoMessage(path=path, caption=url)
        if kind == "audio":
            return AudioMessage(path=path, mimetype=content_type)
        return DocumentMessage(path=path, filename=filename, mimetype=mimetype_of(content_type))

    def _send_error(self, chat_id: str, message: ErrorMessage) -> Optional[ErrorMessage]:
        try:
            self.sender.send(chat_id, message)
        except Exception:
            logger.exception(f"Could not deliver error message to {chat_id}")
            return None
        return message
