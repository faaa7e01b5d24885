"""Shared types for the fetch strategies."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Optional, Protocol

from .exceptions import SizeLimitExceeded


MAX_CONTENT_SIZE = 100 * 1024 * 1024
DEFAULT_TIMEOUT = 10.0

DEFAULT_HEADERS: Dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/125.0 Safari/537.36"
    ),
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.9",
}

_charset_re = re.compile(r"charset=[\"']?([\w.:-]+)", re.IGNORECASE)


@dataclass
class FetchResult:
    url: str
    status_code: int
    headers: Dict[str, str]
    body: bytes
    strategy: str
    body_skipped: bool = field(default=False)

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")

    @property
    def content_length(self) -> Optional[int]:
        return parse_content_length(self.headers.get("content-length"))

    @property
    def charset(self) -> str:
        m = _charset_re.search(self.content_type)
        return m.group(1) if m else "utf-8"

    @property
    def text(self) -> str:
        try:
            return self.body.decode(self.charset, errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")


class FetchStrategy(Protocol):
    """A single way of retrieving a URL. Raises FetchError on failure."""

    name: str

    def fetch(self, url: str, headers: Mapping[str, str], timeout: float, max_bytes: int) -> FetchResult:
        ...


def parse_content_length(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        length = int(str(value).strip())
    except ValueError:
        return None
    return length if length >= 0 else None


def build_headers(extra: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    headers = dict(DEFAULT_HEADERS)
    if extra:
        headers.update(extra)
    return headers


def lower_headers(headers: Iterable) -> Dict[str, str]:
    return {str(k).lower(): str(v) for k, v in headers}


def exceeds_declared(headers: Mapping[str, str], max_bytes: int) -> bool:
    declared = parse_content_length(headers.get("content-length"))
    return declared is not None and declared > max_bytes


def read_capped(chunks: Iterable[bytes], max_bytes: int) -> bytes:
    """Join streamed chunks, giving up once more than ``max_bytes`` arrived."""
    buf = bytearray()
    for chunk in chunks:
        if not chunk:
            continue
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise SizeLimitExceeded(len(buf), max_bytes)
    return bytes(buf)
