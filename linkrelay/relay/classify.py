from __future__ import annotations

import json


MAX_TEXT_CHARS = 65536
TRUNCATION_SUFFIX = "\n... (content truncated)"


def is_textual(content_type: str) -> bool:
    ct = content_type.lower()
    return "text" in ct or "json" in ct


def media_kind(content_type: str) -> str:
    ct = content_type.strip().lower()
    for kind in ("image", "video", "audio"):
        if ct.startswith(kind + "/"):
            return kind
    return "document"


def mimetype_of(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip() or "application/octet-stream"


def format_text(text: str, content_type: str) -> str:
    """Pretty-print JSON payloads; anything that does not parse stays as is."""
    if "json" in content_type.lower() or text.strip().startswith("{"):
        try:
            data = json.loads(text)
        except ValueError:
            return text
        return json.dumps(data, indent=2, ensure_ascii=False)
    return text


def truncate_text(text: str, limit: int = MAX_TEXT_CHARS) -> str:
    if len(text) > limit:
        return text[:limit] + TRUNCATION_SUFFIX
    return text
