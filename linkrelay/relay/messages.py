"""Outbound chat messages produced by the relay."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union


@dataclass(frozen=True)
class TextMessage:
    text: str
    kind = "text"


@dataclass(frozen=True)
class ErrorMessage:
    text: str
    kind = "error"


@dataclass(frozen=True)
class ImageMessage:
    path: Path
    caption: str
    kind = "image"


@dataclass(frozen=True)
class VideoMessage:
    path: Path
    caption: str
    kind = "video"


@dataclass(frozen=True)
class AudioMessage:
    path: Path
    mimetype: str
    kind = "audio"


@dataclass(frozen=True)
class DocumentMessage:
    path: Path
    filename: str
    mimetype: str
    kind = "document"


RelayOutcome = Union[TextMessage, ErrorMessage, ImageMessage, VideoMessage, AudioMessage, DocumentMessage]
