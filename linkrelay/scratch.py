from __future__ import annotations

import os
import time
from dataclasses import dataclass
from pathlib import Path


PART_SUFFIX = ".part"
MAX_NAME_BYTES = 200


def shorten_filename(filename: str, max_bytes: int = MAX_NAME_BYTES) -> str:
    """Cut ``filename`` to ``max_bytes`` of UTF-8, keeping a short extension."""
    if len(filename.encode("utf-8")) <= max_bytes:
        return filename
    stem, dot, ext = filename.rpartition(".")
    suffix = dot + ext if stem and len(ext.encode("utf-8")) <= 16 else ""
    if not suffix:
        stem = filename
    budget = max_bytes - len(suffix.encode("utf-8"))
    stem = stem.encode("utf-8")[:budget].decode("utf-8", errors="ignore")
    return stem + suffix


@dataclass
class ScratchDirectory:
    """Directory holding downloaded media until the client has uploaded it."""

    path: Path

    def ensure(self) -> Path:
        self.path.mkdir(parents=True, exist_ok=True)
        return self.path

    def unique_name(self, filename: str) -> str:
        return f"{time.time_ns() // 1_000_000}_{filename}"

    def write(self, filename: str, data: bytes) -> Path:
        """Write ``data`` under a timestamp-prefixed name.

        The bytes land in a hidden ``.part`` file that is renamed into place, so
        the reaper and the uploader only ever see complete files.
        """
        self.ensure()
        name = self.unique_name(shorten_filename(filename))
        target = self.path / name
        counter = 1
        while target.exists():
            target = self.path / f"{name}.{counter}"
            counter += 1
        tmp = self.path / f".{target.name}{PART_SUFFIX}"
        tmp.write_bytes(data)
        os.replace(tmp, target)
        return target
