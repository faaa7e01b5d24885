"""Periodic removal of old files from the scratch directory."""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import List, Optional

from .utils.logging import get_logger


logger = get_logger(__name__)

CLEANUP_INTERVAL = 60 * 60
MAX_FILE_AGE = 2 * 60 * 60


def sweep(directory: Path, max_age: float = MAX_FILE_AGE, now: Optional[float] = None) -> List[Path]:
    now = time.time() if now is None else now
    deleted: List[Path] = []
    try:
        entries = list(directory.iterdir())
    except FileNotFoundError:
        return deleted
    except OSError as e:
        logger.error(f"Error cleaning up temp files: {e}")
        return deleted

    for path in entries:
        try:
            if not path.is_file() or now - path.stat().st_mtime <= max_age:
                continue
            path.unlink()
        except FileNotFoundError:
            # removed by someone else between listing and unlinking
            continue
        except OSError as e:
            logger.error(f"Error deleting temp file {path.name}: {e}")
            continue
        deleted.append(path)
        logger.info(f"Deleted old temp file: {path.name}")
    return deleted


class TempReaper:
    def __init__(self, directory: Path, interval: float = CLEANUP_INTERVAL, max_age: float = MAX_FILE_AGE) -> None:
        self.directory = directory
        self.interval = interval
        self.max_age = max_age
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        self._thread = threading.Thread(target=self._run, name="linkrelay-reaper", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            sweep(self.directory, self.max_age)
