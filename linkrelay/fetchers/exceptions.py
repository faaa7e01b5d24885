"""Exceptions raised while fetching a link."""

from __future__ import annotations

from typing import List, Optional


class FetchError(Exception):
    """A single fetch strategy failed."""

    def __init__(self, message: str, strategy: str):
        self.strategy = strategy
        super().__init__(message)


class AllStrategiesFailed(Exception):
    """Every fetch strategy failed. The message is the last strategy's error."""

    def __init__(self, message: str, errors: Optional[List[FetchError]] = None):
        self.errors = errors or []
        super().__init__(message)


class SizeLimitExceeded(Exception):
    """The resource is larger than the configured cap."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"Content size {size} exceeds limit {limit}")
