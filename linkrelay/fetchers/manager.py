"""Fetcher: tries the fetch strategies in order and returns the first success."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from ..utils.logging import get_logger
from ..utils.url import origin_of
from .base import DEFAULT_TIMEOUT, MAX_CONTENT_SIZE, FetchResult, FetchStrategy
from .curl_cffi_fetcher import CurlCffiFetcher
from .exceptions import AllStrategiesFailed, FetchError, SizeLimitExceeded
from .httpx_fetcher import HttpxFetcher
from .requests_fetcher import RequestsFetcher


logger = get_logger(__name__)

STRATEGIES: Dict[str, type] = {
    "httpx": HttpxFetcher,
    "requests": RequestsFetcher,
    "curl_cffi": CurlCffiFetcher,
}
DEFAULT_ORDER = ["httpx", "requests", "curl_cffi"]


def build_strategies(names: Optional[Iterable[str]] = None) -> List[FetchStrategy]:
    selected = list(names or DEFAULT_ORDER)
    unknown = [n for n in selected if n not in STRATEGIES]
    if unknown:
        raise ValueError(f"Unknown fetch strategy: {', '.join(unknown)} (choose from {', '.join(STRATEGIES)})")
    return [STRATEGIES[n]() for n in selected]


class Fetcher:
    def __init__(
        self,
        strategies: Optional[Sequence[FetchStrategy]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_bytes: int = MAX_CONTENT_SIZE,
    ) -> None:
        self.strategies = list(strategies) if strategies is not None else build_strategies()
        if not self.strategies:
            raise ValueError("At least one fetch strategy is required")
        self.timeout = timeout
        self.max_bytes = max_bytes

    def fetch(self, url: str) -> FetchResult:
        """Fetch ``url`` with each strategy in turn.

        Strategies run strictly one after another. The first one that does not
        raise wins; SizeLimitExceeded is not a strategy failure and propagates
        right away. Any other exception moves on to the next strategy. When all
        fail, AllStrategiesFailed carries the last error's message.
        """
        headers = {"referer": origin_of(url)}
        errors: List[FetchError] = []
        for strategy in self.strategies:
            logger.info(f"Attempting to fetch with {strategy.name}: {url}")
            try:
                result = strategy.fetch(url, headers=headers, timeout=self.timeout, max_bytes=self.max_bytes)
            except SizeLimitExceeded:
                raise
            except FetchError as e:
                logger.warning(f"{strategy.name} fetch failed: {e}")
                errors.append(e)
                continue
            except Exception as e:
                error = FetchError(str(e) or type(e).__name__, strategy=strategy.name)
                logger.warning(f"{strategy.name} fetch failed unexpectedly: {error}")
                errors.append(error)
                continue
            logger.info(f"Successfully fetched with {strategy.name}")
            return result

        message = str(errors[-1])
        logger.error(f"All fetch methods failed: {message}")
        raise AllStrategiesFailed(message, errors=errors)
