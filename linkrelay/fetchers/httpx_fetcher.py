from __future__ import annotations

from typing import Mapping, Optional

import httpx

from .base import FetchResult, build_headers, exceeds_declared, lower_headers, read_capped
from .exceptions import FetchError


class HttpxFetcher:
    """Primary strategy: httpx with HTTP/2 and redirects."""

    name = "httpx"

    def __init__(self, transport: Optional[httpx.BaseTransport] = None, http2: bool = True):
        self.transport = transport
        self.http2 = http2

    def fetch(self, url: str, headers: Mapping[str, str], timeout: float, max_bytes: int) -> FetchResult:
        try:
            with httpx.Client(
                http2=self.http2,
                timeout=timeout,
                follow_redirects=True,
                headers=build_headers(headers),
                transport=self.transport,
            ) as client:
                with client.stream("GET", url) as resp:
                    resp.raise_for_status()
                    hdrs = lower_headers(resp.headers.items())
                    if exceeds_declared(hdrs, max_bytes):
                        body, skipped = b"", True
                    else:
                        body, skipped = read_capped(resp.iter_bytes(), max_bytes), False
                    return FetchResult(
                        url=str(resp.url),
                        status_code=resp.status_code,
                        headers=hdrs,
                        body=body,
                        strategy=self.name,
                        body_skipped=skipped,
                    )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(str(e) or type(e).__name__, strategy=self.name) from e
