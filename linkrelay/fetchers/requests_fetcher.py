from __future__ import annotations

from typing import Mapping, Optional

import requests

from .base import FetchResult, build_headers, exceeds_declared, lower_headers, read_capped
from .exceptions import FetchError


CHUNK_SIZE = 64 * 1024


class RequestsFetcher:
    """Secondary strategy: a plain requests session."""

    name = "requests"

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session

    def fetch(self, url: str, headers: Mapping[str, str], timeout: float, max_bytes: int) -> FetchResult:
        session = self.session or requests.Session()
        try:
            resp = session.get(url, headers=build_headers(headers), timeout=timeout, stream=True, allow_redirects=True)
            try:
                resp.raise_for_status()
                hdrs = lower_headers(resp.headers.items())
                skipped = exceeds_declared(hdrs, max_bytes)
                body = b"" if skipped else read_capped(resp.iter_content(chunk_size=CHUNK_SIZE), max_bytes)
                return FetchResult(
                    url=resp.url,
                    status_code=resp.status_code,
                    headers=hdrs,
                    body=body,
                    strategy=self.name,
                    body_skipped=skipped,
                )
            finally:
                resp.close()
        except requests.RequestException as e:
            raise FetchError(str(e) or type(e).__name__, strategy=self.name) from e
        finally:
            if self.session is None:
                session.close()
