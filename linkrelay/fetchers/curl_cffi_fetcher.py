"""Tertiary strategy: browser TLS impersonation via curl-cffi."""

from __future__ import annotations

from typing import Mapping, Optional

from curl_cffi import requests as curl_requests
from curl_cffi.requests.exceptions import RequestException

from .base import FetchResult, exceeds_declared, lower_headers, read_capped
from .exceptions import FetchError


class CurlCffiFetcher:
    """Fetcher using curl-cffi with a browser TLS fingerprint.

    The impersonated browser supplies its own User-Agent, so only the caller's
    headers (the referer) are sent on top of it.
    """

    name = "curl_cffi"

    def __init__(self, impersonate: str = "chrome", session: Optional[curl_requests.Session] = None):
        self.impersonate = impersonate
        self.session = session

    def fetch(self, url: str, headers: Mapping[str, str], timeout: float, max_bytes: int) -> FetchResult:
        session = self.session or curl_requests.Session(impersonate=self.impersonate)
        try:
            resp = session.get(url, headers=dict(headers), timeout=timeout, stream=True, allow_redirects=True)
            try:
                resp.raise_for_status()
                hdrs = lower_headers(resp.headers.items())
                skipped = exceeds_declared(hdrs, max_bytes)
                body = b"" if skipped else read_capped(resp.iter_content(), max_bytes)
                return FetchResult(
                    url=str(resp.url),
                    status_code=resp.status_code,
                    headers=hdrs,
                    body=body,
                    strategy=self.name,
                    body_skipped=skipped,
                )
            finally:
                resp.close()
        except RequestException as e:
            raise FetchError(str(e) or type(e).__name__, strategy=self.name) from e
        finally:
            if self.session is None:
                session.close()
