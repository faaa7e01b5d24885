from __future__ import annotations

import re
from urllib.parse import unquote, urlsplit


_scheme_re = re.compile(r"^https?://", re.IGNORECASE)
_default_ports = {"http": 80, "https": 443}

DEFAULT_FILENAME = "downloaded_file"


def normalize_url(link: str) -> str:
    """Prefix ``https://`` unless the link already carries an http(s) scheme."""
    link = link.strip()
    if not _scheme_re.match(link):
        link = "https://" + link
    return link


def origin_of(url: str) -> str:
    """Scheme, host and non-default port of ``url``; credentials are dropped."""
    parsed = urlsplit(url)
    scheme = parsed.scheme.lower()
    host = parsed.hostname
    if not host:
        raise ValueError(f"Invalid URL: {url}")
    if ":" in host:
        host = f"[{host}]"
    port = parsed.port
    if port is not None and port != _default_ports.get(scheme):
        return f"{scheme}://{host}:{port}"
    return f"{scheme}://{host}"


def filename_from_url(url: str, default: str = DEFAULT_FILENAME) -> str:
    path = urlsplit(url).path
    name = unquote(path.rsplit("/", 1)[-1])
    name = name.replace("/", "_").replace("\\", "_").strip()
    if name in ("", ".", ".."):
        return default
    return name
