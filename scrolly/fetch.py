# cpi_scrolly/scrolly/fetch.py
"""Static retrieval of chart artifacts for the synchroniser.

Identifiers are resolved against an artifact root which may be a local
directory or a base URL. Local files mimic a static file server: a missing
file yields a ``404`` response rather than an exception, so the synchroniser
sees the same status-based failure either way.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from urllib.error import HTTPError, URLError
from urllib.parse import urljoin, urlparse
from urllib.request import url2pathname, urlopen

from .errors import TransportFailure

REMOTE_SCHEMES = {"http", "https", "file"}


@dataclass(frozen=True)
class FetchResponse:
    """Status and raw body of one retrieval."""

    status: int
    body: bytes
    identifier: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class StaticFileFetcher:
    """Async callable returning a :class:`FetchResponse` for an identifier."""

    def __init__(self, root: str | Path):
        self.root = root

    async def __call__(self, identifier: str) -> FetchResponse:
        return await asyncio.to_thread(self.fetch_blocking, identifier)

    def resolve(self, identifier: str) -> str | Path:
        if urlparse(identifier).scheme in REMOTE_SCHEMES:
            return identifier
        root = str(self.root)
        if urlparse(root).scheme in REMOTE_SCHEMES:
            return urljoin(root.rstrip("/") + "/", identifier)
        return Path(self.root) / identifier

    def fetch_blocking(self, identifier: str) -> FetchResponse:
        location = self.resolve(identifier)
        if isinstance(location, Path):
            return _read_local(location, identifier)
        if urlparse(location).scheme == "file":
            return _read_local(Path(url2pathname(urlparse(location).path)), identifier)
        return _read_url(location, identifier)


def _read_local(path: Path, identifier: str) -> FetchResponse:
    if not path.is_file():
        return FetchResponse(status=404, body=b"", identifier=identifier)
    return FetchResponse(status=200, body=path.read_bytes(), identifier=identifier)


def _read_url(url: str, identifier: str) -> FetchResponse:
    try:
        with urlopen(url) as response:
            return FetchResponse(status=response.status, body=response.read(), identifier=identifier)
    except HTTPError as exc:
        return FetchResponse(status=exc.code, body=b"", identifier=identifier)
    except URLError as exc:
        raise TransportFailure(f"Network error for file {identifier}: {exc.reason}", status=0, identifier=identifier) from exc


__all__ = ["FetchResponse", "StaticFileFetcher"]
