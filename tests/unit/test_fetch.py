# cpi_scrolly/tests/unit/test_fetch.py
"""Unit tests for static chart artifact retrieval."""

from __future__ import annotations

import asyncio
from pathlib import Path
import sys
from urllib.error import HTTPError, URLError

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

import pytest

from scrolly import fetch
from scrolly.errors import TransportFailure


def test_local_file_is_returned_with_status_200(tmp_path: Path) -> None:
    (tmp_path / "A.json").write_text('{"mark": "line"}', encoding="utf-8")
    fetcher = fetch.StaticFileFetcher(tmp_path)

    response = asyncio.run(fetcher("A.json"))

    assert response.ok
    assert response.status == 200
    assert response.body == b'{"mark": "line"}'
    assert response.identifier == "A.json"


def test_missing_local_file_is_a_404(tmp_path: Path) -> None:
    response = asyncio.run(fetch.StaticFileFetcher(tmp_path)("missing.json"))

    assert not response.ok
    assert response.status == 404


def test_file_urls_resolve_against_root(tmp_path: Path) -> None:
    (tmp_path / "B.json").write_text("{}", encoding="utf-8")

    by_root = fetch.StaticFileFetcher(tmp_path.as_uri()).fetch_blocking("B.json")
    by_identifier = fetch.StaticFileFetcher("unused").fetch_blocking((tmp_path / "B.json").as_uri())

    assert by_root.status == 200
    assert by_identifier.body == b"{}"


def test_http_root_joins_identifier() -> None:
    fetcher = fetch.StaticFileFetcher("https://example.org/story")
    assert fetcher.resolve("chart_state_1.json") == "https://example.org/story/chart_state_1.json"


def test_http_error_status_is_reported(monkeypatch) -> None:
    def fake_urlopen(url):
        raise HTTPError(url, 404, "Not Found", None, None)

    monkeypatch.setattr(fetch, "urlopen", fake_urlopen)

    response = fetch.StaticFileFetcher("https://example.org/").fetch_blocking("gone.json")

    assert response.status == 404
    assert response.body == b""


def test_network_error_raises_transport_failure(monkeypatch) -> None:
    def fake_urlopen(url):
        raise URLError("connection refused")

    monkeypatch.setattr(fetch, "urlopen", fake_urlopen)

    with pytest.raises(TransportFailure) as excinfo:
        fetch.StaticFileFetcher("https://example.org/").fetch_blocking("down.json")
    assert excinfo.value.identifier == "down.json"
