from __future__ import annotations

import logging
from datetime import date
from typing import cast

import httpx
import pytest

from password_game.adapters.http_facts import (
    CatalogFirstVideoDurations,
    FactLookupError,
    HttpVideoDurationSource,
    HttpWordleSource,
    parse_iso_duration,
    parse_video_duration,
)
from password_game.adapters.static_facts import OfflineVideoCatalog


class FakeClient:
    def __init__(self, responses: dict[str, httpx.Response | Exception]) -> None:
        self.responses = responses
        self.calls: list[str] = []

    def get(self, url: str) -> httpx.Response:
        self.calls.append(url)
        outcome = self.responses[url]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _json(url: str, status_code: int, payload: object) -> httpx.Response:
    return httpx.Response(status_code=status_code, request=httpx.Request("GET", url), json=payload)


def _html(url: str, body: str) -> httpx.Response:
    return httpx.Response(status_code=200, request=httpx.Request("GET", url), text=body)


WORDLE_URL = "https://example.com/wordle?date={date}"


@pytest.mark.parametrize(
    ("raw", "seconds"),
    [("PT1M3S", 63), ("PT13M3S", 783), ("PT2H", 7200), ("P1DT1S", 86401), ("PT0S", 0)],
)
def test_parse_iso_duration(raw: str, seconds: int) -> None:
    assert parse_iso_duration(raw) == seconds


@pytest.mark.parametrize("raw", ["", "P", "PT", "1M3S", "PT1.5S"])
def test_parse_iso_duration_rejects_garbage(raw: str) -> None:
    with pytest.raises(ValueError):
        parse_iso_duration(raw)


def test_parse_video_duration_reads_metadata() -> None:
    page = '<html><head><meta itemprop="duration" content="PT4M12S"></head></html>'
    assert parse_video_duration(page) == 252
    with pytest.raises(ValueError):
        parse_video_duration("<html></html>")


def test_wordle_answer_is_fetched_once_per_day(caplog: pytest.LogCaptureFixture) -> None:
    url = WORDLE_URL.format(date="2024-03-01")
    client = FakeClient({url: _json(url, 200, {"answer": " Crane "})})
    source = HttpWordleSource(client=cast(httpx.Client, client), url_template=WORDLE_URL)
    with caplog.at_level(logging.INFO, logger="password_game.adapters.http_facts"):
        assert source.answer_for(date(2024, 3, 1)) == "crane"
        assert source.answer_for(date(2024, 3, 1)) == "crane"
    assert client.calls == [url]
    assert "facts.wordle day=2024-03-01" in caplog.text


@pytest.mark.parametrize(
    "outcome",
    [
        _json(WORDLE_URL.format(date="2024-03-01"), 500, {}),
        _json(WORDLE_URL.format(date="2024-03-01"), 200, {"word": "crane"}),
        _json(WORDLE_URL.format(date="2024-03-01"), 200, ["crane"]),
        httpx.ConnectError("offline"),
    ],
)
def test_wordle_failures_raise_fact_lookup_error(outcome: httpx.Response | Exception) -> None:
    url = WORDLE_URL.format(date="2024-03-01")
    client = FakeClient({url: outcome})
    source = HttpWordleSource(client=cast(httpx.Client, client), url_template=WORDLE_URL)
    with pytest.raises(FactLookupError):
        source.answer_for(date(2024, 3, 1))


def test_video_duration_scrapes_watch_page() -> None:
    url = "https://www.youtube.com/watch?v=Hc6J5rlKhIc"
    page = '<meta itemprop="duration" content="PT0M14S">'
    client = FakeClient({url: _html(url, page)})
    source = HttpVideoDurationSource(client=cast(httpx.Client, client))
    assert source.duration_seconds("Hc6J5rlKhIc") == 14
    assert source.duration_seconds("Hc6J5rlKhIc") == 14
    assert client.calls == [url]


def test_video_duration_without_metadata_fails() -> None:
    url = "https://www.youtube.com/watch?v=aaaaaaaaaaa"
    client = FakeClient({url: _html(url, "<html>removed</html>")})
    source = HttpVideoDurationSource(client=cast(httpx.Client, client))
    with pytest.raises(FactLookupError):
        source.duration_seconds("aaaaaaaaaaa")


def test_catalog_ids_resolve_locally_and_others_remotely() -> None:
    url = "https://www.youtube.com/watch?v=Hc6J5rlKhIc"
    client = FakeClient({url: _html(url, '<meta itemprop="duration" content="PT14S">')})
    catalog = OfflineVideoCatalog()
    issued = catalog.video_id_for(300)
    assert issued is not None
    source = CatalogFirstVideoDurations(
        catalog, HttpVideoDurationSource(client=cast(httpx.Client, client))
    )

    assert source.duration_seconds(issued) == 300
    assert client.calls == []
    assert source.duration_seconds("Hc6J5rlKhIc") == 14
    assert client.calls == [url]
