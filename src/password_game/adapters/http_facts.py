"""Fact resolvers that look answers up over HTTP."""

from __future__ import annotations

import logging
import re
from datetime import date

import httpx
from bs4 import BeautifulSoup

from password_game.adapters.settings import DEFAULT_WORDLE_URL
from password_game.core.errors import PasswordGameError
from password_game.domain.ports import VideoDurationSource

logger = logging.getLogger(__name__)

DEFAULT_VIDEO_URL = "https://www.youtube.com/watch?v={video_id}"
ISO_DURATION_PATTERN = re.compile(
    r"^P(?:(?P<days>\d+)D)?(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+)S)?)?$"
)


class FactLookupError(PasswordGameError):
    """Raised when an external fact cannot be fetched or parsed."""


def parse_iso_duration(raw: str) -> int:
    """Convert an ISO-8601 duration such as ``PT1M3S`` into whole seconds."""
    match = ISO_DURATION_PATTERN.match(raw.strip())
    if match is None or raw.strip() in {"P", "PT"}:
        raise ValueError(f"Not an ISO-8601 duration: {raw!r}")
    parts = {name: int(value) if value else 0 for name, value in match.groupdict().items()}
    return ((parts["days"] * 24 + parts["hours"]) * 60 + parts["minutes"]) * 60 + parts["seconds"]


def parse_video_duration(html: str) -> int:
    """Read the duration advertised in a watch page's ``itemprop`` metadata."""
    soup = BeautifulSoup(html, "html.parser")
    meta = soup.select_one('meta[itemprop="duration"]')
    if meta is None:
        raise ValueError("Watch page has no duration metadata.")
    content = meta.get("content")
    if not isinstance(content, str):
        raise ValueError("Duration metadata has no content.")
    return parse_iso_duration(content)


class HttpWordleSource:
    """Word-guess answers from the game's own API, one request per date."""

    def __init__(self, *, client: httpx.Client, url_template: str = DEFAULT_WORDLE_URL) -> None:
        self._client = client
        self._url_template = url_template
        self._answers: dict[date, str] = {}

    def answer_for(self, day: date) -> str:
        if day in self._answers:
            return self._answers[day]
        url = self._url_template.format(date=day.isoformat())
        try:
            response = self._client.get(url)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise FactLookupError(f"Wordle lookup failed for {day}: {exc}") from exc
        answer = payload.get("answer") if isinstance(payload, dict) else None
        if not isinstance(answer, str) or not answer.strip():
            raise FactLookupError(f"Wordle response for {day} missing answer.")
        self._answers[day] = answer.strip().lower()
        logger.info("facts.wordle day=%s", day)
        return self._answers[day]


class HttpVideoDurationSource:
    """Video durations scraped from watch pages."""

    def __init__(self, *, client: httpx.Client, url_template: str = DEFAULT_VIDEO_URL) -> None:
        self._client = client
        self._url_template = url_template
        self._durations: dict[str, int] = {}

    def duration_seconds(self, video_id: str) -> int:
        if video_id in self._durations:
            return self._durations[video_id]
        try:
            response = self._client.get(self._url_template.format(video_id=video_id))
            response.raise_for_status()
            seconds = parse_video_duration(response.text)
        except (httpx.HTTPError, ValueError) as exc:
            raise FactLookupError(f"Duration lookup failed for video {video_id}: {exc}") from exc
        self._durations[video_id] = seconds
        logger.info("facts.video_duration id=%s seconds=%s", video_id, seconds)
        return seconds


class CatalogFirstVideoDurations:
    """Durations of catalogue-issued ids, with any other video looked up remotely."""

    def __init__(self, catalog: VideoDurationSource, remote: VideoDurationSource) -> None:
        self._catalog = catalog
        self._remote = remote

    def duration_seconds(self, video_id: str) -> int:
        try:
            return self._catalog.duration_seconds(video_id)
        except FactLookupError:
            logger.debug("facts.video_remote id=%s", video_id)
            return self._remote.duration_seconds(video_id)
