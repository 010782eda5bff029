from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime

import pytest

from password_game.adapters.static_facts import (
    NearestCountryLocator,
    PuzzleTableChessEngine,
    StaticWordleSource,
)
from password_game.core.facts import FactServices
from password_game.domain.models import MoonPhase

FactsFactory = Callable[..., FactServices]


class FixedMoonPhase:
    def __init__(self, phase: MoonPhase) -> None:
        self.phase = phase

    def phase_at(self, moment: datetime) -> MoonPhase:
        return self.phase


class KnownVideos:
    """Video ids with known durations, usable as both video ports."""

    def __init__(self, durations: Mapping[str, int]) -> None:
        self.durations = dict(durations)
        self.lookups: list[str] = []

    def duration_seconds(self, video_id: str) -> int:
        self.lookups.append(video_id)
        return self.durations.get(video_id, 0)

    def video_id_for(self, seconds: int) -> str | None:
        for video_id, duration in self.durations.items():
            if duration == seconds:
                return video_id
        return None


@pytest.fixture
def make_facts() -> FactsFactory:
    def build(
        *,
        wordle: str = "enter",
        phase: MoonPhase = "full",
        videos: Mapping[str, int] | None = None,
    ) -> FactServices:
        known = KnownVideos(videos if videos is not None else {"Hc6J5rlKhIc": 14})
        return FactServices(
            wordle=StaticWordleSource(wordle),
            moon=FixedMoonPhase(phase),
            countries=NearestCountryLocator(),
            chess=PuzzleTableChessEngine(),
            video_durations=known,
            video_catalog=known,
        )

    return build


@pytest.fixture
def facts(make_facts: FactsFactory) -> FactServices:
    return make_facts()


@pytest.fixture
def now() -> datetime:
    return datetime(2023, 7, 12, 4, 8, 20)
