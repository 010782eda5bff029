"""Ports for externally resolved facts consumed by rules and the solver."""

from __future__ import annotations

from datetime import date, datetime
from typing import Protocol

from password_game.domain.models import Coords, MoonPhase


class WordleSource(Protocol):
    """Resolves the word-guess answer published for a date."""

    def answer_for(self, day: date) -> str:
        ...


class MoonPhaseSource(Protocol):
    """Resolves the moon phase at a moment in time."""

    def phase_at(self, moment: datetime) -> MoonPhase:
        ...


class CountryLocator(Protocol):
    """Reverse-geocodes coordinates to a lowercase country name."""

    def country_at(self, coords: Coords) -> str:
        ...


class ChessEngine(Protocol):
    """Finds the best move for a FEN position in algebraic notation."""

    def best_move(self, fen: str) -> str:
        ...


class VideoDurationSource(Protocol):
    """Looks up a video's duration in seconds."""

    def duration_seconds(self, video_id: str) -> int:
        ...


class VideoCatalog(Protocol):
    """Finds a video id whose duration matches a number of seconds."""

    def video_id_for(self, seconds: int) -> str | None:
        ...
