"""Offline fact resolvers backed by tables and arithmetic instead of network lookups."""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Mapping, Sequence
from datetime import date, datetime, time, timedelta, timezone

from password_game.adapters.http_facts import FactLookupError
from password_game.core.facts import FactServices
from password_game.core.reference_data import DEFAULT_CHESS_PUZZLES, DEFAULT_GEO_GAMES
from password_game.domain.models import ChessPuzzle, Coords, GeoGame, MoonPhase

logger = logging.getLogger(__name__)

DEFAULT_WORDLE_ANSWER = "crane"
SYNODIC_MONTH_DAYS = 29.530588853
REFERENCE_NEW_MOON = datetime(2000, 1, 6, 18, 14, tzinfo=timezone.utc)
# Lowercase hex letters: never sacrificed, never roman numerals or element symbols, no digits.
VIDEO_ID_LETTERS = "abcdef"
VIDEO_ID_LENGTH = 11


class StaticWordleSource:
    """Fixed word-guess answers, optionally per date."""

    def __init__(
        self,
        default: str = DEFAULT_WORDLE_ANSWER,
        answers: Mapping[date, str] | None = None,
    ) -> None:
        self._default = default.lower()
        self._answers = {day: answer.lower() for day, answer in (answers or {}).items()}

    def answer_for(self, day: date) -> str:
        return self._answers.get(day, self._default)


def moon_cycle_fraction(moment: datetime) -> float:
    """Position in the mean synodic month, 0 at new moon and 0.5 at full moon."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    elapsed_days = (moment - REFERENCE_NEW_MOON).total_seconds() / 86400
    return (elapsed_days / SYNODIC_MONTH_DAYS) % 1.0


class ApproximateMoonPhaseSource:
    """Moon phase from the mean lunar cycle, sampled at midnight today and tomorrow.

    A quarter boundary crossed during the day names the principal phase; otherwise the
    day falls in the intermediate phase of the half-cycle it sits in.
    """

    def phase_at(self, moment: datetime) -> MoonPhase:
        midnight = datetime.combine(moment.date(), time(), tzinfo=timezone.utc)
        today = moon_cycle_fraction(midnight)
        tomorrow = moon_cycle_fraction(midnight + timedelta(days=1))
        if today <= 0.25 <= tomorrow:
            return "first_quarter"
        if today <= 0.5 <= tomorrow:
            return "full"
        if today <= 0.75 <= tomorrow:
            return "last_quarter"
        if today >= tomorrow:
            return "new"
        if today <= 0.25:
            return "waxing_crescent"
        if today <= 0.5:
            return "waxing_gibbous"
        if today <= 0.75:
            return "waning_gibbous"
        return "waning_crescent"


def _great_circle_km(a: Coords, b: Coords) -> float:
    lat_a, lat_b = math.radians(a.lat), math.radians(b.lat)
    d_lat = lat_b - lat_a
    d_long = math.radians(b.long - a.long)
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat_a) * math.cos(lat_b) * math.sin(d_long / 2) ** 2
    return 2 * 6371.0 * math.asin(min(1.0, math.sqrt(h)))


class NearestCountryLocator:
    """Names the country of the closest known geo game."""

    def __init__(self, geo_games: Sequence[GeoGame] = DEFAULT_GEO_GAMES) -> None:
        if not geo_games:
            raise ValueError("NearestCountryLocator needs at least one geo game.")
        self._geo_games = tuple(geo_games)

    def country_at(self, coords: Coords) -> str:
        nearest = min(self._geo_games, key=lambda game: _great_circle_km(game.coords, coords))
        return nearest.country.lower()


class PuzzleTableChessEngine:
    """Best moves for the known puzzle positions."""

    def __init__(self, puzzles: Sequence[ChessPuzzle] = DEFAULT_CHESS_PUZZLES) -> None:
        self._solutions = {puzzle.fen: puzzle.solution for puzzle in puzzles}

    def best_move(self, fen: str) -> str:
        try:
            return self._solutions[fen]
        except KeyError:
            raise FactLookupError(f"No known best move for position {fen!r}.") from None


class OfflineVideoCatalog:
    """Issues a stable video id per duration and answers duration lookups for issued ids."""

    def __init__(self) -> None:
        self._durations: dict[str, int] = {}

    def video_id_for(self, seconds: int) -> str | None:
        if seconds < 0:
            return None
        # Each letter appears at most twice, which keeps the letter font-size rule cheap.
        letters = random.Random(seconds).sample(VIDEO_ID_LETTERS * 2, VIDEO_ID_LENGTH)
        video_id = "".join(letters)
        self._durations[video_id] = seconds
        logger.debug("facts.video_issued id=%s seconds=%s", video_id, seconds)
        return video_id

    def duration_seconds(self, video_id: str) -> int:
        try:
            return self._durations[video_id]
        except KeyError:
            raise FactLookupError(f"Video {video_id} is not in the offline catalogue.") from None


def offline_fact_services(
    *,
    wordle_answer: str = DEFAULT_WORDLE_ANSWER,
    geo_games: Sequence[GeoGame] = DEFAULT_GEO_GAMES,
    chess_puzzles: Sequence[ChessPuzzle] = DEFAULT_CHESS_PUZZLES,
) -> FactServices:
    """Fact services that need no network access."""
    catalog = OfflineVideoCatalog()
    return FactServices(
        wordle=StaticWordleSource(wordle_answer),
        moon=ApproximateMoonPhaseSource(),
        countries=NearestCountryLocator(geo_games),
        chess=PuzzleTableChessEngine(chess_puzzles),
        video_durations=catalog,
        video_catalog=catalog,
    )
