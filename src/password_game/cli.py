"""CLI that plays the password game to completion and prints the winning password."""

from __future__ import annotations

import argparse
import logging
import random

import httpx
from pydantic import ValidationError

from password_game.adapters.html_surface import HtmlEntrySurface
from password_game.adapters.http_facts import (
    CatalogFirstVideoDurations,
    HttpVideoDurationSource,
    HttpWordleSource,
)
from password_game.adapters.observability import configure_runtime_logging
from password_game.adapters.settings import GameSettings, SettingsError, load_settings
from password_game.adapters.static_facts import (
    DEFAULT_WORDLE_ANSWER,
    ApproximateMoonPhaseSource,
    NearestCountryLocator,
    OfflineVideoCatalog,
    PuzzleTableChessEngine,
    StaticWordleSource,
    offline_fact_services,
)
from password_game.application.driver import DirectDriver, PlaythroughResult, play_until_solved
from password_game.core.errors import PasswordGameError
from password_game.core.facts import FactServices
from password_game.core.rules import new_rule_catalogue
from password_game.core.solver import Solver
from password_game.domain.ports import WordleSource

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    """Define CLI flags; unset flags fall back to PASSWORD_GAME_* settings."""
    parser = argparse.ArgumentParser(description="Solve the password game with a rule solver.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for rules and events.")
    parser.add_argument(
        "--slack",
        type=int,
        default=None,
        help="Graphemes reserved beyond the length goal for late edits.",
    )
    parser.add_argument("--max-attempts", type=int, default=None)
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Resolve every fact from local tables instead of HTTP.",
    )
    parser.add_argument("--wordle-answer", default=None, help="Use a fixed Wordle answer.")
    parser.add_argument(
        "--surface",
        choices=["direct", "html"],
        default="direct",
        help="Mirror every edit onto an HTML surface and check sync (default: direct).",
    )
    return parser


def _merge_settings(parsed: argparse.Namespace, settings: GameSettings) -> GameSettings:
    overrides: dict[str, object] = {}
    if parsed.seed is not None:
        overrides["seed"] = parsed.seed
    if parsed.slack is not None:
        overrides["slack"] = parsed.slack
    if parsed.max_attempts is not None:
        overrides["max_attempts"] = parsed.max_attempts
    if parsed.offline:
        overrides["offline"] = True
    try:
        return GameSettings.model_validate({**settings.model_dump(), **overrides})
    except ValidationError as exc:
        raise SettingsError(f"Invalid command-line settings: {exc}") from exc


def online_fact_services(
    client: httpx.Client, settings: GameSettings, wordle_answer: str | None = None
) -> FactServices:
    """Fact services that reach the network for the word-game answer and foreign videos."""
    wordle: WordleSource = (
        StaticWordleSource(wordle_answer)
        if wordle_answer
        else HttpWordleSource(client=client, url_template=settings.wordle_url)
    )
    # No video search API is wired up, so ids come from the offline catalogue.
    catalog = OfflineVideoCatalog()
    return FactServices(
        wordle=wordle,
        moon=ApproximateMoonPhaseSource(),
        countries=NearestCountryLocator(),
        chess=PuzzleTableChessEngine(),
        video_durations=CatalogFirstVideoDurations(
            catalog, HttpVideoDurationSource(client=client)
        ),
        video_catalog=catalog,
    )


def _play(
    settings: GameSettings, facts: FactServices, surface_kind: str
) -> PlaythroughResult:
    seeds = random.Random(settings.seed)

    def factory(attempt: int) -> DirectDriver:
        rng = random.Random(seeds.getrandbits(64))
        logger.info("cli.attempt attempt=%s", attempt)
        return DirectDriver(
            Solver(facts=facts, rng=rng),
            new_rule_catalogue(rng, facts),
            surface=HtmlEntrySurface() if surface_kind == "html" else None,
            rng=rng,
            slack=settings.slack,
        )

    return play_until_solved(factory, settings.max_attempts)


def main(argv: list[str] | None = None) -> None:
    """Play until a game is won or attempts run out."""
    parser = build_arg_parser()
    parsed = parser.parse_args(argv)
    configure_runtime_logging()

    try:
        settings = _merge_settings(parsed, load_settings())
    except SettingsError as exc:
        raise SystemExit(str(exc)) from exc

    wordle_answer = str(parsed.wordle_answer) if parsed.wordle_answer else None
    try:
        if settings.offline:
            facts = offline_fact_services(wordle_answer=wordle_answer or DEFAULT_WORDLE_ANSWER)
            result = _play(settings, facts, str(parsed.surface))
        else:
            with httpx.Client(timeout=settings.http_timeout, follow_redirects=True) as client:
                facts = online_fact_services(client, settings, wordle_answer)
                result = _play(settings, facts, str(parsed.surface))
    except PasswordGameError as exc:
        raise SystemExit(f"Password game failed: {exc}") from exc

    print(f"Password: {result.password}")
    print(f"Attempts: {result.attempt + 1}")
    print(f"Steps: {result.steps}")
    print(f"Rules satisfied: {result.highest_rule}")


if __name__ == "__main__":
    main()
