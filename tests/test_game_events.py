from __future__ import annotations

import random
from datetime import datetime

import pytest

from password_game.application.game_events import (
    FireRecord,
    extinguish_fire,
    fire_candidates,
    hatch_egg,
    spread_fire,
    start_fire,
)
from password_game.core.facts import FactServices
from password_game.core.mutable import MutablePassword
from password_game.core.password import split_graphemes
from password_game.core.reference_data import CHICKEN, EGG, FIRE
from password_game.core.rules import Rule
from password_game.core.solver import Solver
from password_game.domain.models import GameState


def _solver(text: str, facts: FactServices, now: datetime) -> Solver:
    return Solver(MutablePassword.from_text(text), facts=facts, clock=lambda: now)


def test_fire_keeps_its_distance_from_paul() -> None:
    graphemes = split_graphemes(f"avoid the{EGG}egg foo")
    assert set(fire_candidates(graphemes)) == {0, 1, 2, 3, 15, 16}
    assert fire_candidates(list("abc")) == [0, 1, 2]
    assert fire_candidates([]) == []


def test_fire_candidates_skip_the_clearance_behind_a_trailing_egg() -> None:
    assert fire_candidates([*"abcdefgh", EGG]) == [0, 1, 2]
    assert fire_candidates([*"abcdefgh", EGG, *"ijklmn"]) == [0, 1, 2, 14]
    assert fire_candidates(["a", "b", EGG]) == []


def test_start_fire_needs_a_grapheme_clear_of_paul(facts: FactServices, now: datetime) -> None:
    solver = _solver(f"ab{EGG}", facts, now)
    with pytest.raises(ValueError):
        start_fire(solver, random.Random(0))
    assert solver.password.text == f"ab{EGG}"


def test_start_fire_burns_protected_graphemes(facts: FactServices, now: datetime) -> None:
    solver = _solver("abcdef", facts, now)
    for index in range(6):
        solver.password.protect(index)
    record = start_fire(solver, random.Random(3))
    assert solver.password.graphemes()[record.index] == FIRE
    assert record.original == "abcdef"[record.index]
    assert solver.password.protected[record.index]


def test_spread_fire_grows_each_run_both_ways(facts: FactServices, now: datetime) -> None:
    solver = _solver(f"ab{FIRE}cdef{FIRE}", facts, now)
    batch = spread_fire(solver)
    assert len(batch) == 3
    assert solver.password.text == f"a{FIRE * 3}de{FIRE * 2}"
    assert spread_fire(_solver("quiet", facts, now)) == []


def test_hatch_egg_replaces_first_egg(facts: FactServices, now: datetime) -> None:
    solver = _solver(f"{EGG}x{EGG}", facts, now)
    solver.password.protect(0)
    assert len(hatch_egg(solver)) == 1
    assert solver.password.text == f"{CHICKEN}x{EGG}"
    assert solver.password.protected[0]
    assert hatch_egg(_solver("no egg", facts, now)) == []


def test_extinguish_restores_the_burnt_grapheme(facts: FactServices, now: datetime) -> None:
    solver = _solver("abc", facts, now)
    record = start_fire(solver, random.Random(0))
    extinguish_fire(solver, record)
    assert solver.password.text == "abc"


def test_extinguish_skips_a_grapheme_already_put_out(facts: FactServices, now: datetime) -> None:
    solver = _solver("abc", facts, now)
    assert extinguish_fire(solver, FireRecord(index=1, original="z")) == []
    assert extinguish_fire(solver, FireRecord(index=7, original="z")) == []
    assert solver.password.text == "abc"


def test_fire_rule_clears_the_rest_after_extinguishing(facts: FactServices, now: datetime) -> None:
    solver = _solver("abcdefgh", facts, now)
    record = start_fire(solver, random.Random(5))
    spread_fire(solver)
    extinguish_fire(solver, record)
    state = GameState(fire_started=True)
    solver.solve_and_apply(Rule("fire"), state)
    assert FIRE not in solver.password.text
    assert "abcdefgh"[record.index] in solver.password.text
