"""Narrative events the game inflicts on the password outside of any rule's solution."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from password_game.core.changes import Change, Replace
from password_game.core.reference_data import CHICKEN, EGG, FIRE
from password_game.core.solver import Solver

logger = logging.getLogger(__name__)

# Fire never starts within this many graphemes of Paul.
EGG_CLEARANCE = 5


@dataclass(frozen=True)
class FireRecord:
    """Where the fire started and which grapheme it burnt."""

    index: int
    original: str


def fire_candidates(graphemes: list[str]) -> list[int]:
    if EGG not in graphemes:
        return list(range(len(graphemes)))
    egg_index = graphemes.index(EGG)
    before = range(0, max(egg_index - EGG_CLEARANCE, 0))
    after = range(egg_index + EGG_CLEARANCE + 1, len(graphemes))
    return [*before, *after]


def start_fire(solver: Solver, rng: random.Random) -> FireRecord:
    """Burn one random grapheme away from Paul, regardless of protection."""
    graphemes = solver.password.graphemes()
    candidates = fire_candidates(graphemes)
    if not candidates:
        raise ValueError("No grapheme is far enough from Paul to catch fire.")
    index = rng.choice(candidates)
    solver.apply([Replace(index, FIRE, ignore_protection=True)])
    logger.info("events.fire_started index=%s original=%r", index, graphemes[index])
    return FireRecord(index=index, original=graphemes[index])


def spread_fire(solver: Solver) -> list[Change]:
    """Grow every run of fire by one grapheme in both directions."""
    graphemes = solver.password.graphemes()
    changes: list[Change] = []
    for index, grapheme in enumerate(graphemes):
        if grapheme == FIRE:
            continue
        left_burning = index > 0 and graphemes[index - 1] == FIRE
        right_burning = index < len(graphemes) - 1 and graphemes[index + 1] == FIRE
        if left_burning or right_burning:
            changes.append(Replace(index, FIRE, ignore_protection=True))
    if not changes:
        return []
    return solver.apply(changes)


def hatch_egg(solver: Solver) -> list[Change]:
    """Turn the first egg into a chicken and return the committed batch."""
    for index, grapheme in enumerate(solver.password.graphemes()):
        if grapheme == EGG:
            logger.info("events.hatched index=%s", index)
            return solver.apply([Replace(index, CHICKEN, ignore_protection=True)])
    return []


def extinguish_fire(solver: Solver, record: FireRecord) -> list[Change]:
    """Restore the grapheme the fire replaced, leaving any other fire to the solver."""
    graphemes = solver.password.graphemes()
    if record.index >= len(graphemes) or graphemes[record.index] != FIRE:
        return []
    return solver.apply([Replace(record.index, record.original, ignore_protection=True)])
