"""In-process driver that plays one game with the solver, optionally mirroring a surface."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from datetime import datetime

from password_game.application.game_events import (
    FireRecord,
    extinguish_fire,
    hatch_egg,
    start_fire,
)
from password_game.application.sync import RenderingSurface, ensure_synced
from password_game.core.changes import Append, Change, Replace, sort_for_entry
from password_game.core.errors import DesynchronizationError, UnsatisfiableRuleError
from password_game.core.reference_data import BUG, FIRE, MAX_BUGS
from password_game.core.rules import Rule, RuleCatalogue
from password_game.core.solver import Solver
from password_game.domain.models import GameState

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 400
LENGTH_RULES = frozenset({"include_length", "prime_length"})


@dataclass(frozen=True)
class PlaythroughResult:
    """Outcome of a finished game."""

    password: str
    steps: int
    highest_rule: int
    attempt: int = 0


class DirectDriver:
    """Plays a game against an in-memory rule catalogue.

    The driver owns the game state: it reveals rules as earlier ones pass, triggers the
    egg, fire and hatch events when their rules are reached, and feeds the highest
    violated rule to the solver until nothing is violated.
    """

    def __init__(
        self,
        solver: Solver,
        catalogue: RuleCatalogue,
        *,
        state: GameState | None = None,
        surface: RenderingSurface | None = None,
        rng: random.Random | None = None,
        slack: int = 0,
        max_steps: int = DEFAULT_MAX_STEPS,
    ) -> None:
        self.solver = solver
        self.catalogue = catalogue
        self.state = state if state is not None else GameState()
        self.surface = surface
        self.rng = rng if rng is not None else random.Random()
        self.slack = slack
        self.max_steps = max_steps
        self.fire: FireRecord | None = None

    def advance(self) -> list[Rule]:
        """Reveal rules while all earlier ones pass and return violations, highest first."""
        now = self.solver.clock()
        violated: list[Rule] = []
        for rule in self.catalogue.rules:
            if rule.number <= self.state.highest_rule:
                if not self._passes(rule, now):
                    violated.append(rule)
            elif not violated:
                self.state.highest_rule += 1
                logger.info("driver.rule_reached number=%s rule=%s", rule.number, rule.kind)
                self._on_rule_reached(rule)
                if not self._passes(rule, now):
                    violated.append(rule)
        violated.reverse()
        return violated

    def play(self) -> PlaythroughResult:
        self._commit(self.solver.starting_changes())
        violated = self.advance()
        steps = 0
        while violated:
            rule = violated[0]
            if steps >= self.max_steps:
                raise UnsatisfiableRuleError(rule.kind, f"no solution after {steps} steps")
            logger.info(
                "driver.step password=%r rule=%s violated=%s",
                self.solver.password.text,
                rule.kind,
                [violation.kind for violation in violated],
            )
            if not self._put_out_fire(rule) and not self._settle_slack(rule):
                changes = self.solver.solve(rule, self.state, self.slack)
                if self.state.sacrificed_letters != self.solver.sacrificed_letters:
                    self.state.sacrificed_letters = list(self.solver.sacrificed_letters)
                if changes:
                    self._commit(changes)
                elif not self._passes(rule, self.solver.clock()):
                    raise UnsatisfiableRuleError(rule.kind, "solve made no progress")
            steps += 1
            violated = self.advance()

        logger.info("driver.complete steps=%s password=%r", steps, self.solver.password.text)
        return PlaythroughResult(
            password=self.solver.password.text,
            steps=steps,
            highest_rule=self.state.highest_rule,
        )

    def _passes(self, rule: Rule, now: datetime) -> bool:
        return self.catalogue.validate(rule, self.solver.password.password, self.state, now)

    def _on_rule_reached(self, rule: Rule) -> None:
        if rule.kind == "egg":
            self.state.egg_placed = True
        elif rule.kind == "fire":
            self.state.fire_started = True
            self.fire = start_fire(self.solver, self.rng)
            self._mirror([Replace(self.fire.index, FIRE, ignore_protection=True)])
        elif rule.kind == "hatch":
            self.state.paul_hatched = True
            self._mirror(hatch_egg(self.solver))

    def _put_out_fire(self, rule: Rule) -> bool:
        if rule.kind != "fire" or self.fire is None:
            return False
        record, self.fire = self.fire, None
        batch = extinguish_fire(self.solver, record)
        if not batch:
            return False
        logger.info("driver.fire_out index=%s", record.index)
        self._mirror(batch)
        return True

    def _settle_slack(self, rule: Rule) -> bool:
        """Make the length change ``slack`` reserved once the goal length is in place.

        Paul is fed up to his limit and any remainder is padding. Later solves see no slack.
        """
        goal = self.solver.goal_length
        if rule.kind not in LENGTH_RULES or not self.slack or goal is None:
            return False
        self.slack = 0
        gap = goal - len(self.solver.password)
        if gap <= 0:
            return False
        bugs = self.solver.password.graphemes().count(BUG)
        fed = max(0, min(gap, MAX_BUGS - bugs))
        changes: list[Change] = []
        if fed:
            changes.append(Append(BUG * fed))
        if gap > fed:
            changes.append(Append("-" * (gap - fed)))
        logger.info("driver.slack_settled bugs=%s padding=%s", fed, gap - fed)
        self._commit(changes)
        return True

    def _commit(self, changes: Sequence[Change]) -> None:
        batch = self.solver.apply(changes)
        logger.debug("driver.commit changes=%s", len(batch))
        self._mirror(batch)

    def _mirror(self, batch: Sequence[Change]) -> None:
        if self.surface is None or not batch:
            return
        self.surface.apply(sort_for_entry(batch))
        actual_text, actual_formatting = self.surface.get_current_text_and_formatting()
        result = ensure_synced(
            self.solver.password.text,
            self.solver.password.formatting,
            actual_text,
            actual_formatting,
        )
        if result == "hatched":
            hatch_egg(self.solver)
        elif result == "fire":
            raise DesynchronizationError("fire", self.solver.password.text, actual_text)


def play_until_solved(
    factory: Callable[[int], DirectDriver],
    attempts: int,
) -> PlaythroughResult:
    """Play fresh games until one finishes, retrying unsatisfiable rules and lost sync."""
    if attempts < 1:
        raise ValueError("attempts must be at least 1.")
    errors: list[UnsatisfiableRuleError | DesynchronizationError] = []
    for attempt in range(attempts):
        driver = factory(attempt)
        try:
            result = driver.play()
        except (UnsatisfiableRuleError, DesynchronizationError) as error:
            logger.info("driver.retry attempt=%s error=%s", attempt, error)
            errors.append(error)
            continue
        return replace(result, attempt=attempt)
    raise errors[-1]
