"""Per-rule edit synthesis over a protected, pending-edit password."""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime

from password_game.core.changes import (
    Append,
    Change,
    Format,
    Insert,
    Prepend,
    Remove,
    Replace,
    inserted_length,
)
from password_game.core.errors import PasswordGameError, UnsatisfiableRuleError
from password_game.core.facts import FactServices
from password_game.core.mutable import MutablePassword
from password_game.core.password import split_graphemes
from password_game.core.reference_data import (
    AFFIRMATIONS,
    BUG,
    EGG,
    FIRE,
    MAX_BUGS,
    MONTHS,
    SPONSORS,
    VOWELS,
    WEIGHTLIFTER,
)
from password_game.core.rules import RULE_ORDER, Rule, RuleKind, validate_rule
from password_game.core.text_scan import (
    format_clock,
    get_digits,
    get_elements,
    get_letters,
    get_roman_numerals,
    int_to_roman,
    is_prime,
)
from password_game.domain.models import (
    FONT_SIZE_ORDER,
    MOON_PHASE_EMOJIS,
    FormatChange,
    GameState,
    font_size_for_square,
)

logger = logging.getLogger(__name__)

# Targets of these rules depend on slack, so a currently passing password is re-planned.
SLACK_DEPENDENT_RULES: frozenset[RuleKind] = frozenset(
    {"wingdings", "include_length", "prime_length"}
)
MIN_GOAL_LENGTH = 100
# Hex digits plus the roman numerals V and X are never sacrificed.
SACRIFICE_CANDIDATES = tuple(letter for letter in "ghijklmnopqrstuvwxyz" if letter not in "vx")


@dataclass(frozen=True)
class TrackedSpan:
    """Start grapheme index and grapheme length of a substring the solver relies on."""

    index: int
    length: int


@dataclass(frozen=True)
class _SpanPlan:
    """Length and time bookkeeping that takes effect once ``changes`` are committed."""

    changes: tuple[Change, ...]
    goal_length: int | None = None
    length_span: TrackedSpan | None = None
    time_span: TrackedSpan | None = None


def relocate_span(span: TrackedSpan, changes: Iterable[Change]) -> TrackedSpan:
    """Return where ``span`` starts after ``changes`` were committed in order."""
    index = span.index
    for change in changes:
        if isinstance(change, Prepend):
            index += inserted_length(change)
        elif isinstance(change, Insert) and change.index <= index:
            index += inserted_length(change)
        elif isinstance(change, Remove) and change.index < index:
            index -= 1
    return TrackedSpan(index=index, length=span.length)


class Solver:
    """Proposes edit batches that satisfy one rule at a time.

    The solver owns the playthrough's ``MutablePassword`` and the bookkeeping that spans
    rules: the sacrificed letters, the chosen goal length and the tracked length and time
    substrings.
    """

    def __init__(
        self,
        password: MutablePassword | None = None,
        *,
        facts: FactServices,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.password = password if password is not None else MutablePassword()
        self.facts = facts
        self.rng = rng if rng is not None else random.Random()
        self.clock = clock if clock is not None else datetime.now
        self.sacrificed_letters: list[str] = []
        self.length_span: TrackedSpan | None = None
        self.time_span: TrackedSpan | None = None
        self.goal_length: int | None = None
        self._plan: _SpanPlan | None = None

    def solve(self, rule: Rule, state: GameState, slack: int = 0) -> list[Change]:
        """Return changes that make ``rule`` pass, or raise ``UnsatisfiableRuleError``."""
        now = self.clock()
        self._plan = None
        logger.debug("solver.solve rule=%s slack=%s", rule.kind, slack)
        if rule.kind not in SLACK_DEPENDENT_RULES and validate_rule(
            rule, self.password.password, state, facts=self.facts, now=now
        ):
            return []
        procedure = getattr(self, f"_solve_{rule.kind}")
        changes: list[Change] = procedure(rule, slack, now)
        logger.debug("solver.solved rule=%s changes=%s", rule.kind, len(changes))
        return changes

    def apply(self, changes: Iterable[Change]) -> list[Change]:
        """Queue and commit ``changes``, then relocate the tracked spans.

        Spans planned by the last ``solve`` are installed only when its exact batch commits.
        """
        batch = list(changes)
        plan, self._plan = self._plan, None
        try:
            self.password.queue_all(batch)
            committed = self.password.commit()
        except PasswordGameError:
            self.password.discard()
            raise
        if plan is not None and plan.changes == tuple(batch):
            self._install(plan)
        if self.length_span is not None:
            self.length_span = relocate_span(self.length_span, committed)
        if self.time_span is not None:
            self.time_span = relocate_span(self.time_span, committed)
        return committed

    def _install(self, plan: _SpanPlan) -> None:
        if plan.goal_length is not None:
            self.goal_length = plan.goal_length
        if plan.length_span is not None:
            self.length_span = plan.length_span
        if plan.time_span is not None:
            self.time_span = plan.time_span

    def solve_and_apply(self, rule: Rule, state: GameState, slack: int = 0) -> list[Change]:
        changes = self.solve(rule, state, slack)
        if not changes:
            return []
        return self.apply(changes)

    def starting_changes(self) -> list[Change]:
        """Opening batch covering the early rules in one go."""
        phase = self.facts.moon.phase_at(self.clock())
        return [
            Append(f"{EGG}0mayXXXVshell", protected=True),
            Append(MOON_PHASE_EMOJIS[phase][0], protected=True),
            Append("He997"),
        ]

    def _fail(self, rule: Rule, reason: str) -> UnsatisfiableRuleError:
        logger.info("solver.unsatisfiable rule=%s reason=%s", rule.kind, reason)
        return UnsatisfiableRuleError(rule.kind, reason)

    def _solve_min_length(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        return [Append("z" * (5 - len(self.password)))]

    def _solve_number(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        return [Append("9")]

    def _solve_uppercase(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        return [Append("Z")]

    def _solve_special(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        return [Append("!")]

    def _solve_digits(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        digits = [(digit, index) for digit, index in get_digits(self.password.text) if digit]
        total = sum(digit for digit, _ in digits)
        if total <= 25:
            appended: list[str] = []
            while total < 25:
                digit = min(9, 25 - total)
                appended.append(str(digit))
                total += digit
            return [Append("".join(appended))]

        protected = self.password.protected
        unprotected = [(digit, index) for digit, index in digits if not protected[index]]
        if total - sum(digit for digit, _ in unprotected) > 25:
            raise self._fail(rule, "protected digits alone sum to more than 25")

        changes: list[Change] = []
        to_reduce = total - 25
        kept: list[tuple[int, int]] = []
        for digit, index in sorted(unprotected, key=lambda item: item[0], reverse=True):
            if to_reduce and digit <= to_reduce:
                changes.append(Remove(index))
                to_reduce -= digit
            else:
                kept.append((digit, index))
        if to_reduce:
            # kept[0] is larger than the remainder.
            digit, index = kept[0]
            changes.append(Replace(index, str(digit - to_reduce)))
        return changes

    def _solve_month(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        return [Append(self.rng.choice(MONTHS), protected=True)]

    def _solve_roman(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        return [Append("XXXV")]

    def _solve_sponsors(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        return [Append(self.rng.choice(SPONSORS), protected=True)]

    def _solve_roman_multiply(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        graphemes = self.password.graphemes()
        protected = self.password.protected
        # Original indices of the graphemes that survive the removals planned so far.
        alive = list(range(len(graphemes)))
        removed: set[int] = set()
        while True:
            numerals = get_roman_numerals("".join(graphemes[index] for index in alive))
            goals = [35] if any(numeral.value == 35 for numeral in numerals) else [5, 7]
            doomed: list[int] = []
            for numeral in numerals:
                if numeral.value == 1:
                    continue
                if numeral.value in goals:
                    goals.remove(numeral.value)
                    continue
                for position in numeral.indices():
                    index = alive[position]
                    if protected[index]:
                        raise self._fail(rule, f"protected numeral worth {numeral.value}")
                    doomed.append(index)
            if not doomed:
                break
            # Removing a numeral can join its neighbours into a new one, so rescan.
            removed.update(doomed)
            alive = [index for index in alive if index not in removed]

        changes: list[Change] = [Remove(index) for index in sorted(removed)]
        # The leading space keeps a new numeral from merging with one ending the password.
        changes.extend(Append(f" {int_to_roman(goal)}") for goal in goals)
        return changes

    def _solve_captcha(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        return [Append(rule.captcha, protected=True)]

    def _solve_wordle(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        return [Append(self.facts.wordle.answer_for(now.date()), protected=True)]

    def _solve_periodic_table(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        return [Append("He", protected=True)]

    def _solve_moon_phase(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        phase = self.facts.moon.phase_at(now)
        return [Append(MOON_PHASE_EMOJIS[phase][0], protected=True)]

    def _solve_geo(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        if rule.coords is None:
            raise ValueError("Geo rule requires coordinates.")
        country = self.facts.countries.country_at(rule.coords).lower()
        return [Append(country.replace(" ", ""), protected=True)]

    def _solve_leap_year(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        # Zero is a leap year and leaves the digit sum alone.
        return [Append("0", protected=True)]

    def _solve_chess(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        return [Append(self.facts.chess.best_move(rule.fen), protected=True)]

    def _solve_egg(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        return [Prepend(EGG, protected=True)]

    def _solve_atomic_number(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        table = self.facts.elements
        elements = get_elements(self.password.text, table.symbols)
        total = sum(table.atomic_number(element.symbol) for element in elements)
        non_roman = table.non_roman
        changes: list[Change] = []

        if total > 200:
            protected = self.password.protected
            removable = [
                element
                for element in elements
                if element.symbol in non_roman
                and not protected[element.index]
                and (len(element.symbol) == 1 or not protected[element.index + 1])
            ]
            removable.sort(key=lambda element: table.atomic_number(element.symbol), reverse=True)
            for element in removable:
                if total <= 200:
                    break
                changes.append(Remove(element.index))
                if len(element.symbol) == 2:
                    changes.append(Remove(element.index + 1))
                total -= table.atomic_number(element.symbol)
            if total > 200:
                raise self._fail(rule, "atomic numbers exceed 200 with nothing left to remove")

        gap = 200 - total
        while gap > 0:
            symbol = [s for s in non_roman if table.atomic_number(s) <= gap][-1]
            changes.append(Append(symbol))
            gap -= table.atomic_number(symbol)
        return changes

    def _solve_bold_vowels(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        formatting = self.password.formatting
        return [
            Format(index, FormatChange.bold_on())
            for index, grapheme in enumerate(self.password.graphemes())
            if grapheme in VOWELS and not formatting[index].bold
        ]

    def _solve_fire(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        protected = self.password.protected
        changes: list[Change] = []
        for index, grapheme in enumerate(self.password.graphemes()):
            if grapheme != FIRE:
                continue
            if protected[index]:
                raise self._fail(rule, f"fire burns protected grapheme {index}")
            changes.append(Remove(index))
        return changes

    def _solve_strength(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        return [Append(WEIGHTLIFTER * 3, protected=True)]

    def _solve_affirmation(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        affirmation = self.rng.choice(AFFIRMATIONS)
        return [Append(affirmation.replace(" ", ""), protected=True)]

    def _solve_hatch(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        return [Append(BUG * MAX_BUGS)]

    def _solve_youtube(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        video_id = self.facts.video_catalog.video_id_for(rule.video_seconds)
        if video_id is None:
            raise self._fail(rule, f"no known video lasting {rule.video_seconds}s")
        return [Append(f"youtu.be/{video_id}", protected=True)]

    def _solve_sacrifice(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        letters = get_letters(self.password.text)
        protected = self.password.protected
        if not self.sacrificed_letters:
            present = {letter.lower() for letter, _ in letters}
            guarded = {letter.lower() for letter, index in letters if protected[index]}
            absent = [letter for letter in SACRIFICE_CANDIDATES if letter not in present]
            unguarded = [
                letter
                for letter in SACRIFICE_CANDIDATES
                if letter in present and letter not in guarded
            ]
            chosen = (absent + unguarded)[:2]
            if len(chosen) < 2:
                raise self._fail(rule, "fewer than two letters can be sacrificed")
            self.sacrificed_letters = chosen
            logger.info("solver.sacrifice letters=%s", "".join(chosen))

        changes: list[Change] = []
        for letter, index in letters:
            if letter.lower() not in self.sacrificed_letters:
                continue
            if protected[index]:
                raise self._fail(rule, f"sacrificed letter '{letter}' is protected")
            changes.append(Remove(index))
        return changes

    def _solve_twice_italic(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        formatting = self.password.formatting
        bold = sum(1 for record in formatting if record.bold)
        italic = sum(1 for record in formatting if record.italic)
        needed = 2 * bold - italic
        changes: list[Change] = []
        index = 0
        while len(changes) < needed:
            if index == len(formatting):
                raise self._fail(rule, "not enough graphemes left to italicise")
            if not formatting[index].italic:
                changes.append(Format(index, FormatChange.italic_on()))
            index += 1
        return changes

    def _solve_wingdings(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        numeral_indices = {
            index
            for numeral in get_roman_numerals(self.password.text)
            for index in numeral.indices()
        }
        formatting = self.password.formatting
        current = sum(1 for record in formatting if record.font_family == "wingdings")
        needed = math.ceil(0.3 * (len(formatting) + slack)) - current
        changes: list[Change] = []
        index = 0
        while len(changes) < needed:
            if index == len(formatting):
                raise self._fail(rule, "not enough graphemes left for Wingdings")
            # Roman numerals stay in Times New Roman.
            if index not in numeral_indices and formatting[index].font_family != "wingdings":
                changes.append(Format(index, FormatChange.family("wingdings")))
            index += 1
        return changes

    def _solve_hex(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        if rule.color is None:
            raise ValueError("Hex rule requires a color.")
        return [Append(rule.color.to_hex_string(), protected=True)]

    def _solve_times_new_roman(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        formatting = self.password.formatting
        return [
            Format(index, FormatChange.family("times_new_roman"))
            for numeral in get_roman_numerals(self.password.text)
            for index in numeral.indices()
            if formatting[index].font_family != "times_new_roman"
        ]

    def _solve_digit_font_size(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        formatting = self.password.formatting
        changes: list[Change] = []
        for digit, index in get_digits(self.password.text):
            size = font_size_for_square(digit * digit)
            if formatting[index].font_size != size:
                changes.append(Format(index, FormatChange.size(size)))
        return changes

    def _solve_letter_font_size(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        formatting = self.password.formatting
        used: dict[str, int] = {}
        changes: list[Change] = []
        for letter, index in get_letters(self.password.text):
            position = used.get(letter.lower(), 0)
            if position == len(FONT_SIZE_ORDER):
                raise self._fail(rule, f"ran out of font sizes for '{letter.lower()}'")
            used[letter.lower()] = position + 1
            size = FONT_SIZE_ORDER[position]
            if formatting[index].font_size != size:
                changes.append(Format(index, FormatChange.size(size)))
        return changes

    def _solve_include_length(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        if self.goal_length is None:
            return self._plan_length(slack, now)
        return self._restore_goal_length(rule, self.goal_length, slack)

    def _solve_prime_length(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        if self.goal_length is None:
            return self._plan_length(slack, now)
        return self._restore_goal_length(rule, self.goal_length, slack)

    def _solve_skip(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        return []

    def _solve_time(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        clock = split_graphemes(format_clock(now))
        span = self.time_span
        if span is None:
            appended: list[Change] = [Append("".join(clock), protected=True)]
            planned = TrackedSpan(index=len(self.password), length=len(clock))
            self._plan = _SpanPlan(tuple(appended), time_span=planned)
            return appended

        current = self.password.graphemes()[span.index : span.index + span.length]
        changes: list[Change] = [
            Replace(span.index + offset, grapheme, ignore_protection=True)
            for offset, grapheme in enumerate(clock[: span.length])
            if offset >= len(current) or current[offset] != grapheme
        ]
        if len(clock) > span.length:
            extra = "".join(clock[span.length :])
            changes.append(Insert(span.index + span.length, extra, protected=True))
        for offset in range(len(clock), span.length):
            changes.append(Remove(span.index + offset, ignore_protection=True))
        planned = TrackedSpan(index=span.index, length=len(clock))
        self._plan = _SpanPlan(tuple(changes), time_span=planned)
        return changes

    def _solve_final(self, rule: Rule, slack: int, now: datetime) -> list[Change]:
        return []

    def _plan_length(self, slack: int, now: datetime) -> list[Change]:
        """Pick a prime goal length of at least 100 and append its tracked substrings."""
        clock = format_clock(now)
        base = len(self.password) + slack + len(clock)
        goal = MIN_GOAL_LENGTH
        while not is_prime(goal) or goal - base - len(str(goal)) < 0:
            goal += 1
        length_text = str(goal)
        padding = goal - base - len(length_text)

        changes: list[Change] = [
            Append(length_text, protected=True),
            Append(clock, protected=True),
        ]
        if padding:
            changes.append(Append("-" * padding))

        start = len(self.password)
        self._plan = _SpanPlan(
            tuple(changes),
            goal_length=goal,
            length_span=TrackedSpan(index=start, length=len(length_text)),
            time_span=TrackedSpan(index=start + len(length_text), length=len(clock)),
        )
        logger.info("solver.goal_length_planned length=%s padding=%s", goal, padding)
        return changes

    def _restore_goal_length(self, rule: Rule, goal: int, slack: int) -> list[Change]:
        difference = goal - (len(self.password) + slack)
        if difference > 0:
            return [Append("-" * difference)]
        if difference == 0:
            return []
        protected = self.password.protected
        padding = [
            index
            for index, grapheme in enumerate(self.password.graphemes())
            if grapheme == "-" and not protected[index]
        ]
        if len(padding) < -difference:
            raise self._fail(rule, f"password is {-difference} over its goal length")
        return [Remove(index) for index in padding[difference:]]


_unsolvable = [kind for kind in RULE_ORDER if not hasattr(Solver, f"_solve_{kind}")]
if _unsolvable:
    raise RuntimeError(f"Rules without a solve procedure: {_unsolvable}")
