from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import pytest

from password_game.core.changes import Append, Format, Insert, Prepend, Remove
from password_game.core.errors import InvariantBreachError, UnsatisfiableRuleError
from password_game.core.facts import FactServices
from password_game.core.mutable import MutablePassword
from password_game.core.reference_data import (
    CHICKEN,
    DEFAULT_CHESS_PUZZLES,
    DEFAULT_GEO_GAMES,
    EGG,
    FIRE,
    WEIGHTLIFTER,
)
from password_game.core.rules import Rule, RuleKind, validate_rule
from password_game.core.solver import Solver, TrackedSpan, relocate_span
from password_game.core.text_scan import get_roman_numerals, is_prime
from password_game.domain.models import Color, FormatChange, GameState


def _solver(text: str, facts: FactServices, now: datetime) -> Solver:
    return Solver(MutablePassword.from_text(text), facts=facts, clock=lambda: now)


def _valid(solver: Solver, rule: Rule, state: GameState, now: datetime) -> bool:
    return validate_rule(rule, solver.password.password, state, facts=solver.facts, now=now)


@pytest.mark.parametrize(
    ("kind", "text"),
    [
        ("min_length", f"{WEIGHTLIFTER}1"),
        ("number", f"On{WEIGHTLIFTER}e!"),
        ("uppercase", f"hello{WEIGHTLIFTER}"),
        ("special", "Hello23"),
        ("digits", f"1{WEIGHTLIFTER}"),
        ("digits", f"55{WEIGHTLIFTER}5546"),
        ("month", f"{WEIGHTLIFTER}Dec@"),
        ("roman", f"eci$ {WEIGHTLIFTER}"),
        ("sponsors", f"dew123 test {WEIGHTLIFTER}"),
        ("roman_multiply", "VIIXDIaIaI"),
        ("wordle", "guess"),
        ("periodic_table", "hello"),
        ("moon_phase", "dark"),
        ("leap_year", "year 1999!"),
        ("atomic_number", "FooBar"),
        ("bold_vowels", "foobar"),
        ("strength", "nostrength"),
        ("affirmation", "i am"),
        ("wingdings", "0123456789"),
        ("times_new_roman", "mmhellofooX-VIII"),
        ("digit_font_size", "0123456789abc"),
        ("letter_font_size", "aAaBbbCcccc"),
        ("time", "foo"),
    ],
)
def test_solve_and_commit_satisfies_rule(
    kind: RuleKind, text: str, facts: FactServices, now: datetime
) -> None:
    solver = _solver(text, facts, now)
    rule = Rule(kind)
    state = GameState()
    assert not _valid(solver, rule, state, now)
    solver.solve_and_apply(rule, state)
    assert _valid(solver, rule, state, now)


@pytest.mark.parametrize(
    "rule",
    [
        Rule("captcha", captcha="pcmcf"),
        Rule("hex", color=Color(127, 0, 54)),
    ],
)
def test_solve_randomised_rules(rule: Rule, facts: FactServices, now: datetime) -> None:
    solver = _solver("#123", facts, now)
    solver.solve_and_apply(rule, GameState())
    assert _valid(solver, rule, GameState(), now)


def test_geo_and_chess_use_fact_services(facts: FactServices, now: datetime) -> None:
    solver = _solver("start", facts, now)
    geo = Rule("geo", coords=DEFAULT_GEO_GAMES[3].coords)
    chess = Rule("chess", fen=DEFAULT_CHESS_PUZZLES[0].fen)
    solver.solve_and_apply(geo, GameState())
    solver.solve_and_apply(chess, GameState())
    assert solver.password.text == "startbrazilQd8+"
    assert solver.password.document.protected_bitstring() == "00000" + "1" * 10


def test_digit_sum_already_met_is_left_alone(facts: FactServices, now: datetime) -> None:
    solver = _solver(f"9{WEIGHTLIFTER}97", facts, now)
    assert solver.solve_and_apply(Rule("digits"), GameState()) == []
    assert len(solver.password) == 4


def test_digit_sum_reduces_partially_around_protected_digits(
    facts: FactServices, now: datetime
) -> None:
    solver = _solver("155555", facts, now)
    solver.password.protect(0)
    solver.solve_and_apply(Rule("digits"), GameState())
    assert solver.password.text == "145555"
    assert _valid(solver, Rule("digits"), GameState(), now)


def test_digit_sum_fails_when_protected_digits_exceed_target(
    facts: FactServices, now: datetime
) -> None:
    solver = _solver("99999", facts, now)
    for index in range(5):
        solver.password.protect(index)
    with pytest.raises(UnsatisfiableRuleError) as excinfo:
        solver.solve(Rule("digits"), GameState())
    assert excinfo.value.rule_kind == "digits"


def test_roman_multiply_keeps_only_factor_numerals(facts: FactServices, now: datetime) -> None:
    solver = _solver("VIIXDIaIaI", facts, now)
    solver.solve_and_apply(Rule("roman_multiply"), GameState())
    values = {numeral.value for numeral in get_roman_numerals(solver.password.text)}
    assert values <= {1, 5, 7}


def test_atomic_number_removes_unprotected_elements(facts: FactServices, now: datetime) -> None:
    solver = _solver("FooBarHeIOU", facts, now)
    solver.password.protect(0)
    solver.solve_and_apply(Rule("atomic_number"), GameState())
    assert solver.password.text.startswith("F")
    assert "U" not in solver.password.text
    assert _valid(solver, Rule("atomic_number"), GameState(), now)


def test_atomic_number_never_adds_roman_numerals(facts: FactServices, now: datetime) -> None:
    solver = _solver("FmAg", facts, now)
    solver.solve_and_apply(Rule("atomic_number"), GameState())
    assert "I" not in solver.password.text
    assert _valid(solver, Rule("atomic_number"), GameState(), now)


def test_fire_is_removed(facts: FactServices, now: datetime) -> None:
    solver = _solver(f"f{FIRE}{FIRE}ooba{FIRE}r", facts, now)
    state = GameState(fire_started=True)
    solver.solve_and_apply(Rule("fire"), state)
    assert solver.password.text == "foobar"
    assert _valid(solver, Rule("fire"), state, now)


def test_fire_on_protected_grapheme_is_unsatisfiable(facts: FactServices, now: datetime) -> None:
    solver = _solver(f"a{FIRE}", facts, now)
    solver.password.protect(1)
    with pytest.raises(UnsatisfiableRuleError):
        solver.solve(Rule("fire"), GameState(fire_started=True))


def test_egg_is_prepended_and_protected(facts: FactServices, now: datetime) -> None:
    solver = _solver("noegg", facts, now)
    state = GameState(egg_placed=True)
    solver.solve_and_apply(Rule("egg"), state)
    assert solver.password.text == f"{EGG}noegg"
    assert solver.password.protected[0]
    assert _valid(solver, Rule("egg"), state, now)


def test_hatched_paul_gets_fed(facts: FactServices, now: datetime) -> None:
    solver = _solver(f"paul: {CHICKEN}", facts, now)
    state = GameState(egg_placed=True, paul_hatched=True)
    assert not _valid(solver, Rule("hatch"), state, now)
    solver.solve_and_apply(Rule("hatch"), state)
    assert _valid(solver, Rule("hatch"), state, now)


def test_youtube_appends_known_video(
    make_facts: Callable[..., FactServices], now: datetime
) -> None:
    facts = make_facts(videos={"ghilmnoprst": 13 * 60 + 3})
    solver = _solver("foo", facts, now)
    rule = Rule("youtube", video_seconds=13 * 60 + 3)
    solver.solve_and_apply(rule, GameState())
    assert solver.password.text == "fooyoutu.be/ghilmnoprst"
    assert _valid(solver, rule, GameState(), now)


def test_youtube_without_video_is_unsatisfiable(facts: FactServices, now: datetime) -> None:
    solver = _solver("foo", facts, now)
    with pytest.raises(UnsatisfiableRuleError):
        solver.solve(Rule("youtube", video_seconds=999), GameState())


def test_sacrifice_of_full_alphabet(facts: FactServices, now: datetime) -> None:
    solver = _solver("abcdefghijklmnopqrstuvwxyz", facts, now)
    state = GameState()
    solver.solve_and_apply(Rule("sacrifice"), state)
    assert solver.sacrificed_letters == ["g", "h"]
    state.sacrificed_letters = list(solver.sacrificed_letters)
    assert _valid(solver, Rule("sacrifice"), state, now)


def test_sacrifice_prefers_absent_letters(facts: FactServices, now: datetime) -> None:
    solver = _solver("ghij", facts, now)
    assert solver.solve(Rule("sacrifice"), GameState()) == []
    assert solver.sacrificed_letters == ["k", "l"]


def test_sacrifice_fails_on_protected_letter(facts: FactServices, now: datetime) -> None:
    solver = _solver("ab", facts, now)
    solver.sacrificed_letters = ["a", "b"]
    solver.password.protect(0)
    with pytest.raises(UnsatisfiableRuleError):
        solver.solve(Rule("sacrifice"), GameState(sacrificed_letters=["a", "b"]))


def test_skip_and_final_need_nothing(facts: FactServices, now: datetime) -> None:
    solver = _solver("foo", facts, now)
    assert solver.solve(Rule("skip"), GameState()) == []
    assert solver.solve(Rule("final"), GameState()) == []


def test_min_length_already_met_is_a_no_op(facts: FactServices, now: datetime) -> None:
    solver = _solver("hello", facts, now)
    assert solver.solve_and_apply(Rule("min_length"), GameState()) == []
    assert solver.password.text == "hello"


def test_digit_font_size_matches_squares(facts: FactServices, now: datetime) -> None:
    solver = _solver("023", facts, now)
    solver.solve_and_apply(Rule("digit_font_size"), GameState())
    assert [record.font_size for record in solver.password.formatting] == [0, 4, 9]


def test_twice_italic_after_bold(facts: FactServices, now: datetime) -> None:
    solver = _solver("abcdef", facts, now)
    solver.apply([Format(0, FormatChange.bold_on()), Format(1, FormatChange.bold_on())])
    assert not _valid(solver, Rule("twice_italic"), GameState(), now)
    solver.solve_and_apply(Rule("twice_italic"), GameState())
    assert sum(record.italic for record in solver.password.formatting) == 4


def test_wingdings_reserves_room_for_slack(facts: FactServices, now: datetime) -> None:
    solver = _solver("abcdefghij", facts, now)
    changes = solver.solve(Rule("wingdings"), GameState(), slack=5)
    assert len(changes) == 5


def test_wingdings_skips_roman_numerals(facts: FactServices, now: datetime) -> None:
    solver = _solver("XXXVab", facts, now)
    changes = solver.solve(Rule("wingdings"), GameState())
    wingdings = FormatChange.family("wingdings")
    assert changes == [Format(4, wingdings), Format(5, wingdings)]


def test_starting_changes_cover_early_rules(facts: FactServices, now: datetime) -> None:
    solver = Solver(facts=facts, clock=lambda: now)
    solver.apply(solver.starting_changes())
    assert solver.password.text == f"{EGG}0mayXXXVshell🌕He997"
    state = GameState()
    for kind in ("min_length", "number", "uppercase", "special", "digits", "month", "roman"):
        assert _valid(solver, Rule(kind), state, now), kind
    for kind in ("sponsors", "roman_multiply", "periodic_table", "moon_phase", "leap_year"):
        assert _valid(solver, Rule(kind), state, now), kind


def test_length_plan_hits_prime_goal_with_slack(facts: FactServices, now: datetime) -> None:
    solver = _solver("x" * 20, facts, now)
    solver.solve_and_apply(Rule("include_length"), GameState(), slack=5)
    assert solver.goal_length == 101
    assert len(solver.password) + 5 == 101
    assert solver.length_span == TrackedSpan(index=20, length=3)
    assert solver.time_span == TrackedSpan(index=23, length=4)
    assert solver.password.text[20:27] == "1014:08"


def test_length_plan_satisfies_both_length_rules(facts: FactServices, now: datetime) -> None:
    solver = _solver("x" * 20, facts, now)
    solver.solve_and_apply(Rule("prime_length"), GameState())
    assert is_prime(len(solver.password))
    assert _valid(solver, Rule("include_length"), GameState(), now)
    assert _valid(solver, Rule("time"), GameState(), now)
    # Once planned, a passing length rule produces no further changes.
    assert solver.solve(Rule("include_length"), GameState()) == []


def test_goal_length_is_restored_after_growth(facts: FactServices, now: datetime) -> None:
    solver = _solver("x" * 20, facts, now)
    solver.solve_and_apply(Rule("include_length"), GameState())
    solver.apply([Append("yy")])
    changes = solver.solve(Rule("prime_length"), GameState())
    assert all(isinstance(change, Remove) for change in changes)
    solver.apply(changes)
    assert len(solver.password) == 101


def test_time_update_rewrites_tracked_clock(facts: FactServices) -> None:
    moments = [datetime(2023, 7, 12, 4, 8)]
    solver = Solver(MutablePassword.from_text("x" * 20), facts=facts, clock=lambda: moments[0])
    solver.solve_and_apply(Rule("include_length"), GameState())
    solver.apply([Prepend("ab")])
    assert solver.time_span == TrackedSpan(index=25, length=4)

    moments[0] = datetime(2023, 7, 12, 10, 15)
    changes = solver.solve(Rule("time"), GameState())
    assert any(isinstance(change, Insert) for change in changes)
    solver.apply(changes)
    assert solver.time_span == TrackedSpan(index=25, length=5)
    assert solver.password.text[25:30] == "10:15"
    assert solver.password.text[22:25] == "101"


def test_relocate_span() -> None:
    span = TrackedSpan(index=5, length=3)
    assert relocate_span(span, [Prepend("ab")]) == TrackedSpan(index=7, length=3)
    assert relocate_span(span, [Insert(5, "z")]) == TrackedSpan(index=6, length=3)
    assert relocate_span(span, [Insert(6, "z")]) == span
    assert relocate_span(span, [Remove(8), Remove(2), Remove(1)]) == TrackedSpan(index=3, length=3)
    assert relocate_span(span, [Append("tail")]) == span


def test_failed_apply_leaves_queue_empty(facts: FactServices, now: datetime) -> None:
    solver = _solver("abc", facts, now)
    with pytest.raises(InvariantBreachError):
        solver.apply([Append("d"), Insert(10, "z")])
    assert solver.password.pending == ()
    assert solver.password.text == "abc"


def test_length_plan_waits_for_its_batch_to_commit(facts: FactServices, now: datetime) -> None:
    solver = _solver("x" * 20, facts, now)
    solver.solve(Rule("include_length"), GameState())
    assert solver.goal_length is None
    assert solver.length_span is None and solver.time_span is None

    solver.apply([Append("y")])
    assert solver.goal_length is None

    changes = solver.solve(Rule("include_length"), GameState())
    solver.apply(changes)
    assert solver.goal_length == 101
    assert solver.length_span == TrackedSpan(index=21, length=3)
    assert solver.time_span == TrackedSpan(index=24, length=4)


def test_failed_batch_drops_planned_spans(facts: FactServices, now: datetime) -> None:
    solver = _solver("x" * 20, facts, now)
    changes = solver.solve(Rule("time"), GameState())
    with pytest.raises(InvariantBreachError):
        solver.apply([*changes, Insert(99, "z")])
    assert solver.time_span is None
    assert solver.password.text == "x" * 20

    solver.apply(changes)
    assert solver.time_span is None
    assert solver.solve(Rule("time"), GameState()) == []
