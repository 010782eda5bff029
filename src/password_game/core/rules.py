"""The fixed catalogue of 36 password rules and their validation predicates."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Final, Literal, get_args

from password_game.core.facts import FactServices
from password_game.core.password import Password
from password_game.core.reference_data import (
    AFFIRMATIONS,
    BUG,
    CHICKEN,
    DEFAULT_CAPTCHAS,
    DEFAULT_CHESS_PUZZLES,
    DEFAULT_GEO_GAMES,
    EGG,
    FIRE,
    MONTHS,
    SPONSORS,
    VOWELS,
    WEIGHTLIFTER,
)
from password_game.core.text_scan import (
    format_clock,
    get_digit_runs,
    get_digits,
    get_elements,
    get_roman_numerals,
    get_youtube_id,
    is_leap_year,
    is_prime,
)
from password_game.domain.models import (
    MOON_PHASE_EMOJIS,
    ChessPuzzle,
    Color,
    Coords,
    Formatting,
    GameState,
    GeoGame,
)

logger = logging.getLogger(__name__)

RuleKind = Literal[
    "min_length",
    "number",
    "uppercase",
    "special",
    "digits",
    "month",
    "roman",
    "sponsors",
    "roman_multiply",
    "captcha",
    "wordle",
    "periodic_table",
    "moon_phase",
    "geo",
    "leap_year",
    "chess",
    "egg",
    "atomic_number",
    "bold_vowels",
    "fire",
    "strength",
    "affirmation",
    "hatch",
    "youtube",
    "sacrifice",
    "twice_italic",
    "wingdings",
    "hex",
    "times_new_roman",
    "digit_font_size",
    "letter_font_size",
    "include_length",
    "prime_length",
    "skip",
    "time",
    "final",
]
RULE_ORDER: Final[tuple[RuleKind, ...]] = get_args(RuleKind)

RULE_DESCRIPTIONS: Final[dict[RuleKind, str]] = {
    "min_length": "Your password must be at least 5 characters.",
    "number": "Your password must include a number.",
    "uppercase": "Your password must include an uppercase letter.",
    "special": "Your password must include a special character.",
    "digits": "The digits in your password must add up to 25.",
    "month": "Your password must include a month of the year.",
    "roman": "Your password must include a roman numeral.",
    "sponsors": "Your password must include one of our sponsors.",
    "roman_multiply": "The roman numerals in your password should multiply to 35.",
    "captcha": "Your password must include this CAPTCHA.",
    "wordle": "Your password must include today's Wordle answer.",
    "periodic_table": "Your password must include a two letter symbol from the periodic table.",
    "moon_phase": "Your password must include the current phase of the moon as an emoji.",
    "geo": "Your password must include the name of this country.",
    "leap_year": "Your password must include a leap year.",
    "chess": "Your password must include the best move in algebraic chess notation.",
    "egg": "This is my chicken Paul. Please put him in your password and keep him safe.",
    "atomic_number": "The elements in your password must have atomic numbers that add up to 200.",
    "bold_vowels": "All the vowels in your password must be bolded.",
    "fire": "Oh no! Your password is on fire. Quick, put it out!",
    "strength": "Your password is not strong enough.",
    "affirmation": "Your password must contain one of the following affirmations.",
    "hatch": "Paul has hatched! Please don't forget to feed him.",
    "youtube": "Your password must include the URL of a YouTube video of this exact length.",
    "sacrifice": "A sacrifice must be made. Pick 2 letters that you will no longer be able to use.",
    "twice_italic": "Your password must contain twice as many italic characters as bold.",
    "wingdings": "At least 30% of your password must be in the Wingdings font.",
    "hex": "Your password must include this color in hex.",
    "times_new_roman": "All roman numerals must be in Times New Roman.",
    "digit_font_size": "The font size of every digit must be equal to its square.",
    "letter_font_size": "Every instance of the same letter must have a different font size.",
    "include_length": "Your password must include the length of your password.",
    "prime_length": "The length of your password must be a prime number.",
    "skip": "Uhhh let's skip this one.",
    "time": "Your password must include the current time.",
    "final": "Is this your final password?",
}


@dataclass(frozen=True)
class Rule:
    """One numbered rule, carrying the instance data of randomised rules."""

    kind: RuleKind
    captcha: str = ""
    coords: Coords | None = None
    fen: str = ""
    color: Color | None = None
    video_seconds: int = 0

    @property
    def number(self) -> int:
        return RULE_ORDER.index(self.kind) + 1

    @property
    def description(self) -> str:
        return RULE_DESCRIPTIONS[self.kind]


@dataclass(frozen=True)
class _Check:
    rule: Rule
    text: str
    graphemes: list[str]
    formatting: tuple[Formatting, ...]
    state: GameState
    facts: FactServices
    now: datetime

    @property
    def lowered(self) -> str:
        return self.text.lower()


def _digit_sum(check: _Check) -> bool:
    return sum(digit for digit, _ in get_digits(check.text)) == 25


def _roman_product(check: _Check) -> bool:
    numerals = get_roman_numerals(check.text)
    if not numerals:
        return False
    product = 1
    for numeral in numerals:
        product *= numeral.value
    return product == 35


def _periodic_table(check: _Check) -> bool:
    elements = get_elements(check.text, check.facts.elements.symbols)
    return any(len(element.symbol) == 2 for element in elements)


def _moon_phase(check: _Check) -> bool:
    accepted = MOON_PHASE_EMOJIS[check.facts.moon.phase_at(check.now)]
    return any(grapheme in accepted for grapheme in check.graphemes)


def _geo(check: _Check) -> bool:
    if check.rule.coords is None:
        raise ValueError("Geo rule requires coordinates.")
    country = check.facts.countries.country_at(check.rule.coords).lower()
    return country in check.lowered


def _chess(check: _Check) -> bool:
    if not check.rule.fen:
        raise ValueError("Chess rule requires a FEN position.")
    return check.facts.chess.best_move(check.rule.fen) in check.text


def _egg(check: _Check) -> bool:
    if check.state.paul_hatched:
        return CHICKEN in check.graphemes
    if check.state.egg_placed:
        return EGG in check.graphemes
    return True


def _atomic_number(check: _Check) -> bool:
    table = check.facts.elements
    elements = get_elements(check.text, table.symbols)
    return sum(table.atomic_number(element.symbol) for element in elements) == 200


def _bold_vowels(check: _Check) -> bool:
    return all(
        check.formatting[index].bold
        for index, grapheme in enumerate(check.graphemes)
        if grapheme in VOWELS
    )


def _affirmation(check: _Check) -> bool:
    lowered = check.lowered
    return any(
        affirmation in lowered or affirmation.replace(" ", "") in lowered
        for affirmation in AFFIRMATIONS
    )


def _hatch(check: _Check) -> bool:
    if not check.state.paul_hatched:
        return True
    return check.state.paul_eating or BUG in check.graphemes


def _youtube(check: _Check) -> bool:
    video_id = get_youtube_id(check.text)
    if video_id is None:
        return False
    duration = check.facts.video_durations.duration_seconds(video_id)
    return abs(duration - check.rule.video_seconds) <= 1


def _sacrifice(check: _Check) -> bool:
    letters = check.state.sacrificed_letters
    if len(letters) != 2:
        return False
    lowered = check.lowered
    return not any(letter in lowered for letter in letters)


def _twice_italic(check: _Check) -> bool:
    italic = sum(1 for record in check.formatting if record.italic)
    bold = sum(1 for record in check.formatting if record.bold)
    return italic >= 2 * bold


def _wingdings(check: _Check) -> bool:
    if not check.formatting:
        return False
    wingdings = sum(1 for record in check.formatting if record.font_family == "wingdings")
    return wingdings / len(check.formatting) >= 0.3


def _hex(check: _Check) -> bool:
    if check.rule.color is None:
        raise ValueError("Hex rule requires a color.")
    return check.rule.color.to_hex_string()[1:] in check.lowered


def _times_new_roman(check: _Check) -> bool:
    return all(
        check.formatting[index].font_family == "times_new_roman"
        for numeral in get_roman_numerals(check.text)
        for index in numeral.indices()
    )


def _digit_font_size(check: _Check) -> bool:
    return all(
        check.formatting[index].font_size == digit * digit
        for digit, index in get_digits(check.text)
    )


def _letter_font_size(check: _Check) -> bool:
    seen: dict[str, set[int]] = {}
    for index, grapheme in enumerate(check.graphemes):
        if len(grapheme) != 1 or not (grapheme.isascii() and grapheme.isalpha()):
            continue
        sizes = seen.setdefault(grapheme.lower(), set())
        size = check.formatting[index].font_size
        if size in sizes:
            return False
        sizes.add(size)
    return True


_VALIDATORS: Final[dict[RuleKind, Callable[[_Check], bool]]] = {
    "min_length": lambda check: len(check.graphemes) >= 5,
    "number": lambda check: any(char in "0123456789" for char in check.text),
    "uppercase": lambda check: any("A" <= char <= "Z" for char in check.text),
    "special": lambda check: any(
        not (char.isascii() and char.isalnum()) for char in check.text
    ),
    "digits": _digit_sum,
    "month": lambda check: any(month in check.lowered for month in MONTHS),
    "roman": lambda check: bool(get_roman_numerals(check.text)),
    "sponsors": lambda check: any(sponsor in check.lowered for sponsor in SPONSORS),
    "roman_multiply": _roman_product,
    "captcha": lambda check: bool(check.rule.captcha) and check.rule.captcha in check.text,
    "wordle": lambda check: (
        check.facts.wordle.answer_for(check.now.date()).lower() in check.lowered
    ),
    "periodic_table": _periodic_table,
    "moon_phase": _moon_phase,
    "geo": _geo,
    "leap_year": lambda check: any(is_leap_year(year) for year in get_digit_runs(check.text)),
    "chess": _chess,
    "egg": _egg,
    "atomic_number": _atomic_number,
    "bold_vowels": _bold_vowels,
    "fire": lambda check: check.state.fire_started and FIRE not in check.graphemes,
    "strength": lambda check: check.graphemes.count(WEIGHTLIFTER) >= 3,
    "affirmation": _affirmation,
    "hatch": _hatch,
    "youtube": _youtube,
    "sacrifice": _sacrifice,
    "twice_italic": _twice_italic,
    "wingdings": _wingdings,
    "hex": _hex,
    "times_new_roman": _times_new_roman,
    "digit_font_size": _digit_font_size,
    "letter_font_size": _letter_font_size,
    "include_length": lambda check: str(len(check.graphemes)) in check.text,
    "prime_length": lambda check: is_prime(len(check.graphemes)),
    "skip": lambda check: True,
    "time": lambda check: format_clock(check.now) in check.text,
    "final": lambda check: True,
}

_missing = set(RULE_ORDER) - set(_VALIDATORS)
if _missing:
    raise RuntimeError(f"Rules without a validator: {sorted(_missing)}")


def validate_rule(
    rule: Rule,
    password: Password,
    state: GameState,
    *,
    facts: FactServices,
    now: datetime,
) -> bool:
    """Evaluate ``rule`` against the password. Never cached."""
    check = _Check(
        rule=rule,
        text=password.text,
        graphemes=password.graphemes(),
        formatting=password.formatting,
        state=state,
        facts=facts,
        now=now,
    )
    return _VALIDATORS[rule.kind](check)


class RuleCatalogue:
    """The ordered rule set of one playthrough."""

    def __init__(self, rules: Sequence[Rule], facts: FactServices) -> None:
        kinds = tuple(rule.kind for rule in rules)
        if kinds != RULE_ORDER:
            raise ValueError("Catalogue must hold exactly one rule of each kind in rule order.")
        self.rules = tuple(rules)
        self.facts = facts

    def rule(self, kind: RuleKind) -> Rule:
        return self.rules[RULE_ORDER.index(kind)]

    def validate(
        self,
        rule: Rule,
        password: Password,
        state: GameState,
        now: datetime | None = None,
    ) -> bool:
        return validate_rule(
            rule, password, state, facts=self.facts, now=now or datetime.now()
        )

    def violated_rules(
        self,
        password: Password,
        state: GameState,
        now: datetime | None = None,
    ) -> list[Rule]:
        """Reached rules that currently fail, highest number first."""
        moment = now or datetime.now()
        violated = [
            rule
            for rule in self.rules
            if rule.number <= state.highest_rule
            and not self.validate(rule, password, state, moment)
        ]
        violated.reverse()
        return violated


def new_rule_catalogue(
    rng: random.Random,
    facts: FactServices,
    *,
    captchas: Sequence[str] = DEFAULT_CAPTCHAS,
    geo_games: Sequence[GeoGame] = DEFAULT_GEO_GAMES,
    chess_puzzles: Sequence[ChessPuzzle] = DEFAULT_CHESS_PUZZLES,
) -> RuleCatalogue:
    """Build a catalogue whose randomised rules draw their data from ``rng``."""
    rules: list[Rule] = []
    for kind in RULE_ORDER:
        if kind == "captcha":
            rules.append(Rule(kind, captcha=rng.choice(captchas)))
        elif kind == "geo":
            rules.append(Rule(kind, coords=rng.choice(geo_games).coords))
        elif kind == "chess":
            rules.append(Rule(kind, fen=rng.choice(chess_puzzles).fen))
        elif kind == "hex":
            color = Color(rng.randrange(256), rng.randrange(256), rng.randrange(256))
            rules.append(Rule(kind, color=color))
        elif kind == "youtube":
            rules.append(Rule(kind, video_seconds=int(2000 * rng.random()) + 180))
        else:
            rules.append(Rule(kind))
    logger.debug(
        "rules.catalogue captcha=%s fen=%s video_seconds=%s",
        rules[RULE_ORDER.index("captcha")].captcha,
        rules[RULE_ORDER.index("chess")].fen,
        rules[RULE_ORDER.index("youtube")].video_seconds,
    )
    return RuleCatalogue(rules, facts)
