"""Grapheme-aware scanners for digits, letters, element symbols and roman numerals."""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from password_game.core.password import split_graphemes

ROMAN_PATTERN = re.compile(r"M{0,4}(CM|CD|D?C{0,3})(XC|XL|L?X{0,3})(IX|IV|V?I{0,3})")
YOUTUBE_LONG_PATTERN = re.compile(r"youtube\.com/watch\?v=(.{11})")
YOUTUBE_SHORT_PATTERN = re.compile(r"youtu\.be/(.{11})")
DIGIT_RUN_PATTERN = re.compile(r"\d+")

_ROMAN_VALUES = {"I": 1, "V": 5, "X": 10, "L": 50, "C": 100, "D": 500, "M": 1000}
_ROMAN_SYMBOLS = (
    (1000, "M"),
    (900, "CM"),
    (500, "D"),
    (400, "CD"),
    (100, "C"),
    (90, "XC"),
    (50, "L"),
    (40, "XL"),
    (10, "X"),
    (9, "IX"),
    (5, "V"),
    (4, "IV"),
    (1, "I"),
)


@dataclass(frozen=True)
class RomanNumeral:
    value: int
    index: int
    length: int

    def indices(self) -> range:
        return range(self.index, self.index + self.length)


@dataclass(frozen=True)
class ElementMatch:
    symbol: str
    index: int


def _grapheme_starts(text: str) -> dict[int, int]:
    """Map code point offsets that begin a grapheme to that grapheme's index."""
    starts: dict[int, int] = {}
    offset = 0
    for index, grapheme in enumerate(split_graphemes(text)):
        starts[offset] = index
        offset += len(grapheme)
    starts[offset] = len(starts)
    return starts


def get_digits(text: str) -> list[tuple[int, int]]:
    """Single ASCII digit graphemes as ``(digit, grapheme_index)``."""
    return [
        (int(grapheme), index)
        for index, grapheme in enumerate(split_graphemes(text))
        if len(grapheme) == 1 and grapheme in "0123456789"
    ]


def get_letters(text: str) -> list[tuple[str, int]]:
    """Graphemes starting with an ASCII letter as ``(letter, grapheme_index)``."""
    letters: list[tuple[str, int]] = []
    for index, grapheme in enumerate(split_graphemes(text)):
        first = grapheme[0]
        if first.isascii() and first.isalpha():
            letters.append((first, index))
    return letters


def get_elements(text: str, symbols: Iterable[str]) -> list[ElementMatch]:
    """Element symbols found in ``text``, ordered by grapheme index.

    A two-letter symbol wins over a one-letter symbol starting at the same grapheme.
    """
    starts = _grapheme_starts(text)
    found: list[ElementMatch] = []
    for symbol in symbols:
        for match in re.finditer(re.escape(symbol), text):
            index = starts.get(match.start())
            if index is not None:
                found.append(ElementMatch(symbol=symbol, index=index))
    found.sort(key=lambda element: len(element.symbol), reverse=True)
    seen: set[int] = set()
    unique: list[ElementMatch] = []
    for element in found:
        if element.index in seen:
            continue
        seen.add(element.index)
        unique.append(element)
    unique.sort(key=lambda element: element.index)
    return unique


def roman_to_int(numeral: str) -> int:
    total = 0
    for position, symbol in enumerate(numeral):
        value = _ROMAN_VALUES[symbol]
        following = numeral[position + 1] if position + 1 < len(numeral) else ""
        if following and _ROMAN_VALUES[following] > value:
            total -= value
        else:
            total += value
    return total


def int_to_roman(value: int) -> str:
    if value <= 0:
        raise ValueError(f"Roman numerals start at 1, got {value}.")
    parts: list[str] = []
    for amount, symbol in _ROMAN_SYMBOLS:
        count, value = divmod(value, amount)
        parts.append(symbol * count)
    return "".join(parts)


def get_roman_numerals(text: str) -> list[RomanNumeral]:
    """Maximal roman numerals in ``text`` with their grapheme index and grapheme length."""
    starts = _grapheme_starts(text)
    numerals: list[RomanNumeral] = []
    for match in ROMAN_PATTERN.finditer(text):
        if not match.group(0):
            continue
        start = starts.get(match.start())
        end = starts.get(match.end())
        if start is None or end is None:
            continue
        numerals.append(
            RomanNumeral(value=roman_to_int(match.group(0)), index=start, length=end - start)
        )
    return numerals


def get_youtube_id(text: str) -> str | None:
    """First video id in ``text``; ``youtube.com`` links are preferred over ``youtu.be``."""
    for pattern in (YOUTUBE_LONG_PATTERN, YOUTUBE_SHORT_PATTERN):
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def get_digit_runs(text: str) -> list[int]:
    return [int(run) for run in DIGIT_RUN_PATTERN.findall(text)]


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def is_prime(value: int) -> bool:
    if value <= 1:
        return False
    for divisor in range(2, math.isqrt(value) + 1):
        if value % divisor == 0:
            return False
    return True


def format_clock(now: datetime) -> str:
    """Render ``now`` as ``H:MM`` on a 12-hour clock without a leading zero."""
    hour = now.hour % 12 or 12
    return f"{hour}:{now.minute:02d}"
