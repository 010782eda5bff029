"""Injected lookup services for facts rules and the solver cannot compute themselves."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property

from password_game.core.reference_data import ELEMENT_SYMBOLS
from password_game.core.text_scan import get_roman_numerals
from password_game.domain.ports import (
    ChessEngine,
    CountryLocator,
    MoonPhaseSource,
    VideoCatalog,
    VideoDurationSource,
    WordleSource,
)


@dataclass(frozen=True)
class ElementTable:
    """Side-effect-free periodic table lookup. Atomic numbers follow symbol order."""

    symbols: tuple[str, ...] = ELEMENT_SYMBOLS

    @cached_property
    def atomic_numbers(self) -> dict[str, int]:
        return {symbol: number for number, symbol in enumerate(self.symbols, start=1)}

    def atomic_number(self, symbol: str) -> int:
        return self.atomic_numbers[symbol]

    @cached_property
    def non_roman(self) -> tuple[str, ...]:
        """Symbols that are not themselves roman numerals, in atomic-number order."""
        return tuple(symbol for symbol in self.symbols if not get_roman_numerals(symbol))


@dataclass(frozen=True)
class FactServices:
    """Bundle of fact resolvers passed to the rule catalogue and the solver."""

    wordle: WordleSource
    moon: MoonPhaseSource
    countries: CountryLocator
    chess: ChessEngine
    video_durations: VideoDurationSource
    video_catalog: VideoCatalog
    elements: ElementTable = field(default_factory=ElementTable)
