"""Core password game domain models."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Final, Literal

FontFamily = Literal["monospace", "comic_sans", "wingdings", "times_new_roman"]
FONT_FAMILIES: Final[tuple[FontFamily, ...]] = (
    "monospace",
    "comic_sans",
    "wingdings",
    "times_new_roman",
)

FontSize = Literal[0, 1, 4, 9, 12, 16, 25, 28, 32, 36, 42, 49, 64, 81]
# Selection order offered by the game, default size first.
FONT_SIZE_ORDER: Final[tuple[FontSize, ...]] = (
    28,
    32,
    36,
    42,
    49,
    64,
    81,
    0,
    1,
    4,
    9,
    12,
    16,
    25,
)
DEFAULT_FONT_SIZE: Final[FontSize] = 28

FormatChangeKind = Literal["bold_on", "italic_on", "font_size", "font_family"]


def font_size_for_square(value: int) -> FontSize:
    """Return the font size whose pixel value equals ``value``."""
    for size in FONT_SIZE_ORDER:
        if size == value:
            return size
    raise ValueError(f"No font size of {value}px.")


@dataclass(frozen=True)
class FormatChange:
    """One modification to a grapheme's formatting."""

    kind: FormatChangeKind
    font_size: FontSize | None = None
    font_family: FontFamily | None = None

    @classmethod
    def bold_on(cls) -> FormatChange:
        return cls(kind="bold_on")

    @classmethod
    def italic_on(cls) -> FormatChange:
        return cls(kind="italic_on")

    @classmethod
    def size(cls, font_size: FontSize) -> FormatChange:
        return cls(kind="font_size", font_size=font_size)

    @classmethod
    def family(cls, font_family: FontFamily) -> FormatChange:
        return cls(kind="font_family", font_family=font_family)


@dataclass(frozen=True)
class Formatting:
    """Formatting properties of a single grapheme cluster."""

    bold: bool = False
    italic: bool = False
    font_size: FontSize = DEFAULT_FONT_SIZE
    font_family: FontFamily = "monospace"

    def changed(self, change: FormatChange) -> Formatting:
        if change.kind == "bold_on":
            return replace(self, bold=True)
        if change.kind == "italic_on":
            return replace(self, italic=True)
        if change.kind == "font_size":
            if change.font_size is None:
                raise ValueError("font_size change requires a size.")
            return replace(self, font_size=change.font_size)
        if change.font_family is None:
            raise ValueError("font_family change requires a family.")
        return replace(self, font_family=change.font_family)

    def short_code(self) -> str:
        family_codes = {
            "monospace": "M",
            "comic_sans": "CS",
            "wingdings": "W",
            "times_new_roman": "TNR",
        }
        return "-".join(
            (
                "B" if self.bold else "b",
                "I" if self.italic else "i",
                f"{self.font_size}px",
                family_codes[self.font_family],
            )
        )


@dataclass(frozen=True, order=True)
class Color:
    """RGB colour used by the hex rule."""

    r: int
    g: int
    b: int

    def to_hex_string(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


@dataclass(frozen=True, order=True)
class Coords:
    """Latitude/longitude pair used by the geo rule."""

    lat: float
    long: float


@dataclass(frozen=True)
class GeoGame:
    """A geo-guessing location with its known country."""

    coords: Coords
    country: str


@dataclass(frozen=True)
class ChessPuzzle:
    """A chess position in FEN and its best move in algebraic notation."""

    fen: str
    solution: str


@dataclass
class GameState:
    """Cross-rule facts the password alone cannot encode."""

    highest_rule: int = 0
    fire_started: bool = False
    egg_placed: bool = False
    paul_hatched: bool = False
    paul_eating: bool = False
    sacrificed_letters: list[str] = field(default_factory=list)


MoonPhase = Literal[
    "new",
    "waxing_crescent",
    "first_quarter",
    "waxing_gibbous",
    "full",
    "waning_gibbous",
    "last_quarter",
    "waning_crescent",
]
MOON_PHASE_EMOJIS: Final[dict[MoonPhase, tuple[str, ...]]] = {
    "new": ("🌑", "🌚"),
    "waxing_crescent": ("🌒", "🌘"),
    "first_quarter": ("🌓", "🌗", "🌛", "🌜"),
    "waxing_gibbous": ("🌔", "🌖"),
    "full": ("🌕", "🌝"),
    "waning_gibbous": ("🌔", "🌖"),
    "last_quarter": ("🌓", "🌗", "🌛", "🌜"),
    "waning_crescent": ("🌒", "🌘"),
}
