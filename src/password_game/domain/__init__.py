"""Domain models and ports for the password game."""

from password_game.domain.models import (
    DEFAULT_FONT_SIZE,
    FONT_FAMILIES,
    FONT_SIZE_ORDER,
    MOON_PHASE_EMOJIS,
    ChessPuzzle,
    Color,
    Coords,
    FontFamily,
    FontSize,
    FormatChange,
    Formatting,
    GameState,
    GeoGame,
    MoonPhase,
    font_size_for_square,
)
from password_game.domain.ports import (
    ChessEngine,
    CountryLocator,
    MoonPhaseSource,
    VideoCatalog,
    VideoDurationSource,
    WordleSource,
)

__all__ = [
    "DEFAULT_FONT_SIZE",
    "FONT_FAMILIES",
    "FONT_SIZE_ORDER",
    "MOON_PHASE_EMOJIS",
    "ChessEngine",
    "ChessPuzzle",
    "Color",
    "Coords",
    "CountryLocator",
    "FontFamily",
    "FontSize",
    "FormatChange",
    "Formatting",
    "GameState",
    "GeoGame",
    "MoonPhase",
    "MoonPhaseSource",
    "VideoCatalog",
    "VideoDurationSource",
    "WordleSource",
    "font_size_for_square",
]
