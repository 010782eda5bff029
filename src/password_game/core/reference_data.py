"""Static tables the rules and solver draw from."""

from __future__ import annotations

from typing import Final

from password_game.domain.models import ChessPuzzle, Coords, GeoGame

MONTHS: Final[tuple[str, ...]] = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)
SPONSORS: Final[tuple[str, ...]] = ("pepsi", "starbucks", "shell")
AFFIRMATIONS: Final[tuple[str, ...]] = ("i am loved", "i am worthy", "i am enough")
VOWELS: Final[frozenset[str]] = frozenset("aeiouyAEIOUY")

EGG: Final = "🥚"
CHICKEN: Final = "🐔"
FIRE: Final = "🔥"
BUG: Final = "🐛"
TOMBSTONE: Final = "🪦"
WEIGHTLIFTER: Final = "🏋️‍♂️"
# Paul is overfed past this many bugs.
MAX_BUGS: Final = 8

# Symbols in atomic-number order, hydrogen first.
ELEMENT_SYMBOLS: Final[tuple[str, ...]] = (
    "H", "He", "Li", "Be", "B", "C", "N", "O", "F", "Ne",
    "Na", "Mg", "Al", "Si", "P", "S", "Cl", "Ar", "K", "Ca",
    "Sc", "Ti", "V", "Cr", "Mn", "Fe", "Co", "Ni", "Cu", "Zn",
    "Ga", "Ge", "As", "Se", "Br", "Kr", "Rb", "Sr", "Y", "Zr",
    "Nb", "Mo", "Tc", "Ru", "Rh", "Pd", "Ag", "Cd", "In", "Sn",
    "Sb", "Te", "I", "Xe", "Cs", "Ba", "La", "Ce", "Pr", "Nd",
    "Pm", "Sm", "Eu", "Gd", "Tb", "Dy", "Ho", "Er", "Tm", "Yb",
    "Lu", "Hf", "Ta", "W", "Re", "Os", "Ir", "Pt", "Au", "Hg",
    "Tl", "Pb", "Bi", "Po", "At", "Rn", "Fr", "Ra", "Ac", "Th",
    "Pa", "U", "Np", "Pu", "Am", "Cm", "Bk", "Cf", "Es", "Fm",
    "Md", "No", "Lr", "Rf", "Db", "Sg", "Bh", "Hs", "Mt", "Ds",
    "Rg", "Cn", "Nh", "Fl", "Mc", "Lv", "Ts", "Og",
)  # fmt: skip

DEFAULT_CAPTCHAS: Final[tuple[str, ...]] = ("d22bd", "x4nyn", "pcmcf", "nnp4e", "2bg48")

DEFAULT_GEO_GAMES: Final[tuple[GeoGame, ...]] = (
    GeoGame(Coords(-25.35068396746521, 131.0463222711639), "australia"),
    GeoGame(Coords(48.85837009999999, 2.2944813000000295), "france"),
    GeoGame(Coords(35.36056, 138.72736), "japan"),
    GeoGame(Coords(-22.951916, -43.2104872), "brazil"),
    GeoGame(Coords(64.14815, -21.9425), "iceland"),
)

DEFAULT_CHESS_PUZZLES: Final[tuple[ChessPuzzle, ...]] = (
    ChessPuzzle("r1b2k1r/ppp1bppp/8/1B1Q4/5q2/2P5/PPP2PPP/R3R1K1 w - - 0 1", "Qd8+"),
    ChessPuzzle("r2qrb2/p1pn1Qp1/1p4Nk/4PR2/3n4/7N/P5PP/R6K w - - 0 1", "Ne7"),
    ChessPuzzle("r2qkb1r/pp2nppp/3p4/2pNN1B1/2BnP3/3P4/PPP2PPP/R2bK2R w KQkq - 0 1", "Nf6+"),
)
