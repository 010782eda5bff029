"""Edit operations queued against a password and their deterministic ordering."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Union

from password_game.core.password import grapheme_count
from password_game.domain.models import FONT_FAMILIES, FONT_SIZE_ORDER, FormatChange


@dataclass(frozen=True)
class Format:
    """Format the grapheme at ``index``."""

    index: int
    change: FormatChange


@dataclass(frozen=True)
class Prepend:
    string: str
    protected: bool = False


@dataclass(frozen=True)
class Append:
    string: str
    protected: bool = False


@dataclass(frozen=True)
class Insert:
    index: int
    string: str
    protected: bool = False


@dataclass(frozen=True)
class Replace:
    """Swap the grapheme at ``index`` for ``new_grapheme``, keeping its formatting."""

    index: int
    new_grapheme: str
    ignore_protection: bool = False


@dataclass(frozen=True)
class Remove:
    index: int
    ignore_protection: bool = False


Change = Union[Format, Prepend, Append, Insert, Replace, Remove]

_FORMAT_KIND_RANK = {"bold_on": 0, "italic_on": 1, "font_size": 2, "font_family": 3}


def _format_change_key(change: FormatChange) -> tuple[int, int]:
    rank = _FORMAT_KIND_RANK[change.kind]
    if change.kind == "font_size" and change.font_size is not None:
        return rank, FONT_SIZE_ORDER.index(change.font_size)
    if change.kind == "font_family" and change.font_family is not None:
        return rank, FONT_FAMILIES.index(change.font_family)
    return rank, 0


def order_key(change: Change) -> tuple[object, ...]:
    """Total-order key: Format < Prepend < Append < Insert < Replace < Remove.

    Appends share one key so a stable sort keeps them in submission order.
    """
    if isinstance(change, Format):
        return 0, change.index, _format_change_key(change.change)
    if isinstance(change, Prepend):
        return 1, change.string, change.protected
    if isinstance(change, Append):
        return (2,)
    if isinstance(change, Insert):
        return 3, change.index, change.string, change.protected
    if isinstance(change, Replace):
        return 4, change.index, change.new_grapheme, change.ignore_protection
    if isinstance(change, Remove):
        return 5, change.index, change.ignore_protection
    raise TypeError(f"Unknown change type: {type(change).__name__}")


def sort_for_entry(changes: Iterable[Change]) -> list[Change]:
    """Plain total order, removals ascending.

    Surfaces consuming this order must offset each removal by the number of removals
    already entered.
    """
    return sorted(changes, key=order_key)


def sort_for_commit(changes: Iterable[Change]) -> list[Change]:
    """Total order with the trailing removal block reversed, highest index first."""
    ordered = sort_for_entry(changes)
    first_removal = next(
        (position for position, change in enumerate(ordered) if isinstance(change, Remove)),
        None,
    )
    if first_removal is not None:
        ordered[first_removal:] = reversed(ordered[first_removal:])
    return ordered


def inserted_length(change: Change) -> int:
    """Number of graphemes a change adds to the document."""
    if isinstance(change, (Prepend, Append, Insert)):
        return grapheme_count(change.string)
    return 0
