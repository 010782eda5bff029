"""Grapheme-indexed password text with per-grapheme formatting."""

from __future__ import annotations

from collections.abc import Sequence

import regex

from password_game.core.errors import InvariantBreachError
from password_game.domain.models import FormatChange, Formatting

_GRAPHEME = regex.compile(r"\X")


def split_graphemes(text: str) -> list[str]:
    """Split text into Unicode extended grapheme clusters."""
    return _GRAPHEME.findall(text)


def grapheme_count(text: str) -> int:
    return len(split_graphemes(text))


class Password:
    """A password conceptualised as a sequence of grapheme clusters.

    Every grapheme owns exactly one ``Formatting`` record. Structural edits insert default
    records for new graphemes; ``replace`` keeps the record of the grapheme it overwrites.
    """

    def __init__(self, text: str = "", formatting: Sequence[Formatting] | None = None) -> None:
        graphemes = split_graphemes(text)
        records = list(formatting) if formatting is not None else [Formatting()] * len(graphemes)
        self._commit(text, records)

    @property
    def text(self) -> str:
        return self._text

    @property
    def formatting(self) -> tuple[Formatting, ...]:
        return tuple(self._formatting)

    def graphemes(self) -> list[str]:
        return split_graphemes(self._text)

    def __len__(self) -> int:
        return len(self._formatting)

    def __repr__(self) -> str:
        return f"Password({self._text!r})"

    def copy(self) -> Password:
        return Password(self._text, self._formatting)

    def append(self, string: str) -> None:
        added = grapheme_count(string)
        self._commit(self._text + string, [*self._formatting, *[Formatting()] * added])

    def prepend(self, string: str) -> None:
        added = grapheme_count(string)
        self._commit(string + self._text, [*[Formatting()] * added, *self._formatting])

    def insert(self, index: int, string: str) -> None:
        length = len(self)
        if index < 0 or index > length:
            raise InvariantBreachError(f"Insert index {index} outside 0..{length}.")
        if index == 0:
            self.prepend(string)
            return
        if index == length:
            self.append(string)
            return
        graphemes = self.graphemes()
        added = grapheme_count(string)
        text = "".join(graphemes[:index]) + string + "".join(graphemes[index:])
        formatting = [
            *self._formatting[:index],
            *[Formatting()] * added,
            *self._formatting[index:],
        ]
        self._commit(text, formatting)

    def remove(self, index: int) -> None:
        self._check_index(index)
        graphemes = self.graphemes()
        del graphemes[index]
        formatting = list(self._formatting)
        del formatting[index]
        self._commit("".join(graphemes), formatting)

    def replace(self, index: int, grapheme: str) -> None:
        self._check_index(index)
        graphemes = self.graphemes()
        graphemes[index] = grapheme
        self._commit("".join(graphemes), list(self._formatting))

    def format(self, index: int, change: FormatChange) -> None:
        self._check_index(index)
        formatting = list(self._formatting)
        formatting[index] = formatting[index].changed(change)
        self._commit(self._text, formatting)

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= len(self):
            raise InvariantBreachError(f"Grapheme index {index} outside 0..{len(self) - 1}.")

    def _commit(self, text: str, formatting: list[Formatting]) -> None:
        count = grapheme_count(text)
        if count != len(formatting):
            raise InvariantBreachError(
                f"Text has {count} graphemes but {len(formatting)} formatting records."
            )
        self._text = text
        self._formatting = formatting
