"""Protection mask layered over a grapheme document."""

from __future__ import annotations

from collections.abc import Sequence

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
from password_game.core.errors import InvariantBreachError, ProtectionViolationError
from password_game.core.password import Password


class ProtectedPassword:
    """A password whose protected graphemes cannot be removed or replaced."""

    def __init__(self, password: Password | None = None, protected: Sequence[bool] | None = None):
        self._password = password if password is not None else Password()
        if protected is None:
            protected = [False] * len(self._password)
        if len(protected) != len(self._password):
            raise InvariantBreachError(
                f"Protection mask has {len(protected)} entries for {len(self._password)} graphemes."
            )
        self._protected = list(protected)

    @classmethod
    def from_text(cls, text: str) -> ProtectedPassword:
        return cls(Password(text))

    @property
    def password(self) -> Password:
        return self._password

    @property
    def protected(self) -> tuple[bool, ...]:
        return tuple(self._protected)

    @property
    def text(self) -> str:
        return self._password.text

    def __len__(self) -> int:
        return len(self._password)

    def is_protected(self, index: int) -> bool:
        return self._protected[index]

    def protect(self, index: int) -> None:
        if index < 0 or index >= len(self._protected):
            raise InvariantBreachError(f"Cannot protect grapheme {index}.")
        self._protected[index] = True

    def protected_bitstring(self) -> str:
        """Mask as ``0``/``1`` characters, e.g. ``00110`` for ``hello`` with ``ll`` protected."""
        return "".join("1" if flag else "0" for flag in self._protected)

    def check(self, change: Change) -> None:
        """Raise if ``change`` cannot be applied to the current document."""
        if isinstance(change, Format):
            self._check_bounds(change.index, change)
        elif isinstance(change, (Remove, Replace)):
            self._check_bounds(change.index, change)
            if self._protected[change.index] and not change.ignore_protection:
                raise ProtectionViolationError(change.index, change)

    def apply(self, change: Change) -> None:
        self.check(change)
        if isinstance(change, Format):
            self._password.format(change.index, change.change)
        elif isinstance(change, Append):
            self._password.append(change.string)
            self._protected.extend([change.protected] * inserted_length(change))
        elif isinstance(change, Prepend):
            self._password.prepend(change.string)
            self._protected[:0] = [change.protected] * inserted_length(change)
        elif isinstance(change, Insert):
            self._password.insert(change.index, change.string)
            position = change.index
            self._protected[position:position] = [change.protected] * inserted_length(change)
        elif isinstance(change, Replace):
            self._password.replace(change.index, change.new_grapheme)
        elif isinstance(change, Remove):
            self._password.remove(change.index)
            del self._protected[change.index]
        if len(self._protected) != len(self._password):
            raise InvariantBreachError(
                f"Protection mask has {len(self._protected)} entries "
                f"for {len(self._password)} graphemes after {change!r}."
            )

    def _check_bounds(self, index: int, change: Change) -> None:
        if index < 0 or index >= len(self._password):
            raise InvariantBreachError(f"Index {index} out of bounds for {change!r}.")
