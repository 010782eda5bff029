"""Pending-edit queue that validates changes on submission and commits them as one batch."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from password_game.core.changes import Change, sort_for_commit
from password_game.core.password import Password
from password_game.core.protection import ProtectedPassword
from password_game.domain.models import Formatting

logger = logging.getLogger(__name__)


class MutablePassword:
    """A protected password with a queue of changes awaiting commit.

    Changes are validated against the state at queue time. ``commit`` applies the whole
    batch to a working copy and swaps it in only when every change succeeded.
    """

    def __init__(self, protected_password: ProtectedPassword | None = None) -> None:
        self._document = (
            protected_password if protected_password is not None else ProtectedPassword()
        )
        self._pending: list[Change] = []

    @classmethod
    def from_text(cls, text: str) -> MutablePassword:
        return cls(ProtectedPassword.from_text(text))

    @property
    def document(self) -> ProtectedPassword:
        return self._document

    @property
    def password(self) -> Password:
        return self._document.password

    @property
    def text(self) -> str:
        return self._document.text

    @property
    def formatting(self) -> tuple[Formatting, ...]:
        return self._document.password.formatting

    @property
    def protected(self) -> tuple[bool, ...]:
        return self._document.protected

    @property
    def pending(self) -> tuple[Change, ...]:
        return tuple(self._pending)

    def __len__(self) -> int:
        return len(self._document)

    def graphemes(self) -> list[str]:
        return self._document.password.graphemes()

    def protect(self, index: int) -> None:
        self._document.protect(index)

    def queue(self, change: Change) -> None:
        self._document.check(change)
        self._pending.append(change)

    def queue_all(self, changes: Iterable[Change]) -> None:
        for change in changes:
            self.queue(change)

    def discard(self) -> None:
        self._pending.clear()

    def commit(self) -> list[Change]:
        """Apply queued changes in commit order and return the applied batch."""
        batch = sort_for_commit(self._pending)
        working = ProtectedPassword(self._document.password.copy(), self._document.protected)
        for change in batch:
            working.apply(change)
        self._document = working
        self._pending.clear()
        logger.debug("mutable.commit changes=%s length=%s", len(batch), len(working))
        return batch
