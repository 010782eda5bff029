"""Detect and classify divergence between the computed password and a rendering surface."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Literal, Protocol, cast

from password_game.core.changes import Change
from password_game.core.errors import DesyncCause, DesynchronizationError
from password_game.core.password import split_graphemes
from password_game.core.reference_data import BUG, CHICKEN, EGG, FIRE, TOMBSTONE
from password_game.domain.models import Formatting

logger = logging.getLogger(__name__)

SyncResult = Literal["synced", "fire", "hatched", "starved", "formatting", "unknown"]
RECOVERABLE: frozenset[SyncResult] = frozenset({"synced", "fire", "hatched"})


class RenderingSurface(Protocol):
    """An external place the password is typed into and read back from."""

    def apply(self, batch: Sequence[Change]) -> None:
        ...

    def get_current_text_and_formatting(self) -> tuple[str, list[Formatting]]:
        ...


def _without_bugs(
    text: str, formatting: Sequence[Formatting]
) -> tuple[str, list[Formatting]]:
    graphemes = split_graphemes(text)
    if len(graphemes) != len(formatting):
        return text.replace(BUG, ""), list(formatting)
    kept = [
        (grapheme, record) for grapheme, record in zip(graphemes, formatting) if grapheme != BUG
    ]
    return "".join(grapheme for grapheme, _ in kept), [record for _, record in kept]


def classify_sync(
    expected_text: str,
    expected_formatting: Sequence[Formatting],
    actual_text: str,
    actual_formatting: Sequence[Formatting],
) -> SyncResult:
    """Explain why a readback differs from the computed password. Bugs are ignored."""
    expected, expected_records = _without_bugs(expected_text, expected_formatting)
    actual, actual_records = _without_bugs(actual_text, actual_formatting)
    if actual == expected:
        return "synced" if actual_records == expected_records else "formatting"
    if FIRE in actual:
        return "fire"
    if expected.replace(EGG, CHICKEN) == actual:
        return "hatched"
    if expected.replace(CHICKEN, TOMBSTONE) == actual:
        return "starved"
    return "unknown"


def _log_formatting_drift(
    expected_text: str,
    expected_formatting: Sequence[Formatting],
    actual_text: str,
    actual_formatting: Sequence[Formatting],
) -> None:
    _, expected_records = _without_bugs(expected_text, expected_formatting)
    _, actual_records = _without_bugs(actual_text, actual_formatting)
    for index, (want, got) in enumerate(zip(expected_records, actual_records)):
        if want != got:
            logger.error(
                "sync.formatting index=%s expected=%s actual=%s",
                index,
                want.short_code(),
                got.short_code(),
            )
            return


def ensure_synced(
    expected_text: str,
    expected_formatting: Sequence[Formatting],
    actual_text: str,
    actual_formatting: Sequence[Formatting],
) -> SyncResult:
    """Classify the readback, raising ``DesynchronizationError`` when it cannot be recovered."""
    result = classify_sync(expected_text, expected_formatting, actual_text, actual_formatting)
    if result not in RECOVERABLE:
        if result == "formatting":
            _log_formatting_drift(
                expected_text, expected_formatting, actual_text, actual_formatting
            )
        logger.error(
            "sync.lost cause=%s expected=%r actual=%r", result, expected_text, actual_text
        )
        raise DesynchronizationError(cast(DesyncCause, result), expected_text, actual_text)
    if result != "synced":
        logger.debug("sync.recoverable cause=%s", result)
    return result
