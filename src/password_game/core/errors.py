"""Error taxonomy shared by the document model, solver and drivers."""

from __future__ import annotations

from typing import Literal

DesyncCause = Literal["fire", "hatched", "starved", "formatting", "unknown"]


class PasswordGameError(RuntimeError):
    """Base class for password game failures."""


class InvariantBreachError(PasswordGameError):
    """Raised when document bookkeeping is inconsistent. Always a bug."""


class ProtectionViolationError(PasswordGameError):
    """Raised when an edit would remove or replace a protected grapheme."""

    def __init__(self, index: int, change: object) -> None:
        super().__init__(f"Edit touches protected grapheme {index}: {change!r}")
        self.index = index
        self.change = change


class UnsatisfiableRuleError(PasswordGameError):
    """Raised when no edit batch can satisfy a rule under current protections."""

    def __init__(self, rule_kind: str, reason: str) -> None:
        super().__init__(f"Cannot satisfy rule '{rule_kind}': {reason}")
        self.rule_kind = rule_kind
        self.reason = reason


class DesynchronizationError(PasswordGameError):
    """Raised when a rendering surface no longer matches the computed password."""

    def __init__(self, cause: DesyncCause, expected: str, actual: str) -> None:
        super().__init__(f"Password out of sync ({cause}): expected {expected!r}, got {actual!r}")
        self.cause = cause
        self.expected = expected
        self.actual = actual
