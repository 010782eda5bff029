"""Environment-driven settings for a playthrough."""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from password_game.core.errors import PasswordGameError

ENV_PREFIX = "PASSWORD_GAME_"
DEFAULT_WORDLE_URL = "https://neal.fun/api/password-game/wordle?date={date}"


class SettingsError(PasswordGameError):
    """Raised when environment settings fail validation."""


class GameSettings(BaseModel):
    """Knobs for the solver, the retry loop and the external fact lookups."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True, frozen=True)

    seed: int | None = None
    slack: int = Field(default=0, ge=0, le=50)
    max_attempts: int = Field(default=5, ge=1, le=100)
    wordle_url: str = Field(default=DEFAULT_WORDLE_URL, min_length=1, max_length=500)
    http_timeout: float = Field(default=10.0, gt=0, le=120)
    offline: bool = False

    @field_validator("wordle_url")
    @classmethod
    def _validate_wordle_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("wordle_url must be an http(s) URL.")
        if "{date}" not in value:
            raise ValueError("wordle_url must contain a `{date}` placeholder.")
        return value


def load_settings(environ: Mapping[str, str] | None = None) -> GameSettings:
    """Read ``PASSWORD_GAME_*`` variables, ignoring blank ones."""
    source = os.environ if environ is None else environ
    raw: dict[str, str] = {}
    for name in GameSettings.model_fields:
        value = source.get(f"{ENV_PREFIX}{name.upper()}", "").strip()
        if value:
            raw[name] = value
    try:
        return GameSettings.model_validate(raw)
    except ValidationError as exc:
        raise SettingsError(f"Invalid {ENV_PREFIX}* settings: {exc}") from exc
