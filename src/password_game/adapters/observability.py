"""Process-wide logging for playthroughs: console output plus a size-capped log file."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path

ENV_PREFIX = "PASSWORD_GAME_"
DEFAULT_LOG_PATH = Path("work/logs/password_game.log")
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
# Loggers of the HTTP client used by the fact lookups.
HTTP_LOGGERS = ("httpx", "httpcore")

_CONFIGURED = False


def _clamped_int(raw: str, default: int, *, minimum: int, maximum: int) -> int:
    try:
        value = int(raw) if raw else default
    except ValueError:
        return default
    return max(minimum, min(maximum, value))


def _level(raw: str, default: int) -> int:
    level = logging.getLevelName(raw.upper()) if raw else default
    return level if isinstance(level, int) else default


@dataclass(frozen=True)
class LogSettings:
    """Logging knobs read from ``PASSWORD_GAME_LOG_*``; unusable values fall back."""

    level: int = logging.INFO
    http_level: int = logging.WARNING
    path: Path = DEFAULT_LOG_PATH
    max_bytes: int = 5 * 1024 * 1024
    backup_count: int = 10

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> LogSettings:
        source = os.environ if environ is None else environ

        def read(name: str) -> str:
            return source.get(f"{ENV_PREFIX}{name}", "").strip()

        return cls(
            level=_level(read("LOG_LEVEL"), cls.level),
            http_level=_level(read("HTTP_LOG_LEVEL"), cls.http_level),
            path=Path(read("LOG_PATH")) if read("LOG_PATH") else cls.path,
            max_bytes=_clamped_int(
                read("LOG_MAX_BYTES"), cls.max_bytes, minimum=64 * 1024, maximum=100 * 1024 * 1024
            ),
            backup_count=_clamped_int(
                read("LOG_BACKUP_COUNT"), cls.backup_count, minimum=1, maximum=120
            ),
        )


def _handlers(settings: LogSettings) -> list[logging.Handler]:
    settings.path.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers: list[logging.Handler] = [
        logging.StreamHandler(),
        RotatingFileHandler(
            filename=settings.path,
            maxBytes=settings.max_bytes,
            backupCount=settings.backup_count,
            encoding="utf-8",
        ),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_runtime_logging(settings: LogSettings | None = None) -> None:
    """Install console and rotating file handlers on the root logger once per process."""
    global _CONFIGURED
    if _CONFIGURED:
        return
    settings = settings if settings is not None else LogSettings.from_env()

    root = logging.getLogger()
    root.setLevel(settings.level)
    root.handlers.clear()
    for handler in _handlers(settings):
        root.addHandler(handler)
    # Request lines from the fact lookups are noise at INFO.
    for name in HTTP_LOGGERS:
        logging.getLogger(name).setLevel(settings.http_level)

    _CONFIGURED = True
