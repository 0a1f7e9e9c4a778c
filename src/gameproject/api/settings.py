"""Configuration helpers for deploying the project session API."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _normalise_path(value: str | None) -> Path | None:
    if value is None:
        return None

    trimmed = value.strip()
    if not trimmed:
        return None

    return Path(trimmed).expanduser()


def _normalise_string(value: str | None, *, default: str) -> str:
    if value is None:
        return default

    trimmed = value.strip()
    return trimmed or default


def _parse_bool(name: str, value: str | None, *, default: bool) -> bool:
    if value is None:
        return default

    trimmed = value.strip().lower()
    if not trimmed:
        return default
    if trimmed in _TRUE_VALUES:
        return True
    if trimmed in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean (true/false, yes/no, 1/0, on/off).")


def _parse_level(value: str) -> str:
    level = value.upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(
            "GAMEPROJECT_LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR or CRITICAL."
        )
    return level


@dataclass(frozen=True)
class SessionApiSettings:
    """Deployment settings for the session API.

    Values come from environment variables so the service can be configured
    without code changes. Paths are expanded to support ``~`` prefixes and
    empty strings are treated as if the variable was unset.
    """

    log_level: str = "INFO"
    log_file: Path | None = None
    project_root: Path | None = None
    backup_on_save: bool = True
    save_on_shutdown: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SessionApiSettings":
        """Return settings populated from ``environ``.

        Args:
            environ: Optional mapping of environment variables. When omitted,
                :data:`os.environ` is used.

        Raises:
            ValueError: If a level or boolean variable holds an invalid value.
        """

        source = environ if environ is not None else os.environ

        log_level = _parse_level(
            _normalise_string(source.get("GAMEPROJECT_LOG_LEVEL"), default="INFO")
        )
        log_file = _normalise_path(source.get("GAMEPROJECT_LOG_FILE"))
        project_root = _normalise_path(source.get("GAMEPROJECT_PROJECT_ROOT"))
        backup_on_save = _parse_bool(
            "GAMEPROJECT_BACKUP_ON_SAVE",
            source.get("GAMEPROJECT_BACKUP_ON_SAVE"),
            default=True,
        )
        save_on_shutdown = _parse_bool(
            "GAMEPROJECT_SAVE_ON_SHUTDOWN",
            source.get("GAMEPROJECT_SAVE_ON_SHUTDOWN"),
            default=False,
        )

        return cls(
            log_level=log_level,
            log_file=log_file,
            project_root=project_root,
            backup_on_save=backup_on_save,
            save_on_shutdown=save_on_shutdown,
        )

    def resolve_project_path(self, value: str | Path) -> Path:
        """Resolve ``value`` against :attr:`project_root` when it is relative."""

        path = Path(value).expanduser()
        if not path.is_absolute() and self.project_root is not None:
            path = self.project_root / path
        return path.resolve()


__all__ = ["SessionApiSettings"]
