"""Runtime configuration for the Courses API."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


class ConfigError(Exception):
    """Raised when configuration is invalid."""


DEFAULT_DB_PATH = "coursesapi.db"
DEFAULT_SEMESTER = "20173"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


@dataclass
class Settings:
    """Application settings.

    Every field can be overridden with a COURSESAPI_* environment variable.
    """

    db_path: str = DEFAULT_DB_PATH
    default_semester: str = DEFAULT_SEMESTER
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Load settings from the environment.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Returns:
            Parsed settings.

        Raises:
            ConfigError: If COURSESAPI_PORT is not a valid port number.
        """
        env = os.environ if environ is None else environ

        raw_port = env.get("COURSESAPI_PORT", str(DEFAULT_PORT))
        try:
            port = int(raw_port)
        except ValueError as e:
            raise ConfigError(f"COURSESAPI_PORT must be an integer, got {raw_port!r}") from e
        if not 1 <= port <= 65535:
            raise ConfigError(f"COURSESAPI_PORT out of range: {port}")

        return cls(
            db_path=env.get("COURSESAPI_DB_PATH", DEFAULT_DB_PATH),
            default_semester=env.get("COURSESAPI_DEFAULT_SEMESTER", DEFAULT_SEMESTER),
            host=env.get("COURSESAPI_HOST", DEFAULT_HOST),
            port=port,
        )
