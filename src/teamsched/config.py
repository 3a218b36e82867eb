from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _get_env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"Environment variable {name} must be an int, got: {raw!r}") from e
    return value


def _get_env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw


CALENDAR_KINDS = ("chinese", "weekends")


@dataclass(frozen=True)
class Settings:
    # Database
    db_path: Path
    migrations_dir: Path

    # Which work calendar resolves task end dates
    calendar: str

    # Server (used by teamsched.main when starting uvicorn programmatically)
    host: str
    port: int
    log_level: str


def load_settings() -> Settings:
    """
    Loads settings from env vars with sane defaults.

    Env vars:
      - TEAMSCHED_DB_PATH (default: ./var/teamsched.db)
      - TEAMSCHED_MIGRATIONS_DIR (default: ./migrations)
      - TEAMSCHED_CALENDAR (default: chinese; or: weekends)
      - TEAMSCHED_HOST (default: 127.0.0.1)
      - TEAMSCHED_PORT (default: 8000)
      - TEAMSCHED_LOG_LEVEL (default: info)
    """
    db_path = Path(_get_env_str("TEAMSCHED_DB_PATH", "./var/teamsched.db")).expanduser()
    migrations_dir = Path(_get_env_str("TEAMSCHED_MIGRATIONS_DIR", "migrations")).expanduser()

    calendar = _get_env_str("TEAMSCHED_CALENDAR", "chinese").lower().strip()
    if calendar not in CALENDAR_KINDS:
        raise ValueError(f"TEAMSCHED_CALENDAR must be one of {CALENDAR_KINDS}, got: {calendar!r}")

    host = _get_env_str("TEAMSCHED_HOST", "127.0.0.1")
    port = _get_env_int("TEAMSCHED_PORT", 8000)
    if not (1 <= port <= 65535):
        raise ValueError("TEAMSCHED_PORT must be between 1 and 65535")

    log_level = _get_env_str("TEAMSCHED_LOG_LEVEL", "info").lower()

    return Settings(
        db_path=db_path,
        migrations_dir=migrations_dir,
        calendar=calendar,
        host=host,
        port=port,
        log_level=log_level,
    )
