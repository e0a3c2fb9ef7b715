"""Process-wide configuration loaded once from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def _env_str(name: str) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str

    database_path: Path
    database_timeout_seconds: float

    jwt_secret: Optional[str]
    jwt_algorithm: str
    token_ttl_hours: int

    booking_timezone: str
    booking_max_duration_minutes: int

    admin_email: Optional[str]
    admin_password: Optional[str]
    password_hash_iterations: int

    page_default_limit: int
    page_max_limit: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings from the environment exactly once per process."""
    return Settings(
        app_name=os.getenv("APP_NAME", "SpaceBook Reservation API"),
        app_version=os.getenv("APP_VERSION", "1.0.0"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        database_path=Path(os.getenv("DATABASE_PATH", "data/spacebook.db")),
        database_timeout_seconds=_env_float("DATABASE_TIMEOUT_SECONDS", 5.0),
        jwt_secret=_env_str("JWT_SECRET"),
        jwt_algorithm="HS256",
        token_ttl_hours=_env_int("TOKEN_TTL_HOURS", 1),
        booking_timezone=os.getenv("BOOKING_TIMEZONE", "UTC"),
        booking_max_duration_minutes=_env_int("BOOKING_MAX_DURATION_MINUTES", 120),
        admin_email=_env_str("ADMIN_EMAIL"),
        admin_password=_env_str("ADMIN_PASSWORD"),
        password_hash_iterations=_env_int("PASSWORD_HASH_ITERATIONS", 260000),
        page_default_limit=10,
        page_max_limit=100,
    )
