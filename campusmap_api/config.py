"""
Runtime configuration for the API.

Settings come from environment variables. Only the store connection string
is required; everything else has a development default.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Optional

# Frontend origins allowed when CORS_ORIGINS is not set
DEFAULT_CORS_ORIGINS = [
    "https://insdaga.netlify.app",
    "http://localhost:5175",
    "http://localhost:5174",
    "http://localhost:5173",
]


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or malformed."""


def parse_origins(value: Optional[str]) -> list[str]:
    """Parse a comma separated origin list. '*' allows every origin."""
    if value is None or not value.strip():
        return list(DEFAULT_CORS_ORIGINS)
    if value.strip() == "*":
        return ["*"]
    return [origin.strip() for origin in value.split(",") if origin.strip()]


@dataclass(frozen=True)
class Settings:
    """API settings."""

    database_url: Optional[str] = None
    port: int = 5005
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    upload_dir: Path = Path("public/uploads")
    routing_base_url: str = "http://router.project-osrm.org"
    routing_timeout: float = 10.0
    db_pool_min: int = 2
    db_pool_max: int = 10

    def require_database_url(self) -> str:
        """Return the store connection string or fail."""
        if not self.database_url:
            raise ConfigError(
                "DATABASE_URL is not set. The API cannot start without a store connection string."
            )
        return self.database_url


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def load_settings() -> Settings:
    """Build settings from the current environment."""
    timeout_raw = os.environ.get("ROUTING_TIMEOUT", "10")
    try:
        routing_timeout = float(timeout_raw)
    except ValueError:
        raise ConfigError(f"ROUTING_TIMEOUT must be a number, got {timeout_raw!r}")

    return Settings(
        database_url=os.environ.get("DATABASE_URL") or None,
        port=_int_env("PORT", 5005),
        cors_origins=parse_origins(os.environ.get("CORS_ORIGINS")),
        upload_dir=Path(os.environ.get("UPLOAD_DIR", "public/uploads")),
        routing_base_url=os.environ.get("ROUTING_BASE_URL", "http://router.project-osrm.org").rstrip("/"),
        routing_timeout=routing_timeout,
        db_pool_min=_int_env("DB_POOL_MIN", 2),
        db_pool_max=_int_env("DB_POOL_MAX", 10),
    )


@lru_cache
def get_settings() -> Settings:
    """Settings loaded once per process."""
    return load_settings()
