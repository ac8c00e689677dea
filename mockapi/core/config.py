"""
Configuration helpers for the MockAPI server.

Settings are read from environment variables once and cached, so routers and
services never touch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    data_file: str
    schema_file: str
    fk_suffix: str
    strict_match: bool
    latency_factor: float
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _float(value: str | None, default: float = 0.0) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        data_file=os.getenv("MOCKAPI_DATA_FILE") or "mockapi.json",
        schema_file=(os.getenv("MOCKAPI_SCHEMA_FILE") or "").strip(),
        fk_suffix=os.getenv("MOCKAPI_FK_SUFFIX") or ".id",
        strict_match=_bool(os.getenv("MOCKAPI_STRICT_MATCH"), False),
        latency_factor=max(0.0, _float(os.getenv("MOCKAPI_LATENCY_FACTOR"), 0.0)),
        log_level=(os.getenv("MOCKAPI_LOG_LEVEL") or "INFO").upper(),
    )
