"""
Centralised settings loader.

Values come from the environment (or a local `.env` file); anything not
set falls back to the defaults below.
"""

from __future__ import annotations
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ------------------------------------------------------------------ #
#  Master settings model
# ------------------------------------------------------------------ #
class _Settings(BaseSettings):
    # ─── runtime / DB ───────────────────────────────────────────────
    env_name: str = "local"
    database_url: str | None = None
    log_level: str = "INFO"

    # ─── diet engine ────────────────────────────────────────────────
    catalog_path: str = "data/sample_catalog.json"
    candidate_limit: int = Field(10, ge=10)
    default_diversity_level: str = "medium"
    recent_history_days: int = 30

    # allow other teammates’ env-vars without crashing
    model_config = SettingsConfigDict(
        extra="ignore", env_file=".env", env_file_encoding="utf-8"
    )


# ------------------------------------------------------------------ #
#  Cached singleton accessor
# ------------------------------------------------------------------ #
@lru_cache
def _cached() -> _Settings:  # pragma: no cover
    return _Settings()  # type: ignore[call-arg]


settings: _Settings = _cached()
