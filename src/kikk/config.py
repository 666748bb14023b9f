"""
Application settings.

Values come from ``KIKK_``-prefixed environment variables or a ``.env`` file.
The remote-vs-local decision is derived from these settings once, when the
stores are built (see ``stores.build_stores``).
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration."""

    model_config = SettingsConfigDict(
        env_prefix="KIKK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "kikk"
    app_env: str = "development"
    debug: bool = False

    # Hosted datastore. Both URL and key must be set to use it.
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_access_token: str | None = Field(
        None,
        description="Signed-in user's JWT; falls back to the anon key when unset.",
    )

    # Local storage
    data_dir: Path = Path("data")
    export_dir: Path = Path("exports")

    # External services
    taxonomy_api: str = "https://artskart.artsdatabanken.no/publicapi/api"
    geocoding_api: str = "https://nominatim.openstreetmap.org"
    mapbox_token: str = ""

    # Timing
    http_timeout: float = 30.0
    query_stale_seconds: float = 300.0
    search_debounce_seconds: float = 0.3
    search_min_length: int = 2

    @property
    def remote_configured(self) -> bool:
        """True when both the datastore URL and key are present."""
        return bool(self.supabase_url.strip() and self.supabase_key.strip())


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings (read once)."""
    return Settings()
