"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# Values are read from two sources (in priority order):
#
#   1. **Environment variables** - e.g., FETCH_MIN_INTERVAL=1.5
#   2. **.env file** - key=value lines in the project root .env file
#
# Field name `fetch_min_interval` maps to env var `FETCH_MIN_INTERVAL`.
# Defaults apply when neither source sets a field.  See .env.example.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """animePicker application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === Metadata service ===
    jikan_base_url: str = "https://api.jikan.moe/v4"
    jikan_timeout: float = Field(default=15.0, gt=0)

    # === Enrichment ===
    # Minimum seconds between the start of two outbound metadata calls,
    # shared by the foreground and prefetch paths.
    fetch_min_interval: float = Field(default=0.9, ge=0)
    prefetch_window: int = Field(default=3, ge=0)

    # === Session ===
    decision_cooldown: float = Field(default=1.0, ge=0)
    # None → a fresh random order every load.
    shuffle_seed: int | None = None

    # === List source / persistence ===
    default_list_path: str = "data/anime.xml"
    list_store_db_path: str = "data/list_store.db"
    max_upload_bytes: int = 5 * 1024 * 1024

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
