from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env from repo root if present
ENV_PATH = Path(__file__).resolve().parents[3] / ".env"
if ENV_PATH.exists():
    load_dotenv(dotenv_path=ENV_PATH)


class Settings(BaseSettings):
    """Storefront settings (loaded from env).

    Storage:
      - "database_url" is any SQLAlchemy URL; the default is a SQLite file under ./data.
      - "seed_demo_catalog" fills an empty catalog with a few demo products on startup.

    Sessions:
      - Each browser gets a cart and a favorites set keyed by the "session_cookie_name" cookie.
        Nothing about a session is persisted. Sessions are opened only by cart or favorites
        writes, and the map is capped by "session_max_count" and "session_idle_seconds".
    """

    # --- service ---
    service_name: str = Field(default="storefront", description="Service name")
    version: str = Field(default="0.1.0", description="Service version")
    environment: str = Field(default="dev", description="Environment name (dev/staging/prod)")
    host: str = Field(default="0.0.0.0", description="API bind host")
    port: int = Field(default=3000, description="API bind port")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_format: str = Field(default="text", description="text|json")

    # --- database ---
    database_url: str = Field(
        default="sqlite:///./data/storefront.db",
        description="SQLAlchemy URL of the product catalog",
    )
    database_echo: bool = Field(default=False, description="Echo SQL statements to the log")
    seed_demo_catalog: bool = Field(
        default=False, description="Insert demo products when the catalog is empty"
    )

    # --- catalog ---
    default_categories: List[str] = Field(
        default_factory=lambda: ["Apparel", "Footwear", "Tech", "Home", "Garden"],
        description="Categories offered by the storefront even before any product uses them",
    )
    currency: str = Field(default="USD", description="Display currency code")

    # --- sessions ---
    session_cookie_name: str = Field(
        default="storefront_session", description="Cookie carrying the UI session id"
    )
    session_max_count: int = Field(
        default=10000, ge=1, description="Sessions held in memory before the least recently used is dropped"
    )
    session_idle_seconds: int = Field(
        default=86400, ge=0, description="Idle time after which a session is dropped (0 = never)"
    )

    # --- CORS (storefront UI is served from another origin in dev) ---
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["*"])
    cors_allow_methods: List[str] = Field(default_factory=lambda: ["*"])
    cors_allow_headers: List[str] = Field(default_factory=lambda: ["*"])

    # pydantic-settings v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ---- Convenience helpers ----
    @property
    def is_sqlite(self) -> bool:
        """True when the catalog lives in SQLite (needs check_same_thread=False)."""
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
