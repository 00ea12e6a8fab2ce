"""
Application configuration using Pydantic Settings.
All environment-specific values are centralized here.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── App ──────────────────────────────────────────────
    app_name: str = "BASIL Core"
    debug: bool = False

    # ── Remote API ───────────────────────────────────────
    api_base_url: str = "http://localhost:8000/api/v1"
    http_timeout_seconds: float = 30.0

    # ── Local persistence ────────────────────────────────
    local_store_path: str = "./.basil/local_store.json"  # "" = in-memory only

    # ── Pricing ──────────────────────────────────────────
    default_tax_percentage: float = 0.0
    use_backend_pricing: bool = True  # False = always use the local engine

    # ── Logging ──────────────────────────────────────────
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings (singleton)."""
    return Settings()
