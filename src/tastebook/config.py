"""
Tastebook - Configuration and settings.

All values come from the environment or a local .env file.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class TastebookSettings(BaseSettings):
    """
    Application settings.

    Supabase credentials are required; everything else has a default
    suitable for local development.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Supabase
    supabase_url: str
    supabase_anon_key: str
    supabase_service_role_key: str | None = None

    # Application
    tastebook_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    cors_origins: list[str] = [
        "http://localhost:5173",  # Vite dev server
        "http://127.0.0.1:5173",
    ]

    # Storage
    recipe_images_bucket: str = "recipe-images"
    avatars_bucket: str = "public"
    max_recipe_image_bytes: int = 5 * 1024 * 1024
    max_avatar_bytes: int = 2 * 1024 * 1024

    @property
    def is_development(self) -> bool:
        return self.tastebook_env == "development"

    @property
    def is_production(self) -> bool:
        return self.tastebook_env == "production"


@lru_cache
def get_settings() -> TastebookSettings:
    """Get cached settings instance."""
    return TastebookSettings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: TastebookSettings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()
