# api/app/config.py
from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application configuration.

    Loads environment variables from `.env` and provides
    typed access across the API and services.
    """

    # ─────────────────────────────────────────────
    # Pydantic Settings Config
    # ─────────────────────────────────────────────
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ─────────────────────────────────────────────
    # Upstream (OpenRouter chat completions)
    # ─────────────────────────────────────────────
    openrouter_api_key: str | None = None
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_model: str = "google/gemini-2.5-pro-preview"

    app_url: str | None = None
    app_title: str = "Thera Coach"

    llm_temperature: float = 0.3
    llm_max_tokens: int = 1024

    upstream_connect_timeout: float = 10.0
    upstream_read_timeout: float = 30.0
    request_deadline_seconds: float = 120.0

    # ─────────────────────────────────────────────
    # Rate limiting
    # ─────────────────────────────────────────────
    rate_limit_window_seconds: float = 60.0
    rate_limit_max_requests: int = 20
    rate_limit_sweep_threshold: int = 1000

    # ─────────────────────────────────────────────
    # API
    # ─────────────────────────────────────────────
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = ["*"]

    # ─────────────────────────────────────────────
    # Derived Properties
    # ─────────────────────────────────────────────
    @property
    def upstream_configured(self) -> bool:
        return bool(self.openrouter_api_key)

    @property
    def upstream_headers(self) -> dict[str, str]:
        """Attribution headers OpenRouter uses for app rankings."""
        headers = {"X-Title": self.app_title}
        if self.app_url:
            headers["HTTP-Referer"] = self.app_url
        return headers


# ─────────────────────────────────────────────
# Cached Settings Instance
# ─────────────────────────────────────────────
@lru_cache
def get_settings() -> Settings:
    """
    Returns a cached Settings instance so config
    is only loaded once per process.
    """
    return Settings()
