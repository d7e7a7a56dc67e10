"""Application configuration.

Configuration is loaded from environment variables. For local development, you can provide a
`.env` file and set `RAWSOURCE_ENV_FILE` to point to it.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """rawsource settings.

    All fields are environment-configurable. Prefix is `RAWSOURCE_`.
    """

    model_config = SettingsConfigDict(
        env_prefix="RAWSOURCE_",
        env_file=None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    app_env: Literal["dev", "prod"] = Field(default="dev")
    log_level: str = Field(default="INFO")

    # HTTP service
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000, ge=1, le=65_535)

    # English input policy: "resolve" looks the raw title up on the index site,
    # "reject" refuses English input and expects a raw title from the caller.
    english_policy: Literal["resolve", "reject"] = Field(default="resolve")

    # Search
    search_strategy: Literal["rotate", "direct_then_proxy"] = Field(default="rotate")
    search_backends: list[str] = Field(
        default_factory=lambda: ["duckduckgo_lite", "duckduckgo_html", "searxng"]
    )
    search_shuffle: bool = Field(default=True)
    searxng_instances: list[str] = Field(default_factory=list)
    text_proxy_base_url: str = Field(default="https://r.jina.ai/")
    search_attempt_timeout_s: float = Field(default=20.0, ge=1.0, le=120.0)
    search_max_concurrency: int = Field(default=16, ge=1, le=64)
    search_max_results: int = Field(default=20, ge=1, le=50)

    # Index site resolution
    index_window_chars: int = Field(default=8000, ge=500, le=100_000)
    index_max_names: int = Field(default=30, ge=1, le=200)

    # Response cache
    cache_backend: Literal["none", "memory", "redis"] = Field(default="none")
    cache_ttl_s: int = Field(default=1800, ge=1, le=86_400)
    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_key_prefix: str = Field(default="rawsource")

    # Networking
    http_timeout_s: float = Field(default=15.0)
    http_accept_language: str = Field(default="en-US,en;q=0.9")
    http_user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        )
    )


def load_settings() -> Settings:
    """Load settings from env.

    Returns:
        Settings: Parsed settings.
    """

    env_file_override = os.getenv("RAWSOURCE_ENV_FILE")
    if env_file_override:
        env_path = Path(env_file_override)
        return Settings(_env_file=env_path)

    default_env = Path.cwd() / ".env"
    if default_env.exists():
        return Settings(_env_file=default_env)

    return Settings()
