"""Runtime configuration for the knowsynth services."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed configuration model."""

    model_config = SettingsConfigDict(env_prefix="knowsynth_", env_file=".env", case_sensitive=False)

    environment: Literal["dev", "test", "prod"] = "dev"

    # Generative language backend
    google_api_key: str | None = None
    api_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    # None waits indefinitely on backend calls
    request_timeout_seconds: float | None = None

    embedding_provider: Literal["hash", "gemini", "huggingface"] = "hash"
    embedding_model: str = "text-embedding-004"
    embedding_dim: int = 768
    huggingface_model: str = "BAAI/bge-small-en-v1.5"
    huggingface_device: str | None = None

    generation_provider: Literal["template", "gemini"] = "template"
    generation_model: str = "gemini-2.5-flash"
    history_window: int = 10

    # Relevance re-ranking
    rerank_top_k: int = 5
    rerank_min_relevance_score: float = 0.3

    # Analysis
    analysis_cache_ttl_seconds: float = 60 * 60
    summary_max_documents: int = 20
    document_page_size: int = 20

    # CORS
    cors_allow_origins: tuple[str, ...] = ()
    cors_allow_credentials: bool = False
    cors_allow_methods: tuple[str, ...] = ("GET", "POST", "DELETE", "OPTIONS")
    cors_allow_headers: tuple[str, ...] = ("*",)

    # Security
    api_key: str | None = None  # if set, required in X-API-Key header

    @property
    def is_test(self) -> bool:
        return self.environment == "test"

    @property
    def uses_remote_backend(self) -> bool:
        return self.embedding_provider == "gemini" or self.generation_provider == "gemini"


@lru_cache(maxsize=1)
def _cached_settings() -> Settings:
    return Settings()


def get_settings(override: Optional[dict[str, object]] = None) -> Settings:
    """Return settings, optionally overriding values without mutating cache."""

    if override:
        return Settings(**override)
    return _cached_settings()
