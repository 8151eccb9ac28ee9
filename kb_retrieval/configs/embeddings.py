"""
Embedding provider configuration settings.

Selects the embedding wire dialect and holds model, credentials,
timeouts and retry bounds.

Dependencies: pydantic, pydantic_settings
System role: Embedding client configuration
"""

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmbeddingSettings(BaseSettings):
    """Embedding provider configuration (OpenAI-compatible or generic HTTP)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EMBEDDINGS_",
        case_sensitive=False,
        extra="ignore",
    )

    provider: Literal["openai", "http"] = Field(
        default="openai",
        description="Wire dialect: 'openai' for the OpenAI Embeddings API, 'http' for a self-hosted service",
    )
    model: str = Field(
        default="text-embedding-3-large",
        description="Embedding model identifier stored alongside vectors",
    )
    dimensions: int | None = Field(
        default=3072,
        ge=1,
        description="Expected vector dimension; None accepts whatever the backend returns",
    )
    api_key: str | None = Field(default=None, description="Bearer token for the embedding API")
    base_url: str = Field(
        default="https://api.openai.com",
        description="Base URL; '/v1/embeddings' is appended",
    )

    timeout_seconds: float = Field(default=30.0, gt=0, description="Per-attempt request timeout")
    max_attempts: int = Field(default=3, ge=1, description="Total attempts including the first")
    min_backoff_seconds: float = Field(default=1.0, ge=0, description="Minimum delay between attempts")
    max_backoff_seconds: float = Field(default=10.0, ge=0, description="Cap on a single backoff delay")

    @model_validator(mode="after")
    def _check_backoff_bounds(self) -> "EmbeddingSettings":
        if self.max_backoff_seconds < self.min_backoff_seconds:
            raise ValueError("max_backoff_seconds must be >= min_backoff_seconds")
        return self
