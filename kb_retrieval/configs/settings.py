"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from kb_retrieval.configs.base import BaseSettings
from kb_retrieval.configs.database import DatabaseSettings
from kb_retrieval.configs.embeddings import EmbeddingSettings
from kb_retrieval.configs.migration import MigrationSettings
from kb_retrieval.configs.vector_store import VectorStoreSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    # Aggregated settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    embeddings: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    vector_store: VectorStoreSettings = Field(default_factory=VectorStoreSettings)
    migration: MigrationSettings = Field(default_factory=MigrationSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for the process lifetime.
    Environment variables loaded once at first call.

    Returns:
        Settings: Application settings instance

    Usage:
        from kb_retrieval.configs import get_settings
        settings = get_settings()
    """
    return Settings()
