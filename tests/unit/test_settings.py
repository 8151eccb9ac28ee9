"""
Test suite for configuration settings.

System role: Verification of environment-driven configuration
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from kb_retrieval.configs import get_settings
from kb_retrieval.configs.database import DatabaseSettings
from kb_retrieval.configs.embeddings import EmbeddingSettings
from kb_retrieval.configs.vector_store import VectorStoreSettings


class TestSettings:
    """Test suite for settings classes."""

    def test_defaults(self) -> None:
        settings = get_settings()

        assert settings.embeddings.max_attempts == 3
        assert settings.embeddings.min_backoff_seconds == 1.0
        assert settings.embeddings.max_backoff_seconds == 10.0
        assert settings.vector_store.namespace_prefix == "kb_"
        assert settings.migration.batch_size == 500

    def test_environment_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("EMBEDDINGS_PROVIDER", "http")
        monkeypatch.setenv("EMBEDDINGS_MAX_ATTEMPTS", "5")
        monkeypatch.setenv("VECTOR_STORE_PROVIDER", "memory")

        settings = get_settings()

        assert settings.embeddings.provider == "http"
        assert settings.embeddings.max_attempts == 5
        assert settings.vector_store.provider == "memory"

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_database_url_override_wins(self) -> None:
        settings = DatabaseSettings(url="sqlite:///local.db")

        assert settings.database_url == "sqlite:///local.db"

    def test_database_url_built_from_parts(self) -> None:
        settings = DatabaseSettings(host="db", port=5433, user="u", password="p", db="kb")

        assert settings.database_url.startswith("postgresql+psycopg2://u:p@db:5433/kb")

    def test_invalid_backoff_bounds_fail(self) -> None:
        with pytest.raises(PydanticValidationError):
            EmbeddingSettings(min_backoff_seconds=5, max_backoff_seconds=1)

    def test_unknown_vector_store_provider_fails(self) -> None:
        with pytest.raises(PydanticValidationError):
            VectorStoreSettings(provider="faiss")
