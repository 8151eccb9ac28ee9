"""
Vector store configuration settings.

Selects the similarity index backend and the namespace conventions
used for knowledge bases.

Dependencies: pydantic, pydantic_settings
System role: Vector database configuration for RAG retrieval
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VectorStoreSettings(BaseSettings):
    """Vector store configuration (in-memory for dev, SQL/pgvector for prod)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VECTOR_STORE_",
        case_sensitive=False,
        extra="ignore",
    )

    provider: Literal["memory", "sql"] = Field(
        default="sql",
        description="Similarity index backend: 'memory' for local dev, 'sql' for PostgreSQL/pgvector",
    )
    namespace_prefix: str = Field(
        default="kb_",
        description="Prefix joined with a knowledge base id to form its namespace",
    )
    index_name: str = Field(
        default="kb_embedding",
        description="Index/table name recorded in vector references",
    )

    top_k: int = Field(default=5, ge=1, le=100, description="Number of top results to retrieve")
    min_score: float | None = Field(
        default=None,
        ge=-1.0,
        le=1.0,
        description="Minimum similarity score for retrieval; None disables the threshold",
    )
