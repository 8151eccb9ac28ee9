"""
Vector migration configuration settings.

Defaults for the one-shot namespace/backend migration entrypoint.

Dependencies: pydantic, pydantic_settings
System role: Migration tool configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MigrationSettings(BaseSettings):
    """Defaults for copying vectors between namespaces or backends."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MIGRATION_",
        case_sensitive=False,
        extra="ignore",
    )

    source_ns: str = Field(default="kb", description="Namespace to read from")
    dest_ns: str = Field(default="kb2", description="Namespace to write to")
    vector_dim: int = Field(default=1536, ge=1, description="Dimension declared for the destination")
    batch_size: int = Field(default=500, ge=1, description="Records per streamed batch")

    source_url: str | None = Field(
        default=None,
        description="SQLAlchemy URL of the source database; defaults to the POSTGRES_* database",
    )
    dest_url: str | None = Field(
        default=None,
        description="SQLAlchemy URL of the destination database; defaults to the source",
    )
