"""
Chunk domain model.

Represents a content-bearing fragment of an ingested document, the unit
of embedding and retrieval. Chunks are created by the ingestion pipeline
and never mutated afterwards.

Dependencies: pydantic
System role: Document chunk data structure
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Chunk(BaseModel):
    """Document chunk model."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Opaque chunk identifier")
    document_id: str = Field(min_length=1, description="Owning document identifier")
    index: int = Field(ge=0, description="Zero-based position within the document")
    content: str = Field(description="Chunk text content")
    token_count: int | None = Field(default=None, ge=0, description="Token count, if known")

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("chunk content must not be blank")
        return value
