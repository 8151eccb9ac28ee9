"""
Vector index schemas.

Pydantic models for similarity index operations: stored records, query
results, backend references and upsert outcomes.

Dependencies: pydantic
System role: Type definitions for vector operations
"""

import math

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Payload values stay scalar so every backend can store and filter them
PayloadValue = str | int | float | bool | None
Payload = dict[str, PayloadValue]


class VectorRecord(BaseModel):
    """
    An (id, vector, payload) triple stored in the similarity index.

    The id equals the id of the Chunk the vector represents. The payload
    carries ``client_id`` and ``kb_id`` for filtered queries.
    """

    id: str = Field(min_length=1, description="Chunk identifier")
    vector: list[float] = Field(min_length=1, description="Embedding vector")
    payload: Payload = Field(default_factory=dict, description="Scalar metadata")

    @field_validator("vector")
    @classmethod
    def _finite(cls, value: list[float]) -> list[float]:
        if not all(math.isfinite(component) for component in value):
            raise ValueError("vector components must be finite")
        return value

    @property
    def dimension(self) -> int:
        return len(self.vector)


class QueryResult(BaseModel):
    """Single result from a similarity query."""

    id: str = Field(description="Chunk identifier")
    score: float = Field(description="Similarity score, 1 - cosine distance")
    payload: Payload = Field(default_factory=dict, description="Stored metadata plus chunk_id")


class VectorRef(BaseModel):
    """Pointer from a chunk to its vector inside a specific backend."""

    model_config = ConfigDict(frozen=True)

    chunk_id: str = Field(min_length=1, description="Chunk identifier")
    backend: str = Field(min_length=1, max_length=40, description="Backend name, e.g. 'pgvector'")
    index_name: str = Field(min_length=1, max_length=128, description="Index or table name in the backend")
    vector_id: str = Field(min_length=1, max_length=256, description="Backend-native vector identifier")


class SkippedRecord(BaseModel):
    """A record an upsert left out, with the reason."""

    id: str
    reason: str


class UpsertResult(BaseModel):
    """Outcome of one upsert batch."""

    upserted: list[str] = Field(default_factory=list)
    skipped: list[SkippedRecord] = Field(default_factory=list)

    @property
    def written_count(self) -> int:
        return len(self.upserted)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)
