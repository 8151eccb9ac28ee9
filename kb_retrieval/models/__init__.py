"""
Domain models for chunks, vector records and operation outcomes.
"""

from kb_retrieval.models.chunk import Chunk
from kb_retrieval.models.linkage import LinkResult, LinkStatus
from kb_retrieval.models.migration import MigrationReport
from kb_retrieval.models.vector import (
    Payload,
    PayloadValue,
    QueryResult,
    SkippedRecord,
    UpsertResult,
    VectorRecord,
    VectorRef,
)

__all__ = [
    "Chunk",
    "LinkResult",
    "LinkStatus",
    "MigrationReport",
    "Payload",
    "PayloadValue",
    "QueryResult",
    "SkippedRecord",
    "UpsertResult",
    "VectorRecord",
    "VectorRef",
]
