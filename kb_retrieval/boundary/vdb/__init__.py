"""
Similarity index boundary.

Exports:
  - SimilarityIndex, ChunkLookup: Backend contract
  - InMemoryVectorIndex, SqlVectorIndex: Backends
  - VectorRefRepository and its SQL/in-memory implementations
  - resolve_scope, is_transient_store_error: Pure query helpers
  - get_similarity_index(), get_vector_ref_repository(): Factories

Dependencies: sqlalchemy, pgvector, numpy
System role: Namespace-scoped vector storage and nearest-neighbour search
"""

from kb_retrieval.boundary.vdb.base import ChunkLookup, SimilarityIndex, namespace_for
from kb_retrieval.boundary.vdb.classification import is_transient_store_error
from kb_retrieval.boundary.vdb.factory import get_similarity_index, get_vector_ref_repository
from kb_retrieval.boundary.vdb.filters import QueryScope, resolve_scope
from kb_retrieval.boundary.vdb.memory_index import InMemoryVectorIndex
from kb_retrieval.boundary.vdb.refs import (
    InMemoryVectorRefRepository,
    SqlVectorRefRepository,
    VectorRefRepository,
)
from kb_retrieval.boundary.vdb.sql_index import SqlVectorIndex

__all__ = [
    "ChunkLookup",
    "SimilarityIndex",
    "namespace_for",
    "is_transient_store_error",
    "get_similarity_index",
    "get_vector_ref_repository",
    "QueryScope",
    "resolve_scope",
    "InMemoryVectorIndex",
    "SqlVectorIndex",
    "InMemoryVectorRefRepository",
    "SqlVectorRefRepository",
    "VectorRefRepository",
]
