"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, TimestampMixin: Model building blocks
  - get_engine(), get_session_factory(): Connection management
  - ChunkModel, EmbeddingModel, NamespaceModel, VectorRefModel: Mapped tables
  - chunk_crud, embedding_crud, namespace_crud, vector_ref_crud: CRUD singletons

Dependencies: sqlalchemy, pgvector, kb_retrieval.configs
System role: Relational storage for vectors, namespaces and backend references
"""

from kb_retrieval.boundary.db.base import Base, TimestampMixin
from kb_retrieval.boundary.db.connection import (
    enable_sqlite_savepoints,
    get_engine,
    get_session_factory,
)
from kb_retrieval.boundary.db.models import (
    ChunkModel,
    EmbeddingModel,
    NamespaceModel,
    VectorRefModel,
)
from kb_retrieval.boundary.db.CRUD import (
    BaseCRUD,
    ChunkCRUD,
    EmbeddingCRUD,
    NamespaceCRUD,
    VectorRefCRUD,
    chunk_crud,
    embedding_crud,
    namespace_crud,
    vector_ref_crud,
)

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    # Connection
    "enable_sqlite_savepoints",
    "get_engine",
    "get_session_factory",
    # Models
    "ChunkModel",
    "EmbeddingModel",
    "NamespaceModel",
    "VectorRefModel",
    # CRUD classes
    "BaseCRUD",
    "ChunkCRUD",
    "EmbeddingCRUD",
    "NamespaceCRUD",
    "VectorRefCRUD",
    # CRUD singletons
    "chunk_crud",
    "embedding_crud",
    "namespace_crud",
    "vector_ref_crud",
]
