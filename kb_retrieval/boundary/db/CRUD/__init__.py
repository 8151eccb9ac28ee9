"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from kb_retrieval.boundary.db.CRUD import chunk_crud, vector_ref_crud

    live = chunk_crud.existing_ids(session, ["c1", "c2"])
"""

from kb_retrieval.boundary.db.CRUD.base_crud import BaseCRUD
from kb_retrieval.boundary.db.CRUD.chunk_crud import ChunkCRUD, chunk_crud
from kb_retrieval.boundary.db.CRUD.embedding_crud import EmbeddingCRUD, embedding_crud
from kb_retrieval.boundary.db.CRUD.namespace_crud import NamespaceCRUD, namespace_crud
from kb_retrieval.boundary.db.CRUD.vector_ref_crud import VectorRefCRUD, vector_ref_crud

__all__ = [
    "BaseCRUD",
    "ChunkCRUD",
    "chunk_crud",
    "EmbeddingCRUD",
    "embedding_crud",
    "NamespaceCRUD",
    "namespace_crud",
    "VectorRefCRUD",
    "vector_ref_crud",
]
