"""
ORM models of the retrieval subsystem.
"""

from kb_retrieval.boundary.db.models.chunk_model import ChunkModel
from kb_retrieval.boundary.db.models.embedding_model import EmbeddingModel
from kb_retrieval.boundary.db.models.namespace_model import NamespaceModel
from kb_retrieval.boundary.db.models.vector_ref_model import VectorRefModel

__all__ = ["ChunkModel", "EmbeddingModel", "NamespaceModel", "VectorRefModel"]
