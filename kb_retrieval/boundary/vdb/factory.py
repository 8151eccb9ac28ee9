"""
Similarity index factory for selecting between in-memory (dev) and SQL (prod).

Depends on VECTOR_STORE_PROVIDER. Callers get the same SimilarityIndex
contract regardless of the backend.

Dependencies: kb_retrieval.boundary.vdb, kb_retrieval.configs
System role: Similarity index instantiation and selection
"""

import logging

from sqlalchemy import Engine

from kb_retrieval.boundary.db.connection import get_engine
from kb_retrieval.boundary.vdb.base import ChunkLookup, SimilarityIndex
from kb_retrieval.boundary.vdb.memory_index import InMemoryVectorIndex
from kb_retrieval.boundary.vdb.refs import (
    InMemoryVectorRefRepository,
    SqlVectorRefRepository,
    VectorRefRepository,
)
from kb_retrieval.boundary.vdb.sql_index import SqlVectorIndex
from kb_retrieval.configs import get_settings

logger = logging.getLogger(__name__)


def get_similarity_index(
    provider: str | None = None,
    engine: Engine | None = None,
    chunk_lookup: ChunkLookup | None = None,
    ref_repository: VectorRefRepository | None = None,
) -> SimilarityIndex:
    """
    Build the similarity index named by ``provider``.

    Args:
        provider: 'memory' or 'sql'; defaults to VECTOR_STORE_PROVIDER
        engine: Database engine for the SQL backend
        chunk_lookup: Live-chunk check override
        ref_repository: Ref store the in-memory backend cleans on delete

    Returns:
        SimilarityIndex: Configured index

    Raises:
        ValueError: If the provider is unknown
    """
    settings = get_settings().vector_store
    provider = (provider or settings.provider).lower()

    if provider == "memory":
        logger.info(f"{__name__}:get_similarity_index - Creating in-memory index (local dev mode)")
        return InMemoryVectorIndex(chunk_lookup=chunk_lookup, ref_repository=ref_repository)

    elif provider == "sql":
        engine = engine or get_engine()
        logger.info(
            f"{__name__}:get_similarity_index - Creating SQL index on {engine.dialect.name}"
        )
        return SqlVectorIndex(
            engine,
            index_name=settings.index_name,
            chunk_lookup=chunk_lookup,
        )

    else:
        raise ValueError(
            f"Invalid VECTOR_STORE_PROVIDER: {provider}. "
            f"Must be 'memory' (dev) or 'sql' (production)."
        )


def get_vector_ref_repository(
    provider: str | None = None,
    engine: Engine | None = None,
) -> VectorRefRepository:
    """Ref store matching the index provider: SQL table for 'sql', a dict for 'memory'."""
    provider = (provider or get_settings().vector_store.provider).lower()
    if provider == "memory":
        return InMemoryVectorRefRepository()
    elif provider == "sql":
        return SqlVectorRefRepository(engine or get_engine())
    raise ValueError(f"Invalid VECTOR_STORE_PROVIDER: {provider}")
