"""
Embedding ORM model.

Stores one vector per (namespace, chunk) with the payload used for
filtered queries. ``client_id`` and ``kb_id`` are lifted out of the
payload into indexed columns for tenant and knowledge-base scoping.

Dependencies: sqlalchemy, pgvector, kb_retrieval.boundary.db.base
System role: Vector persistence for similarity search
"""

from typing import Any

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from kb_retrieval.boundary.db.base import Base, TimestampMixin
from kb_retrieval.boundary.db.models.types import EmbeddingType, PayloadType


class EmbeddingModel(Base, TimestampMixin):
    """
    Vector record keyed by namespace and chunk id.

    Attributes:
        namespace: Namespace the vector belongs to (primary key part)
        chunk_id: Chunk the vector represents (primary key part, cascade delete)
        client_id: Tenant identifier for tenant-scoped queries
        kb_id: Knowledge base identifier for kb-scoped queries
        embedding: Vector (pgvector on PostgreSQL, JSON elsewhere)
        payload: Scalar metadata map

    Constraints:
        chunk_id: Foreign key ON DELETE CASCADE to kb_chunk.id
    """

    __tablename__ = "kb_embedding"

    namespace: Mapped[str] = mapped_column(String(128), primary_key=True)

    chunk_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("kb_chunk.id", ondelete="CASCADE"),
        primary_key=True,
    )

    client_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    kb_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    embedding: Mapped[Any] = mapped_column(EmbeddingType, nullable=False)

    payload: Mapped[dict[str, Any]] = mapped_column(PayloadType, nullable=False, default=dict)
