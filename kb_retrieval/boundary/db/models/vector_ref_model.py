"""
Vector reference ORM model.

Links a chunk to the location of its vector in a specific backend so
domain code never depends on one index implementation.

Dependencies: sqlalchemy, kb_retrieval.boundary.db.base
System role: Backend pointer persistence
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from kb_retrieval.boundary.db.base import Base, utcnow


class VectorRefModel(Base):
    """
    Backend pointer for a chunk's vector; one row per chunk per backend.

    Attributes:
        chunk_id: Chunk identifier (primary key part, cascade delete)
        backend: Backend name, e.g. 'pgvector', 'sql', 'memory' (primary key part)
        index_name: Index or table holding the vector
        vector_id: Backend-native vector identifier
        created_at: Creation timestamp (UTC)
    """

    __tablename__ = "kb_vector_ref"

    chunk_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("kb_chunk.id", ondelete="CASCADE"),
        primary_key=True,
    )

    backend: Mapped[str] = mapped_column(String(40), primary_key=True, default="pgvector")

    index_name: Mapped[str] = mapped_column(String(128), nullable=False)

    vector_id: Mapped[str] = mapped_column(String(256), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
