"""
Chunk ORM model.

The relational persistence layer owns the document/chunk lifecycle; the
retrieval subsystem maps the table to check that an upserted vector
still has a live owning chunk and to cascade deletions.

Dependencies: sqlalchemy, kb_retrieval.boundary.db.base
System role: Read-side mapping of knowledge base chunks
"""

from typing import Any

from sqlalchemy import JSON, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from kb_retrieval.boundary.db.base import Base, TimestampMixin


class ChunkModel(Base, TimestampMixin):
    """
    Knowledge base chunk.

    Attributes:
        id: Opaque chunk identifier (primary key)
        document_id: Owning document identifier
        chunk_index: Zero-based position within the document
        content: Chunk text
        tokens: Token count, if known
        meta: Free-form chunk metadata (column ``metadata``)
    """

    __tablename__ = "kb_chunk"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    document_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
        doc="Owning document identifier",
    )

    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    tokens: Mapped[int | None] = mapped_column(Integer, nullable=True)

    meta: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSON, nullable=True)
