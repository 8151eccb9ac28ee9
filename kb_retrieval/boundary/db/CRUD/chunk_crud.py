"""
Chunk CRUD operations.

Existence checks the index runs before writing vectors, and the
chunk copy that precedes a migration into another database.

Dependencies: sqlalchemy, kb_retrieval.boundary.db.models
System role: Live-chunk lookups and cross-database chunk copies
"""

from typing import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from kb_retrieval.boundary.db.CRUD.base_crud import BaseCRUD
from kb_retrieval.boundary.db.models.chunk_model import ChunkModel
from kb_retrieval.boundary.db.models.embedding_model import EmbeddingModel


class ChunkCRUD(BaseCRUD[ChunkModel]):
    """CRUD operations for ChunkModel."""

    def __init__(self) -> None:
        """Initialize ChunkCRUD with ChunkModel."""
        super().__init__(ChunkModel)

    def existing_ids(self, session: Session, ids: Iterable[str]) -> set[str]:
        """
        Return the subset of ``ids`` that have a chunk row.

        Args:
            session: Database session
            ids: Candidate chunk identifiers

        Returns:
            set[str]: Identifiers of live chunks
        """
        wanted = list(dict.fromkeys(ids))
        if not wanted:
            return set()
        stmt = select(ChunkModel.id).where(ChunkModel.id.in_(wanted))
        return set(session.execute(stmt).scalars().all())


    def page_in_namespace(
        self,
        session: Session,
        namespace: str,
        after_id: str | None,
        limit: int,
    ) -> Sequence[ChunkModel]:
        """Next ``limit`` chunks owning a vector in ``namespace``, ordered by id."""
        stmt = (
            select(ChunkModel)
            .join(EmbeddingModel, EmbeddingModel.chunk_id == ChunkModel.id)
            .where(EmbeddingModel.namespace == namespace)
        )
        if after_id is not None:
            stmt = stmt.where(ChunkModel.id > after_id)
        stmt = stmt.order_by(ChunkModel.id).limit(limit)
        return session.execute(stmt).scalars().all()

    def copy_into(self, session: Session, chunks: Iterable[ChunkModel]) -> int:
        """
        Write copies of chunks loaded from another database.

        Rows already present are overwritten with the copied values.

        Returns:
            int: Number of chunks written
        """
        written = 0
        for chunk in chunks:
            session.merge(
                ChunkModel(
                    id=chunk.id,
                    document_id=chunk.document_id,
                    chunk_index=chunk.chunk_index,
                    content=chunk.content,
                    tokens=chunk.tokens,
                    meta=chunk.meta,
                )
            )
            written += 1
        session.flush()
        return written


chunk_crud = ChunkCRUD()
