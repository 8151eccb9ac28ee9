"""
Vector reference CRUD operations.

Upserts are dialect-native ``INSERT ... ON CONFLICT DO UPDATE`` so
concurrent writers for the same chunk and backend converge on the last
write instead of failing on the primary key.

Dependencies: sqlalchemy, kb_retrieval.boundary.db.models
System role: Backend pointer persistence operations
"""

from typing import Iterable

from sqlalchemy import delete
from sqlalchemy.orm import Session

from kb_retrieval.boundary.db.CRUD.base_crud import BaseCRUD
from kb_retrieval.boundary.db.CRUD.upsert import dialect_insert
from kb_retrieval.boundary.db.models.vector_ref_model import VectorRefModel
from kb_retrieval.models.vector import VectorRef


class VectorRefCRUD(BaseCRUD[VectorRefModel]):
    """CRUD operations for VectorRefModel."""

    def __init__(self) -> None:
        """Initialize VectorRefCRUD with VectorRefModel."""
        super().__init__(VectorRefModel)

    def upsert(self, session: Session, ref: VectorRef) -> None:
        """
        Insert or replace the reference for (chunk_id, backend).

        Args:
            session: Database session
            ref: Reference to store
        """
        insert = dialect_insert(session, VectorRefModel)
        stmt = insert.values(
            chunk_id=ref.chunk_id,
            backend=ref.backend,
            index_name=ref.index_name,
            vector_id=ref.vector_id,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[VectorRefModel.chunk_id, VectorRefModel.backend],
            set_={
                "index_name": stmt.excluded.index_name,
                "vector_id": stmt.excluded.vector_id,
            },
        )
        session.execute(stmt)

    def get_ref(self, session: Session, chunk_id: str, backend: str) -> VectorRef | None:
        row = self.get(session, (chunk_id, backend))
        if row is None:
            return None
        return VectorRef(
            chunk_id=row.chunk_id,
            backend=row.backend,
            index_name=row.index_name,
            vector_id=row.vector_id,
        )

    def delete_for_chunks(self, session: Session, chunk_ids: Iterable[str], backend: str) -> int:
        """
        Delete the references of ``chunk_ids`` in one backend.

        Returns:
            int: Number of rows removed
        """
        ids = list(chunk_ids)
        if not ids:
            return 0
        stmt = delete(VectorRefModel).where(
            VectorRefModel.backend == backend,
            VectorRefModel.chunk_id.in_(ids),
        )
        return session.execute(stmt).rowcount or 0


vector_ref_crud = VectorRefCRUD()
