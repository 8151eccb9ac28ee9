"""
Embedding CRUD operations.

Row-level writes, keyset pagination and candidate/neighbour selection
for the SQL similarity index.

Dependencies: sqlalchemy, pgvector, kb_retrieval.boundary.db.models
System role: Vector persistence operations
"""

from typing import Any, Iterable, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from kb_retrieval.boundary.db.base import utcnow
from kb_retrieval.boundary.db.CRUD.base_crud import BaseCRUD
from kb_retrieval.boundary.db.CRUD.upsert import dialect_insert
from kb_retrieval.boundary.db.models.embedding_model import EmbeddingModel
from kb_retrieval.models.vector import VectorRecord

# Scope of a query: (column name, value) or None for unfiltered
ScopeClause = tuple[str, str] | None


def _scope_filter(scope: ScopeClause) -> list[Any]:
    if scope is None:
        return []
    column, value = scope
    return [getattr(EmbeddingModel, column) == value]


class EmbeddingCRUD(BaseCRUD[EmbeddingModel]):
    """CRUD operations for EmbeddingModel."""

    def __init__(self) -> None:
        """Initialize EmbeddingCRUD with EmbeddingModel."""
        super().__init__(EmbeddingModel)

    def upsert(self, session: Session, namespace: str, record: VectorRecord) -> None:
        """
        Insert or replace one vector; last write wins.

        Args:
            session: Database session
            namespace: Target namespace
            record: Record to store
        """
        client_id = record.payload.get("client_id")
        kb_id = record.payload.get("kb_id")
        insert = dialect_insert(session, EmbeddingModel)
        stmt = insert.values(
            namespace=namespace,
            chunk_id=record.id,
            client_id=None if client_id is None else str(client_id),
            kb_id=None if kb_id is None else str(kb_id),
            embedding=list(record.vector),
            payload=dict(record.payload),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[EmbeddingModel.namespace, EmbeddingModel.chunk_id],
            set_={
                "client_id": stmt.excluded.client_id,
                "kb_id": stmt.excluded.kb_id,
                "embedding": stmt.excluded.embedding,
                "payload": stmt.excluded.payload,
                "updated_at": utcnow(),
            },
        )
        session.execute(stmt)

    def delete_ids(self, session: Session, namespace: str, ids: Iterable[str]) -> list[str]:
        """
        Delete vectors by chunk id within a namespace.

        Returns:
            list[str]: Chunk ids whose rows were removed
        """
        wanted = list(dict.fromkeys(ids))
        if not wanted:
            return []
        present = session.execute(
            select(EmbeddingModel.chunk_id).where(
                EmbeddingModel.namespace == namespace,
                EmbeddingModel.chunk_id.in_(wanted),
            )
        ).scalars().all()
        if present:
            session.execute(
                delete(EmbeddingModel).where(
                    EmbeddingModel.namespace == namespace,
                    EmbeddingModel.chunk_id.in_(present),
                )
            )
        return list(present)

    def page(
        self,
        session: Session,
        namespace: str,
        after_id: str | None,
        limit: int,
    ) -> Sequence[EmbeddingModel]:
        """Next ``limit`` rows of a namespace ordered by chunk id, after ``after_id``."""
        stmt = select(EmbeddingModel).where(EmbeddingModel.namespace == namespace)
        if after_id is not None:
            stmt = stmt.where(EmbeddingModel.chunk_id > after_id)
        stmt = stmt.order_by(EmbeddingModel.chunk_id).limit(limit)
        return session.execute(stmt).scalars().all()

    def count(self, session: Session, namespace: str) -> int:
        stmt = select(func.count()).select_from(EmbeddingModel).where(
            EmbeddingModel.namespace == namespace
        )
        return int(session.execute(stmt).scalar_one())

    def candidates(self, session: Session, scope: ScopeClause) -> Sequence[EmbeddingModel]:
        """All rows in scope, for in-process ranking on dialects without vector operators."""
        stmt = select(EmbeddingModel).where(*_scope_filter(scope))
        return session.execute(stmt).scalars().all()

    def nearest(
        self,
        session: Session,
        query_vector: list[float],
        scope: ScopeClause,
        top_k: int,
        dimension: int | None = None,
        offset: int = 0,
    ) -> list[tuple[EmbeddingModel, float]]:
        """
        Nearest rows by pgvector cosine distance, ascending.

        Args:
            session: Database session
            query_vector: Query vector
            scope: Namespace, kb or client restriction
            top_k: Maximum rows to return
            dimension: When set, rows of other dimensions are excluded
            offset: Rows to skip, for reading further pages

        Returns:
            list of (row, cosine distance)
        """
        distance = EmbeddingModel.embedding.cosine_distance(query_vector).label("distance")
        stmt = select(EmbeddingModel, distance).where(*_scope_filter(scope))
        if dimension is not None:
            stmt = stmt.where(func.vector_dims(EmbeddingModel.embedding) == dimension)
        stmt = stmt.order_by(distance, EmbeddingModel.chunk_id, EmbeddingModel.namespace).offset(offset).limit(top_k)
        return [(row, float(dist)) for row, dist in session.execute(stmt).all()]


embedding_crud = EmbeddingCRUD()
