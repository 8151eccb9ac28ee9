"""
Vector reference repositories.

A VectorRef says where a chunk's vector lives in a given backend. The
SQL repository persists refs in ``kb_vector_ref`` with last-write-wins
upserts; the in-memory one backs local development and tests.

Dependencies: sqlalchemy, kb_retrieval.boundary.db
System role: Chunk to backend pointer storage
"""

import logging
import threading
from typing import Iterable, Protocol, runtime_checkable

from sqlalchemy import Engine

from kb_retrieval.boundary.db.connection import get_session_factory
from kb_retrieval.boundary.db.CRUD.vector_ref_crud import vector_ref_crud
from kb_retrieval.models.vector import VectorRef

logger = logging.getLogger(__name__)


@runtime_checkable
class VectorRefRepository(Protocol):
    """Storage of chunk to backend vector pointers, keyed by (chunk_id, backend)."""

    def upsert(self, ref: VectorRef) -> None:
        ...

    def get(self, chunk_id: str, backend: str) -> VectorRef | None:
        ...

    def delete(self, chunk_ids: Iterable[str], backend: str) -> int:
        ...


class SqlVectorRefRepository:
    """VectorRef storage in the relational database."""

    def __init__(self, engine: Engine) -> None:
        self._session_factory = get_session_factory(engine)

    def upsert(self, ref: VectorRef) -> None:
        """
        Insert or replace the reference for (chunk_id, backend).

        Args:
            ref: Reference to persist

        Raises:
            SQLAlchemyError: If the write fails
        """
        with self._session_factory() as session, session.begin():
            vector_ref_crud.upsert(session, ref)
        logger.debug(
            f"{__name__}:upsert - Stored ref",
            extra={"chunk_id": ref.chunk_id, "backend": ref.backend},
        )

    def get(self, chunk_id: str, backend: str) -> VectorRef | None:
        with self._session_factory() as session:
            return vector_ref_crud.get_ref(session, chunk_id, backend)

    def delete(self, chunk_ids: Iterable[str], backend: str) -> int:
        with self._session_factory() as session, session.begin():
            return vector_ref_crud.delete_for_chunks(session, chunk_ids, backend)


class InMemoryVectorRefRepository:
    """Process-local VectorRef storage."""

    def __init__(self) -> None:
        self._refs: dict[tuple[str, str], VectorRef] = {}
        self._lock = threading.Lock()

    def upsert(self, ref: VectorRef) -> None:
        with self._lock:
            self._refs[(ref.chunk_id, ref.backend)] = ref

    def get(self, chunk_id: str, backend: str) -> VectorRef | None:
        with self._lock:
            return self._refs.get((chunk_id, backend))

    def delete(self, chunk_ids: Iterable[str], backend: str) -> int:
        removed = 0
        with self._lock:
            for chunk_id in set(chunk_ids):
                if self._refs.pop((chunk_id, backend), None) is not None:
                    removed += 1
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._refs)
