"""
SQL similarity index.

Stores vectors in ``kb_embedding``. On PostgreSQL the column is a
pgvector ``vector`` and nearest-neighbour ordering runs in the database
with the cosine distance operator; on other dialects (SQLite in tests)
vectors are JSON and candidates are ranked in-process with numpy.

Every operation runs in its own session, so a failed query never
leaves a poisoned transaction behind for unrelated callers.

Dependencies: sqlalchemy, pgvector, numpy, kb_retrieval.boundary.db
System role: Production similarity index
"""

import logging
from typing import Any, Iterable, Iterator, Mapping, Sequence

from sqlalchemy import Engine, select, text
from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from kb_retrieval.boundary.db.connection import get_session_factory
from kb_retrieval.boundary.db.CRUD.chunk_crud import chunk_crud
from kb_retrieval.boundary.db.CRUD.embedding_crud import embedding_crud
from kb_retrieval.boundary.db.CRUD.namespace_crud import namespace_crud
from kb_retrieval.boundary.db.CRUD.vector_ref_crud import vector_ref_crud
from kb_retrieval.boundary.db.models.chunk_model import ChunkModel
from kb_retrieval.boundary.db.models.embedding_model import EmbeddingModel
from kb_retrieval.boundary.db.models.types import to_float_list
from kb_retrieval.boundary.vdb.base import ChunkLookup
from kb_retrieval.boundary.vdb.classification import is_transient_store_error
from kb_retrieval.boundary.vdb.filters import (
    QueryScope,
    resolve_scope,
    validate_batch_size,
    validate_dimension,
    validate_namespace,
    validate_query_vector,
    validate_top_k,
)
from kb_retrieval.boundary.vdb.scoring import rank
from kb_retrieval.boundary.vdb.skips import reject_reason, warn_skipped
from kb_retrieval.core.exceptions import (
    NamespaceError,
    StoreTransientError,
    VectorStoreError,
)
from kb_retrieval.models.vector import (
    QueryResult,
    UpsertResult,
    VectorRecord,
    VectorRef,
)
from kb_retrieval.observability.log_utils import log_store_failure

logger = logging.getLogger(__name__)

# pgvector page size, as a multiple of top_k, while skipping stale rows
_NEAREST_OVERFETCH = 4


class SqlVectorIndex:
    """
    Similarity index over the relational database.

    Args:
        engine: Engine bound to the database holding ``kb_chunk``
        index_name: Name recorded in vector references
        chunk_lookup: External live-chunk check; when None the
            ``kb_chunk`` table is consulted in the same transaction
        enrich_payload: Add chunk text and position to query payloads
    """

    def __init__(
        self,
        engine: Engine,
        index_name: str = EmbeddingModel.__tablename__,
        chunk_lookup: ChunkLookup | None = None,
        enrich_payload: bool = True,
    ) -> None:
        self._engine = engine
        self._session_factory = get_session_factory(engine)
        self._index_name = index_name
        self._chunk_lookup = chunk_lookup
        self._enrich_payload = enrich_payload

    @property
    def is_pgvector(self) -> bool:
        return self._engine.dialect.name == "postgresql"

    @property
    def backend_name(self) -> str:
        return "pgvector" if self.is_pgvector else "sql"

    @property
    def index_name(self) -> str:
        return self._index_name

    # ------------------------------------------------------------------
    # Namespaces
    # ------------------------------------------------------------------

    def ensure_namespace(self, namespace: str, dimension: int) -> None:
        """
        Declare ``namespace`` with ``dimension``. Never touches stored vectors.

        Raises:
            NamespaceError: If the namespace exists with a different dimension
        """
        validate_namespace(namespace)
        validate_dimension(dimension)
        try:
            with self._session_factory() as session, session.begin():
                if self.is_pgvector:
                    session.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
                existing = namespace_crud.get(session, namespace)
                if existing is None:
                    namespace_crud.create(session, name=namespace, dimension=dimension)
                    logger.info(
                        f"{__name__}:ensure_namespace - Created {namespace} (dim={dimension})"
                    )
                    return
                declared = existing.dimension
        except IntegrityError as e:
            # A concurrent caller declared it first; compare against theirs
            with self._session_factory() as session:
                declared = self._dimension_of(session, namespace)
            if declared is None:
                raise _store_error("ensure_namespace", namespace, e) from e
        except SQLAlchemyError as e:
            raise _store_error("ensure_namespace", namespace, e) from e

        if declared != dimension:
            raise NamespaceError(
                f"Namespace {namespace} already declared with dimension {declared}, not {dimension}",
                namespace=namespace,
                details={"declared": declared, "requested": dimension},
            )

    def _dimension_of(self, session: Session, namespace: str) -> int | None:
        declared = namespace_crud.get(session, namespace)
        return None if declared is None else declared.dimension

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _live_ids(self, session: Session, ids: list[str]) -> set[str]:
        if self._chunk_lookup is not None:
            return self._chunk_lookup.existing_ids(ids)
        return chunk_crud.existing_ids(session, ids)

    def upsert(self, namespace: str, records: Sequence[VectorRecord]) -> UpsertResult:
        """
        Insert or replace records; last write wins per (namespace, id).

        Each record is written under its own savepoint. A record without
        a live owning chunk, with the wrong dimension, or rejected by the
        database is skipped with a StoreIntegrityWarning; the rest of the
        batch still commits.

        Raises:
            NamespaceError: If the namespace was never declared
            StoreTransientError: Connectivity loss during the write
            VectorStoreError: Any other database failure
        """
        records = list(records)
        result = UpsertResult()
        try:
            with self._session_factory() as session, session.begin():
                dimension = self._dimension_of(session, namespace)
                if dimension is None:
                    raise NamespaceError(
                        f"Namespace {namespace} is not declared", namespace=namespace
                    )
                if not records:
                    return result

                live = self._live_ids(session, [record.id for record in records])
                for record in records:
                    reason = reject_reason(record, dimension, live)
                    if reason is None:
                        try:
                            with session.begin_nested():
                                embedding_crud.upsert(session, namespace, record)
                        except (IntegrityError, DataError) as e:
                            reason = f"rejected by database: {type(e).__name__}"
                    if reason is not None:
                        warn_skipped(logger, result, namespace, record.id, reason)
                        continue
                    result.upserted.append(record.id)
        except SQLAlchemyError as e:
            raise _store_error("upsert", namespace, e) from e

        logger.info(
            f"{__name__}:upsert - Upserted {result.written_count} records into {namespace}, "
            f"skipped {result.skipped_count}"
        )
        return result

    def delete(self, namespace: str, ids: Iterable[str]) -> int:
        """
        Remove vectors by id and their refs in this backend.

        Unknown ids are ignored. Returns the number of vectors removed.
        """
        try:
            with self._session_factory() as session, session.begin():
                removed = embedding_crud.delete_ids(session, namespace, ids)
                refs = vector_ref_crud.delete_for_chunks(session, removed, self.backend_name)
        except SQLAlchemyError as e:
            raise _store_error("delete", namespace, e) from e

        logger.info(
            f"{__name__}:delete - Removed {len(removed)} records and {refs} refs from {namespace}"
        )
        return len(removed)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def query(
        self,
        namespace: str | None,
        vector: Sequence[float],
        top_k: int,
        filter: Mapping[str, Any] | None = None,
        min_score: float | None = None,
    ) -> list[QueryResult]:
        """
        Top ``top_k`` records by cosine similarity (``1 - distance``), best first.

        Scope precedence is namespace, then ``kb_id``, then ``client_id``.
        Transient backend failures are logged and yield an empty list;
        malformed arguments raise ValidationError.

        Returns:
            list[QueryResult]: Results whose chunk still exists
        """
        scope = resolve_scope(namespace, filter)
        query_vector = validate_query_vector(vector)
        validate_top_k(top_k)

        try:
            with self._session_factory() as session:
                ranked = self._rank(session, scope, query_vector, top_k, min_score)
                results = self._to_results(session, ranked)
        except SQLAlchemyError as e:
            if not is_transient_store_error(e):
                raise _store_error("query", namespace, e) from e
            log_store_failure(
                logger,
                "query",
                e,
                namespace=namespace,
                scope=scope.field,
                top_k=top_k,
            )
            return []

        logger.debug(f"{__name__}:query - {len(results)} results for scope {scope.field}")
        return results

    def _rank(
        self,
        session: Session,
        scope: QueryScope,
        query_vector: list[float],
        top_k: int,
        min_score: float | None,
    ) -> list[tuple[EmbeddingModel, float]]:
        """Best ``top_k`` live rows, one per chunk id, with their scores."""
        if self.is_pgvector:
            return self._nearest_live(session, scope, query_vector, top_k, min_score)

        rows = [
            row
            for row in embedding_crud.candidates(session, scope.as_clause())
            if len(row.embedding) == len(query_vector)
        ]
        live = self._live_ids(session, [row.chunk_id for row in rows])
        rows = [row for row in rows if row.chunk_id in live]
        ranked = rank(
            [row.chunk_id for row in rows],
            [to_float_list(row.embedding) for row in rows],
            query_vector,
            len(rows),
            min_score,
        )
        return _distinct([(rows[i], score) for i, score in ranked], top_k)

    def _nearest_live(
        self,
        session: Session,
        scope: QueryScope,
        query_vector: list[float],
        top_k: int,
        min_score: float | None,
    ) -> list[tuple[EmbeddingModel, float]]:
        # Stale rows are only known after the lookup, so pages are read
        # until top_k live rows are found or the scope is exhausted
        page_size = top_k * _NEAREST_OVERFETCH
        kept: list[tuple[EmbeddingModel, float]] = []
        offset = 0
        while True:
            rows = embedding_crud.nearest(
                session,
                query_vector,
                scope.as_clause(),
                page_size,
                dimension=len(query_vector),
                offset=offset,
            )
            live = self._live_ids(session, [row.chunk_id for row, _ in rows])
            for row, distance in rows:
                score = 1.0 - distance
                if min_score is not None and score < min_score:
                    return _distinct(kept, top_k)
                if row.chunk_id in live:
                    kept.append((row, score))
            kept = _distinct(kept, top_k)
            if len(kept) == top_k or len(rows) < page_size:
                return kept
            offset += page_size

    def _to_results(
        self,
        session: Session,
        ranked: list[tuple[EmbeddingModel, float]],
    ) -> list[QueryResult]:
        if not ranked:
            return []

        chunks: dict[str, ChunkModel] = {}
        if self._enrich_payload:
            ids = [row.chunk_id for row, _ in ranked]
            chunks = {
                chunk.id: chunk
                for chunk in session.execute(
                    select(ChunkModel).where(ChunkModel.id.in_(ids))
                ).scalars()
            }

        results: list[QueryResult] = []
        for row, score in ranked:
            payload = {**(row.payload or {}), "chunk_id": row.chunk_id}
            # Liveness may come from an external lookup with no kb_chunk row
            chunk = chunks.get(row.chunk_id)
            if chunk is not None:
                payload.update(
                    document_id=chunk.document_id,
                    chunk_index=chunk.chunk_index,
                    text=chunk.content,
                )
            results.append(QueryResult(id=row.chunk_id, score=score, payload=payload))
        return results

    def stream_all(self, namespace: str, batch_size: int) -> Iterator[list[VectorRecord]]:
        """
        Every record of ``namespace`` in ascending id order.

        Keyset pagination: each batch is read in a short session of its
        own, so the stream holds no transaction open between batches.
        """
        validate_batch_size(batch_size)
        return self._pages(namespace, batch_size)

    def _pages(self, namespace: str, batch_size: int) -> Iterator[list[VectorRecord]]:
        after: str | None = None
        while True:
            try:
                with self._session_factory() as session:
                    rows = embedding_crud.page(session, namespace, after, batch_size)
                    batch = [_to_record(row) for row in rows]
            except SQLAlchemyError as e:
                raise _store_error("stream_all", namespace, e) from e
            if not batch:
                return
            yield batch
            if len(batch) < batch_size:
                return
            after = batch[-1].id

    def count(self, namespace: str) -> int:
        with self._session_factory() as session:
            return embedding_crud.count(session, namespace)

    def ref_for(self, namespace: str, record_id: str) -> VectorRef:
        return VectorRef(
            chunk_id=record_id,
            backend=self.backend_name,
            index_name=self.index_name,
            vector_id=record_id,
        )


def _to_record(row: EmbeddingModel) -> VectorRecord:
    return VectorRecord(
        id=row.chunk_id,
        vector=to_float_list(row.embedding),
        payload=dict(row.payload or {}),
    )


def _store_error(operation: str, namespace: str | None, exc: SQLAlchemyError) -> VectorStoreError:
    error_cls = StoreTransientError if is_transient_store_error(exc) else VectorStoreError
    return error_cls(
        f"Similarity index {operation} failed: {type(exc).__name__}",
        operation=operation,
        details={"namespace": namespace},
    )


def _distinct(
    ranked: list[tuple[EmbeddingModel, float]],
    top_k: int,
) -> list[tuple[EmbeddingModel, float]]:
    # A kb or client scope spans namespaces; keep each chunk's best row
    seen: set[str] = set()
    kept: list[tuple[EmbeddingModel, float]] = []
    for row, score in ranked:
        if row.chunk_id in seen:
            continue
        seen.add(row.chunk_id)
        kept.append((row, score))
        if len(kept) == top_k:
            break
    return kept
