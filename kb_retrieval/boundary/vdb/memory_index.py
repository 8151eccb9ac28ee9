"""
In-memory similarity index for local development and tests.

Same contract as the SQL index: namespaces carry a fixed dimension,
upserts skip records without a live owning chunk, queries rank by
cosine similarity with numpy and streaming pages by ascending id.

Dependencies: numpy, kb_retrieval.boundary.vdb
System role: Local similarity index
"""

import heapq
import logging
import threading
from typing import Any, Iterable, Iterator, Mapping, Sequence

from kb_retrieval.boundary.vdb.base import ChunkLookup
from kb_retrieval.boundary.vdb.filters import (
    resolve_scope,
    validate_batch_size,
    validate_dimension,
    validate_namespace,
    validate_query_vector,
    validate_top_k,
)
from kb_retrieval.boundary.vdb.refs import VectorRefRepository
from kb_retrieval.boundary.vdb.scoring import rank
from kb_retrieval.boundary.vdb.skips import reject_reason, warn_skipped
from kb_retrieval.core.exceptions import NamespaceError
from kb_retrieval.models.vector import (
    QueryResult,
    UpsertResult,
    VectorRecord,
    VectorRef,
)

logger = logging.getLogger(__name__)


class InMemoryVectorIndex:
    """
    Process-local similarity index.

    Thread-safe: all state is guarded by one lock and ranking runs on
    a snapshot taken under it.

    Args:
        chunk_lookup: Live-chunk check for upserts and stale-result
            filtering; when None every id counts as live
        ref_repository: Refs removed alongside deleted vectors
    """

    def __init__(
        self,
        chunk_lookup: ChunkLookup | None = None,
        ref_repository: VectorRefRepository | None = None,
        index_name: str = "memory",
    ) -> None:
        self._chunk_lookup = chunk_lookup
        self._ref_repository = ref_repository
        self._index_name = index_name
        self._dimensions: dict[str, int] = {}
        self._records: dict[str, dict[str, VectorRecord]] = {}
        self._lock = threading.RLock()

    @property
    def backend_name(self) -> str:
        return "memory"

    @property
    def index_name(self) -> str:
        return self._index_name

    def ensure_namespace(self, namespace: str, dimension: int) -> None:
        """
        Declare ``namespace`` with ``dimension``; a no-op when already declared alike.

        Raises:
            NamespaceError: If the namespace exists with a different dimension
        """
        validate_namespace(namespace)
        validate_dimension(dimension)
        with self._lock:
            existing = self._dimensions.get(namespace)
            if existing is None:
                self._dimensions[namespace] = dimension
                self._records[namespace] = {}
                logger.info(f"{__name__}:ensure_namespace - Created {namespace} (dim={dimension})")
                return
        if existing != dimension:
            raise NamespaceError(
                f"Namespace {namespace} already declared with dimension {existing}, not {dimension}",
                namespace=namespace,
                details={"declared": existing, "requested": dimension},
            )

    def _live_ids(self, ids: Iterable[str]) -> set[str]:
        ids = set(ids)
        if self._chunk_lookup is None:
            return ids
        return self._chunk_lookup.existing_ids(ids)

    def upsert(self, namespace: str, records: Sequence[VectorRecord]) -> UpsertResult:
        """
        Insert or replace records; last write wins per id.

        Records whose chunk is gone or whose dimension does not match the
        namespace are skipped with a StoreIntegrityWarning.

        Raises:
            NamespaceError: If the namespace was never declared
        """
        records = list(records)
        result = UpsertResult()
        with self._lock:
            dimension = self._dimensions.get(namespace)
        if dimension is None:
            raise NamespaceError(f"Namespace {namespace} is not declared", namespace=namespace)
        if not records:
            return result

        live = self._live_ids(record.id for record in records)
        with self._lock:
            stored = self._records[namespace]
            for record in records:
                reason = reject_reason(record, dimension, live)
                if reason is not None:
                    warn_skipped(logger, result, namespace, record.id, reason)
                    continue
                stored[record.id] = record.model_copy(deep=True)
                result.upserted.append(record.id)

        logger.info(
            f"{__name__}:upsert - Upserted {result.written_count} records into {namespace}, "
            f"skipped {result.skipped_count}"
        )
        return result

    def query(
        self,
        namespace: str | None,
        vector: Sequence[float],
        top_k: int,
        filter: Mapping[str, Any] | None = None,
        min_score: float | None = None,
    ) -> list[QueryResult]:
        """
        Top ``top_k`` records by cosine similarity, best first.

        Scope precedence is namespace, then ``kb_id``, then ``client_id``.
        Records of another dimension than the query vector never match.
        """
        scope = resolve_scope(namespace, filter)
        query_vector = validate_query_vector(vector)
        validate_top_k(top_k)

        with self._lock:
            candidates = [
                record
                for ns, stored in self._records.items()
                if self._dimensions[ns] == len(query_vector)
                for record in stored.values()
                if scope.matches(ns, record.payload)
            ]
        if not candidates:
            return []

        # Scope may span namespaces, so an id can appear more than once
        by_id: dict[str, VectorRecord] = {}
        for record in candidates:
            by_id.setdefault(record.id, record)
        # Stale ids go before ranking so they never take a top_k slot
        live = self._live_ids(by_id)
        ids = [record_id for record_id in by_id if record_id in live]
        ranked = rank(ids, [by_id[i].vector for i in ids], query_vector, top_k, min_score)

        results = [
            QueryResult(
                id=ids[i],
                score=score,
                payload={**by_id[ids[i]].payload, "chunk_id": ids[i]},
            )
            for i, score in ranked
        ]
        logger.debug(f"{__name__}:query - {len(results)} results for scope {scope.field}")
        return results

    def delete(self, namespace: str, ids: Iterable[str]) -> int:
        """Remove vectors by id; unknown ids are ignored. Returns the number removed."""
        removed: list[str] = []
        with self._lock:
            stored = self._records.get(namespace, {})
            for record_id in dict.fromkeys(ids):
                if stored.pop(record_id, None) is not None:
                    removed.append(record_id)
        if removed and self._ref_repository is not None:
            self._ref_repository.delete(removed, self.backend_name)
        logger.info(f"{__name__}:delete - Removed {len(removed)} records from {namespace}")
        return len(removed)

    def stream_all(self, namespace: str, batch_size: int) -> Iterator[list[VectorRecord]]:
        """Every record of ``namespace`` in ascending id order, in batches of ``batch_size``."""
        validate_batch_size(batch_size)
        return self._pages(namespace, batch_size)

    def _pages(self, namespace: str, batch_size: int) -> Iterator[list[VectorRecord]]:
        after: str | None = None
        while True:
            with self._lock:
                stored = self._records.get(namespace, {})
                keys = heapq.nsmallest(
                    batch_size,
                    (key for key in stored if after is None or key > after),
                )
                batch = [stored[key].model_copy(deep=True) for key in keys]
            if not batch:
                return
            yield batch
            if len(batch) < batch_size:
                return
            after = batch[-1].id

    def count(self, namespace: str) -> int:
        with self._lock:
            return len(self._records.get(namespace, {}))

    def ref_for(self, namespace: str, record_id: str) -> VectorRef:
        return VectorRef(
            chunk_id=record_id,
            backend=self.backend_name,
            index_name=self.index_name,
            vector_id=f"{namespace}:{record_id}",
        )
