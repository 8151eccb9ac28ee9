"""
Similarity index contract.

Every backend is a variant satisfying SimilarityIndex; no shared base
class is required. ChunkLookup is the read-only view of the relational
chunk store that indexes consult before writing a vector.

Dependencies: kb_retrieval.models
System role: Capability set of similarity index backends
"""

from typing import Any, Iterable, Iterator, Mapping, Protocol, Sequence, runtime_checkable

from kb_retrieval.models.vector import QueryResult, UpsertResult, VectorRecord, VectorRef


def namespace_for(kb_id: Any, prefix: str = "kb_") -> str:
    """Namespace of a knowledge base, e.g. ``kb_<uuid>``."""
    return f"{prefix}{kb_id}"


@runtime_checkable
class ChunkLookup(Protocol):
    """Existence checks against the store that owns chunk lifecycle."""

    def existing_ids(self, ids: Iterable[str]) -> set[str]:
        ...


@runtime_checkable
class SimilarityIndex(Protocol):
    """Namespace-scoped CRUD and nearest-neighbour query over vector records."""

    @property
    def backend_name(self) -> str:
        ...

    @property
    def index_name(self) -> str:
        ...

    def ensure_namespace(self, namespace: str, dimension: int) -> None:
        ...

    def upsert(self, namespace: str, records: Sequence[VectorRecord]) -> UpsertResult:
        ...

    def query(
        self,
        namespace: str | None,
        vector: Sequence[float],
        top_k: int,
        filter: Mapping[str, Any] | None = None,
        min_score: float | None = None,
    ) -> list[QueryResult]:
        ...

    def delete(self, namespace: str, ids: Iterable[str]) -> int:
        ...

    def stream_all(self, namespace: str, batch_size: int) -> Iterator[list[VectorRecord]]:
        ...

    def count(self, namespace: str) -> int:
        ...

    def ref_for(self, namespace: str, record_id: str) -> VectorRef:
        ...
