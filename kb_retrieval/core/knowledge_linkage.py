"""
Knowledge linkage.

Associates a chunk with its stored vector: embed the chunk text, upsert
the vector into the knowledge base namespace, then record a VectorRef
pointing at it. Both steps are idempotent and keyed by chunk id. They
are not atomic: when the ref write fails the vector stays valid and the
link must be retried.

Dependencies: kb_retrieval.boundary.embeddings, kb_retrieval.boundary.vdb
System role: Ingestion-side glue between embeddings and the similarity index
"""

import logging
from typing import Any, Iterable, Sequence

from kb_retrieval.boundary.embeddings.base import EmbeddingProvider
from kb_retrieval.boundary.vdb.base import SimilarityIndex, namespace_for
from kb_retrieval.boundary.vdb.refs import VectorRefRepository
from kb_retrieval.configs import get_settings
from kb_retrieval.core.exceptions import RefWriteError
from kb_retrieval.models.chunk import Chunk
from kb_retrieval.models.linkage import LinkResult, LinkStatus
from kb_retrieval.models.vector import Payload, UpsertResult, VectorRecord

logger = logging.getLogger(__name__)


class KnowledgeLinkage:
    """Embeds chunks and links them to their vectors in one backend."""

    def __init__(
        self,
        embeddings: EmbeddingProvider,
        index: SimilarityIndex,
        refs: VectorRefRepository,
        namespace_prefix: str | None = None,
    ) -> None:
        """
        Initialize linkage with its collaborators.

        Args:
            embeddings: Provider used when no vector is supplied
            index: Similarity index the vectors are written to
            refs: Store of chunk to backend pointers
            namespace_prefix: Prefix of knowledge base namespaces;
                defaults to VECTOR_STORE_NAMESPACE_PREFIX
        """
        self._embeddings = embeddings
        self._index = index
        self._refs = refs
        self._namespace_prefix = namespace_prefix or get_settings().vector_store.namespace_prefix

    def namespace(self, kb_id: Any) -> str:
        return namespace_for(kb_id, self._namespace_prefix)

    def _payload(self, chunk: Chunk, kb_id: Any, client_id: Any) -> Payload:
        return {
            "client_id": str(client_id),
            "kb_id": str(kb_id),
            "document_id": chunk.document_id,
            "chunk_index": chunk.index,
            "embedding_model": self._embeddings.model(),
        }

    def embed_and_link(
        self,
        chunk: Chunk,
        kb_id: Any,
        client_id: Any,
        vector: Sequence[float] | None = None,
    ) -> LinkResult:
        """
        Store the chunk's vector and record where it lives.

        Args:
            chunk: Chunk to link
            kb_id: Owning knowledge base; selects the namespace
            client_id: Owning tenant, stored for tenant-scoped queries
            vector: Precomputed embedding; the chunk text is embedded when None

        Returns:
            LinkResult: LINKED, or SKIPPED when the index refused the record

        Raises:
            ValidationError: Blank chunk text
            ProviderError: Embedding failed
            NamespaceError: Vector dimension conflicts with the namespace
            RefWriteError: Vector stored but its reference was not
        """
        namespace = self.namespace(kb_id)
        if vector is None:
            vector = self._embeddings.embed_one(chunk.content)
        vector = list(vector)

        self._index.ensure_namespace(namespace, len(vector))
        record = VectorRecord(
            id=chunk.id,
            vector=vector,
            payload=self._payload(chunk, kb_id, client_id),
        )
        result = self._index.upsert(namespace, [record])
        skipped = _skipped_reason(result, chunk.id)
        if skipped is not None:
            return LinkResult(
                chunk_id=chunk.id,
                namespace=namespace,
                status=LinkStatus.SKIPPED,
                reason=skipped,
            )
        return self._link(chunk.id, namespace, raise_on_failure=True)

    def embed_and_link_many(
        self,
        chunks: Sequence[Chunk],
        kb_id: Any,
        client_id: Any,
    ) -> list[LinkResult]:
        """
        Batch variant of embed_and_link with one embedding call for all chunks.

        Ref failures do not raise here; the affected chunks come back as
        VECTOR_WRITTEN_REF_PENDING so the caller can retry just those.

        Returns:
            list[LinkResult]: One result per chunk, in input order
        """
        chunks = list(chunks)
        if not chunks:
            return []
        namespace = self.namespace(kb_id)
        vectors = self._embeddings.embed_many([chunk.content for chunk in chunks])

        self._index.ensure_namespace(namespace, len(vectors[0]))
        records = [
            VectorRecord(id=chunk.id, vector=vector, payload=self._payload(chunk, kb_id, client_id))
            for chunk, vector in zip(chunks, vectors)
        ]
        result = self._index.upsert(namespace, records)

        results = []
        for chunk in chunks:
            skipped = _skipped_reason(result, chunk.id)
            if skipped is not None:
                results.append(
                    LinkResult(
                        chunk_id=chunk.id,
                        namespace=namespace,
                        status=LinkStatus.SKIPPED,
                        reason=skipped,
                    )
                )
                continue
            results.append(self._link(chunk.id, namespace, raise_on_failure=False))

        linked = sum(1 for r in results if r.status == LinkStatus.LINKED)
        logger.info(
            f"{__name__}:embed_and_link_many - Linked {linked}/{len(chunks)} chunks",
            extra={"namespace": namespace, "chunk_count": len(chunks)},
        )
        return results

    def _link(self, chunk_id: str, namespace: str, raise_on_failure: bool) -> LinkResult:
        ref = self._index.ref_for(namespace, chunk_id)
        try:
            self._refs.upsert(ref)
        except Exception as e:
            logger.error(
                f"{__name__}:_link - Vector stored but ref write failed for {chunk_id}: "
                f"{type(e).__name__}: {e}",
                exc_info=True,
            )
            if raise_on_failure:
                raise RefWriteError(
                    chunk_id, LinkStatus.VECTOR_WRITTEN_REF_PENDING.value
                ) from e
            return LinkResult(
                chunk_id=chunk_id,
                namespace=namespace,
                status=LinkStatus.VECTOR_WRITTEN_REF_PENDING,
                reason=f"{type(e).__name__}: {e}",
            )
        return LinkResult(
            chunk_id=chunk_id,
            namespace=namespace,
            status=LinkStatus.LINKED,
            ref=ref,
        )

    def unlink(self, kb_id: Any, chunk_ids: Iterable[str]) -> int:
        """
        Delete the vectors of ``chunk_ids`` and then their refs.

        Returns:
            int: Number of vectors removed
        """
        chunk_ids = list(chunk_ids)
        removed = self._index.delete(self.namespace(kb_id), chunk_ids)
        self._refs.delete(chunk_ids, self._index.backend_name)
        return removed


def _skipped_reason(result: UpsertResult, chunk_id: str) -> str | None:
    for skipped in result.skipped:
        if skipped.id == chunk_id:
            return skipped.reason
    return None
