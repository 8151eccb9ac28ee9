"""
Knowledge search.

Embeds a question and returns the most similar chunks of one
knowledge base.

Dependencies: kb_retrieval.boundary.embeddings, kb_retrieval.boundary.vdb
System role: Retrieval-side use case
"""

import logging
from typing import Any

from kb_retrieval.boundary.embeddings.base import EmbeddingProvider
from kb_retrieval.boundary.vdb.base import SimilarityIndex, namespace_for
from kb_retrieval.configs import get_settings
from kb_retrieval.models.vector import QueryResult

logger = logging.getLogger(__name__)


class KnowledgeSearch:
    """
    Top-k chunk retrieval for a knowledge base.

    Arguments left as None take VECTOR_STORE_NAMESPACE_PREFIX,
    VECTOR_STORE_TOP_K and VECTOR_STORE_MIN_SCORE.
    """

    def __init__(
        self,
        embeddings: EmbeddingProvider,
        index: SimilarityIndex,
        namespace_prefix: str | None = None,
        top_k: int | None = None,
        min_score: float | None = None,
    ) -> None:
        settings = get_settings().vector_store
        self._embeddings = embeddings
        self._index = index
        self._namespace_prefix = namespace_prefix or settings.namespace_prefix
        self._top_k = settings.top_k if top_k is None else top_k
        self._min_score = settings.min_score if min_score is None else min_score

    def search(
        self,
        kb_id: Any,
        text: str,
        top_k: int | None = None,
        client_id: Any = None,
        min_score: float | None = None,
    ) -> list[QueryResult]:
        """
        Most relevant chunks of ``kb_id`` for ``text``.

        The namespace scopes the query. When ``client_id`` is given,
        results stored for another tenant are dropped as well.

        Args:
            kb_id: Knowledge base to search
            text: Question text
            top_k: Result count; defaults to the configured value
            client_id: Tenant the caller acts for
            min_score: Score threshold; defaults to the configured value

        Returns:
            list[QueryResult]: Best first; empty on transient store failures

        Raises:
            ValidationError: Blank question
            ProviderError: Embedding failed
        """
        query_vector = self._embeddings.embed_one(text)
        namespace = namespace_for(kb_id, self._namespace_prefix)
        filter = {"client_id": str(client_id)} if client_id is not None else None

        results = self._index.query(
            namespace,
            query_vector,
            self._top_k if top_k is None else top_k,
            filter=filter,
            min_score=self._min_score if min_score is None else min_score,
        )
        if client_id is not None:
            results = [r for r in results if r.payload.get("client_id") == str(client_id)]

        logger.info(
            f"{__name__}:search - {len(results)} results",
            extra={"namespace": namespace, "query_len": len(text)},
        )
        return results
