"""
Test suite for KnowledgeLinkage and KnowledgeSearch.

Uses the in-memory index with a fake embedding provider.

System role: Verification of ingestion and retrieval use cases
"""

from unittest.mock import MagicMock

import pytest

from kb_retrieval.core.exceptions import (
    NamespaceError,
    RefWriteError,
    StoreIntegrityWarning,
    ValidationError,
)
from kb_retrieval.core.knowledge_linkage import KnowledgeLinkage
from kb_retrieval.core.knowledge_search import KnowledgeSearch
from kb_retrieval.models.chunk import Chunk
from kb_retrieval.models.linkage import LinkStatus


def chunk(chunk_id: str, content: str = "some text", index: int = 0) -> Chunk:
    return Chunk(id=chunk_id, document_id="doc-1", index=index, content=content)


@pytest.fixture
def linkage(fake_embeddings, memory_index, ref_repository) -> KnowledgeLinkage:
    return KnowledgeLinkage(fake_embeddings, memory_index, ref_repository)


class TestEmbedAndLink:
    """Test suite for embed_and_link()."""

    def test_stores_vector_then_ref(self, linkage, memory_index, ref_repository, live_chunks) -> None:
        """Test the vector lands in the kb namespace and the ref points at it."""
        # Arrange
        live_chunks.ids.add("c1")

        # Act
        result = linkage.embed_and_link(chunk("c1"), kb_id="kb-1", client_id="client-1")

        # Assert
        assert result.status == LinkStatus.LINKED
        assert result.namespace == "kb_kb-1"
        assert memory_index.count("kb_kb-1") == 1
        assert ref_repository.get("c1", "memory") == result.ref
        stored = next(iter(memory_index.stream_all("kb_kb-1", 10)))[0]
        assert stored.payload["client_id"] == "client-1"
        assert stored.payload["kb_id"] == "kb-1"
        assert stored.payload["embedding_model"] == "fake-embedding"

    def test_is_idempotent(self, linkage, memory_index, ref_repository, live_chunks) -> None:
        live_chunks.ids.add("c1")

        linkage.embed_and_link(chunk("c1"), kb_id="kb-1", client_id="client-1")
        linkage.embed_and_link(chunk("c1"), kb_id="kb-1", client_id="client-1")

        assert memory_index.count("kb_kb-1") == 1
        assert len(ref_repository) == 1

    def test_precomputed_vector_skips_embedding(self, linkage, fake_embeddings, live_chunks) -> None:
        live_chunks.ids.add("c1")

        linkage.embed_and_link(chunk("c1"), kb_id="kb-1", client_id="c", vector=[0.1, 0.2, 0.3])

        assert fake_embeddings.calls == []

    def test_missing_chunk_is_reported_as_skipped(self, linkage, ref_repository) -> None:
        with pytest.warns(StoreIntegrityWarning):
            result = linkage.embed_and_link(chunk("gone"), kb_id="kb-1", client_id="c")

        assert result.status == LinkStatus.SKIPPED
        assert ref_repository.get("gone", "memory") is None

    def test_ref_failure_leaves_vector_and_raises(self, fake_embeddings, memory_index, live_chunks) -> None:
        """Test the vector survives a failed ref write and the error names the pending state."""
        # Arrange
        live_chunks.ids.add("c1")
        refs = MagicMock()
        refs.upsert.side_effect = RuntimeError("ref store down")
        linkage = KnowledgeLinkage(fake_embeddings, memory_index, refs)

        # Act
        with pytest.raises(RefWriteError) as exc_info:
            linkage.embed_and_link(chunk("c1"), kb_id="kb-1", client_id="c")

        # Assert
        assert exc_info.value.status == LinkStatus.VECTOR_WRITTEN_REF_PENDING.value
        assert exc_info.value.chunk_id == "c1"
        assert memory_index.count("kb_kb-1") == 1

    def test_dimension_conflict_with_namespace_propagates(self, linkage, memory_index, live_chunks) -> None:
        live_chunks.ids.add("c1")
        memory_index.ensure_namespace("kb_kb-1", 8)

        with pytest.raises(NamespaceError):
            linkage.embed_and_link(chunk("c1"), kb_id="kb-1", client_id="c")


class TestEmbedAndLinkMany:
    """Test suite for embed_and_link_many()."""

    def test_one_embedding_call_for_the_batch(self, linkage, fake_embeddings, live_chunks) -> None:
        live_chunks.ids.update({"c1", "c2"})

        results = linkage.embed_and_link_many(
            [chunk("c1", "first"), chunk("c2", "second", 1)], kb_id="kb-1", client_id="c"
        )

        assert [r.status for r in results] == [LinkStatus.LINKED, LinkStatus.LINKED]
        assert fake_embeddings.calls == [("embed_many", ["first", "second"])]

    def test_ref_failures_are_returned_not_raised(self, fake_embeddings, memory_index, live_chunks) -> None:
        live_chunks.ids.update({"c1", "c2"})
        refs = MagicMock()
        refs.upsert.side_effect = [None, RuntimeError("down")]
        linkage = KnowledgeLinkage(fake_embeddings, memory_index, refs)

        results = linkage.embed_and_link_many([chunk("c1"), chunk("c2")], kb_id="kb-1", client_id="c")

        assert [r.status for r in results] == [
            LinkStatus.LINKED,
            LinkStatus.VECTOR_WRITTEN_REF_PENDING,
        ]

    def test_empty_batch(self, linkage, fake_embeddings) -> None:
        assert linkage.embed_and_link_many([], kb_id="kb-1", client_id="c") == []
        assert fake_embeddings.calls == []


class TestUnlink:
    """Test suite for unlink()."""

    def test_removes_vectors_and_refs(self, linkage, memory_index, ref_repository, live_chunks) -> None:
        live_chunks.ids.update({"c1", "c2"})
        linkage.embed_and_link_many([chunk("c1"), chunk("c2")], kb_id="kb-1", client_id="c")

        removed = linkage.unlink("kb-1", ["c1", "unknown"])

        assert removed == 1
        assert memory_index.count("kb_kb-1") == 1
        assert ref_repository.get("c1", "memory") is None
        assert ref_repository.get("c2", "memory") is not None


class TestKnowledgeSearch:
    """Test suite for KnowledgeSearch.search()."""

    @pytest.fixture
    def search(self, fake_embeddings, memory_index, linkage, live_chunks) -> KnowledgeSearch:
        fake_embeddings.vectors.update(
            {
                "cats": [1.0, 0.0, 0.0],
                "dogs": [0.0, 1.0, 0.0],
                "kittens": [0.9, 0.1, 0.0],
            }
        )
        live_chunks.ids.update({"c-cats", "c-dogs", "c-other"})
        linkage.embed_and_link(chunk("c-cats", "cats"), kb_id="kb-1", client_id="t1")
        linkage.embed_and_link(chunk("c-dogs", "dogs"), kb_id="kb-1", client_id="t1")
        linkage.embed_and_link(chunk("c-other", "cats"), kb_id="kb-2", client_id="t1")
        return KnowledgeSearch(fake_embeddings, memory_index, top_k=5)

    def test_returns_best_match_of_the_knowledge_base(self, search: KnowledgeSearch) -> None:
        results = search.search("kb-1", "kittens", top_k=1)

        assert [r.id for r in results] == ["c-cats"]

    def test_stays_inside_the_knowledge_base(self, search: KnowledgeSearch) -> None:
        results = search.search("kb-1", "kittens")

        assert {r.id for r in results} == {"c-cats", "c-dogs"}

    def test_foreign_tenant_results_are_dropped(self, search: KnowledgeSearch) -> None:
        assert search.search("kb-1", "kittens", client_id="t2") == []

    def test_explicit_zero_top_k_is_rejected(self, search: KnowledgeSearch) -> None:
        with pytest.raises(ValidationError):
            search.search("kb-1", "kittens", top_k=0)


class TestVectorStoreSettingsDefaults:
    """Test suite for linkage and search defaults taken from VECTOR_STORE_* settings."""

    def test_prefix_top_k_and_min_score_follow_environment(
        self, monkeypatch, fake_embeddings, memory_index, ref_repository, live_chunks
    ) -> None:
        """Test unconfigured use cases pick up the namespace prefix and retrieval bounds from env."""
        # Arrange
        monkeypatch.setenv("VECTOR_STORE_NAMESPACE_PREFIX", "tenantkb_")
        monkeypatch.setenv("VECTOR_STORE_TOP_K", "1")
        monkeypatch.setenv("VECTOR_STORE_MIN_SCORE", "0.95")
        fake_embeddings.vectors.update({"cats": [1.0, 0.0, 0.0], "dogs": [0.0, 1.0, 0.0], "kittens": [0.9, 0.1, 0.0]})
        live_chunks.ids.update({"c-cats", "c-dogs"})
        linkage = KnowledgeLinkage(fake_embeddings, memory_index, ref_repository)
        search = KnowledgeSearch(fake_embeddings, memory_index)

        # Act
        linked = linkage.embed_and_link(chunk("c-cats", "cats"), kb_id="42", client_id="t1")
        linkage.embed_and_link(chunk("c-dogs", "dogs"), kb_id="42", client_id="t1")

        # Assert
        assert linkage.namespace("42") == "tenantkb_42"
        assert linked.namespace == "tenantkb_42"
        assert memory_index.count("tenantkb_42") == 2
        assert [r.id for r in search.search("42", "kittens")] == ["c-cats"]
        # min_score still applies when the caller widens top_k
        assert [r.id for r in search.search("42", "kittens", top_k=5)] == ["c-cats"]

    def test_explicit_arguments_win_over_settings(self, monkeypatch, fake_embeddings, memory_index, ref_repository) -> None:
        monkeypatch.setenv("VECTOR_STORE_NAMESPACE_PREFIX", "tenantkb_")

        linkage = KnowledgeLinkage(fake_embeddings, memory_index, ref_repository, namespace_prefix="kb_")

        assert linkage.namespace("42") == "kb_42"
