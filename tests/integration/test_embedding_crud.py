"""
Test suite for the embedding and chunk CRUD singletons.

Runs against in-memory SQLite with real tables.

System role: Verification of vector persistence operations
"""

from kb_retrieval.boundary.db.CRUD import chunk_crud, embedding_crud, namespace_crud
from kb_retrieval.boundary.db.models import EmbeddingModel
from kb_retrieval.models.vector import VectorRecord


class TestEmbeddingCRUD:
    """Test suite for EmbeddingCRUD."""

    def test_upsert_lifts_scoping_ids_into_columns(self, session_factory, add_chunks) -> None:
        add_chunks("c1")
        rec = VectorRecord(id="c1", vector=[0.5, 0.5], payload={"kb_id": "kb-1", "client_id": 7})

        with session_factory() as session, session.begin():
            embedding_crud.upsert(session, "kb_kb-1", rec)

        with session_factory() as session:
            row = embedding_crud.get(session, ("kb_kb-1", "c1"))
            assert row.kb_id == "kb-1"
            assert row.client_id == "7"
            assert row.payload == {"kb_id": "kb-1", "client_id": 7}

    def test_same_chunk_in_two_namespaces(self, session_factory, add_chunks) -> None:
        add_chunks("c1")
        rec = VectorRecord(id="c1", vector=[1.0])

        with session_factory() as session, session.begin():
            embedding_crud.upsert(session, "kb", rec)
            embedding_crud.upsert(session, "kb2", rec)

        with session_factory() as session:
            assert embedding_crud.count(session, "kb") == 1
            assert embedding_crud.count(session, "kb2") == 1

    def test_page_is_keyset_ordered(self, session_factory, add_chunks) -> None:
        ids = add_chunks("a", "b", "c", "d", "e")
        with session_factory() as session, session.begin():
            for chunk_id in reversed(ids):
                embedding_crud.upsert(session, "kb", VectorRecord(id=chunk_id, vector=[1.0]))

        with session_factory() as session:
            first = [row.chunk_id for row in embedding_crud.page(session, "kb", None, 2)]
            second = [row.chunk_id for row in embedding_crud.page(session, "kb", first[-1], 2)]

        assert first == ["a", "b"]
        assert second == ["c", "d"]

    def test_delete_ids_returns_removed_only(self, session_factory, add_chunks) -> None:
        add_chunks("c1", "c2")
        with session_factory() as session, session.begin():
            embedding_crud.upsert(session, "kb", VectorRecord(id="c1", vector=[1.0]))
            embedding_crud.upsert(session, "kb", VectorRecord(id="c2", vector=[1.0]))

        with session_factory() as session, session.begin():
            removed = embedding_crud.delete_ids(session, "kb", ["c1", "missing"])

        with session_factory() as session:
            remaining = session.query(EmbeddingModel.chunk_id).all()

        assert removed == ["c1"]
        assert [r.chunk_id for r in remaining] == ["c2"]


class TestChunkAndNamespaceCRUD:
    """Test suite for ChunkCRUD and NamespaceCRUD."""

    def test_existing_ids_filters_to_live_chunks(self, session_factory, add_chunks) -> None:
        add_chunks("c1", "c2")

        with session_factory() as session:
            assert chunk_crud.existing_ids(session, ["c1", "c3", "c2"]) == {"c1", "c2"}
            assert chunk_crud.existing_ids(session, []) == set()

    def test_namespace_create_and_get(self, session_factory) -> None:
        with session_factory() as session, session.begin():
            namespace_crud.create(session, name="kb_x", dimension=3)

        with session_factory() as session:
            assert namespace_crud.get(session, "kb_x").dimension == 3
            assert not namespace_crud.exists(session, "kb_y")
