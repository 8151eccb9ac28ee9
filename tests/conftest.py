"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory SQLite engine with seeded chunks, similarity indexes,
fake embedding provider, live-chunk lookups
Dependencies: pytest, sqlalchemy
System role: Test infrastructure and fixture management
"""

from typing import Callable, Iterable, Sequence

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool

from kb_retrieval.boundary.db.connection import enable_sqlite_savepoints, get_session_factory
from kb_retrieval.boundary.db.create_tables import create_all_tables, drop_all_tables
from kb_retrieval.boundary.db.models import ChunkModel
from kb_retrieval.boundary.vdb.memory_index import InMemoryVectorIndex
from kb_retrieval.boundary.vdb.refs import InMemoryVectorRefRepository
from kb_retrieval.boundary.vdb.sql_index import SqlVectorIndex
from kb_retrieval.configs import get_settings


class SetChunkLookup:
    """ChunkLookup over a mutable set of live chunk ids."""

    def __init__(self, ids: Iterable[str] = ()) -> None:
        self.ids = set(ids)

    def existing_ids(self, ids: Iterable[str]) -> set[str]:
        return set(ids) & self.ids


class FakeEmbeddings:
    """
    Deterministic EmbeddingProvider.

    Texts listed in ``vectors`` get that vector; any other text gets a
    vector derived from its length. Every call is recorded.
    """

    def __init__(self, vectors: dict[str, list[float]] | None = None, dim: int = 3) -> None:
        self.vectors = vectors or {}
        self.dim = dim
        self.calls: list[tuple[str, object]] = []

    def model(self) -> str:
        return "fake-embedding"

    def dimension(self) -> int:
        return self.dim

    def _vector(self, text: str) -> list[float]:
        if text in self.vectors:
            return list(self.vectors[text])
        return [float(len(text))] + [1.0] * (self.dim - 1)

    def embed_one(self, text: str) -> list[float]:
        self.calls.append(("embed_one", text))
        return self._vector(text)

    def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        self.calls.append(("embed_many", list(texts)))
        return [self._vector(text) for text in texts]


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; every test starts from the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def engine() -> Engine:
    """
    Create in-memory SQLite database for testing.

    Yields:
        Engine: Engine with all tables created, shared by every session
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    create_all_tables(engine)
    yield engine
    drop_all_tables(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine):
    return get_session_factory(engine)


@pytest.fixture
def add_chunks(session_factory) -> Callable[..., list[str]]:
    """Insert chunk rows so vectors pointing at them count as live."""

    def _add(*ids: str, document_id: str = "doc-1") -> list[str]:
        with session_factory() as session, session.begin():
            for position, chunk_id in enumerate(ids):
                session.add(
                    ChunkModel(
                        id=chunk_id,
                        document_id=document_id,
                        chunk_index=position,
                        content=f"content of {chunk_id}",
                    )
                )
        return list(ids)

    return _add


@pytest.fixture
def sql_index(engine: Engine) -> SqlVectorIndex:
    return SqlVectorIndex(engine)


@pytest.fixture
def live_chunks() -> SetChunkLookup:
    return SetChunkLookup()


@pytest.fixture
def ref_repository() -> InMemoryVectorRefRepository:
    return InMemoryVectorRefRepository()


@pytest.fixture
def memory_index(live_chunks: SetChunkLookup, ref_repository) -> InMemoryVectorIndex:
    return InMemoryVectorIndex(chunk_lookup=live_chunks, ref_repository=ref_repository)


@pytest.fixture
def fake_embeddings() -> FakeEmbeddings:
    return FakeEmbeddings()
