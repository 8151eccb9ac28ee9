"""
Database table creation script.

Creates the tables of the retrieval subsystem defined in ORM models.
On PostgreSQL the pgvector extension is enabled first.

Dependencies: sqlalchemy, kb_retrieval.configs
System role: Database schema initialization

Usage:
    python -m kb_retrieval.boundary.db.create_tables
"""

from sqlalchemy import Engine, text

from kb_retrieval.boundary.db.base import Base
from kb_retrieval.boundary.db.connection import get_engine

# Import all models to register them with Base.metadata
from kb_retrieval.boundary.db.models import (  # noqa: F401
    ChunkModel,
    EmbeddingModel,
    NamespaceModel,
    VectorRefModel,
)


def create_all_tables(engine: Engine | None = None) -> None:
    """
    Create all database tables from registered ORM models.

    Idempotent: existing tables remain unchanged, so safe to run
    multiple times.

    Args:
        engine: Target engine; defaults to one built from settings

    Raises:
        SQLAlchemyError: If the connection or table creation fails
    """
    engine = engine or get_engine()
    if engine.dialect.name == "postgresql":
        with engine.begin() as conn:
            conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
    Base.metadata.create_all(bind=engine)


def drop_all_tables(engine: Engine | None = None) -> None:
    """
    Drop all tables of this subsystem and their data.

    WARNING: Irreversible data loss. Only use in development environments.
    """
    engine = engine or get_engine()
    Base.metadata.drop_all(bind=engine)


if __name__ == "__main__":
    create_all_tables()
    print("All tables created successfully.")
