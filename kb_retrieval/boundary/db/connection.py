"""
Database connection management.

Provides the SQLAlchemy engine and session factory.

Dependencies: sqlalchemy, kb_retrieval.configs
System role: Database connection lifecycle management
"""

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool

from kb_retrieval.configs import get_settings
from kb_retrieval.configs.database import DatabaseSettings


def enable_sqlite_savepoints(engine: Engine) -> None:
    """
    Let pysqlite honour SAVEPOINT by emitting BEGIN ourselves.

    The driver otherwise manages transactions on its own and releases
    savepoints early, which breaks per-record isolation in upserts.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


def get_engine(db_config: DatabaseSettings | None = None) -> Engine:
    """
    Create SQLAlchemy engine with connection pooling and health checks.

    Configures QueuePool for server databases. pool_pre_ping=True verifies
    connections before use to detect stale/broken connections early.
    SQLite URLs keep SQLAlchemy's default pool.

    Args:
        db_config: Database settings; defaults to the application settings

    Returns:
        Engine: Configured SQLAlchemy engine

    Raises:
        ArgumentError: If database URL is invalid
    """
    db_config = db_config or get_settings().database
    url = make_url(db_config.database_url)

    if url.get_backend_name() == "sqlite":
        engine = create_engine(url, echo=db_config.echo_sql)
        enable_sqlite_savepoints(engine)
        return engine

    return create_engine(
        url,
        echo=db_config.echo_sql,
        poolclass=QueuePool,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=True,  # Verify connections before using
    )


def get_session_factory(engine: Engine | None = None) -> sessionmaker[Session]:
    """
    Create session factory for database operations.

    Returns sessionmaker with autoflush=False and expire_on_commit=False
    for explicit transaction control and detached reads.

    Args:
        engine: Engine to bind; a new one is created from settings when None

    Returns:
        sessionmaker: Session factory configured for manual transaction control

    Usage:
        SessionFactory = get_session_factory()
        with SessionFactory() as session:
            session.add(obj)
            session.commit()
    """
    engine = engine or get_engine()
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

