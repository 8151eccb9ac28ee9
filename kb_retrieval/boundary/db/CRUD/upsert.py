"""
Dialect-native insert helper.

PostgreSQL and SQLite both support ``ON CONFLICT DO UPDATE`` through
their dialect-specific ``insert`` constructs.

Dependencies: sqlalchemy
System role: Upsert statement construction
"""

from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session


def dialect_insert(session: Session, model: type[Any]) -> Any:
    """
    Return an insert construct supporting ``on_conflict_do_update``.

    Raises:
        NotImplementedError: For dialects without ON CONFLICT support
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model)
    if dialect == "sqlite":
        return sqlite.insert(model)
    raise NotImplementedError(f"Upsert is not supported on dialect '{dialect}'")
