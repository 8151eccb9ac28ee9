"""
Portable column types.

pgvector and JSONB on PostgreSQL, JSON elsewhere (SQLite in tests and
local runs). Vectors read back from pgvector arrive as numpy arrays and
are normalised with ``to_float_list``.

Dependencies: sqlalchemy, pgvector
System role: Dialect-aware column types for vector tables
"""

from typing import Any, Iterable

from pgvector.sqlalchemy import Vector
from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB

# Dimension-less so one table can hold namespaces of different dimensions;
# the namespace registry enforces per-namespace length.
EmbeddingType = Vector().with_variant(JSON(), "sqlite")
PayloadType = JSON().with_variant(JSONB(), "postgresql")


def to_float_list(value: Iterable[Any]) -> list[float]:
    return [float(x) for x in value]
