"""
Namespace registry ORM model.

Records the vector dimension declared for each namespace. Rows are only
ever inserted; re-declaring with another dimension is rejected.

Dependencies: sqlalchemy, kb_retrieval.boundary.db.base
System role: Namespace dimension registry
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from kb_retrieval.boundary.db.base import Base, TimestampMixin


class NamespaceModel(Base, TimestampMixin):
    """Declared namespace and its vector dimension."""

    __tablename__ = "vector_namespaces"

    name: Mapped[str] = mapped_column(String(128), primary_key=True)

    dimension: Mapped[int] = mapped_column(Integer, nullable=False)
