"""
Base CRUD operations for SQLAlchemy models.

Provides generic create and read operations that can be inherited
and extended by model-specific CRUD classes. Callers own the session
and the transaction; CRUD methods never commit.

Dependencies: sqlalchemy
System role: Foundation for all database CRUD operations
"""

from typing import Any, Generic, TypeVar

from sqlalchemy.orm import Session

from kb_retrieval.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Generic base class for CRUD operations.

    Type Parameters:
        ModelT: SQLAlchemy model class inheriting from Base

    Attributes:
        model: The SQLAlchemy model class to operate on
    """

    def __init__(self, model: type[ModelT]) -> None:
        """
        Initialize CRUD with target model.

        Args:
            model: SQLAlchemy model class for database operations
        """
        self.model = model

    def create(self, session: Session, **kwargs: Any) -> ModelT:
        """
        Create a new record in the session and flush it.

        Args:
            session: Database session
            **kwargs: Model field values

        Returns:
            Created model instance
        """
        instance = self.model(**kwargs)
        session.add(instance)
        session.flush()
        return instance

    def get(self, session: Session, ident: Any) -> ModelT | None:
        """
        Retrieve a single record by primary key (scalar or tuple).

        Returns:
            Model instance if found, None otherwise
        """
        return session.get(self.model, ident)

    def exists(self, session: Session, ident: Any) -> bool:
        """Check if a record exists by primary key."""
        return self.get(session, ident) is not None
