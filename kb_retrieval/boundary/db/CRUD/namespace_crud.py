"""
Namespace registry CRUD operations.

Dependencies: sqlalchemy, kb_retrieval.boundary.db.models
System role: Namespace dimension persistence
"""

from kb_retrieval.boundary.db.CRUD.base_crud import BaseCRUD
from kb_retrieval.boundary.db.models.namespace_model import NamespaceModel


class NamespaceCRUD(BaseCRUD[NamespaceModel]):
    """CRUD operations for NamespaceModel."""

    def __init__(self) -> None:
        """Initialize NamespaceCRUD with NamespaceModel."""
        super().__init__(NamespaceModel)


namespace_crud = NamespaceCRUD()
