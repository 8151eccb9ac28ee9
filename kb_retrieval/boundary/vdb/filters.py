"""
Query scoping and argument validation.

Resolves which single restriction a query runs under when several
scoping hints are present: explicit namespace, then ``kb_id`` filter,
then ``client_id`` filter, then none. Pure functions, shared by every
backend.

Dependencies: kb_retrieval.core.exceptions
System role: Filter precedence rules for similarity queries
"""

import math
import uuid
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from kb_retrieval.core.exceptions import ValidationError

FILTER_KEYS = ("kb_id", "client_id")


@dataclass(frozen=True)
class QueryScope:
    """The single restriction a query is evaluated under."""

    field: str | None
    value: str | None = None

    @property
    def is_unfiltered(self) -> bool:
        return self.field is None

    def as_clause(self) -> tuple[str, str] | None:
        if self.field is None or self.value is None:
            return None
        return (self.field, self.value)

    def matches(self, namespace: str, payload: Mapping[str, Any]) -> bool:
        """Whether a record stored under ``namespace`` with ``payload`` is in scope."""
        if self.field is None:
            return True
        if self.field == "namespace":
            return namespace == self.value
        stored = payload.get(self.field)
        return stored is not None and str(stored) == self.value


def _filter_value(key: str, value: Any) -> str:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value
    raise ValidationError(f"Filter value for '{key}' must be a non-blank string or UUID", field=key)


def resolve_scope(namespace: str | None, filter: Mapping[str, Any] | None) -> QueryScope:
    """
    Pick the restriction a query runs under.

    Args:
        namespace: Explicit namespace, or None/'' when not given
        filter: Optional mapping with ``kb_id`` and/or ``client_id``

    Returns:
        QueryScope: namespace > kb_id > client_id > unfiltered

    Raises:
        ValidationError: Unknown filter keys or malformed values
    """
    filter = filter or {}
    unknown = sorted(set(filter) - set(FILTER_KEYS))
    if unknown:
        raise ValidationError(f"Unsupported filter keys: {unknown}", field="filter")
    values = {key: _filter_value(key, value) for key, value in filter.items() if value is not None}

    if namespace:
        return QueryScope("namespace", namespace)
    if "kb_id" in values:
        return QueryScope("kb_id", values["kb_id"])
    if "client_id" in values:
        return QueryScope("client_id", values["client_id"])
    return QueryScope(None)


def validate_query_vector(vector: Sequence[float]) -> list[float]:
    """Query vectors must be non-empty and finite."""
    query_vector = [float(x) for x in vector]
    if not query_vector:
        raise ValidationError("Query vector must not be empty", field="vector")
    if not all(math.isfinite(x) for x in query_vector):
        raise ValidationError("Query vector contains non-finite values", field="vector")
    return query_vector


def validate_top_k(top_k: int) -> int:
    if not isinstance(top_k, int) or top_k < 1:
        raise ValidationError("top_k must be a positive integer", field="top_k")
    return top_k


def validate_batch_size(batch_size: int) -> int:
    if not isinstance(batch_size, int) or batch_size < 1:
        raise ValidationError("batch_size must be a positive integer", field="batch_size")
    return batch_size


def validate_dimension(dimension: int) -> int:
    if not isinstance(dimension, int) or dimension < 1:
        raise ValidationError("dimension must be a positive integer", field="dimension")
    return dimension


def validate_namespace(namespace: str) -> str:
    if not isinstance(namespace, str) or not namespace.strip():
        raise ValidationError("namespace must be a non-blank string", field="namespace")
    return namespace
