"""
Exception hierarchy for the knowledge retrieval subsystem.

Provides layered exception structure for embedding, index, linkage and
migration errors. All exceptions include context for observability and
debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the subsystem
"""

from typing import Any


class KbRetrievalException(Exception):
    """Base exception for all knowledge retrieval errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(KbRetrievalException):
    """Raised when input validation fails (blank text, malformed filters)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class CardinalityError(KbRetrievalException):
    """Raised when an embedding response does not match the request size."""

    def __init__(self, requested: int, returned: int) -> None:
        super().__init__(
            f"Embedding count ({returned}) does not match text count ({requested})",
            {"requested": requested, "returned": returned},
        )
        self.requested = requested
        self.returned = returned


class ProviderError(KbRetrievalException):
    """Base exception for embedding backend failures."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize provider error.

        Args:
            message: Error message
            status_code: HTTP status returned by the backend, if any
            details: Additional context
        """
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details)
        self.status_code = status_code


class TransientProviderError(ProviderError):
    """
    Network reset, timeout or 5xx from the embedding backend.

    Retried with bounded backoff. When surfaced to a caller, ``attempts``
    holds the number of attempts that were made.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, status_code, details)
        self.attempts = 1

    def with_attempts(self, attempts: int) -> "TransientProviderError":
        """Record how many attempts were made before this error was surfaced."""
        self.attempts = attempts
        self.details["attempts"] = attempts
        return self


class PermanentProviderError(ProviderError):
    """4xx or malformed response from the embedding backend; never retried."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_type: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if error_type:
            details["error_type"] = error_type
        if error_code:
            details["error_code"] = error_code
        super().__init__(message, status_code, details)
        self.error_type = error_type
        self.error_code = error_code


class NamespaceError(KbRetrievalException):
    """Raised for undeclared namespaces and dimension conflicts."""

    def __init__(
        self,
        message: str,
        namespace: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["namespace"] = namespace
        super().__init__(message, details)
        self.namespace = namespace


class VectorStoreError(KbRetrievalException):
    """Raised when vector store operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector store error.

        Args:
            message: Error message
            operation: Operation that failed (upsert, query, delete, stream)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class StoreTransientError(VectorStoreError):
    """Connectivity loss or poisoned session in the index backend."""

    pass


class StoreIntegrityWarning(UserWarning):
    """Emitted when an upserted record has no live owning chunk and is skipped."""

    pass


class RefWriteError(KbRetrievalException):
    """
    Raised when a vector was written but its VectorRef was not.

    The vector is valid; re-running the link for the chunk reconciles
    the reference.
    """

    def __init__(
        self,
        chunk_id: str,
        status: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["chunk_id"] = chunk_id
        details["status"] = status
        super().__init__(f"Vector reference write failed for chunk {chunk_id}", details)
        self.chunk_id = chunk_id
        self.status = status


class MigrationError(KbRetrievalException):
    """Aborts a migration run; the run has no checkpoint and must be restarted."""

    def __init__(
        self,
        message: str,
        read: int = 0,
        written: int = 0,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["read"] = read
        details["written"] = written
        super().__init__(message, details)
        self.read = read
        self.written = written
