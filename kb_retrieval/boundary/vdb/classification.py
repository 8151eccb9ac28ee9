"""
Store failure classification.

Decides whether an index backend failure is transient: connectivity
loss, a poisoned (aborted) transaction, or the vector extension being
unavailable on the session. Pure predicate, independent of any backend.

Dependencies: sqlalchemy
System role: Error triage for the query path
"""

from sqlalchemy import exc as sa_exc

from kb_retrieval.core.exceptions import StoreTransientError

TRANSIENT_MESSAGES = (
    "current transaction is aborted",
    'type "vector" does not exist',
    'extension "vector" is not available',
    "could not connect to server",
    "server closed the connection",
    "connection reset",
    "connection refused",
    "terminating connection",
    "ssl connection has been closed",
    "database is locked",
)


def is_transient_store_error(exc: BaseException) -> bool:
    """
    True when ``exc`` is an index backend failure expected to clear on its own.

    Args:
        exc: Exception raised by a backend operation

    Returns:
        bool: Whether the failure is transient
    """
    if isinstance(exc, StoreTransientError):
        return True
    if isinstance(
        exc,
        (
            sa_exc.OperationalError,
            sa_exc.InterfaceError,
            sa_exc.DisconnectionError,
            sa_exc.PendingRollbackError,
            sa_exc.TimeoutError,
        ),
    ):
        return True
    if isinstance(exc, sa_exc.DBAPIError) and exc.connection_invalidated:
        return True
    if isinstance(exc, sa_exc.SQLAlchemyError):
        message = str(getattr(exc, "orig", None) or exc).lower()
        return any(marker in message for marker in TRANSIENT_MESSAGES)
    return False
