"""
Structured logging helpers for the index and migration paths.

Log records carry namespace and scope context as ``extra`` fields.
Vectors and payloads are reduced to their size before they reach a
handler.

Dependencies: logging (stdlib)
System role: Logging helper functions
"""

import logging
from typing import Any


def safe_log_value(value: Any, max_length: int = 200) -> str:
    """
    Render a context value for a log record.

    Sequences become ``list(N items)`` and mappings ``dict(N keys)``, so a
    3072-float embedding costs one short token in the log line.
    """
    if value is None:
        return "None"
    if isinstance(value, (list, tuple)):
        return f"{type(value).__name__}({len(value)} items)"
    if isinstance(value, dict):
        return f"dict({len(value)} keys)"

    text = value if isinstance(value, str) else repr(value)
    if len(text) > max_length:
        return text[:max_length] + f"... (truncated, {len(text)} total)"
    return text


def log_store_failure(
    logger: logging.Logger,
    operation: str,
    exc: BaseException,
    **context: Any,
) -> None:
    """
    Log an absorbed index failure with its traceback.

    Args:
        logger: Module logger of the index
        operation: Index operation that failed (query, upsert, ...)
        exc: The absorbed exception
        **context: Namespace, scope and sizing details of the call
    """
    fields = {key: safe_log_value(val) for key, val in context.items()}
    fields["operation"] = operation
    fields["error_type"] = type(exc).__name__
    logger.error(
        f"{logger.name}:{operation} - {type(exc).__name__}: {safe_log_value(str(exc))}",
        exc_info=exc,
        extra=fields,
    )
