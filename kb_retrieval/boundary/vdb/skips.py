"""
Upsert rejection rules shared by the index backends.

A record is skipped, never written, when its owning chunk is gone or its
dimension differs from the namespace. Skips are reported three ways: in
the UpsertResult, as a warning log line and as a StoreIntegrityWarning.

Dependencies: kb_retrieval.models, kb_retrieval.core.exceptions
System role: Write-side integrity checks
"""

import logging
import warnings

from kb_retrieval.core.exceptions import StoreIntegrityWarning
from kb_retrieval.models.vector import SkippedRecord, UpsertResult, VectorRecord


def reject_reason(record: VectorRecord, dimension: int, live: set[str]) -> str | None:
    """Why ``record`` cannot be written to a namespace of ``dimension``, or None."""
    if record.id not in live:
        return "no live owning chunk"
    if record.dimension != dimension:
        return f"dimension mismatch (got {record.dimension}, expected {dimension})"
    return None


def warn_skipped(
    logger: logging.Logger,
    result: UpsertResult,
    namespace: str,
    record_id: str,
    reason: str,
) -> None:
    """Record a skipped id on ``result`` and warn the caller of ``upsert``."""
    result.skipped.append(SkippedRecord(id=record_id, reason=reason))
    logger.warning(f"{logger.name}:upsert - Skipped {record_id} in {namespace}: {reason}")
    warnings.warn(
        f"Skipped vector {record_id} in {namespace}: {reason}",
        StoreIntegrityWarning,
        stacklevel=3,
    )
