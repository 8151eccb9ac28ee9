"""
Knowledge linkage result models.

Dependencies: pydantic
System role: Outcome of linking a chunk to its stored vector
"""

import enum

from pydantic import BaseModel

from kb_retrieval.models.vector import VectorRef


class LinkStatus(str, enum.Enum):
    """
    Chunk linkage states.

    LINKED: Vector stored and reference recorded
    VECTOR_WRITTEN_REF_PENDING: Vector stored, reference write failed; retry the link
    SKIPPED: Index refused the record (no live owning chunk, dimension mismatch)
    """

    LINKED = "linked"
    VECTOR_WRITTEN_REF_PENDING = "vector_written_ref_pending"
    SKIPPED = "skipped"


class LinkResult(BaseModel):
    """Outcome of linking one chunk."""

    chunk_id: str
    namespace: str
    status: LinkStatus
    ref: VectorRef | None = None
    reason: str | None = None
