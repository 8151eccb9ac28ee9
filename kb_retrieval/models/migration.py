"""
Migration report model.

Dependencies: pydantic
System role: Summary of a vector migration run
"""

from pydantic import BaseModel, Field


class MigrationReport(BaseModel):
    """Counts collected over one migration pass."""

    source_ns: str
    dest_ns: str
    read: int = Field(default=0, description="Records streamed from the source")
    written: int = Field(default=0, description="Records the destination accepted")
    skipped: int = Field(default=0, description="Records the destination skipped")
    batches: int = Field(default=0, description="Upsert calls issued to the destination")
    elapsed_seconds: float = 0.0

    @property
    def total_processed(self) -> int:
        """Records read from the source; the count the migration reports."""
        return self.read
