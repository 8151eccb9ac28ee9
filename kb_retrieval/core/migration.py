"""
Vector migration.

Copies every vector of a source namespace into a destination namespace,
possibly on another backend. One sequential pass in bounded batches,
with no checkpoint: an interrupted run starts over. Re-running is safe
because upserts are idempotent per id.

Dependencies: kb_retrieval.boundary.vdb
System role: Bulk re-indexing and backend changes
"""

import logging
import time

from kb_retrieval.boundary.vdb.base import SimilarityIndex
from kb_retrieval.boundary.vdb.filters import validate_batch_size, validate_dimension
from kb_retrieval.core.exceptions import MigrationError
from kb_retrieval.models.migration import MigrationReport

logger = logging.getLogger(__name__)


class MigrationRunner:
    """
    Streams a namespace out of one index and upserts it into another.

    Args:
        source: Index read with stream_all
        destination: Index written with upsert; the source when None
    """

    def __init__(self, source: SimilarityIndex, destination: SimilarityIndex | None = None) -> None:
        self._source = source
        self._destination = destination or source

    def run(self, source_ns: str, dest_ns: str, dimension: int, batch_size: int) -> int:
        """
        Copy ``source_ns`` into ``dest_ns``.

        Returns:
            int: Records read from the source, including any the destination skipped
        """
        return self.run_with_report(source_ns, dest_ns, dimension, batch_size).total_processed

    def run_with_report(
        self,
        source_ns: str,
        dest_ns: str,
        dimension: int,
        batch_size: int,
    ) -> MigrationReport:
        """
        Copy ``source_ns`` into ``dest_ns`` and report read/written/skipped counts.

        Args:
            source_ns: Namespace to read
            dest_ns: Namespace to write; declared with ``dimension`` first
            dimension: Vector dimension of the destination namespace
            batch_size: Records per streamed batch and per upsert call

        Returns:
            MigrationReport: Counts for the completed pass

        Raises:
            ValidationError: Non-positive dimension or batch size
            MigrationError: Any failure during the pass; no progress is kept
        """
        validate_dimension(dimension)
        validate_batch_size(batch_size)
        report = MigrationReport(source_ns=source_ns, dest_ns=dest_ns)
        started = time.monotonic()

        logger.info(
            f"{__name__}:run - START: {source_ns} -> {dest_ns} "
            f"(dim={dimension}, batch_size={batch_size})"
        )
        try:
            self._destination.ensure_namespace(dest_ns, dimension)
            for batch in self._source.stream_all(source_ns, batch_size):
                report.read += len(batch)
                result = self._destination.upsert(dest_ns, batch)
                report.batches += 1
                report.written += result.written_count
                report.skipped += result.skipped_count
                logger.info(
                    f"{__name__}:run - Batch {report.batches}: read={report.read} "
                    f"written={report.written} skipped={report.skipped}"
                )
        except Exception as e:
            logger.error(
                f"{__name__}:run - FAILED after read={report.read}: {type(e).__name__}: {e}",
                exc_info=True,
            )
            raise MigrationError(
                f"Migration {source_ns} -> {dest_ns} aborted: {e}",
                read=report.read,
                written=report.written,
            ) from e

        report.elapsed_seconds = time.monotonic() - started
        logger.info(
            f"{__name__}:run - SUCCESS: read={report.read} written={report.written} "
            f"skipped={report.skipped} in {report.elapsed_seconds:.1f}s"
        )
        return report
