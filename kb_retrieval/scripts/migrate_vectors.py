"""
Vector migration entrypoint.

Copies every vector of one namespace into another, in the same database
or into another one, and prints the number of records read. A run into
another database first copies the chunks owning those vectors.

Usage:
    kb-migrate-vectors --source-ns kb --dest-ns kb2 --dim 1536 --batch-size 500
    kb-migrate-vectors --dest-url postgresql+psycopg2://u:p@new-host/kb --create-tables

Exit codes:
    0: Pass completed
    1: Migration aborted, or records were skipped under --strict
    2: Invalid arguments

Dependencies: python-dotenv, sqlalchemy, kb_retrieval.core, kb_retrieval.boundary.vdb
System role: One-shot re-indexing tool
"""

import argparse
import logging
import sys
from typing import Sequence

from dotenv import load_dotenv
from sqlalchemy import Engine
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from kb_retrieval.boundary.db.connection import get_engine, get_session_factory
from kb_retrieval.boundary.db.CRUD.chunk_crud import chunk_crud
from kb_retrieval.boundary.db.create_tables import create_all_tables
from kb_retrieval.boundary.vdb.base import SimilarityIndex
from kb_retrieval.boundary.vdb.factory import get_similarity_index
from kb_retrieval.configs import get_settings
from kb_retrieval.configs.database import DatabaseSettings
from kb_retrieval.core.exceptions import MigrationError
from kb_retrieval.core.migration import MigrationRunner
from kb_retrieval.observability.logger import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Argument parser with defaults taken from MIGRATION_* settings."""
    defaults = get_settings().migration
    parser = argparse.ArgumentParser(
        prog="kb-migrate-vectors",
        description="Copy all vectors of a namespace into another namespace or database.",
    )
    parser.add_argument("--source-ns", default=defaults.source_ns, help="Namespace to read from")
    parser.add_argument("--dest-ns", default=defaults.dest_ns, help="Namespace to write to")
    parser.add_argument("--dim", type=int, default=defaults.vector_dim, help="Destination vector dimension")
    parser.add_argument("--batch-size", type=int, default=defaults.batch_size, help="Records per batch")
    parser.add_argument(
        "--source-url",
        default=defaults.source_url,
        help="Source database URL (default: the POSTGRES_* database)",
    )
    parser.add_argument(
        "--dest-url",
        default=defaults.dest_url,
        help="Destination database URL (default: the source database)",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create the index tables in the destination database first",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit 1 when the destination skipped any record",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    return parser


def _engine_for(url: str | None) -> Engine:
    return get_engine(DatabaseSettings(url=url)) if url else get_engine()


def copy_chunks(source: Engine, destination: Engine, namespace: str, batch_size: int) -> int:
    """
    Copy the chunks owning vectors of ``namespace`` into another database.

    Vectors reference their chunk, so the destination needs the chunk
    rows before it accepts the vectors.

    Returns:
        int: Number of chunks copied
    """
    read_source = get_session_factory(source)
    write_destination = get_session_factory(destination)
    copied = 0
    after: str | None = None
    while True:
        with read_source() as session:
            chunks = chunk_crud.page_in_namespace(session, namespace, after, batch_size)
        if not chunks:
            break
        with write_destination() as session, session.begin():
            copied += chunk_crud.copy_into(session, chunks)
        after = chunks[-1].id
        if len(chunks) < batch_size:
            break
    logger.info(f"{__name__}:copy_chunks - Copied {copied} chunks of {namespace}")
    return copied


def _prepare(args: argparse.Namespace) -> tuple[SimilarityIndex, SimilarityIndex, list[Engine]]:
    source_engine = _engine_for(args.source_url)
    source = get_similarity_index("sql", engine=source_engine)
    if not args.dest_url or args.dest_url == args.source_url:
        if args.create_tables:
            create_all_tables(source_engine)
        return source, source, [source_engine]

    engines = [source_engine]
    try:
        dest_engine = _engine_for(args.dest_url)
        engines.append(dest_engine)
        if args.create_tables:
            create_all_tables(dest_engine)
        copy_chunks(source_engine, dest_engine, args.source_ns, args.batch_size)
    except SQLAlchemyError:
        for engine in engines:
            engine.dispose()
        raise
    return source, get_similarity_index("sql", engine=dest_engine), engines


def main(argv: Sequence[str] | None = None) -> int:
    """
    Run one migration pass.

    Args:
        argv: Command line arguments; sys.argv[1:] when None

    Returns:
        int: Process exit code
    """
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level or get_settings().log_level)

    try:
        source, destination, engines = _prepare(args)
    except ArgumentError as e:
        parser.error(f"invalid database URL: {e}")
    except SQLAlchemyError as e:
        logger.error(f"{__name__}:main - Preparing the destination failed: {e}")
        print(f"[migration] failed before copying vectors: {type(e).__name__}", file=sys.stderr)
        return 1

    try:
        report = MigrationRunner(source, destination).run_with_report(
            args.source_ns, args.dest_ns, args.dim, args.batch_size
        )
    except MigrationError as e:
        logger.error(f"{__name__}:main - {e}")
        print(f"[migration] failed after {e.read} records: {e.message}", file=sys.stderr)
        return 1
    finally:
        for engine in engines:
            engine.dispose()

    print(f"[migration] done, total={report.total_processed}")
    if report.skipped:
        print(f"[migration] skipped={report.skipped}", file=sys.stderr)
        if args.strict:
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
