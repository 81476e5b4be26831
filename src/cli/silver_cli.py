"""
Command-line interface for the silver load.

Usage:
    python -m src.cli.silver_cli load [--kind <kind> ...] [options]
    python -m src.cli.silver_cli create-tables [--drop-existing]
    python -m src.cli.silver_cli counts
"""

import argparse
import sys

from pyspark.sql import SparkSession

from src.batch.pipeline import SilverLoadError, SilverPipeline
from src.batch.readers import SparkRawStore
from src.batch.writers import PostgresSilverWriter
from src.core.config import ConfigError, load_config
from src.core.models import EntityKind, RunReport
from src.observability.logger import get_logger
from src.observability.metrics import start_metrics_server
from src.warehouse.connection import DatabaseConnectionPool
from src.warehouse.silver_tables import SilverTableManager

logger = get_logger(__name__)


def create_spark_session(app_name: str = "SilverLoad") -> SparkSession:
    """
    Create Spark session for reading bronze tables.

    Args:
        app_name: Application name

    Returns:
        SparkSession
    """
    spark = SparkSession.builder \
        .appName(app_name) \
        .config("spark.sql.adaptive.enabled", "true") \
        .getOrCreate()

    return spark


def create_pool(args) -> DatabaseConnectionPool:
    """Open a connection pool from CLI arguments (env vars fill the gaps)."""
    pool = DatabaseConnectionPool(
        host=args.db_host,
        port=args.db_port,
        database=args.db_name,
        user=args.db_user,
        password=args.db_password,
        max_size=len(EntityKind) + 1
    )
    pool.open()
    return pool


def log_report(report: RunReport) -> None:
    """Log a per-kind summary of a run."""
    logger.info("=" * 60)
    logger.info("SILVER LOAD SUMMARY")
    logger.info("=" * 60)
    for result in report.results:
        if result.status == "success":
            logger.info(
                f"{result.kind.value:<18} read={result.rows_read} written={result.rows_written} "
                f"dropped={result.rows_dropped} ({result.duration_seconds:.2f}s)"
            )
        else:
            logger.error(f"{result.kind.value:<18} FAILED: {result.error}")
    logger.info("=" * 60)


def load_command(args) -> int:
    """
    Execute the silver load.

    Args:
        args: Command-line arguments

    Returns:
        Process exit code

    Raises:
        ConfigError: If the configuration file is malformed
    """
    config = load_config(args.config)
    kinds = [EntityKind(k) for k in args.kind] if args.kind else None

    if args.metrics_port:
        start_metrics_server(args.metrics_port)

    spark = create_spark_session()
    pool = create_pool(args)

    try:
        pipeline = SilverPipeline(
            raw_store=SparkRawStore(spark, config, csv_root=args.bronze_csv_dir),
            cleaned_store=PostgresSilverWriter(pool, schema=config.silver_schema),
            config=config
        )

        try:
            report = pipeline.run(kinds, max_workers=args.workers)
        except SilverLoadError as e:
            log_report(e.report)
            return 1

        log_report(report)
        return 0
    finally:
        pool.close()
        spark.stop()


def create_tables_command(args) -> int:
    """Create the silver schema and tables."""
    config = load_config(args.config)
    with create_pool(args) as pool:
        SilverTableManager(pool, schema=config.silver_schema).create_tables(
            drop_existing=args.drop_existing
        )
    return 0


def counts_command(args) -> int:
    """Log the row count of every silver table."""
    config = load_config(args.config)
    with create_pool(args) as pool:
        counts = SilverTableManager(pool, schema=config.silver_schema).row_counts()
    for kind, count in counts.items():
        logger.info(f"silver.{kind.value}: {count} rows")
    return 0


def add_db_arguments(parser: argparse.ArgumentParser) -> None:
    """Database connection arguments (unset values fall back to DB_* env vars)."""
    parser.add_argument("--db-host", help="Database host (env: DB_HOST)")
    parser.add_argument("--db-port", type=int, help="Database port (env: DB_PORT)")
    parser.add_argument("--db-name", help="Database name (env: DB_NAME)")
    parser.add_argument("--db-user", help="Database user (env: DB_USER)")
    parser.add_argument("--db-password", help="Database password (env: DB_PASSWORD)")
    parser.add_argument(
        "--config",
        default="config/pipeline.yaml",
        help="Path to pipeline configuration YAML (default: config/pipeline.yaml)"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Bronze to silver cleansing pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Load every entity kind from the Spark catalog
  python -m src.cli.silver_cli load

  # Load customers and products only, from CSV snapshots
  python -m src.cli.silver_cli load --kind customer --kind product \\
      --bronze-csv-dir data/bronze

  # Provision silver tables
  python -m src.cli.silver_cli create-tables
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    load_parser = subparsers.add_parser("load", help="Rebuild silver tables from bronze")
    load_parser.add_argument(
        "--kind",
        action="append",
        choices=[k.value for k in EntityKind],
        help="Entity kind to load (repeatable; default: all)"
    )
    load_parser.add_argument(
        "--bronze-csv-dir",
        help="Read bronze snapshots from <dir>/<table>.csv instead of the Spark catalog"
    )
    load_parser.add_argument(
        "--workers",
        type=int,
        help="Concurrent kind loads (default: one per kind)"
    )
    load_parser.add_argument(
        "--metrics-port",
        type=int,
        help="Expose Prometheus metrics on this port while loading"
    )
    add_db_arguments(load_parser)

    tables_parser = subparsers.add_parser("create-tables", help="Create silver schema and tables")
    tables_parser.add_argument(
        "--drop-existing",
        action="store_true",
        help="Drop and recreate existing silver tables"
    )
    add_db_arguments(tables_parser)

    counts_parser = subparsers.add_parser("counts", help="Report silver table row counts")
    add_db_arguments(counts_parser)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point; a malformed configuration exits with code 2."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    commands = {
        "load": load_command,
        "create-tables": create_tables_command,
        "counts": counts_command,
    }
    try:
        return commands[args.command](args)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
