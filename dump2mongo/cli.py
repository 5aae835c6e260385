# ==============================================
# CLI - Command Line Entry Point
# ==============================================
#
# PURPOSE:
#   Provides command-line interface to run a migration.
#
# USAGE:
# ------
#   dump2mongo                                  # SQL_DUMP_PATH / MONGODB_URI from .env
#   dump2mongo shops.sql
#   dump2mongo shops.sql mongodb://localhost:27017/shop
#   dump2mongo shops.sql --batch-size 1000 --log-level verbose
#   python -m dump2mongo.cli shops.sql --no-clear
#
# IMPLEMENTATION:
# ---------------
# - argparse for parsing
# - load_config() for defaults, command line options win
# - Instantiates DumpMigrator and prints the final summary
# - Exit code 0 when the run completes, 1 on a fatal error
#
# ==============================================

import argparse
import sys
from typing import Optional

from dump2mongo.config import load_config
from dump2mongo.errors import MigrationError
from dump2mongo.logger import LOG_LEVELS, configure_logging
from dump2mongo.migration import DumpMigrator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dump2mongo",
        description="Load a MySQL dump (CREATE TABLE + INSERT) into MongoDB.",
    )
    parser.add_argument("dump_path", nargs="?", help="SQL dump file (default: SQL_DUMP_PATH)")
    parser.add_argument("mongodb_uri", nargs="?", help="MongoDB connection string (default: MONGODB_URI)")
    parser.add_argument("--batch-size", type=int, help="documents per bulk insert")
    parser.add_argument("--report-interval-ms", type=int, help="minimum time between progress reports")
    parser.add_argument("--timeout-ms", type=int, help="MongoDB connection timeout")
    parser.add_argument("--log-level", choices=list(LOG_LEVELS), help="quiet, info or verbose")
    parser.add_argument("--no-clear", action="store_true", help="keep documents already in the collections")
    parser.add_argument("--no-validate", action="store_true", help="create collections without a $jsonSchema validator")
    parser.add_argument("--env-file", help=".env file to read (default: ./.env)")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(dump_path=args.dump_path, uri=args.mongodb_uri, env_file=args.env_file)
        if args.batch_size is not None:
            config.load.batch_size = args.batch_size
        if args.report_interval_ms is not None:
            config.load.report_interval_ms = args.report_interval_ms
        if args.timeout_ms is not None:
            config.mongo.timeout_ms = args.timeout_ms
        if args.log_level:
            config.log_level = args.log_level
        if args.no_clear:
            config.load.clear_collections = False
        if args.no_validate:
            config.validate_schema = False
        config.validate()

        configure_logging(config.log_level)
        summary = DumpMigrator(config).run()
    except MigrationError as e:
        print(f"❌ Migration failed: {e}", file=sys.stderr)
        return 1

    print(f"Documents inserted: {summary.documents_written}")
    print(f"Errors encountered: {summary.error_count}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
