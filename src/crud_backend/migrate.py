#!/usr/bin/env python3
"""
Schema migration tool

Usage:
    python -m crud_backend.migrate up
    python -m crud_backend.migrate down --steps 1
    python -m crud_backend.migrate status
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from crud_backend.config.logging_config import setup_logging
from crud_backend.database.migrator import MigrationError, connect_migrator

logger = logging.getLogger(__name__)


async def run_command(args: argparse.Namespace, database_url: str) -> int:
    async with connect_migrator(database_url, args.migrations_dir) as migrator:
        if args.command == "up":
            applied = await migrator.upgrade()
            for migration in applied:
                print(f"applied  {migration.label}")
            print(f"{len(applied)} migration(s) applied")

        elif args.command == "down":
            reverted = await migrator.downgrade(args.steps)
            for migration in reverted:
                print(f"reverted {migration.label}")
            print(f"{len(reverted)} migration(s) reverted")

        else:
            status = await migrator.status()
            for migration in status.applied:
                print(f"applied  {migration.label}")
            for migration in status.pending:
                print(f"pending  {migration.label}")
            for version, name in status.unknown.items():
                print(f"unknown  {version}_{name} (recorded in ledger, no file)")
            if not status.is_up_to_date:
                return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Apply or revert database schema migrations")
    parser.add_argument("--database-url", help="PostgreSQL DSN (defaults to $DATABASE_URL)")
    parser.add_argument("--migrations-dir", help="Directory of migration files (defaults to the packaged ones)")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("up", help="Apply all pending migrations")
    down = subparsers.add_parser("down", help="Revert the most recent migrations")
    down.add_argument("--steps", type=int, default=1, help="Number of migrations to revert")
    subparsers.add_parser("status", help="List applied and pending migrations")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    setup_logging(os.getenv("LOG_LEVEL", "INFO").upper())

    args = build_parser().parse_args(argv)
    database_url = args.database_url or os.getenv("DATABASE_URL")
    if not database_url:
        print("DATABASE_URL environment variable is required", file=sys.stderr)
        return 2

    try:
        return asyncio.run(run_command(args, database_url))
    except MigrationError as e:
        logger.error(f"Migration failed: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
