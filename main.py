#!/usr/bin/env python3
"""
dbclean CLI
Drop or empty PostgreSQL schemas managed by a schema-migration tool
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from rich.console import Console

from dbclean import CleanConfig, Database, DbCleanError
from dbclean.config import parse_placeholders
from dbclean.log import configure_logging

console = Console()


def create_parser():
    """Create the main argument parser with nested subcommands"""
    parser = argparse.ArgumentParser(
        description="""
╭─────────────────────────────────────────────────────────────────╮
│ dbclean                                                         │
│ Drop or empty the schemas of a migrated PostgreSQL database     │
╰─────────────────────────────────────────────────────────────────╯
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Global database connection options (default: DBCLEAN_* environment variables)
    parser.add_argument("--db-host", help="Database host (default: 127.0.0.1)")
    parser.add_argument("--db-port", type=int, help="Database port (default: 5432)")
    parser.add_argument("--db-name", help="Database name (default: postgres)")
    parser.add_argument("--db-user", help="Database user (default: postgres)")
    parser.add_argument("--db-password", help="Database password")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # ===== DB COMMAND GROUP =====
    db_parser = subparsers.add_parser("db", help="Database management")
    db_subparsers = db_parser.add_subparsers(dest="db_command", help="Database operations")

    for name, help_text in (
        ("clean", "Drop or empty all target schemas"),
        ("status", "Show the target schemas and what clean would do to them"),
    ):
        sub = db_subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--schemas",
            help="Comma-separated schemas; the first is the home schema (default: current schema)",
        )
        sub.add_argument("--history-table", help="Schema history table (default: schema_history)")
        sub.add_argument(
            "--callbacks",
            action="append",
            type=Path,
            help="Directory with beforeClean.sql / afterClean.sql scripts (repeatable)",
        )
        sub.add_argument(
            "--placeholder",
            action="append",
            metavar="KEY=VALUE",
            help="Template variable for *.sql.j2 callback scripts (repeatable)",
        )
        sub.add_argument(
            "--clean-disabled",
            action="store_true",
            default=None,
            help="Refuse to clean (default: DBCLEAN_CLEAN_DISABLED)",
        )

    return parser


def build_config(args) -> CleanConfig:
    """Overlay command-line options on top of the environment."""
    config = CleanConfig.from_env()
    overrides = {
        "host": args.db_host,
        "port": args.db_port,
        "dbname": args.db_name,
        "user": args.db_user,
        "password": args.db_password,
        "history_table": getattr(args, "history_table", None),
        "clean_disabled": getattr(args, "clean_disabled", None),
        "callback_locations": getattr(args, "callbacks", None),
    }
    if getattr(args, "schemas", None):
        overrides["schemas"] = [s.strip() for s in args.schemas.split(",") if s.strip()]
    if getattr(args, "placeholder", None):
        overrides["placeholders"] = parse_placeholders(args.placeholder)
    return replace(config, **{k: v for k, v in overrides.items() if v is not None})


def handle_db_commands(args, db):
    """Handle database management commands"""
    if args.db_command == "clean":
        db.clean()
    elif args.db_command == "status":
        db.status()
    else:
        print("Error: No database command specified. Use 'main.py db --help' for available commands.")
        sys.exit(1)


def main(argv=None):
    parser = create_parser()
    args = parser.parse_args(argv)

    # If no command provided, show help
    if not args.command:
        parser.print_help()
        sys.exit(0)

    configure_logging(getattr(logging, args.log_level))

    try:
        config = build_config(args)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if args.command == "db":
        try:
            handle_db_commands(args, Database(config, console=console))
        except DbCleanError as e:
            console.print(f"[red]✗ {e}[/red]")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
