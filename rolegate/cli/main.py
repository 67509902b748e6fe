#!/usr/bin/env python3
# ROLEGATE_FEAT: cli-entry-001
"""
ROLEGATE - Command Line Entry Point
===================================

Administration of roles, permissions and user assignments, plus ad-hoc
permission checks.

Usage:
    rolegate db init
    rolegate role create -r editor -d "Content editor"
    rolegate permission add -r editor -p post:edit
    rolegate role extend -r editor -e viewer
    rolegate user assign -u user123 -r editor -e "2030-01-01 00:00:00"
    rolegate check -u user123 -p post:edit --trace

Settings are read from ROLEGATE_* environment variables (see
rolegate.config.Settings); global options override them.

Author: ROLEGATE Development Team
Version: 1.0.0
"""

import argparse
import logging
import sys
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from rolegate.cli.commands import (
    EXIT_FAILURE,
    EXIT_SUCCESS,
    check_command,
    db_command,
    error,
    permission_command,
    role_command,
    user_command,
)
from rolegate.config import get_settings
from rolegate.db.repository import SqlAlchemyRoleRepository
from rolegate.db.session import create_db_engine, create_session_factory


def setup_logging(level: str = "INFO") -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="rolegate",
        description="ROLEGATE - Role-Based Access Control",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Database URL (default: ROLEGATE_DATABASE_URL)",
    )

    parser.add_argument(
        "-l", "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: ROLEGATE_LOG_LEVEL)",
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        help="Engine configuration file for `check` (default: ROLEGATE_CONFIG_FILE)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # db
    db = subparsers.add_parser("db", help="Manage the database schema")
    db.add_argument("action", choices=["init", "reset"])
    db.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")

    # role
    role = subparsers.add_parser("role", help="Manage roles")
    role.add_argument(
        "action",
        choices=["list", "create", "delete", "show", "users", "rename", "extend", "unextend"],
    )
    role.add_argument("-r", "--name", help="Role name")
    role.add_argument("-d", "--description", help="Role description for create action")
    role.add_argument("-w", "--new-name", help="New role name for rename action")
    role.add_argument("-e", "--extends", help="Role name to extend (for extend/unextend actions)")
    role.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")

    # permission
    permission = subparsers.add_parser("permission", help="Manage role permissions")
    permission.add_argument(
        "action", choices=["list", "add", "remove", "toggle", "allow", "deny"]
    )
    permission.add_argument("-r", "--role", help="Role name")
    permission.add_argument("-p", "--permission", help="Permission name")
    permission.add_argument(
        "-d", "--decision",
        default="ALLOW",
        help="Decision type (ALLOW/DENY) for add action (default: ALLOW)",
    )

    # user
    user = subparsers.add_parser("user", help="Manage user role assignments")
    user.add_argument("action", choices=["assign", "remove", "roles", "users"])
    user.add_argument("-u", "--user-id", help="User ID")
    user.add_argument("-r", "--role", help="Role name")
    user.add_argument(
        "-e", "--expires-at",
        help="Expiration date (YYYY-MM-DD HH:MM:SS, UTC) for role assignment",
    )

    # check
    check = subparsers.add_parser("check", help="Check a permission")
    check.add_argument("-u", "--user-id", required=True, help="User ID")
    check.add_argument("-p", "--permission", required=True, help="Permission name")
    check.add_argument("-s", "--subject", default=None, help="Subject passed to voters (e.g. an IP)")
    check.add_argument("--trace", action="store_true", help="Print the full reason chain")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    settings = get_settings()

    setup_logging(args.log_level or settings.LOG_LEVEL)
    logger = logging.getLogger("ROLEGATE_CLI")

    engine = create_db_engine(args.database_url or settings.DATABASE_URL, settings.DATABASE_ECHO)

    try:
        if args.command == "db":
            return db_command(args, engine)

        session_factory = create_session_factory(engine)
        with session_factory() as session:
            repository = SqlAlchemyRoleRepository(session)

            if args.command == "check":
                return check_command(args, repository, settings)

            handler = {
                "role": role_command,
                "permission": permission_command,
                "user": user_command,
            }[args.command]

            exit_code = handler(args, repository)
            if exit_code == EXIT_SUCCESS:
                repository.commit()
            else:
                repository.rollback()
            return exit_code

    except SQLAlchemyError as e:
        logger.debug("Database error", exc_info=True)
        error(f"Database error: {e}. Did you run `rolegate db init`?")
        return EXIT_FAILURE
    finally:
        engine.dispose()


def run() -> None:
    """Synchronous entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
