#!/usr/bin/env python3
"""CLI for Task Manager management tasks.

Usage:
    python -m cli <command>

Commands:
    create-tables  Create all tables from the SQLAlchemy models
    migrate        Upgrade the schema (default: head)
    downgrade      Revert the schema (default: one revision)
    current        Print the revision the database is at
    check-db       Exit non-zero if the database is unreachable
    seed           Load sample users, projects and tasks into an empty database
    users          List registered users
"""

import argparse
import asyncio
import sys

from core.logger import configure_logging, get_logger

logger = get_logger(__name__)


async def _create_tables(drop_existing: bool) -> None:
    from core.config import get_settings
    from core.database import (
        create_engine,
        create_session_maker,
        dispose_engine,
        init_db,
        session_scope,
    )
    from scripts.seed_sample_data import seed_sample_data

    engine = create_engine()
    try:
        await init_db(engine, drop_existing=drop_existing)
        if get_settings().seed_on_startup:
            maker = create_session_maker(engine)
            async with session_scope(maker, operation="seed") as db:
                await seed_sample_data(db)
    finally:
        await dispose_engine(engine)


def cmd_create_tables(drop_existing: bool = False) -> int:
    """Create tables directly from the models (development only)."""
    logger.info("cli.create_tables.started", drop_existing=drop_existing)
    asyncio.run(_create_tables(drop_existing))
    logger.info("cli.create_tables.completed")
    return 0


def cmd_migrate(target: str = "head") -> int:
    from scripts import migrate

    migrate.upgrade(target)
    logger.info("cli.migrate.completed", target=target)
    return 0


def cmd_downgrade(target: str = "-1") -> int:
    from scripts import migrate

    migrate.downgrade(target)
    logger.info("cli.downgrade.completed", target=target)
    return 0


def cmd_current() -> int:
    from scripts import migrate

    print(migrate.current_revision() or "<none>")
    return 0


async def _check_db() -> None:
    from core.database import check_db_connection, create_engine, dispose_engine

    engine = create_engine()
    try:
        await check_db_connection(engine)
    finally:
        await dispose_engine(engine)


def cmd_check_db() -> int:
    from sqlalchemy.exc import SQLAlchemyError

    try:
        asyncio.run(_check_db())
    except (SQLAlchemyError, OSError, TimeoutError) as e:
        logger.error("cli.check_db.failed", error=str(e))
        return 1
    logger.info("cli.check_db.ok")
    return 0


async def _seed() -> bool:
    from core.database import (
        create_engine,
        create_session_maker,
        dispose_engine,
        session_scope,
    )
    from scripts.seed_sample_data import seed_sample_data

    engine = create_engine()
    try:
        async with session_scope(create_session_maker(engine), operation="seed") as db:
            return await seed_sample_data(db)
    finally:
        await dispose_engine(engine)


def cmd_seed() -> int:
    """Seed sample data. Skips silently if any user already exists."""
    seeded = asyncio.run(_seed())
    logger.info("cli.seed.completed", seeded=seeded)
    return 0


async def _list_users():
    from core.database import (
        create_engine,
        create_session_maker,
        dispose_engine,
        readonly_session,
    )
    from services import UserService

    engine = create_engine()
    try:
        maker = create_session_maker(engine)
        async with readonly_session(maker, operation="list_users") as db:
            return await UserService.from_session(db).find_all()
    finally:
        await dispose_engine(engine)


def cmd_users() -> int:
    for user in asyncio.run(_list_users()):
        print(f"{user.id}\t{user.username}\t{user.email}")
    return 0


def main(argv: list[str] | None = None) -> int:
    configure_logging()

    parser = argparse.ArgumentParser(
        description="Task Manager CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    create_tables = subparsers.add_parser(
        "create-tables",
        help="Create all tables from the SQLAlchemy models",
    )
    create_tables.add_argument(
        "--drop-existing",
        action="store_true",
        help="Drop all tables before creating them",
    )

    migrate = subparsers.add_parser("migrate", help="Upgrade the schema")
    migrate.add_argument(
        "target",
        nargs="?",
        default="head",
        help="Target revision (default: head)",
    )

    downgrade = subparsers.add_parser("downgrade", help="Revert the schema")
    downgrade.add_argument(
        "target",
        nargs="?",
        default="-1",
        help="Target revision (default: -1)",
    )

    subparsers.add_parser("current", help="Print the current schema revision")
    subparsers.add_parser("check-db", help="Check that the database is reachable")
    subparsers.add_parser(
        "seed",
        help="Load sample users, projects and tasks into an empty database",
    )
    subparsers.add_parser("users", help="List registered users")

    args = parser.parse_args(argv)

    if args.command == "create-tables":
        return cmd_create_tables(args.drop_existing)
    elif args.command == "migrate":
        return cmd_migrate(args.target)
    elif args.command == "downgrade":
        return cmd_downgrade(args.target)
    elif args.command == "current":
        return cmd_current()
    elif args.command == "check-db":
        return cmd_check_db()
    elif args.command == "seed":
        return cmd_seed()
    elif args.command == "users":
        return cmd_users()
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
