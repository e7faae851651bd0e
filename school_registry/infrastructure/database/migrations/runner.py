# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Programmatic schema migrations.

Revisions live in the ``versions`` package, one module per revision, each
declaring ``revision``, ``down_revision`` and an alembic-style ``upgrade()``.
They are chained by ``down_revision`` and applied oldest first, each in its
own transaction together with the ``alembic_version`` bookkeeping.

Example:
    >>> applied = await run_migrations(settings.database.url)
    >>> status = await get_migration_status(settings.database.url)
"""

import argparse
import asyncio
import importlib
import logging
import pkgutil
from types import ModuleType

from alembic.operations import Operations
from alembic.runtime.migration import MigrationContext
from sqlalchemy import Column, Connection, MetaData, String, Table, delete, insert
from sqlalchemy.ext.asyncio import AsyncConnection, create_async_engine

from school_registry.infrastructure.database.migrations import versions

logger = logging.getLogger(__name__)

_version_metadata = MetaData()

alembic_version = Table(
    "alembic_version",
    _version_metadata,
    Column("version_num", String(128), primary_key=True),
)


def _load_revisions() -> dict[str, ModuleType]:
    """Import every revision module and order them by ``down_revision``.

    Raises:
        ValueError: If a module lacks ``upgrade()`` or the chain is broken.
    """
    modules: dict[str | None, ModuleType] = {}
    for info in pkgutil.iter_modules(versions.__path__):
        module = importlib.import_module(f"{versions.__name__}.{info.name}")
        if not callable(getattr(module, "upgrade", None)):
            raise ValueError(f"Migration {info.name} has no upgrade() function")
        modules[getattr(module, "down_revision", None)] = module

    ordered: dict[str, ModuleType] = {}
    parent: str | None = None
    while parent in modules:
        module = modules.pop(parent)
        ordered[module.revision] = module
        parent = module.revision

    if modules:
        orphans = ", ".join(m.revision for m in modules.values())
        raise ValueError(f"Migrations not reachable from the base revision: {orphans}")
    return ordered


REVISIONS = _load_revisions()
MIGRATIONS = list(REVISIONS)


def pending_revisions(current: str | None, target: str | None = None) -> list[str]:
    """Select the revisions after ``current`` up to and including ``target``.

    An unknown current or target revision selects nothing.
    """
    if current is not None and current not in REVISIONS:
        logger.warning("Current version %s not in known migrations", current)
        return []
    if target is not None and target not in REVISIONS:
        logger.warning("Target revision %s not found", target)
        return []

    start = MIGRATIONS.index(current) + 1 if current else 0
    end = MIGRATIONS.index(target) + 1 if target else len(MIGRATIONS)
    return MIGRATIONS[start:end]


def _current_revision(connection: Connection) -> str | None:
    return MigrationContext.configure(connection).get_current_revision()


def _upgrade(connection: Connection, revision: str) -> None:
    context = MigrationContext.configure(connection)
    with Operations.context(context):
        REVISIONS[revision].upgrade()

    connection.execute(delete(alembic_version))
    connection.execute(insert(alembic_version).values(version_num=revision))


async def _read_current(conn: AsyncConnection) -> str | None:
    return await conn.run_sync(_current_revision)


async def run_migrations(db_url: str, target_revision: str | None = None) -> list[str]:
    """Apply pending revisions to a database.

    Args:
        db_url: Async database URL.
        target_revision: Stop after this revision; all pending when None.

    Returns:
        Revisions applied, in order.
    """
    engine = create_async_engine(db_url)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(_version_metadata.create_all)
            current = await _read_current(conn)

        logger.info("Current migration version: %s", current or "None")
        pending = pending_revisions(current, target_revision)
        if not pending:
            logger.info("No pending migrations")
            return []

        for revision in pending:
            async with engine.begin() as conn:
                await conn.run_sync(_upgrade, revision)
            logger.info("Applied migration: %s", revision)
        return pending
    finally:
        await engine.dispose()


async def get_migration_status(db_url: str) -> dict:
    """Report the current revision and what remains to apply."""
    engine = create_async_engine(db_url)
    try:
        async with engine.connect() as conn:
            current = await _read_current(conn)
    finally:
        await engine.dispose()

    pending = pending_revisions(current)
    return {
        "current_version": current,
        "latest_version": MIGRATIONS[-1] if MIGRATIONS else None,
        "pending_count": len(pending),
        "pending_migrations": pending,
    }


def main() -> None:
    """Command line entry point: ``school-registry-migrate``."""
    from school_registry.core.config import get_settings
    from school_registry.utils.logging import setup_logging

    parser = argparse.ArgumentParser(description="Apply registry schema migrations")
    parser.add_argument("--target", default=None, help="Revision to migrate to")
    parser.add_argument("--status", action="store_true", help="Only report status")
    args = parser.parse_args()

    settings = get_settings()
    setup_logging(settings)

    if args.status:
        status = asyncio.run(get_migration_status(settings.database.url))
        for key, value in status.items():
            print(f"{key}: {value}")
        return

    applied = asyncio.run(run_migrations(settings.database.url, args.target))
    print(f"Applied {len(applied)} migration(s)")
