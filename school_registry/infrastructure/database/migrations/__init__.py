# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Schema migrations for the registry database."""

from school_registry.infrastructure.database.migrations.runner import (
    MIGRATIONS,
    get_migration_status,
    run_migrations,
)

__all__ = [
    "MIGRATIONS",
    "get_migration_status",
    "run_migrations",
]
