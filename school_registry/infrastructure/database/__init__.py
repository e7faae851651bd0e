# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure package."""

from school_registry.infrastructure.database.connection import (
    DatabaseError,
    DatabaseManager,
)

__all__ = [
    "DatabaseError",
    "DatabaseManager",
]
