# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models for the registry database.

Importing this package registers every table with ``Base.metadata``.
"""

from school_registry.infrastructure.database.models.base import Base, TimestampMixin
from school_registry.infrastructure.database.models.school import School, SchoolStudent
from school_registry.infrastructure.database.models.student import Student

__all__ = [
    "Base",
    "TimestampMixin",
    "School",
    "SchoolStudent",
    "Student",
]
