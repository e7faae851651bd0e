# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student domain package."""

from school_registry.domains.student.store import StudentStore

__all__ = [
    "StudentStore",
]
