# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School domain package."""

from school_registry.domains.school.store import SchoolStore

__all__ = [
    "SchoolStore",
]
