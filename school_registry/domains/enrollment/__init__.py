# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package.

This package provides the coordinator that keeps a school's ``students`` set
and each student's ``school`` reference consistent:
- Create, update and delete with reference maintenance
- Enroll and unenroll transitions
- Read views with embedded projections
"""

from school_registry.domains.enrollment.service import EnrollmentService

__all__ = [
    "EnrollmentService",
]
