# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain layer for School Registry.

Domains:
    school: School records and their ``students`` set.
    student: Student records and their ``school`` reference.
    enrollment: Coordinator keeping both sides of the enrollment in step.
"""
