# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shallow projections of a referenced record.

A school view embeds its students through one of the student projections; a
student view embeds its school through one of the school projections.
"""

from datetime import datetime

from school_registry.models.common import CamelModel


class SchoolBrief(CamelModel):
    """School name and address (list, create, update, enroll views)."""

    id: str
    name: str
    address: str


class SchoolContact(SchoolBrief):
    """School name, address, phone and email (student detail view)."""

    phone: str
    email: str


class StudentBrief(CamelModel):
    """Student name, email and grade (school list view)."""

    id: str
    first_name: str
    last_name: str
    email: str
    grade: str


class StudentBriefWithBirth(StudentBrief):
    """Student projection for the single-school view."""

    date_of_birth: datetime
