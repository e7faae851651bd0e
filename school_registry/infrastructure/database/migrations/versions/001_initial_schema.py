# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial schema: schools, their student sets, and students.

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-01-06
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create registry tables."""

    op.create_table(
        "schools",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("address", sa.String(200), nullable=False),
        sa.Column("phone", sa.String(21), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("established_year", sa.Integer, nullable=False),
        sa.Column("principal", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_schools_name", "schools", ["name"])

    # Membership set: one row per (school, student id)
    op.create_table(
        "school_students",
        sa.Column("school_id", sa.String(36), nullable=False),
        sa.Column("student_id", sa.String(36), nullable=False),
        sa.Column("added_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("school_id", "student_id"),
    )
    op.create_index("ix_school_students_student_id", "school_students", ["student_id"])

    op.create_table(
        "students",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(21), nullable=True),
        sa.Column("date_of_birth", sa.DateTime(timezone=True), nullable=False),
        sa.Column("grade", sa.String(4), nullable=False),
        sa.Column("school_id", sa.String(36), nullable=True),
        sa.Column("address", sa.JSON, nullable=True),
        sa.Column("parent_info", sa.JSON, nullable=True),
        sa.Column("enrollment_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_students_email", "students", ["email"], unique=True)
    op.create_index("ix_students_school_id", "students", ["school_id"])
    op.create_index("ix_students_grade", "students", ["grade"])


def downgrade() -> None:
    """Drop registry tables."""
    op.drop_table("students")
    op.drop_table("school_students")
    op.drop_table("schools")
