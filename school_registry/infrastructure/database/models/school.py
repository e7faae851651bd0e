# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School ORM models.

A school's ``students`` set is stored as rows of ``school_students``. The
composite primary key gives the set semantics. There is no foreign key to
``students``: the enrollment service keeps both halves of the reference in
step.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from school_registry.infrastructure.database.models.base import Base, TimestampMixin
from school_registry.utils.datetime import utc_now


class School(TimestampMixin, Base):
    """School record."""

    __tablename__ = "schools"

    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    address: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[str] = mapped_column(String(21), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    established_year: Mapped[int] = mapped_column(Integer, nullable=False)
    principal: Mapped[str | None] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        return f"<School {self.id} {self.name!r}>"


class SchoolStudent(Base):
    """Membership of one student id in one school's ``students`` set."""

    __tablename__ = "school_students"

    school_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    student_id: Mapped[str] = mapped_column(String(36), primary_key=True, index=True)
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )
