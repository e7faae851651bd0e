# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student ORM model."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from school_registry.infrastructure.database.models.base import Base, TimestampMixin
from school_registry.utils.datetime import utc_now


class Student(TimestampMixin, Base):
    """Student record.

    ``school_id`` is the student's half of the enrollment back-reference;
    null means unenrolled.
    """

    __tablename__ = "students"

    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(21), nullable=True)
    date_of_birth: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    grade: Mapped[str] = mapped_column(String(4), nullable=False, index=True)
    school_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    address: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    parent_info: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    enrollment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    @property
    def full_name(self) -> str:
        """First and last name joined by a space."""
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Student {self.id} {self.full_name!r}>"
