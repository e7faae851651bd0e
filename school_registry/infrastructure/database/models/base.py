# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Declarative base and shared column mixins."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from school_registry.utils.datetime import utc_now


def generate_id() -> str:
    """Generate an opaque record identifier."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all registry ORM models."""

    pass


class TimestampMixin:
    """Generated id plus creation and last-modified timestamps."""

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_id,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now,
    )
