# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Common schema building blocks.

Field patterns, reusable field checks, the camelCase base model, and the
response envelopes every endpoint returns.
"""

import re
from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from school_registry.utils.datetime import current_year, ensure_utc, utc_now

PHONE_PATTERN = re.compile(r"^[+]?[\d\s\-()]{7,20}$", re.ASCII)
EMAIL_PATTERN = re.compile(r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$", re.ASCII)
ZIP_CODE_PATTERN = re.compile(r"^\d{5}(-\d{4})?$", re.ASCII)

MIN_ESTABLISHED_YEAR = 1800

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        from_attributes=True,
        extra="ignore",
    )


def check_phone(value: str | None) -> str | None:
    """Validate an optional phone number; empty strings count as absent."""
    if not value:
        return None
    if not PHONE_PATTERN.match(value):
        raise ValueError("Please enter a valid phone number")
    return value


def normalize_email(value: str | None) -> str | None:
    """Lowercase and validate an optional email address."""
    if not value:
        return None
    value = value.lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Please enter a valid email")
    return value


def check_zip_code(value: str | None) -> str | None:
    """Validate an optional US-style zip code."""
    if not value:
        return None
    if not ZIP_CODE_PATTERN.match(value):
        raise ValueError("Please enter a valid zip code")
    return value


def check_established_year(value: int | None) -> int | None:
    """Check the year lies in [1800, current year]."""
    if value is None:
        return None
    if value < MIN_ESTABLISHED_YEAR:
        raise ValueError(f"Established year cannot be before {MIN_ESTABLISHED_YEAR}")
    if value > current_year():
        raise ValueError("Established year cannot be in the future")
    return value


def check_past_datetime(value: datetime | None) -> datetime | None:
    """Require a datetime strictly before now (naive values are UTC)."""
    if value is None:
        return None
    value = ensure_utc(value)
    if value >= utc_now():
        raise ValueError("Date of birth must be in the past")
    return value


def reject_null(value: object) -> object:
    """Refuse an explicit null for a field the record requires.

    Reported like a missing field.
    """
    if value is None:
        raise PydanticCustomError("null_required", "Field is required")
    return value


class FieldError(BaseModel):
    """One violated field constraint."""

    field: str = Field(description="Field path, e.g. email or address.zipCode")
    message: str = Field(description="What is wrong with the value")


class ApiResponse(BaseModel, Generic[DataT]):
    """Success envelope.

    Attributes:
        success: Always true.
        message: Optional confirmation message.
        count: Number of items for list responses.
        data: Payload.
    """

    success: bool = True
    message: str | None = None
    count: int | None = None
    data: DataT | None = None


class ErrorResponse(BaseModel):
    """Failure envelope.

    Attributes:
        success: Always false.
        message: Human-readable summary.
        errors: Per-field messages for validation failures.
        error: Internal error detail (debug mode only).
    """

    success: bool = False
    message: str
    errors: list[FieldError] | None = None
    error: str | None = None
