# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School request and response schemas.

The ``students`` set is not part of any request schema: membership only
changes through the enrollment service.
"""

from datetime import datetime

from pydantic import Field, field_validator

from school_registry.models.common import (
    CamelModel,
    check_established_year,
    check_phone,
    normalize_email,
    reject_null,
)
from school_registry.models.projections import StudentBrief, StudentBriefWithBirth


class SchoolUpdateRequest(CamelModel):
    """Partial school update; only supplied fields are validated."""

    name: str | None = Field(None, min_length=1, max_length=100)
    address: str | None = Field(None, min_length=1, max_length=200)
    phone: str | None = Field(None, min_length=1)
    email: str | None = Field(None, min_length=1)
    established_year: int | None = None
    principal: str | None = Field(None, max_length=100)

    @field_validator("name", "address", "phone", "email", "established_year", mode="before")
    @classmethod
    def _required_not_null(cls, value: object) -> object:
        return reject_null(value)

    @field_validator("phone")
    @classmethod
    def _validate_phone(cls, value: str | None) -> str | None:
        return check_phone(value)

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str | None) -> str | None:
        return normalize_email(value)

    @field_validator("established_year")
    @classmethod
    def _validate_established_year(cls, value: int | None) -> int | None:
        return check_established_year(value)


class SchoolCreateRequest(SchoolUpdateRequest):
    """New school; every field but principal is required."""

    name: str = Field(..., min_length=1, max_length=100)
    address: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    established_year: int = Field(...)


class SchoolResponse(CamelModel):
    """School with its enrolled students as shallow projections."""

    id: str
    name: str
    address: str
    phone: str
    email: str
    established_year: int
    principal: str | None = None
    students: list[StudentBrief] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class SchoolDetailResponse(SchoolResponse):
    """Single-school view; student projections include date of birth."""

    students: list[StudentBriefWithBirth] = Field(default_factory=list)
