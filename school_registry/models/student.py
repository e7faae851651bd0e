# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student request and response schemas."""

from datetime import datetime
from enum import Enum

from pydantic import Field, computed_field, field_validator

from school_registry.models.common import (
    CamelModel,
    check_past_datetime,
    check_phone,
    check_zip_code,
    normalize_email,
    reject_null,
)
from school_registry.models.projections import SchoolBrief, SchoolContact
from school_registry.utils.datetime import utc_now


class Grade(str, Enum):
    """Grade labels, in order."""

    FIRST = "1st"
    SECOND = "2nd"
    THIRD = "3rd"
    FOURTH = "4th"
    FIFTH = "5th"
    SIXTH = "6th"
    SEVENTH = "7th"
    EIGHTH = "8th"
    NINTH = "9th"
    TENTH = "10th"
    ELEVENTH = "11th"
    TWELFTH = "12th"


class StudentAddress(CamelModel):
    """Optional postal address."""

    street: str | None = Field(None, max_length=100)
    city: str | None = Field(None, max_length=50)
    state: str | None = Field(None, max_length=50)
    zip_code: str | None = None

    @field_validator("zip_code")
    @classmethod
    def _validate_zip_code(cls, value: str | None) -> str | None:
        return check_zip_code(value)


class ParentInfo(CamelModel):
    """Optional parent or guardian contact."""

    parent_name: str | None = Field(None, max_length=100)
    parent_phone: str | None = None
    parent_email: str | None = None

    @field_validator("parent_phone")
    @classmethod
    def _validate_phone(cls, value: str | None) -> str | None:
        return check_phone(value)

    @field_validator("parent_email")
    @classmethod
    def _validate_email(cls, value: str | None) -> str | None:
        return normalize_email(value)


class StudentUpdateRequest(CamelModel):
    """Partial student update; only supplied fields are validated.

    ``school`` may be supplied as null to clear the reference.
    """

    first_name: str | None = Field(None, min_length=1, max_length=50)
    last_name: str | None = Field(None, min_length=1, max_length=50)
    email: str | None = Field(None, min_length=1)
    phone: str | None = None
    date_of_birth: datetime | None = None
    grade: Grade | None = None
    school: str | None = None
    address: StudentAddress | None = None
    parent_info: ParentInfo | None = None
    enrollment_date: datetime | None = None
    is_active: bool | None = None

    @field_validator(
        "first_name",
        "last_name",
        "email",
        "date_of_birth",
        "grade",
        "enrollment_date",
        "is_active",
        mode="before",
    )
    @classmethod
    def _required_not_null(cls, value: object) -> object:
        return reject_null(value)

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str | None) -> str | None:
        return normalize_email(value)

    @field_validator("phone")
    @classmethod
    def _validate_phone(cls, value: str | None) -> str | None:
        return check_phone(value)

    @field_validator("date_of_birth")
    @classmethod
    def _validate_date_of_birth(cls, value: datetime | None) -> datetime | None:
        return check_past_datetime(value)

    @field_validator("school")
    @classmethod
    def _blank_school_is_none(cls, value: str | None) -> str | None:
        return value or None


class StudentCreateRequest(StudentUpdateRequest):
    """New student, optionally pre-assigned to a school."""

    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=1)
    date_of_birth: datetime = Field(...)
    grade: Grade = Field(...)
    enrollment_date: datetime = Field(default_factory=utc_now)
    is_active: bool = True


class EnrollRequest(CamelModel):
    """Body of the enroll operation."""

    school_id: str | None = None


class StudentListFilter(CamelModel):
    """Query filters for listing students; empty values are ignored."""

    school: str | None = None
    grade: Grade | None = None
    is_active: bool | None = None

    @field_validator("school", "grade", "is_active", mode="before")
    @classmethod
    def _empty_is_absent(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class StudentResponse(CamelModel):
    """Student with its school as the brief projection."""

    id: str
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    date_of_birth: datetime
    grade: str
    school: SchoolBrief | None = None
    address: StudentAddress | None = None
    parent_info: ParentInfo | None = None
    enrollment_date: datetime
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @computed_field(alias="fullName")  # type: ignore[prop-decorator]
    @property
    def full_name(self) -> str:
        """First and last name joined by a space."""
        return f"{self.first_name} {self.last_name}"


class StudentDetailResponse(StudentResponse):
    """Single-student view; the school projection includes contact fields."""

    school: SchoolContact | None = None
