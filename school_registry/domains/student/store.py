# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student entity store.

This module provides the StudentStore that handles:
- Schema-validated create, read, update and delete of student records
- Email uniqueness
- Filtered listing (school, grade, active flag)
- Single-field and bulk writes of the ``school`` reference

Writing ``school`` here never touches any school's ``students`` set.
"""

import logging
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from school_registry.domains.errors import DuplicateKeyError, NotFoundError, ValidationError
from school_registry.infrastructure.database.models import Student
from school_registry.models.student import (
    StudentCreateRequest,
    StudentListFilter,
    StudentUpdateRequest,
)
from school_registry.utils.datetime import utc_now

logger = logging.getLogger(__name__)

# Request attribute -> column, where they differ
_COLUMN_NAMES = {"school": "school_id"}


class StudentStore:
    """Persistence and validation for Student records.

    Every write commits on its own.

    Attributes:
        _db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize the student store.

        Args:
            db: Async database session.
        """
        self._db = db

    @staticmethod
    def validate_create(
        fields: Mapping[str, Any] | StudentCreateRequest,
    ) -> StudentCreateRequest:
        """Validate a full set of student fields.

        Raises:
            ValidationError: If any constraint is violated.
        """
        if isinstance(fields, StudentCreateRequest):
            return fields
        try:
            return StudentCreateRequest.model_validate(fields)
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e) from e

    @staticmethod
    def validate_update(
        fields: Mapping[str, Any] | StudentUpdateRequest,
    ) -> StudentUpdateRequest:
        """Validate only the supplied student fields.

        Raises:
            ValidationError: If any supplied field violates a constraint.
        """
        if isinstance(fields, StudentUpdateRequest):
            return fields
        try:
            return StudentUpdateRequest.model_validate(fields)
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e) from e

    @staticmethod
    def validate_filters(query: Mapping[str, Any]) -> StudentListFilter:
        """Validate list filters; empty values mean no filter.

        Raises:
            ValidationError: If grade or isActive is not a valid value.
        """
        try:
            return StudentListFilter.model_validate(query)
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e) from e

    async def create(self, fields: Mapping[str, Any] | StudentCreateRequest) -> Student:
        """Create a new student.

        Args:
            fields: Raw wire fields or an already validated request.

        Returns:
            The persisted student with generated id and timestamps.

        Raises:
            ValidationError: If any constraint is violated.
            DuplicateKeyError: If the email is already used by another student.
        """
        request = self.validate_create(fields)

        if await self._email_taken(request.email):
            raise DuplicateKeyError("Email already exists")

        student = Student(**_to_columns(request.model_dump(exclude={"school"})))
        student.school_id = request.school
        self._db.add(student)
        await self._commit()
        await self._db.refresh(student)

        logger.info(
            "Student created: %s (email=%s, school=%s)",
            student.id,
            student.email,
            student.school_id,
        )

        return student

    async def get(self, student_id: str) -> Student:
        """Get a student by id.

        Raises:
            NotFoundError: If the student does not exist.
        """
        student = await self.find(student_id)
        if student is None:
            raise NotFoundError("Student not found")
        return student

    async def find(self, student_id: str | None) -> Student | None:
        """Get a student by id, or None when it does not resolve."""
        if not student_id:
            return None
        result = await self._db.execute(select(Student).where(Student.id == str(student_id)))
        return result.scalar_one_or_none()

    async def find_many(self, student_ids: Iterable[str]) -> list[Student]:
        """Fetch students by id, preserving the given order; missing ids are skipped."""
        ids = [str(student_id) for student_id in student_ids]
        if not ids:
            return []
        result = await self._db.execute(select(Student).where(Student.id.in_(ids)))
        by_id = {student.id: student for student in result.scalars().all()}
        return [by_id[student_id] for student_id in ids if student_id in by_id]

    async def list_all(
        self,
        school_id: str | None = None,
        grade: str | None = None,
        is_active: bool | None = None,
    ) -> list[Student]:
        """List students with optional exact-match filters.

        Args:
            school_id: Only students referencing this school.
            grade: Only students in this grade.
            is_active: Only active (True) or inactive (False) students.

        Returns:
            Matching students.
        """
        stmt = select(Student)

        if school_id is not None:
            stmt = stmt.where(Student.school_id == str(school_id))
        if grade is not None:
            stmt = stmt.where(Student.grade == grade)
        if is_active is not None:
            stmt = stmt.where(Student.is_active == is_active)

        stmt = stmt.order_by(Student.created_at.asc())

        result = await self._db.execute(stmt)
        return list(result.scalars().all())

    async def update(
        self,
        student_id: str,
        fields: Mapping[str, Any] | StudentUpdateRequest,
    ) -> Student:
        """Update the supplied fields of a student, including ``school``.

        Args:
            student_id: Student identifier.
            fields: Partial wire fields or an already validated request.

        Returns:
            The updated student.

        Raises:
            NotFoundError: If the student does not exist.
            ValidationError: If a supplied field violates a constraint.
            DuplicateKeyError: If the new email belongs to another student.
        """
        request = self.validate_update(fields)
        student = await self.get(student_id)

        changes = _to_columns(request.model_dump(exclude_unset=True))
        if "email" in changes and changes["email"] != student.email:
            if await self._email_taken(changes["email"], exclude_id=student.id):
                raise DuplicateKeyError("Email already exists")

        for name, value in changes.items():
            setattr(student, name, value)

        await self._commit()
        await self._db.refresh(student)

        logger.info("Student updated: %s (fields=%s)", student.id, sorted(changes))

        return student

    async def delete(self, student_id: str) -> None:
        """Delete a student.

        Raises:
            NotFoundError: If the student does not exist.
        """
        student = await self.get(student_id)

        await self._db.delete(student)
        await self._db.commit()

        logger.info("Student deleted: %s", student_id)

    async def set_school(self, student_id: str, school_id: str | None) -> Student:
        """Write the student's ``school`` reference and nothing else.

        Raises:
            NotFoundError: If the student does not exist.
        """
        student = await self.get(student_id)

        student.school_id = str(school_id) if school_id else None
        await self._db.commit()
        await self._db.refresh(student)

        return student

    async def clear_school_references(self, school_id: str) -> int:
        """Set ``school`` to null on every student referencing a school.

        Args:
            school_id: School whose references are cleared.

        Returns:
            Number of students updated.
        """
        result = await self._db.execute(
            update(Student)
            .where(Student.school_id == str(school_id))
            .values(school_id=None, updated_at=utc_now())
        )
        await self._db.commit()
        return result.rowcount or 0

    async def _email_taken(self, email: str, exclude_id: str | None = None) -> bool:
        """Check whether another student already uses this email."""
        stmt = select(Student.id).where(Student.email == email)
        if exclude_id:
            stmt = stmt.where(Student.id != exclude_id)
        result = await self._db.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def _commit(self) -> None:
        """Commit, translating a unique-email race into DuplicateKeyError."""
        try:
            await self._db.commit()
        except IntegrityError as e:
            await self._db.rollback()
            raise DuplicateKeyError("Email already exists") from e


def _to_columns(values: dict[str, Any]) -> dict[str, Any]:
    """Map request attribute names to column names and enums to values."""
    columns: dict[str, Any] = {}
    for name, value in values.items():
        if isinstance(value, Enum):
            value = value.value
        columns[_COLUMN_NAMES.get(name, name)] = value
    return columns
