# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School entity store.

This module provides the SchoolStore that handles:
- Schema-validated create, read, update and delete of school records
- Email uniqueness
- Atomic, idempotent edits of a school's ``students`` set

The store knows nothing about students' ``school`` field; keeping both sides
of the enrollment reference consistent is the EnrollmentService's job.

Example:
    >>> store = SchoolStore(db_session)
    >>> school = await store.create({"name": "Lincoln High", ...})
    >>> await store.add_to_set(school.id, student_id)
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from school_registry.domains.errors import DuplicateKeyError, NotFoundError, ValidationError
from school_registry.infrastructure.database.models import School, SchoolStudent
from school_registry.models.school import SchoolCreateRequest, SchoolUpdateRequest
from school_registry.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class SchoolStore:
    """Persistence and validation for School records.

    Every write commits on its own.

    Attributes:
        _db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize the school store.

        Args:
            db: Async database session.
        """
        self._db = db

    @staticmethod
    def validate_create(
        fields: Mapping[str, Any] | SchoolCreateRequest,
    ) -> SchoolCreateRequest:
        """Validate a full set of school fields.

        Raises:
            ValidationError: If any constraint is violated.
        """
        if isinstance(fields, SchoolCreateRequest):
            return fields
        try:
            return SchoolCreateRequest.model_validate(fields)
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e) from e

    @staticmethod
    def validate_update(
        fields: Mapping[str, Any] | SchoolUpdateRequest,
    ) -> SchoolUpdateRequest:
        """Validate only the supplied school fields.

        Raises:
            ValidationError: If any supplied field violates a constraint.
        """
        if isinstance(fields, SchoolUpdateRequest):
            return fields
        try:
            return SchoolUpdateRequest.model_validate(fields)
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e) from e

    async def create(self, fields: Mapping[str, Any] | SchoolCreateRequest) -> School:
        """Create a new school.

        Args:
            fields: Raw wire fields or an already validated request.

        Returns:
            The persisted school with generated id and timestamps.

        Raises:
            ValidationError: If any constraint is violated.
            DuplicateKeyError: If the email is already used by another school.
        """
        request = self.validate_create(fields)

        if await self._email_taken(request.email):
            raise DuplicateKeyError("Email already exists")

        school = School(
            name=request.name,
            address=request.address,
            phone=request.phone,
            email=request.email,
            established_year=request.established_year,
            principal=request.principal,
        )
        self._db.add(school)
        await self._commit()
        await self._db.refresh(school)

        logger.info("School created: %s (email=%s)", school.id, school.email)

        return school

    async def get(self, school_id: str) -> School:
        """Get a school by id.

        Raises:
            NotFoundError: If the school does not exist.
        """
        school = await self.find(school_id)
        if school is None:
            raise NotFoundError("School not found")
        return school

    async def find(self, school_id: str | None) -> School | None:
        """Get a school by id, or None when it does not resolve."""
        if not school_id:
            return None
        result = await self._db.execute(select(School).where(School.id == str(school_id)))
        return result.scalar_one_or_none()

    async def find_many(self, school_ids: Iterable[str]) -> dict[str, School]:
        """Fetch several schools at once, keyed by id; missing ids are skipped."""
        ids = {str(school_id) for school_id in school_ids if school_id}
        if not ids:
            return {}
        result = await self._db.execute(select(School).where(School.id.in_(ids)))
        return {school.id: school for school in result.scalars().all()}

    async def list_all(self) -> list[School]:
        """List all schools."""
        result = await self._db.execute(select(School).order_by(School.name.asc()))
        return list(result.scalars().all())

    async def update(
        self,
        school_id: str,
        fields: Mapping[str, Any] | SchoolUpdateRequest,
    ) -> School:
        """Update the supplied fields of a school.

        Args:
            school_id: School identifier.
            fields: Partial wire fields or an already validated request.

        Returns:
            The updated school.

        Raises:
            NotFoundError: If the school does not exist.
            ValidationError: If a supplied field violates a constraint.
            DuplicateKeyError: If the new email belongs to another school.
        """
        request = self.validate_update(fields)
        school = await self.get(school_id)

        changes = request.model_dump(exclude_unset=True)
        if "email" in changes and changes["email"] != school.email:
            if await self._email_taken(changes["email"], exclude_id=school.id):
                raise DuplicateKeyError("Email already exists")

        for name, value in changes.items():
            setattr(school, name, value)

        await self._commit()
        await self._db.refresh(school)

        logger.info("School updated: %s (fields=%s)", school.id, sorted(changes))

        return school

    async def delete(self, school_id: str) -> None:
        """Delete a school and its membership set.

        Raises:
            NotFoundError: If the school does not exist.
        """
        school = await self.get(school_id)

        await self._db.execute(
            delete(SchoolStudent).where(SchoolStudent.school_id == school.id)
        )
        await self._db.delete(school)
        await self._commit()

        logger.info("School deleted: %s", school_id)

    async def member_ids(self, school_id: str) -> list[str]:
        """Return the ids in a school's ``students`` set."""
        result = await self._db.execute(
            select(SchoolStudent.student_id)
            .where(SchoolStudent.school_id == str(school_id))
            .order_by(SchoolStudent.added_at.asc())
        )
        return list(result.scalars().all())

    async def add_to_set(self, school_id: str, student_id: str) -> None:
        """Add a student id to a school's set; a present id is a no-op.

        Raises:
            NotFoundError: If the school does not exist.
        """
        school = await self.get(school_id)

        existing = await self._db.execute(
            select(SchoolStudent).where(
                SchoolStudent.school_id == school.id,
                SchoolStudent.student_id == str(student_id),
            )
        )
        if existing.scalar_one_or_none() is not None:
            logger.debug("Student %s already in set of school %s", student_id, school.id)
            return

        self._db.add(SchoolStudent(school_id=school.id, student_id=str(student_id)))
        school.updated_at = utc_now()
        try:
            await self._db.commit()
        except IntegrityError:
            # A concurrent add landed first; the id is in the set either way
            await self._db.rollback()
            logger.debug("Concurrent add of student %s to school %s", student_id, school.id)

    async def remove_from_set(self, school_id: str, student_id: str) -> None:
        """Remove a student id from a school's set.

        Removing an absent id, or from a school that no longer exists, is a
        no-op.
        """
        result = await self._db.execute(
            delete(SchoolStudent).where(
                SchoolStudent.school_id == str(school_id),
                SchoolStudent.student_id == str(student_id),
            )
        )
        if result.rowcount:
            await self._db.execute(
                update(School)
                .where(School.id == str(school_id))
                .values(updated_at=utc_now())
            )
        await self._db.commit()

    async def _email_taken(self, email: str, exclude_id: str | None = None) -> bool:
        """Check whether another school already uses this email."""
        stmt = select(School.id).where(School.email == email)
        if exclude_id:
            stmt = stmt.where(School.id != exclude_id)
        result = await self._db.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def _commit(self) -> None:
        """Commit, translating a unique-email race into DuplicateKeyError."""
        try:
            await self._db.commit()
        except IntegrityError as e:
            await self._db.rollback()
            raise DuplicateKeyError("Email already exists") from e
