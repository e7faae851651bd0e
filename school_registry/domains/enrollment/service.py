# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment service keeping schools and students in step.

This module provides the EnrollmentService class, the only component that
writes both a school's ``students`` set and a student's ``school`` reference
in one logical operation:
- School and student CRUD with reference maintenance
- Enroll and unenroll transitions
- Read views embedding the shallow projection of the other side

Each operation is an ordered sequence of independently committed store
writes. When the reference changes, the old school's set is edited before
the new one. A failure part way leaves the earlier writes in place.
"""

import logging
from collections.abc import Mapping
from typing import Any

from school_registry.domains.errors import BadRequestError
from school_registry.domains.school.store import SchoolStore
from school_registry.domains.student.store import StudentStore
from school_registry.infrastructure.database.models import School, Student
from school_registry.models.projections import (
    SchoolBrief,
    SchoolContact,
    StudentBrief,
    StudentBriefWithBirth,
)
from school_registry.models.school import (
    SchoolCreateRequest,
    SchoolDetailResponse,
    SchoolResponse,
    SchoolUpdateRequest,
)
from school_registry.models.student import (
    StudentCreateRequest,
    StudentDetailResponse,
    StudentResponse,
    StudentUpdateRequest,
)

logger = logging.getLogger(__name__)

_SCHOOL_COLUMNS = (
    "id",
    "name",
    "address",
    "phone",
    "email",
    "established_year",
    "principal",
    "created_at",
    "updated_at",
)

_STUDENT_COLUMNS = (
    "id",
    "first_name",
    "last_name",
    "email",
    "phone",
    "date_of_birth",
    "grade",
    "address",
    "parent_info",
    "enrollment_date",
    "is_active",
    "created_at",
    "updated_at",
)


class EnrollmentService:
    """Coordinator for the school/student back-reference.

    After any operation completes, a student id is in a school's
    ``students`` set exactly when that student's ``school`` equals the
    school's id. Concurrent operations are not isolated from each other.

    Attributes:
        schools: School entity store.
        students: Student entity store.
    """

    def __init__(self, schools: SchoolStore, students: StudentStore) -> None:
        """Initialize the enrollment service.

        Args:
            schools: School entity store.
            students: Student entity store.
        """
        self.schools = schools
        self.students = students

    # ------------------------------------------------------------------
    # Schools
    # ------------------------------------------------------------------

    async def create_school(
        self,
        fields: Mapping[str, Any] | SchoolCreateRequest,
    ) -> SchoolResponse:
        """Create a school with an empty ``students`` set."""
        school = await self.schools.create(fields)
        return await self._school_view(school)

    async def get_school(self, school_id: str) -> SchoolDetailResponse:
        """Get a school with its students (including date of birth).

        Raises:
            NotFoundError: If the school does not exist.
        """
        school = await self.schools.get(school_id)
        return await self._school_view(school, detail=True)

    async def list_schools(self) -> list[SchoolResponse]:
        """List all schools with their students."""
        schools = await self.schools.list_all()
        return [await self._school_view(school) for school in schools]

    async def update_school(
        self,
        school_id: str,
        fields: Mapping[str, Any] | SchoolUpdateRequest,
    ) -> SchoolResponse:
        """Update school fields; the ``students`` set is never written here.

        Raises:
            NotFoundError: If the school does not exist.
            ValidationError: If a supplied field violates a constraint.
            DuplicateKeyError: If the new email is taken.
        """
        school = await self.schools.update(school_id, fields)
        return await self._school_view(school)

    async def delete_school(self, school_id: str) -> None:
        """Delete a school after clearing every student's reference to it.

        Raises:
            NotFoundError: If the school does not exist.
        """
        school = await self.schools.get(school_id)

        cleared = await self.students.clear_school_references(school.id)
        logger.info("Cleared school reference on %d students of school %s", cleared, school.id)

        await self.schools.delete(school.id)

    async def list_school_students(self, school_id: str) -> list[StudentResponse]:
        """List the students whose ``school`` references a school.

        Raises:
            NotFoundError: If the school does not exist.
        """
        school = await self.schools.get(school_id)
        students = await self.students.list_all(school_id=school.id)
        brief = SchoolBrief.model_validate(school)
        return [self._student_view(student, brief) for student in students]

    # ------------------------------------------------------------------
    # Students
    # ------------------------------------------------------------------

    async def create_student(
        self,
        fields: Mapping[str, Any] | StudentCreateRequest,
    ) -> StudentResponse:
        """Create a student, adding it to its school's set when one is given.

        The school id is resolved before anything is written.

        Raises:
            ValidationError: If any constraint is violated.
            NotFoundError: If the given school does not exist.
            DuplicateKeyError: If the email is taken.
        """
        request = self.students.validate_create(fields)
        if request.school:
            await self.schools.get(request.school)

        student = await self.students.create(request)

        if student.school_id:
            await self.schools.add_to_set(student.school_id, student.id)
            logger.info("Added student %s to school %s", student.id, student.school_id)

        return await self._brief_view(student)

    async def get_student(self, student_id: str) -> StudentDetailResponse:
        """Get a student with its school's contact projection.

        Raises:
            NotFoundError: If the student does not exist.
        """
        student = await self.students.get(student_id)
        school = await self.schools.find(student.school_id)
        contact = SchoolContact.model_validate(school) if school else None
        return self._student_view(student, contact, detail=True)

    async def list_students(
        self,
        school_id: str | None = None,
        grade: str | None = None,
        is_active: bool | None = None,
    ) -> list[StudentResponse]:
        """List students matching the optional filters."""
        students = await self.students.list_all(
            school_id=school_id,
            grade=grade,
            is_active=is_active,
        )
        schools = await self.schools.find_many(
            student.school_id for student in students if student.school_id
        )
        return [
            self._student_view(student, _brief_or_none(schools.get(student.school_id)))
            for student in students
        ]

    async def update_student(
        self,
        student_id: str,
        fields: Mapping[str, Any] | StudentUpdateRequest,
    ) -> StudentResponse:
        """Update a student, moving it between school sets if ``school`` changes.

        Field changes are persisted first, then the id is removed from the
        old school's set, then added to the new one.

        Raises:
            NotFoundError: If the student or the new school does not exist.
            ValidationError: If a supplied field violates a constraint.
            DuplicateKeyError: If the new email is taken.
        """
        current = await self.students.get(student_id)
        old_school_id = current.school_id

        request = self.students.validate_update(fields)
        school_supplied = "school" in request.model_fields_set
        new_school_id = request.school if school_supplied else old_school_id

        if new_school_id and new_school_id != old_school_id:
            await self.schools.get(new_school_id)

        student = await self.students.update(current.id, request)

        if new_school_id != old_school_id:
            if old_school_id:
                await self.schools.remove_from_set(old_school_id, student.id)
                logger.info("Removed student %s from school %s", student.id, old_school_id)
            if new_school_id:
                await self.schools.add_to_set(new_school_id, student.id)
                logger.info("Added student %s to school %s", student.id, new_school_id)

        return await self._brief_view(student)

    async def delete_student(self, student_id: str) -> None:
        """Delete a student after removing it from its school's set.

        Raises:
            NotFoundError: If the student does not exist.
        """
        student = await self.students.get(student_id)

        if student.school_id:
            await self.schools.remove_from_set(student.school_id, student.id)
            logger.info("Removed student %s from school %s", student.id, student.school_id)

        await self.students.delete(student.id)

    async def enroll(self, student_id: str, school_id: str | None) -> StudentResponse:
        """Enroll a student in a school, leaving any previous school.

        Enrolling into the school the student is already in is a no-op on the
        set and succeeds.

        Args:
            student_id: Student identifier.
            school_id: Target school identifier.

        Returns:
            The student with its new school's brief projection.

        Raises:
            BadRequestError: If no school id is given.
            NotFoundError: If the student or the school does not exist.
        """
        if not school_id:
            raise BadRequestError("School ID is required")

        student = await self.students.get(student_id)
        school = await self.schools.get(school_id)

        old_school_id = student.school_id
        if old_school_id and old_school_id != school.id:
            await self.schools.remove_from_set(old_school_id, student.id)
            logger.info("Removed student %s from school %s", student.id, old_school_id)

        student = await self.students.set_school(student.id, school.id)
        await self.schools.add_to_set(school.id, student.id)

        logger.info(
            "Enrolled student %s in school %s (previous=%s)",
            student.id,
            school.id,
            old_school_id,
        )

        return self._student_view(student, SchoolBrief.model_validate(school))

    async def unenroll(self, student_id: str) -> StudentResponse:
        """Remove a student from its school.

        Raises:
            NotFoundError: If the student does not exist.
            BadRequestError: If the student is not enrolled.
        """
        student = await self.students.get(student_id)

        old_school_id = student.school_id
        if not old_school_id:
            raise BadRequestError("Student is not enrolled in any school")

        await self.schools.remove_from_set(old_school_id, student.id)
        student = await self.students.set_school(student.id, None)

        logger.info("Unenrolled student %s from school %s", student.id, old_school_id)

        return self._student_view(student, None)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    async def _school_view(
        self,
        school: School,
        detail: bool = False,
    ) -> SchoolResponse:
        """Render a school with its resolvable members projected."""
        member_ids = await self.schools.member_ids(school.id)
        members = await self.students.find_many(member_ids)

        fields = {name: getattr(school, name) for name in _SCHOOL_COLUMNS}
        if detail:
            return SchoolDetailResponse(
                **fields,
                students=[StudentBriefWithBirth.model_validate(m) for m in members],
            )
        return SchoolResponse(
            **fields,
            students=[StudentBrief.model_validate(m) for m in members],
        )

    async def _brief_view(self, student: Student) -> StudentResponse:
        """Render a student with its school's brief projection."""
        school = await self.schools.find(student.school_id)
        return self._student_view(student, _brief_or_none(school))

    @staticmethod
    def _student_view(
        student: Student,
        school: SchoolBrief | None,
        detail: bool = False,
    ) -> StudentResponse:
        fields = {name: getattr(student, name) for name in _STUDENT_COLUMNS}
        if detail:
            return StudentDetailResponse(**fields, school=school)
        return StudentResponse(**fields, school=school)


def _brief_or_none(school: School | None) -> SchoolBrief | None:
    return SchoolBrief.model_validate(school) if school else None
