# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the Enrollment service."""

from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from school_registry.domains.enrollment import EnrollmentService
from school_registry.domains.errors import (
    BadRequestError,
    DuplicateKeyError,
    NotFoundError,
    ValidationError,
)
from school_registry.domains.school import SchoolStore
from school_registry.domains.student import StudentStore
from school_registry.models.projections import SchoolContact, StudentBriefWithBirth
from school_registry.utils.datetime import utc_now


async def assert_consistent(schools: SchoolStore, students: StudentStore) -> None:
    """Check both halves of every enrollment reference agree."""
    for student in await students.list_all():
        if student.school_id:
            assert student.id in await schools.member_ids(student.school_id)
    for school in await schools.list_all():
        for member_id in await schools.member_ids(school.id):
            member = await students.find(member_id)
            assert member is not None
            assert member.school_id == school.id


# =============================================================================
# Scenarios against a real database
# =============================================================================


class TestEnrollmentScenarios:
    """End-to-end walk through creation, transfer and deletion."""

    @pytest.mark.asyncio
    async def test_create_transfer_and_delete(
        self, enrollment_service, school_store, student_store, school_payload, student_payload
    ):
        """Test the full enrollment lifecycle keeps both sides in step."""
        lincoln = await enrollment_service.create_school(school_payload(name="Lincoln High"))
        assert lincoln.students == []

        john = await enrollment_service.create_student(
            student_payload(firstName="John", lastName="Doe", school=lincoln.id)
        )
        assert john.school.id == lincoln.id
        assert await school_store.member_ids(lincoln.id) == [john.id]
        await assert_consistent(school_store, student_store)

        washington = await enrollment_service.create_school(school_payload(name="Washington"))
        moved = await enrollment_service.enroll(john.id, washington.id)

        assert moved.school.id == washington.id
        assert await school_store.member_ids(lincoln.id) == []
        assert await school_store.member_ids(washington.id) == [john.id]
        await assert_consistent(school_store, student_store)

        await enrollment_service.delete_school(lincoln.id)
        assert (await enrollment_service.get_student(john.id)).school.id == washington.id

        await enrollment_service.delete_school(washington.id)
        assert (await enrollment_service.get_student(john.id)).school is None
        await assert_consistent(school_store, student_store)

    @pytest.mark.asyncio
    async def test_create_student_with_malformed_email(
        self, enrollment_service, student_store, student_payload
    ):
        """Test a bad email is reported on the email field and nothing is stored."""
        with pytest.raises(ValidationError) as exc_info:
            await enrollment_service.create_student(student_payload(email="john@@example"))

        assert "email" in exc_info.value.field_errors
        assert await student_store.list_all() == []

    @pytest.mark.asyncio
    async def test_unenroll_never_enrolled_student(
        self, enrollment_service, student_store, student_payload
    ):
        """Test unenrolling an unenrolled student fails and changes nothing."""
        student = await enrollment_service.create_student(student_payload())
        before = await student_store.get(student.id)
        before_updated_at = before.updated_at

        with pytest.raises(BadRequestError) as exc_info:
            await enrollment_service.unenroll(student.id)

        assert exc_info.value.message == "Student is not enrolled in any school"
        after = await student_store.get(student.id)
        assert after.school_id is None
        assert after.updated_at == before_updated_at


class TestEnrollmentServiceCreate:
    """Tests for creation paths."""

    @pytest.mark.asyncio
    async def test_create_student_with_unknown_school(
        self, enrollment_service, student_store, student_payload
    ):
        """Test an unresolvable school id fails before anything is written."""
        with pytest.raises(NotFoundError) as exc_info:
            await enrollment_service.create_student(student_payload(school=str(uuid4())))

        assert exc_info.value.message == "School not found"
        assert await student_store.list_all() == []

    @pytest.mark.asyncio
    async def test_create_unenrolled_student(self, enrollment_service, student_payload):
        """Test a student without a school renders school as null."""
        student = await enrollment_service.create_student(student_payload())

        assert student.school is None
        assert student.full_name.startswith("Ada ")

    @pytest.mark.asyncio
    async def test_create_school_duplicate_email(self, enrollment_service, school_payload):
        """Test store errors pass through unchanged."""
        await enrollment_service.create_school(school_payload(email="taken@school.org"))

        with pytest.raises(DuplicateKeyError):
            await enrollment_service.create_school(school_payload(email="taken@school.org"))


class TestEnrollmentServiceEnroll:
    """Tests for enroll and unenroll."""

    @pytest.mark.asyncio
    async def test_enroll_requires_school_id(self, enrollment_service, student_payload):
        """Test a missing school id is a bad request."""
        student = await enrollment_service.create_student(student_payload())

        with pytest.raises(BadRequestError) as exc_info:
            await enrollment_service.enroll(student.id, None)

        assert exc_info.value.message == "School ID is required"

    @pytest.mark.asyncio
    async def test_enroll_missing_student(self, enrollment_service, school_payload):
        """Test an unknown student raises NotFoundError."""
        school = await enrollment_service.create_school(school_payload())

        with pytest.raises(NotFoundError) as exc_info:
            await enrollment_service.enroll(str(uuid4()), school.id)

        assert exc_info.value.message == "Student not found"

    @pytest.mark.asyncio
    async def test_enroll_missing_school_changes_nothing(
        self, enrollment_service, school_store, student_store, school_payload, student_payload
    ):
        """Test an unknown school leaves the current enrollment in place."""
        school = await enrollment_service.create_school(school_payload())
        student = await enrollment_service.create_student(student_payload(school=school.id))

        with pytest.raises(NotFoundError) as exc_info:
            await enrollment_service.enroll(student.id, str(uuid4()))

        assert exc_info.value.message == "School not found"
        assert (await student_store.get(student.id)).school_id == school.id
        assert await school_store.member_ids(school.id) == [student.id]

    @pytest.mark.asyncio
    async def test_enroll_same_school_is_idempotent(
        self, enrollment_service, school_store, school_payload, student_payload
    ):
        """Test re-enrolling into the current school keeps one set entry."""
        school = await enrollment_service.create_school(school_payload())
        student = await enrollment_service.create_student(student_payload(school=school.id))

        result = await enrollment_service.enroll(student.id, school.id)

        assert result.school.id == school.id
        assert await school_store.member_ids(school.id) == [student.id]

    @pytest.mark.asyncio
    async def test_unenroll(
        self, enrollment_service, school_store, student_store, school_payload, student_payload
    ):
        """Test unenroll clears both sides."""
        school = await enrollment_service.create_school(school_payload())
        student = await enrollment_service.create_student(student_payload(school=school.id))

        result = await enrollment_service.unenroll(student.id)

        assert result.school is None
        assert await school_store.member_ids(school.id) == []
        await assert_consistent(school_store, student_store)

        with pytest.raises(BadRequestError):
            await enrollment_service.unenroll(student.id)

    @pytest.mark.asyncio
    async def test_unenroll_missing_student(self, enrollment_service):
        """Test an unknown student raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await enrollment_service.unenroll(str(uuid4()))


class TestEnrollmentServiceUpdate:
    """Tests for student updates that move the school reference."""

    @pytest.mark.asyncio
    async def test_update_moves_between_schools(
        self, enrollment_service, school_store, student_store, school_payload, student_payload
    ):
        """Test changing school removes from the old set and adds to the new."""
        old = await enrollment_service.create_school(school_payload())
        new = await enrollment_service.create_school(school_payload())
        student = await enrollment_service.create_student(student_payload(school=old.id))

        result = await enrollment_service.update_student(
            student.id, {"school": new.id, "grade": "9th"}
        )

        assert result.school.id == new.id
        assert result.grade == "9th"
        assert await school_store.member_ids(old.id) == []
        assert await school_store.member_ids(new.id) == [student.id]
        await assert_consistent(school_store, student_store)

    @pytest.mark.asyncio
    async def test_update_to_null_school(
        self, enrollment_service, school_store, student_store, school_payload, student_payload
    ):
        """Test clearing the school removes the student from its set."""
        school = await enrollment_service.create_school(school_payload())
        student = await enrollment_service.create_student(student_payload(school=school.id))

        result = await enrollment_service.update_student(student.id, {"school": None})

        assert result.school is None
        assert await school_store.member_ids(school.id) == []
        await assert_consistent(school_store, student_store)

    @pytest.mark.asyncio
    async def test_update_without_school_keeps_enrollment(
        self, enrollment_service, school_store, school_payload, student_payload
    ):
        """Test an update that omits school leaves the sets alone."""
        school = await enrollment_service.create_school(school_payload())
        student = await enrollment_service.create_student(student_payload(school=school.id))

        result = await enrollment_service.update_student(student.id, {"lastName": "Byron"})

        assert result.last_name == "Byron"
        assert result.school.id == school.id
        assert await school_store.member_ids(school.id) == [student.id]

    @pytest.mark.asyncio
    async def test_update_to_unknown_school(
        self, enrollment_service, student_store, student_payload
    ):
        """Test an unresolvable new school fails before any write."""
        student = await enrollment_service.create_student(student_payload())

        with pytest.raises(NotFoundError):
            await enrollment_service.update_student(
                student.id, {"school": str(uuid4()), "grade": "12th"}
            )

        stored = await student_store.get(student.id)
        assert stored.school_id is None
        assert stored.grade == "8th"

    @pytest.mark.asyncio
    async def test_update_missing_student(self, enrollment_service):
        """Test an unknown student raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await enrollment_service.update_student(str(uuid4()), {"grade": "9th"})


class TestEnrollmentServiceDelete:
    """Tests for delete paths."""

    @pytest.mark.asyncio
    async def test_delete_student_leaves_school_set(
        self, enrollment_service, school_store, school_payload, student_payload
    ):
        """Test deleting an enrolled student removes it from the set."""
        school = await enrollment_service.create_school(school_payload())
        student = await enrollment_service.create_student(student_payload(school=school.id))

        await enrollment_service.delete_student(student.id)

        assert await school_store.member_ids(school.id) == []
        view = await enrollment_service.get_school(school.id)
        assert view.students == []

    @pytest.mark.asyncio
    async def test_delete_school_clears_references(
        self, enrollment_service, school_store, student_store, school_payload, student_payload
    ):
        """Test deleting a school unenrolls its students without deleting them."""
        school = await enrollment_service.create_school(school_payload())
        first = await enrollment_service.create_student(student_payload(school=school.id))
        second = await enrollment_service.create_student(student_payload(school=school.id))

        await enrollment_service.delete_school(school.id)

        assert await school_store.find(school.id) is None
        assert (await student_store.get(first.id)).school_id is None
        assert (await student_store.get(second.id)).school_id is None
        await assert_consistent(school_store, student_store)

    @pytest.mark.asyncio
    async def test_delete_missing_school(self, enrollment_service):
        """Test an unknown school raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await enrollment_service.delete_school(str(uuid4()))


class TestEnrollmentServiceViews:
    """Tests for read profiles."""

    @pytest.mark.asyncio
    async def test_school_views(self, enrollment_service, school_payload, student_payload):
        """Test list and detail profiles of the embedded students."""
        school = await enrollment_service.create_school(school_payload())
        student = await enrollment_service.create_student(student_payload(school=school.id))

        listed = await enrollment_service.list_schools()
        detail = await enrollment_service.get_school(school.id)

        brief = listed[0].students[0]
        assert brief.id == student.id
        assert set(brief.model_dump()) == {"id", "first_name", "last_name", "email", "grade"}
        assert isinstance(detail.students[0], StudentBriefWithBirth)

    @pytest.mark.asyncio
    async def test_student_views(self, enrollment_service, school_payload, student_payload):
        """Test brief and contact profiles of the embedded school."""
        school = await enrollment_service.create_school(school_payload())
        student = await enrollment_service.create_student(student_payload(school=school.id))

        listed = await enrollment_service.list_students()
        detail = await enrollment_service.get_student(student.id)

        assert set(listed[0].school.model_dump()) == {"id", "name", "address"}
        assert isinstance(detail.school, SchoolContact)
        assert detail.school.email == school.email

    @pytest.mark.asyncio
    async def test_list_students_filters(self, enrollment_service, school_payload, student_payload):
        """Test the school, grade and active filters."""
        school = await enrollment_service.create_school(school_payload())
        match = await enrollment_service.create_student(
            student_payload(school=school.id, grade="3rd")
        )
        await enrollment_service.create_student(student_payload(grade="3rd"))
        await enrollment_service.create_student(student_payload(school=school.id, grade="4th"))

        found = await enrollment_service.list_students(
            school_id=school.id, grade="3rd", is_active=True
        )

        assert [s.id for s in found] == [match.id]

    @pytest.mark.asyncio
    async def test_list_school_students(self, enrollment_service, school_payload, student_payload):
        """Test students of a school are listed with the brief school profile."""
        school = await enrollment_service.create_school(school_payload())
        other = await enrollment_service.create_school(school_payload())
        student = await enrollment_service.create_student(student_payload(school=school.id))
        await enrollment_service.create_student(student_payload(school=other.id))

        found = await enrollment_service.list_school_students(school.id)

        assert [s.id for s in found] == [student.id]
        assert found[0].school.name == school.name

    @pytest.mark.asyncio
    async def test_list_students_of_missing_school(self, enrollment_service):
        """Test an unknown school raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await enrollment_service.list_school_students(str(uuid4()))

    @pytest.mark.asyncio
    async def test_school_round_trip(self, enrollment_service, school_payload):
        """Test get returns the created field values."""
        payload = school_payload()
        created = await enrollment_service.create_school(payload)

        fetched = await enrollment_service.get_school(created.id)

        assert fetched.name == payload["name"]
        assert fetched.address == payload["address"]
        assert fetched.phone == payload["phone"]
        assert fetched.email == payload["email"]
        assert fetched.established_year == payload["establishedYear"]
        assert fetched.principal == payload["principal"]
        assert fetched.id == created.id


# =============================================================================
# Write ordering against mocked stores
# =============================================================================


def _student_row(**overrides):
    """Create a stand-in student record."""
    now = utc_now()
    row = SimpleNamespace(
        id="student-1",
        first_name="John",
        last_name="Doe",
        email="john@example.com",
        phone=None,
        date_of_birth=now - timedelta(days=4400),
        grade="7th",
        school_id=None,
        address=None,
        parent_info=None,
        enrollment_date=now,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    for name, value in overrides.items():
        setattr(row, name, value)
    return row


def _school_row(school_id: str):
    """Create a stand-in school record."""
    return SimpleNamespace(
        id=school_id,
        name=f"School {school_id}",
        address="1 Main St",
        phone="555-0100",
        email=f"{school_id}@school.org",
    )


@pytest.fixture
def mock_stores():
    """Create spec'd store mocks attached to one recorder."""
    recorder = MagicMock()
    schools = MagicMock(spec=SchoolStore)
    students = MagicMock(spec=StudentStore)
    students.validate_update.side_effect = StudentStore.validate_update
    recorder.attach_mock(schools, "schools")
    recorder.attach_mock(students, "students")
    return recorder, schools, students


def _write_calls(recorder) -> list[str]:
    writes = {
        "schools.add_to_set",
        "schools.remove_from_set",
        "schools.delete",
        "students.update",
        "students.set_school",
        "students.delete",
        "students.clear_school_references",
    }
    return [name for name, _, _ in recorder.mock_calls if name in writes]


class TestEnrollmentWriteOrder:
    """Tests for the order of store writes."""

    @pytest.mark.asyncio
    async def test_update_persists_then_removes_then_adds(self, mock_stores):
        """Test old set is edited before the new one, after the field write."""
        recorder, schools, students = mock_stores
        students.get.return_value = _student_row(school_id="old")
        students.update.return_value = _student_row(school_id="new")
        schools.get.return_value = _school_row("new")
        schools.find.return_value = _school_row("new")
        service = EnrollmentService(schools, students)

        await service.update_student("student-1", {"school": "new"})

        assert _write_calls(recorder) == [
            "students.update",
            "schools.remove_from_set",
            "schools.add_to_set",
        ]
        schools.remove_from_set.assert_awaited_once_with("old", "student-1")
        schools.add_to_set.assert_awaited_once_with("new", "student-1")

    @pytest.mark.asyncio
    async def test_enroll_removes_before_setting_and_adding(self, mock_stores):
        """Test a transfer leaves the old school first."""
        recorder, schools, students = mock_stores
        students.get.return_value = _student_row(school_id="old")
        students.set_school.return_value = _student_row(school_id="new")
        schools.get.return_value = _school_row("new")
        service = EnrollmentService(schools, students)

        await service.enroll("student-1", "new")

        assert _write_calls(recorder) == [
            "schools.remove_from_set",
            "students.set_school",
            "schools.add_to_set",
        ]

    @pytest.mark.asyncio
    async def test_delete_school_clears_references_first(self, mock_stores):
        """Test references are cleared before the school is deleted."""
        recorder, schools, students = mock_stores
        schools.get.return_value = _school_row("gone")
        students.clear_school_references.return_value = 3
        service = EnrollmentService(schools, students)

        await service.delete_school("gone")

        assert _write_calls(recorder) == [
            "students.clear_school_references",
            "schools.delete",
        ]

    @pytest.mark.asyncio
    async def test_failed_step_keeps_earlier_writes(self, mock_stores):
        """Test a failing add surfaces its error with earlier writes not undone."""
        recorder, schools, students = mock_stores
        students.get.return_value = _student_row(school_id="old")
        students.update.return_value = _student_row(school_id="new")
        schools.get.return_value = _school_row("new")
        schools.add_to_set.side_effect = NotFoundError("School not found")
        service = EnrollmentService(schools, students)

        with pytest.raises(NotFoundError):
            await service.update_student("student-1", {"school": "new"})

        assert _write_calls(recorder) == [
            "students.update",
            "schools.remove_from_set",
            "schools.add_to_set",
        ]
        students.set_school.assert_not_awaited()
