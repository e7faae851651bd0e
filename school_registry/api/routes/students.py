# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student API endpoints.

This module provides endpoints for student management:
- GET / - List students, filtered by school, grade and active flag
- GET /{student_id} - Get student details
- POST / - Create a new student, optionally in a school
- PUT /{student_id} - Update student, moving it between schools if needed
- DELETE /{student_id} - Delete student
- PATCH /{student_id}/enroll - Enroll student in a school
- PATCH /{student_id}/unenroll - Remove student from its school
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Query, status

from school_registry.api.dependencies import Enrollment
from school_registry.domains.student import StudentStore
from school_registry.models.common import ApiResponse
from school_registry.models.student import (
    EnrollRequest,
    StudentDetailResponse,
    StudentResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

StudentPayload = Annotated[dict[str, Any], Body(description="Student fields (camelCase)")]


@router.get(
    "",
    response_model=ApiResponse[list[StudentResponse]],
    summary="List students",
)
async def list_students(
    service: Enrollment,
    school: Annotated[str | None, Query(description="Filter by school id")] = None,
    grade: Annotated[str | None, Query(description="Filter by grade, e.g. 5th")] = None,
    is_active: Annotated[
        str | None, Query(alias="isActive", description="Filter by active status")
    ] = None,
) -> ApiResponse[list[StudentResponse]]:
    """List students matching every non-empty filter."""
    filters = StudentStore.validate_filters(
        {"school": school, "grade": grade, "isActive": is_active}
    )
    students = await service.list_students(
        school_id=filters.school,
        grade=filters.grade.value if filters.grade else None,
        is_active=filters.is_active,
    )
    return ApiResponse(count=len(students), data=students)


@router.get(
    "/{student_id}",
    response_model=ApiResponse[StudentDetailResponse],
    summary="Get student",
)
async def get_student(
    student_id: str,
    service: Enrollment,
) -> ApiResponse[StudentDetailResponse]:
    """Get a student with its school's contact details."""
    return ApiResponse(data=await service.get_student(student_id))


@router.post(
    "",
    response_model=ApiResponse[StudentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create student",
)
async def create_student(
    payload: StudentPayload,
    service: Enrollment,
) -> ApiResponse[StudentResponse]:
    """Create a new student; a supplied school must exist."""
    student = await service.create_student(payload)
    return ApiResponse(message="Student created successfully", data=student)


@router.put(
    "/{student_id}",
    response_model=ApiResponse[StudentResponse],
    summary="Update student",
)
async def update_student(
    student_id: str,
    payload: StudentPayload,
    service: Enrollment,
) -> ApiResponse[StudentResponse]:
    """Update the supplied student fields."""
    student = await service.update_student(student_id, payload)
    return ApiResponse(message="Student updated successfully", data=student)


@router.delete(
    "/{student_id}",
    response_model=ApiResponse[None],
    summary="Delete student",
)
async def delete_student(student_id: str, service: Enrollment) -> ApiResponse[None]:
    """Delete a student and remove it from its school."""
    await service.delete_student(student_id)
    return ApiResponse(message="Student deleted successfully")


@router.patch(
    "/{student_id}/enroll",
    response_model=ApiResponse[StudentResponse],
    summary="Enroll student",
)
async def enroll_student(
    student_id: str,
    service: Enrollment,
    payload: Annotated[EnrollRequest | None, Body()] = None,
) -> ApiResponse[StudentResponse]:
    """Enroll a student in the school given by ``schoolId``."""
    school_id = payload.school_id if payload else None
    student = await service.enroll(student_id, school_id)
    return ApiResponse(message="Student enrolled successfully", data=student)


@router.patch(
    "/{student_id}/unenroll",
    response_model=ApiResponse[StudentResponse],
    summary="Unenroll student",
)
async def unenroll_student(student_id: str, service: Enrollment) -> ApiResponse[StudentResponse]:
    """Remove a student from its school."""
    student = await service.unenroll(student_id)
    return ApiResponse(message="Student unenrolled successfully", data=student)
