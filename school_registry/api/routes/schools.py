# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School API endpoints.

This module provides endpoints for school management:
- GET / - List schools with their students
- GET /{school_id} - Get school details
- POST / - Create a new school
- PUT /{school_id} - Update school
- DELETE /{school_id} - Delete school, clearing its students' reference
- GET /{school_id}/students - List students referencing the school

Example:
    POST /api/schools
    {
        "name": "Lincoln High",
        "address": "1 Main St",
        "phone": "555-123-4567",
        "email": "office@lincoln.edu",
        "establishedYear": 1950
    }
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, status

from school_registry.api.dependencies import Enrollment
from school_registry.models.common import ApiResponse
from school_registry.models.school import SchoolDetailResponse, SchoolResponse
from school_registry.models.student import StudentResponse

logger = logging.getLogger(__name__)

router = APIRouter()

SchoolPayload = Annotated[dict[str, Any], Body(description="School fields (camelCase)")]


@router.get(
    "",
    response_model=ApiResponse[list[SchoolResponse]],
    summary="List schools",
)
async def list_schools(service: Enrollment) -> ApiResponse[list[SchoolResponse]]:
    """List all schools with their students' brief projection."""
    schools = await service.list_schools()
    return ApiResponse(count=len(schools), data=schools)


@router.get(
    "/{school_id}",
    response_model=ApiResponse[SchoolDetailResponse],
    summary="Get school",
)
async def get_school(school_id: str, service: Enrollment) -> ApiResponse[SchoolDetailResponse]:
    """Get a school with its students, including date of birth."""
    return ApiResponse(data=await service.get_school(school_id))


@router.post(
    "",
    response_model=ApiResponse[SchoolResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create school",
)
async def create_school(payload: SchoolPayload, service: Enrollment) -> ApiResponse[SchoolResponse]:
    """Create a new school."""
    school = await service.create_school(payload)
    return ApiResponse(message="School created successfully", data=school)


@router.put(
    "/{school_id}",
    response_model=ApiResponse[SchoolResponse],
    summary="Update school",
)
async def update_school(
    school_id: str,
    payload: SchoolPayload,
    service: Enrollment,
) -> ApiResponse[SchoolResponse]:
    """Update the supplied school fields."""
    school = await service.update_school(school_id, payload)
    return ApiResponse(message="School updated successfully", data=school)


@router.delete(
    "/{school_id}",
    response_model=ApiResponse[None],
    summary="Delete school",
)
async def delete_school(school_id: str, service: Enrollment) -> ApiResponse[None]:
    """Delete a school; its students become unenrolled."""
    await service.delete_school(school_id)
    return ApiResponse(message="School deleted successfully")


@router.get(
    "/{school_id}/students",
    response_model=ApiResponse[list[StudentResponse]],
    summary="List students of school",
)
async def list_school_students(
    school_id: str,
    service: Enrollment,
) -> ApiResponse[list[StudentResponse]]:
    """List the students whose school is this school."""
    students = await service.list_school_students(school_id)
    return ApiResponse(count=len(students), data=students)
