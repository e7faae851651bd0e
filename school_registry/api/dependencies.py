# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get database sessions from the manager created at startup
- Get the enrollment service bound to the request's session

Example:
    @router.get("/students")
    async def list_students(
        service: EnrollmentService = Depends(get_enrollment_service),
    ):
        ...
"""

import logging
from typing import Annotated, AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_registry.domains.enrollment import EnrollmentService
from school_registry.domains.school import SchoolStore
from school_registry.domains.student import StudentStore
from school_registry.infrastructure.database import DatabaseManager

logger = logging.getLogger(__name__)


def get_db_manager(request: Request) -> DatabaseManager:
    """Get the database manager stored on the application.

    Raises:
        HTTPException: If the database was not initialized at startup.
    """
    manager: DatabaseManager | None = getattr(request.app.state, "db", None)
    if manager is None:
        logger.error("Database manager not initialized")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not initialized",
        )
    return manager


async def get_db(
    manager: Annotated[DatabaseManager, Depends(get_db_manager)],
) -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for the duration of one request.

    Yields:
        AsyncSession for the registry database.
    """
    async with manager.session() as session:
        yield session


def get_enrollment_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EnrollmentService:
    """Get an enrollment service whose stores share the request session."""
    return EnrollmentService(SchoolStore(db), StudentStore(db))


# Type alias for cleaner endpoint signatures
Enrollment = Annotated[EnrollmentService, Depends(get_enrollment_service)]
