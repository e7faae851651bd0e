# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API Routes package.

This module exports the ``/api`` router aggregating all route modules.
Every route on it counts against the client's rate limit window.
"""

from fastapi import APIRouter, Depends

from school_registry.api.middleware.rate_limit import enforce_rate_limit
from school_registry.api.routes import health, schools, students

api_router = APIRouter(prefix="/api", dependencies=[Depends(enforce_rate_limit)])
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(schools.router, prefix="/schools", tags=["Schools"])
api_router.include_router(students.router, prefix="/students", tags=["Students"])

__all__ = ["api_router", "health", "schools", "students"]
