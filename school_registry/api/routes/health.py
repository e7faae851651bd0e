# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Health check and welcome endpoints."""

import logging
import time
from datetime import datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from school_registry import __version__
from school_registry.utils.datetime import utc_now

logger = logging.getLogger(__name__)

router = APIRouter()

# Track server start time for uptime calculation
_server_start_time = time.time()


class ComponentHealth(BaseModel):
    """Individual component health status."""
    status: str = Field(description="Component status")
    latency_ms: float | None = Field(None, description="Response latency in ms")


class HealthResponse(BaseModel):
    """Health check response model."""
    success: bool = True
    message: str = Field(description="Liveness message")
    timestamp: datetime = Field(description="Current server timestamp")
    environment: str = Field(description="Deployment environment")
    version: str = Field(description="API version")
    uptime_seconds: int = Field(description="Server uptime in seconds")
    database: ComponentHealth = Field(description="Database reachability")


class WelcomeResponse(BaseModel):
    """Root endpoint response model."""
    success: bool = True
    message: str
    version: str
    endpoints: dict[str, str]


async def check_database(request: Request) -> ComponentHealth:
    """Check the registry database connection."""
    manager = getattr(request.app.state, "db", None)
    if manager is None:
        return ComponentHealth(status="unavailable")

    start = time.time()
    healthy = await manager.check_connection()
    latency = (time.time() - start) * 1000

    if not healthy:
        logger.error("Database health check failed")
        return ComponentHealth(status="unhealthy")
    return ComponentHealth(status="healthy", latency_ms=round(latency, 2))


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Report that the API is running, with a database check."""
    settings = request.app.state.settings
    return HealthResponse(
        message=f"{settings.api.title} is running",
        timestamp=utc_now(),
        environment=settings.environment,
        version=__version__,
        uptime_seconds=int(time.time() - _server_start_time),
        database=await check_database(request),
    )


async def welcome(request: Request) -> WelcomeResponse:
    """Describe the API and list its entry points."""
    settings = request.app.state.settings
    return WelcomeResponse(
        message=f"Welcome to {settings.api.title}",
        version=__version__,
        endpoints={
            "schools": "/api/schools",
            "students": "/api/students",
            "health": "/api/health",
        },
    )
