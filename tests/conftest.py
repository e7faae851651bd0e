# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests (stores and enrollment service on a throwaway SQLite file)
- Integration tests (the full application through TestClient)
"""

from collections.abc import AsyncGenerator, Callable, Generator
from itertools import count
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from school_registry.api.app import create_app
from school_registry.core.config import (
    DatabaseSettings,
    RateLimitSettings,
    Settings,
    clear_settings_cache,
)
from school_registry.domains.enrollment import EnrollmentService
from school_registry.domains.school import SchoolStore
from school_registry.domains.student import StudentStore
from school_registry.infrastructure.database import DatabaseManager
from school_registry.infrastructure.database.models import Base

_sequence = count(1)


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (full app, SQLite)"
    )


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> Generator[None, None, None]:
    """Drop cached settings around every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """Provide a throwaway SQLite database URL."""
    return f"sqlite+aiosqlite:///{tmp_path / 'registry.db'}"


@pytest.fixture
def test_settings(database_url: str) -> Settings:
    """Provide settings pointing at the throwaway database, rate limit off."""
    return Settings(
        environment="development",
        debug=True,
        log_level="DEBUG",
        database=DatabaseSettings(url_override=database_url, run_migrations=True),
        rate_limit=RateLimitSettings(enabled=False),
    )


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
async def db_manager(database_url: str) -> AsyncGenerator[DatabaseManager, None]:
    """Provide a database manager with the schema created."""
    manager = DatabaseManager(database_url)
    async with manager.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield manager
    await manager.close()


@pytest.fixture
async def db_session(db_manager: DatabaseManager) -> AsyncGenerator[AsyncSession, None]:
    """Provide a session on the throwaway database."""
    async with db_manager.session() as session:
        yield session


@pytest.fixture
def school_store(db_session: AsyncSession) -> SchoolStore:
    """Create a school store on the test session."""
    return SchoolStore(db_session)


@pytest.fixture
def student_store(db_session: AsyncSession) -> StudentStore:
    """Create a student store on the test session."""
    return StudentStore(db_session)


@pytest.fixture
def enrollment_service(school_store: SchoolStore, student_store: StudentStore) -> EnrollmentService:
    """Create an enrollment service sharing the test session."""
    return EnrollmentService(school_store, student_store)


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def app(test_settings: Settings):
    """Create the application bound to the throwaway database."""
    return create_app(test_settings)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client; entering it runs startup (migrations included)."""
    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# Payload Factories
# =============================================================================


@pytest.fixture
def school_payload() -> Callable[..., dict[str, Any]]:
    """Build valid school wire fields with a unique email."""

    def _build(**overrides: Any) -> dict[str, Any]:
        n = next(_sequence)
        payload = {
            "name": f"Lincoln High {n}",
            "address": f"{n} Main Street, Springfield",
            "phone": "+1 (555) 123-4567",
            "email": f"office{n}@lincoln.edu",
            "establishedYear": 1950,
            "principal": "Jane Smith",
        }
        payload.update(overrides)
        return payload

    return _build


@pytest.fixture
def student_payload() -> Callable[..., dict[str, Any]]:
    """Build valid student wire fields with a unique email."""

    def _build(**overrides: Any) -> dict[str, Any]:
        n = next(_sequence)
        payload = {
            "firstName": "Ada",
            "lastName": f"Lovelace{n}",
            "email": f"ada{n}@example.com",
            "dateOfBirth": "2010-05-01T00:00:00Z",
            "grade": "8th",
        }
        payload.update(overrides)
        return payload

    return _build
