# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest fixtures for integration tests.

Services run against a real database. TEST_DATABASE_URL selects it
(e.g. a disposable PostgreSQL database); by default each test gets its
own SQLite file.
"""

import os
from pathlib import Path
from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from gradeledger.core.config import Settings
from gradeledger.domains.auth import Principal
from gradeledger.domains.catalog import CourseCatalogService
from gradeledger.domains.enrollment import EnrollmentService
from gradeledger.domains.verification import VerificationService
from gradeledger.infrastructure.database import enable_sqlite_foreign_keys
from gradeledger.infrastructure.database.models import Base
from gradeledger.infrastructure.events import EventBus
from gradeledger.models import CourseResponse


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    """Get database URL for tests."""
    return os.environ.get(
        "TEST_DATABASE_URL",
        f"sqlite+aiosqlite:///{tmp_path / 'gradeledger_test.db'}",
    )


@pytest_asyncio.fixture
async def db_engine(db_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """Create async engine with a fresh schema."""
    engine = create_async_engine(db_url, echo=False)
    if engine.dialect.name == "sqlite":
        enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Sessionmaker configured like the application's."""
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create async session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def catalog(db_session: AsyncSession, event_bus: EventBus, settings: Settings) -> CourseCatalogService:
    return CourseCatalogService(db_session, event_bus=event_bus, settings=settings)


@pytest.fixture
def enrollments(db_session: AsyncSession, event_bus: EventBus, settings: Settings) -> EnrollmentService:
    return EnrollmentService(db_session, event_bus=event_bus, settings=settings)


@pytest.fixture
def verification(db_session: AsyncSession, event_bus: EventBus) -> VerificationService:
    return VerificationService(db_session, event_bus=event_bus)


@pytest_asyncio.fixture
async def service_factory(
    session_factory: async_sessionmaker[AsyncSession],
    event_bus: EventBus,
    settings: Settings,
) -> AsyncGenerator[Callable[[type], object], None]:
    """Build a service on its own session, as a second concurrent request would."""
    sessions: list[AsyncSession] = []

    def _make(service_class: type):
        session = session_factory()
        sessions.append(session)
        if service_class is VerificationService:
            return service_class(session, event_bus=event_bus)
        return service_class(session, event_bus=event_bus, settings=settings)

    yield _make

    for session in sessions:
        await session.close()


@pytest_asyncio.fixture
async def course(
    catalog: CourseCatalogService,
    admin: Principal,
    course_definition: dict,
) -> CourseResponse:
    """A course with the standard boundary table."""
    return await catalog.add_course(admin, course_definition)
