# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Process lifecycle and per-request service scope.

The host application (HTTP API, CLI, worker) calls startup() once,
opens a service_scope() per request for the authenticated principal,
and calls shutdown() on exit.

Example:
    settings = await startup(migrate=True)

    async with service_scope(Principal(id="7", role=Role.STUDENT)) as scope:
        await scope.enrollments.create_enrollment(scope.principal, payload)

    await shutdown()
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from gradeledger.core.config import Settings, get_settings
from gradeledger.domains.auth import Principal
from gradeledger.domains.catalog import CourseCatalogService
from gradeledger.domains.enrollment import EnrollmentService
from gradeledger.domains.verification import VerificationService
from gradeledger.infrastructure.database import close_database, get_session, init_database
from gradeledger.infrastructure.database.migrations.runner import run_migrations
from gradeledger.infrastructure.events import get_event_bus
from gradeledger.utils.logging import bind_context, clear_context, get_logger, setup_logging

logger = get_logger(__name__)


@dataclass
class ServiceScope:
    """Services bound to one session and one acting principal."""

    principal: Principal
    session: AsyncSession
    catalog: CourseCatalogService
    enrollments: EnrollmentService
    verification: VerificationService


async def startup(settings: Settings | None = None, migrate: bool = False) -> Settings:
    """Initialize logging and the database for this process.

    Args:
        settings: Settings to use, defaults to the cached application settings.
        migrate: Apply pending schema migrations before opening the pool.

    Returns:
        The settings in effect.

    Raises:
        InfrastructureError: If the connection pool cannot be created.
    """
    settings = settings or get_settings()
    setup_logging(settings)
    logger.info(
        "Starting gradeledger",
        environment=settings.environment,
        debug=settings.debug,
    )

    if migrate:
        applied = await run_migrations(settings.database.url)
        logger.info("Schema migrations checked", applied=applied)

    await init_database(settings)
    return settings


async def shutdown() -> None:
    """Release the connection pool."""
    await close_database()
    logger.info("Stopped gradeledger", events=get_event_bus().get_stats())


@asynccontextmanager
async def service_scope(
    principal: Principal,
    settings: Settings | None = None,
) -> AsyncIterator[ServiceScope]:
    """Open a session and the domain services for one request.

    Log records emitted inside the scope carry the principal's id and role.

    Args:
        principal: Authenticated principal making the request.
        settings: Settings to use, defaults to the cached application settings.

    Yields:
        ServiceScope bound to a fresh session.
    """
    settings = settings or get_settings()
    event_bus = get_event_bus()
    bind_context(principal_id=principal.id, principal_role=principal.role.value)

    try:
        async with get_session() as session:
            yield ServiceScope(
                principal=principal,
                session=session,
                catalog=CourseCatalogService(session, event_bus=event_bus, settings=settings),
                enrollments=EnrollmentService(session, event_bus=event_bus, settings=settings),
                verification=VerificationService(session, event_bus=event_bus),
            )
    finally:
        clear_context()
