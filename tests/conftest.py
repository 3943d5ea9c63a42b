# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

import logging
from collections.abc import Iterator
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import pytest
import structlog

from gradeledger.core.config import GradingSettings, Settings, clear_settings_cache
from gradeledger.domains.auth import Principal, Role
from gradeledger.domains.grading import DEFAULT_GRADE_BOUNDARIES
from gradeledger.infrastructure.events import EventBus, EventData, reset_event_bus
from gradeledger.utils.logging import clear_context


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (requires a database)"
    )


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_singletons() -> Iterator[None]:
    """Keep the cached settings and the event bus from leaking between tests."""
    clear_settings_cache()
    reset_event_bus()
    yield
    clear_settings_cache()
    reset_event_bus()


@pytest.fixture
def settings() -> Settings:
    """Provide settings with the default 50/50 grading scale."""
    return Settings(
        environment="development",
        grading=GradingSettings(
            assessment_max=Decimal("50"),
            exam_max=Decimal("50"),
            fail_grade="F",
        ),
    )


@pytest.fixture
def restore_logging() -> Iterator[None]:
    """Undo setup_logging() so handlers do not leak into later tests."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    logging.getLogger("gradeledger").setLevel(logging.NOTSET)
    structlog.reset_defaults()
    clear_context()


# =============================================================================
# Principal Fixtures
# =============================================================================


@pytest.fixture
def student() -> Principal:
    """Provide a student principal."""
    return Principal(id="7", role=Role.STUDENT)


@pytest.fixture
def other_student() -> Principal:
    """Provide a second student principal."""
    return Principal(id="8", role=Role.STUDENT)


@pytest.fixture
def tutor() -> Principal:
    """Provide a tutor principal."""
    return Principal(id="tutor-1", role=Role.TUTOR)


@pytest.fixture
def admin() -> Principal:
    """Provide an admin principal."""
    return Principal(id="admin-1", role=Role.ADMIN)


# =============================================================================
# Event Fixtures
# =============================================================================


class RecordingHandler:
    """Async event handler that keeps every event it receives."""

    def __init__(self) -> None:
        self.events: list[EventData] = []

    async def __call__(self, event: EventData) -> None:
        self.events.append(event)

    @property
    def types(self) -> list[str]:
        return [event.event_type for event in self.events]


@pytest.fixture
def event_bus() -> EventBus:
    """Provide a fresh event bus."""
    return EventBus()


@pytest.fixture
def recorded_events(event_bus: EventBus) -> RecordingHandler:
    """Subscribe a recording handler to every event on the bus."""
    handler = RecordingHandler()
    event_bus.subscribe("*", handler)
    return handler


# =============================================================================
# Data Fixtures
# =============================================================================


@pytest.fixture
def default_boundaries() -> list[dict[str, Any]]:
    """Standard O/A+/A/B+/B/C table in request form."""
    return [
        {"letter": b.letter, "minimum_total": str(b.minimum_total)}
        for b in DEFAULT_GRADE_BOUNDARIES
    ]


@pytest.fixture
def course_definition(default_boundaries: list[dict[str, Any]]) -> dict[str, Any]:
    """Provide a course definition payload."""
    return {
        "name": "Data Structures and Algorithms",
        "provider": "NPTEL",
        "instructor": "Prof. Rao",
        "department": "Computer Science",
        "duration_weeks": 12,
        "grade_boundaries": default_boundaries,
    }


@pytest.fixture
def fixed_now() -> datetime:
    """Provide a fixed UTC timestamp."""
    return datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)
