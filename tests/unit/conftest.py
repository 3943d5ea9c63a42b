# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixtures for service unit tests running against a mocked session."""

from decimal import Decimal
from types import SimpleNamespace
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from gradeledger.domains.grading import DEFAULT_GRADE_BOUNDARIES
from gradeledger.infrastructure.database.models import Course, Enrollment


@pytest.fixture
def mock_db():
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.delete = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.execute = AsyncMock()
    return db


def scalar_result(value: Any) -> MagicMock:
    """Build an execute() result whose scalar_one_or_none returns value."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def rows_result(values: list[Any]) -> MagicMock:
    """Build an execute() result whose scalars().all() returns values."""
    result = MagicMock()
    result.scalars.return_value.all.return_value = values
    return result


def write_result(rowcount: int) -> MagicMock:
    """Build an execute() result for a conditional UPDATE/DELETE."""
    result = MagicMock()
    result.rowcount = rowcount
    return result


@pytest.fixture
def results() -> SimpleNamespace:
    """Builders for mocked execute() results."""
    return SimpleNamespace(scalar=scalar_result, rows=rows_result, write=write_result)


@pytest.fixture
def make_course(fixed_now) -> Callable[..., Course]:
    """Factory for detached Course rows."""

    def _make(**overrides: Any) -> Course:
        values = {
            "id": "3",
            "name": "Data Structures and Algorithms",
            "provider": "NPTEL",
            "instructor": "Prof. Rao",
            "department": "Computer Science",
            "duration_weeks": 12,
            "grade_boundaries": [b.to_dict() for b in DEFAULT_GRADE_BOUNDARIES],
            "is_active": True,
            "created_by": "admin-1",
            "created_at": fixed_now,
            "updated_at": fixed_now,
        }
        values.update(overrides)
        return Course(**values)

    return _make


@pytest.fixture
def make_enrollment(fixed_now) -> Callable[..., Enrollment]:
    """Factory for detached Enrollment rows."""

    def _make(**overrides: Any) -> Enrollment:
        values = {
            "id": "enr-1",
            "student_id": "7",
            "course_id": "3",
            "assessment_marks": Decimal("45.00"),
            "exam_marks": Decimal("50.00"),
            "total_marks": Decimal("95.00"),
            "grade": "O",
            "completion_status": "completed",
            "credit_transfer_requested": "no",
            "credit_transfer_grade": None,
            "verification_state": "pending",
            "verifier_id": None,
            "verification_comments": None,
            "verified_at": None,
            "version": 1,
            "created_at": fixed_now,
            "updated_at": fixed_now,
        }
        values.update(overrides)
        return Enrollment(**values)

    return _make
