# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment record helpers shared by the workflow and verification services.

State changes are conditional statements guarded on the pending state.
When such a statement matches no row, resolve_failed_write() re-reads
the record to tell the caller whether it vanished or moved on.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gradeledger.domains.exceptions import NotFoundError, StateConflictError
from gradeledger.infrastructure.database.models import Enrollment
from gradeledger.models.common import VerificationState
from gradeledger.models.enrollment import EnrollmentResponse

logger = logging.getLogger(__name__)


async def load_enrollment(
    db: AsyncSession,
    enrollment_id: str,
    fresh: bool = False,
) -> Enrollment | None:
    """Load an enrollment by ID.

    Args:
        db: Async database session.
        enrollment_id: Enrollment identifier.
        fresh: Overwrite any copy already held in the session identity map.

    Returns:
        The enrollment or None.
    """
    query = select(Enrollment).where(Enrollment.id == str(enrollment_id))
    if fresh:
        query = query.execution_options(populate_existing=True)

    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_enrollment_or_raise(
    db: AsyncSession,
    enrollment_id: str,
    fresh: bool = False,
) -> Enrollment:
    """Load an enrollment by ID.

    Raises:
        NotFoundError: If the enrollment does not exist.
    """
    enrollment = await load_enrollment(db, enrollment_id, fresh=fresh)
    if not enrollment:
        raise NotFoundError(
            f"Enrollment {enrollment_id} not found",
            details={"enrollment_id": str(enrollment_id)},
        )
    return enrollment


def ensure_pending(enrollment: Enrollment, action: str, actor_id: str) -> None:
    """Refuse an operation on an adjudicated enrollment.

    Raises:
        StateConflictError: If the enrollment is no longer pending.
    """
    if enrollment.verification_state == VerificationState.PENDING.value:
        return

    logger.warning(
        "Refused %s on %s enrollment: enrollment=%s, by=%s",
        action,
        enrollment.verification_state,
        enrollment.id,
        actor_id,
    )
    raise StateConflictError(
        f"Cannot {action}: enrollment is already {enrollment.verification_state}",
        details={
            "enrollment_id": enrollment.id,
            "verification_state": enrollment.verification_state,
        },
    )


async def resolve_failed_write(
    db: AsyncSession,
    enrollment_id: str,
    action: str,
    actor_id: str,
) -> None:
    """Explain why a guarded write matched no row.

    The caller must have rolled back its transaction first.

    Raises:
        NotFoundError: If the enrollment no longer exists.
        StateConflictError: If it was adjudicated or modified concurrently.
    """
    enrollment = await get_enrollment_or_raise(db, enrollment_id, fresh=True)
    ensure_pending(enrollment, action, actor_id)

    logger.warning(
        "Refused %s on concurrently modified enrollment: enrollment=%s, version=%s, by=%s",
        action,
        enrollment.id,
        enrollment.version,
        actor_id,
    )
    raise StateConflictError(
        f"Cannot {action}: enrollment was modified concurrently",
        details={"enrollment_id": enrollment.id, "version": enrollment.version},
    )


def event_payload(enrollment: Enrollment) -> dict[str, Any]:
    """Build the domain event payload for an enrollment."""
    return {
        "enrollment_id": enrollment.id,
        "student_id": enrollment.student_id,
        "course_id": enrollment.course_id,
        "verification_state": enrollment.verification_state,
        "grade": enrollment.grade,
        "credit_transfer_grade": enrollment.credit_transfer_grade,
        "version": enrollment.version,
    }


def to_response(enrollment: Enrollment) -> EnrollmentResponse:
    """Convert an enrollment row to its response model."""
    return EnrollmentResponse.model_validate(enrollment)
