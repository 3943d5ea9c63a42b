# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Verification service for tutor and admin review of enrollments.

The decision is one-shot: a single conditional UPDATE moves a pending
record to verified or rejected, and any later call on the same record
(including the loser of two simultaneous calls) gets StateConflictError.
On approval with credit transfer requested, the stored grade is copied
into credit_transfer_grade by the same statement, so the snapshot is
exactly the grade that was approved.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import case, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gradeledger.domains.auth import Principal, Role, require_role
from gradeledger.domains.enrollment.records import (
    event_payload,
    get_enrollment_or_raise,
    resolve_failed_write,
    to_response,
)
from gradeledger.infrastructure.database import storage_failure
from gradeledger.infrastructure.database.models import Enrollment
from gradeledger.infrastructure.events import EventBus, EventTypes, get_event_bus
from gradeledger.models.common import CreditTransfer, VerificationDecision, VerificationState
from gradeledger.models.enrollment import EnrollmentResponse, VerificationRequest
from gradeledger.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class VerificationService:
    """Service for adjudicating pending enrollments.

    Attributes:
        db: Async database session.
        event_bus: Bus that receives decision events after commit.
    """

    def __init__(self, db: AsyncSession, event_bus: EventBus | None = None) -> None:
        """Initialize verification service.

        Args:
            db: Async database session.
            event_bus: Event bus, defaults to the process-wide bus.
        """
        self.db = db
        self.event_bus = event_bus or get_event_bus()

    async def list_pending(
        self,
        principal: Principal,
        course_id: str | None = None,
    ) -> list[EnrollmentResponse]:
        """List enrollments awaiting a decision, newest first.

        Args:
            principal: Acting principal, must be a tutor or admin.
            course_id: Optional course filter.

        Returns:
            Pending enrollments.

        Raises:
            AuthorizationError: If the principal is not a tutor or admin.
        """
        require_role(principal, Role.TUTOR, Role.ADMIN, action="list pending enrollments")

        query = select(Enrollment).where(
            Enrollment.verification_state == VerificationState.PENDING.value
        )
        if course_id:
            query = query.where(Enrollment.course_id == str(course_id))
        query = query.order_by(Enrollment.created_at.desc(), Enrollment.id)

        result = await self.db.execute(query)
        return [to_response(e) for e in result.scalars().all()]

    async def verify_enrollment(
        self,
        principal: Principal,
        enrollment_id: str,
        request: VerificationRequest | dict[str, Any],
    ) -> EnrollmentResponse:
        """Record a verifier's decision on a pending enrollment.

        Args:
            principal: Acting principal, must be a tutor or admin.
            enrollment_id: Enrollment identifier.
            request: Decision and optional comments.

        Returns:
            The adjudicated enrollment.

        Raises:
            AuthorizationError: If the principal is not a tutor or admin.
            ValidationError: If the decision is not verified or rejected.
            NotFoundError: If the enrollment does not exist.
            StateConflictError: If the enrollment was already decided.
        """
        require_role(principal, Role.TUTOR, Role.ADMIN, action="verify enrollments")
        request = VerificationRequest.parse(request)

        approved = request.decision == VerificationDecision.VERIFIED
        if approved:
            transfer_grade = case(
                (
                    Enrollment.credit_transfer_requested == CreditTransfer.YES.value,
                    Enrollment.grade,
                ),
                else_=None,
            )
        else:
            transfer_grade = None

        now = utc_now()
        stmt = (
            update(Enrollment)
            .where(
                Enrollment.id == str(enrollment_id),
                Enrollment.verification_state == VerificationState.PENDING.value,
            )
            .values(
                verification_state=request.decision.value,
                verifier_id=principal.id,
                verification_comments=request.comments,
                credit_transfer_grade=transfer_grade,
                verified_at=now,
                updated_at=now,
                version=Enrollment.version + 1,
            )
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                await self.db.rollback()
                await resolve_failed_write(
                    self.db, enrollment_id, "verify enrollment", principal.id
                )
            await self.db.commit()
            enrollment = await get_enrollment_or_raise(self.db, enrollment_id, fresh=True)
        except SQLAlchemyError as e:
            raise await storage_failure(self.db, "verify enrollment", e) from e

        logger.info(
            "Recorded decision: enrollment=%s, decision=%s, grade=%s, transfer_grade=%s, by=%s",
            enrollment.id,
            request.decision.value,
            enrollment.grade,
            enrollment.credit_transfer_grade,
            principal.id,
        )

        event_type = EventTypes.Enrollment.VERIFIED if approved else EventTypes.Enrollment.REJECTED
        await self.event_bus.publish(
            event_type,
            {
                **event_payload(enrollment),
                "verifier_id": principal.id,
                "comments": request.comments,
            },
            actor_id=principal.id,
        )

        return to_response(enrollment)
