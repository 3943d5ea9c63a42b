# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment workflow service.

This module provides the EnrollmentService class for:
- Students recording their marks for a course
- Owner edits and deletion while the record is pending
- Listing and reading enrollment records

total_marks and grade are derived here, from the submitted marks and the
course's boundary table at write time, and never accepted from callers.
Every pending-only write is a single conditional statement so a
concurrent verification and an owner edit cannot both succeed.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gradeledger.core.config import Settings, get_settings
from gradeledger.domains.auth import Principal, Role, require_role
from gradeledger.domains.enrollment.records import (
    ensure_pending,
    event_payload,
    get_enrollment_or_raise,
    resolve_failed_write,
    to_response,
)
from gradeledger.domains.exceptions import (
    AuthorizationError,
    DuplicateEnrollmentError,
    NotFoundError,
    ValidationError,
)
from gradeledger.domains.grading import compute_grade, compute_total, validate_marks
from gradeledger.infrastructure.database import storage_failure
from gradeledger.infrastructure.database.models import Course, Enrollment, new_uuid
from gradeledger.infrastructure.events import EventBus, EventTypes, get_event_bus
from gradeledger.models.common import VerificationState
from gradeledger.models.enrollment import (
    EnrollmentCreateRequest,
    EnrollmentPatch,
    EnrollmentResponse,
)
from gradeledger.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Service for the student side of the enrollment workflow.

    Attributes:
        db: Async database session.
        event_bus: Bus that receives enrollment events after commit.
        settings: Application settings (mark bounds, fail grade).
    """

    def __init__(
        self,
        db: AsyncSession,
        event_bus: EventBus | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize enrollment service.

        Args:
            db: Async database session.
            event_bus: Event bus, defaults to the process-wide bus.
            settings: Settings, defaults to the cached application settings.
        """
        self.db = db
        self.event_bus = event_bus or get_event_bus()
        self.settings = settings or get_settings()

    async def create_enrollment(
        self,
        principal: Principal,
        request: EnrollmentCreateRequest | dict[str, Any],
    ) -> EnrollmentResponse:
        """Record a student's enrollment in a course.

        Args:
            principal: Acting principal, must be a student.
            request: Course and marks.

        Returns:
            The created enrollment, pending verification.

        Raises:
            AuthorizationError: If the principal is not a student.
            ValidationError: If marks are out of bounds or the course is closed.
            NotFoundError: If the course does not exist.
            DuplicateEnrollmentError: If the student is already enrolled.
        """
        require_role(principal, Role.STUDENT, action="create enrollments")
        request = EnrollmentCreateRequest.parse(request)

        course = await self._get_course(request.course_id)
        course_id = course.id
        if not course.is_active:
            raise ValidationError(
                "Course is not accepting enrollments",
                details={"course_id": course.id},
            )

        if await self._find_existing(principal.id, course.id):
            logger.warning(
                "Duplicate enrollment: student=%s, course=%s",
                principal.id,
                course.id,
            )
            raise DuplicateEnrollmentError(
                "Student is already enrolled in this course",
                details={"student_id": principal.id, "course_id": course.id},
            )

        assessment, exam = self._check_marks(request.assessment_marks, request.exam_marks)
        total, grade = self._derive(assessment, exam, course)
        now = utc_now()

        enrollment = Enrollment(
            id=new_uuid(),
            student_id=principal.id,
            course_id=course.id,
            assessment_marks=assessment,
            exam_marks=exam,
            total_marks=total,
            grade=grade,
            completion_status=request.completion_status.value,
            credit_transfer_requested=request.credit_transfer_requested.value,
            credit_transfer_grade=None,
            verification_state=VerificationState.PENDING.value,
            version=1,
            created_at=now,
            updated_at=now,
        )

        try:
            self.db.add(enrollment)
            await self.db.commit()
            await self.db.refresh(enrollment)
        except IntegrityError as e:
            await self.db.rollback()
            if await self._find_existing(principal.id, course_id):
                logger.warning(
                    "Duplicate enrollment (concurrent): student=%s, course=%s",
                    principal.id,
                    course_id,
                )
                raise DuplicateEnrollmentError(
                    "Student is already enrolled in this course",
                    details={"student_id": principal.id, "course_id": course_id},
                ) from e
            raise await storage_failure(self.db, "create enrollment", e) from e
        except SQLAlchemyError as e:
            raise await storage_failure(self.db, "create enrollment", e) from e

        logger.info(
            "Created enrollment: enrollment=%s, student=%s, course=%s, total=%s, grade=%s",
            enrollment.id,
            principal.id,
            course.id,
            total,
            grade,
        )

        await self.event_bus.publish(
            EventTypes.Enrollment.CREATED,
            event_payload(enrollment),
            actor_id=principal.id,
        )

        return to_response(enrollment)

    async def update_enrollment(
        self,
        principal: Principal,
        enrollment_id: str,
        patch: EnrollmentPatch | dict[str, Any],
    ) -> EnrollmentResponse:
        """Apply an owner edit to a pending enrollment.

        Only fields present in the patch change. total_marks and grade are
        recomputed when either mark changes.

        Args:
            principal: Acting principal, must own the enrollment.
            enrollment_id: Enrollment identifier.
            patch: Fields to change.

        Returns:
            The updated enrollment.

        Raises:
            ValidationError: If the patch is malformed or marks are out of bounds.
            NotFoundError: If the enrollment does not exist.
            AuthorizationError: If the principal does not own the enrollment.
            StateConflictError: If the enrollment is no longer pending or was
                modified concurrently.
        """
        patch = EnrollmentPatch.parse(patch)
        enrollment = await get_enrollment_or_raise(self.db, enrollment_id)
        self._ensure_owner(principal, enrollment, "update")
        ensure_pending(enrollment, "update enrollment", principal.id)

        changes = patch.changes()
        if not changes:
            return to_response(enrollment)

        values: dict[str, Any] = {}
        if patch.touches_marks:
            assessment, exam = self._check_marks(
                changes.get("assessment_marks", enrollment.assessment_marks),
                changes.get("exam_marks", enrollment.exam_marks),
            )
            course = await self._get_course(enrollment.course_id)
            total, grade = self._derive(assessment, exam, course)
            values.update(
                assessment_marks=assessment,
                exam_marks=exam,
                total_marks=total,
                grade=grade,
            )
        if "completion_status" in changes:
            values["completion_status"] = changes["completion_status"].value
        if "credit_transfer_requested" in changes:
            values["credit_transfer_requested"] = changes["credit_transfer_requested"].value

        stmt = (
            update(Enrollment)
            .where(
                Enrollment.id == str(enrollment_id),
                Enrollment.verification_state == VerificationState.PENDING.value,
                Enrollment.version == enrollment.version,
            )
            .values(**values, version=Enrollment.version + 1, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                await self.db.rollback()
                await resolve_failed_write(
                    self.db, enrollment_id, "update enrollment", principal.id
                )
            await self.db.commit()
            enrollment = await get_enrollment_or_raise(self.db, enrollment_id, fresh=True)
        except SQLAlchemyError as e:
            raise await storage_failure(self.db, "update enrollment", e) from e

        logger.info(
            "Updated enrollment: enrollment=%s, fields=%s, grade=%s, by=%s",
            enrollment.id,
            sorted(changes),
            enrollment.grade,
            principal.id,
        )

        await self.event_bus.publish(
            EventTypes.Enrollment.UPDATED,
            {**event_payload(enrollment), "fields": sorted(changes)},
            actor_id=principal.id,
        )

        return to_response(enrollment)

    async def delete_enrollment(self, principal: Principal, enrollment_id: str) -> None:
        """Delete a pending enrollment.

        Args:
            principal: Acting principal, must own the enrollment.
            enrollment_id: Enrollment identifier.

        Raises:
            NotFoundError: If the enrollment does not exist.
            AuthorizationError: If the principal does not own the enrollment.
            StateConflictError: If the enrollment is no longer pending.
        """
        enrollment = await get_enrollment_or_raise(self.db, enrollment_id)
        self._ensure_owner(principal, enrollment, "delete")
        ensure_pending(enrollment, "delete enrollment", principal.id)
        payload = event_payload(enrollment)

        stmt = (
            delete(Enrollment)
            .where(
                Enrollment.id == str(enrollment_id),
                Enrollment.verification_state == VerificationState.PENDING.value,
            )
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                await self.db.rollback()
                await resolve_failed_write(
                    self.db, enrollment_id, "delete enrollment", principal.id
                )
            await self.db.commit()
        except SQLAlchemyError as e:
            raise await storage_failure(self.db, "delete enrollment", e) from e

        logger.info(
            "Deleted enrollment: enrollment=%s, course=%s, by=%s",
            enrollment_id,
            payload["course_id"],
            principal.id,
        )

        await self.event_bus.publish(
            EventTypes.Enrollment.DELETED,
            payload,
            actor_id=principal.id,
        )

    async def list_own_enrollments(self, principal: Principal) -> list[EnrollmentResponse]:
        """List every enrollment owned by the principal, newest first."""
        result = await self.db.execute(
            select(Enrollment)
            .where(Enrollment.student_id == principal.id)
            .order_by(Enrollment.created_at.desc(), Enrollment.id)
        )
        return [to_response(e) for e in result.scalars().all()]

    async def get_enrollment(
        self,
        principal: Principal,
        enrollment_id: str,
    ) -> EnrollmentResponse:
        """Read a single enrollment.

        The owner, tutors and admins may read it.

        Raises:
            NotFoundError: If the enrollment does not exist.
            AuthorizationError: If the principal may not read it.
        """
        enrollment = await get_enrollment_or_raise(self.db, enrollment_id)
        if not principal.is_verifier:
            self._ensure_owner(principal, enrollment, "read")
        return to_response(enrollment)

    # =========================================================================
    # Helper Methods
    # =========================================================================

    def _check_marks(self, assessment_marks: Any, exam_marks: Any):
        grading = self.settings.grading
        return validate_marks(
            assessment_marks,
            exam_marks,
            grading.assessment_max,
            grading.exam_max,
        )

    def _derive(self, assessment_marks, exam_marks, course: Course):
        """Compute total and grade together from the course's current table."""
        total = compute_total(assessment_marks, exam_marks)
        grade = compute_grade(total, course.boundaries, self.settings.grading.fail_grade)
        return total, grade

    def _ensure_owner(self, principal: Principal, enrollment: Enrollment, action: str) -> None:
        if principal.is_student and principal.id == enrollment.student_id:
            return

        logger.warning(
            "Denied %s of enrollment: enrollment=%s, owner=%s, by=%s",
            action,
            enrollment.id,
            enrollment.student_id,
            principal.id,
        )
        raise AuthorizationError(
            f"Only the owning student may {action} this enrollment",
            details={"enrollment_id": enrollment.id},
        )

    async def _get_course(self, course_id: str) -> Course:
        result = await self.db.execute(select(Course).where(Course.id == str(course_id)))
        course = result.scalar_one_or_none()

        if not course:
            raise NotFoundError(f"Course {course_id} not found", details={"course_id": course_id})

        return course

    async def _find_existing(self, student_id: str, course_id: str) -> str | None:
        result = await self.db.execute(
            select(Enrollment.id).where(
                Enrollment.student_id == student_id,
                Enrollment.course_id == course_id,
            )
        )
        return result.scalar_one_or_none()
