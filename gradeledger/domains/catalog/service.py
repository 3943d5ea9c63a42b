# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course catalog service.

This module provides the CourseCatalogService class for:
- Defining courses and their grade boundary tables (admin only)
- Editing course details and boundaries (admin only)
- Course lookup and listing
- Removing courses that nobody is enrolled in

Boundary edits never touch enrollment rows: grades already stored keep
the value computed when they were written.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gradeledger.core.config import Settings, get_settings
from gradeledger.domains.auth import Principal, Role, require_role
from gradeledger.domains.exceptions import NotFoundError, StateConflictError, ValidationError
from gradeledger.domains.grading import GradeBoundary, validate_boundaries
from gradeledger.infrastructure.database import storage_failure
from gradeledger.infrastructure.database.models import Course, Enrollment, new_uuid
from gradeledger.infrastructure.events import EventBus, EventTypes, get_event_bus
from gradeledger.models.course import (
    CourseCreateRequest,
    CourseResponse,
    CourseUpdateRequest,
    GradeBoundarySchema,
)

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("name", "provider", "instructor", "duration_weeks", "is_active")


class CourseCatalogService:
    """Service for managing the course catalog.

    Attributes:
        db: Async database session.
        event_bus: Bus that receives course events after commit.
        settings: Application settings (grading scale).
    """

    def __init__(
        self,
        db: AsyncSession,
        event_bus: EventBus | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize course catalog service.

        Args:
            db: Async database session.
            event_bus: Event bus, defaults to the process-wide bus.
            settings: Settings, defaults to the cached application settings.
        """
        self.db = db
        self.event_bus = event_bus or get_event_bus()
        self.settings = settings or get_settings()

    async def add_course(
        self,
        principal: Principal,
        definition: CourseCreateRequest | dict[str, Any],
    ) -> CourseResponse:
        """Define a new course.

        Args:
            principal: Acting principal, must be an admin.
            definition: Course definition.

        Returns:
            The created course.

        Raises:
            AuthorizationError: If the principal is not an admin.
            ValidationError: If the definition or boundary table is invalid.
        """
        require_role(principal, Role.ADMIN, action="add courses")
        request = CourseCreateRequest.parse(definition)
        boundaries = self._validate_boundaries(request.grade_boundaries)

        course = Course(
            id=new_uuid(),
            name=request.name,
            provider=request.provider,
            instructor=request.instructor,
            department=request.department,
            duration_weeks=request.duration_weeks,
            grade_boundaries=[b.to_dict() for b in boundaries],
            is_active=True,
            created_by=principal.id,
        )

        try:
            self.db.add(course)
            await self.db.commit()
            await self.db.refresh(course)
        except SQLAlchemyError as e:
            raise await storage_failure(self.db, "add course", e) from e

        logger.info(
            "Added course: course=%s, name=%s, boundaries=%d, by=%s",
            course.id,
            course.name,
            len(boundaries),
            principal.id,
        )

        await self.event_bus.publish(
            EventTypes.Course.CREATED,
            {"course_id": course.id, "name": course.name},
            actor_id=principal.id,
        )

        return self._to_response(course)

    async def update_course(
        self,
        principal: Principal,
        course_id: str,
        update: CourseUpdateRequest | dict[str, Any],
    ) -> CourseResponse:
        """Edit a course's details or boundary table.

        Only fields present in the update are changed. Existing enrollment
        grades are not recomputed.

        Args:
            principal: Acting principal, must be an admin.
            course_id: Course identifier.
            update: Fields to change.

        Returns:
            The updated course.

        Raises:
            AuthorizationError: If the principal is not an admin.
            NotFoundError: If the course does not exist.
            ValidationError: If the update or boundary table is invalid.
        """
        require_role(principal, Role.ADMIN, action="update courses")
        request = CourseUpdateRequest.parse(update)
        course = await self._get_course(course_id)

        # Nothing is assigned to the row until every check passes.
        changes = request.model_dump(exclude_unset=True, exclude={"grade_boundaries"})
        for field, value in changes.items():
            if value is None and field in _REQUIRED_FIELDS:
                raise ValidationError(f"{field} cannot be cleared", details={"field": field})

        boundaries = None
        if "grade_boundaries" in request.model_fields_set:
            if request.grade_boundaries is None:
                raise ValidationError(
                    "grade_boundaries cannot be cleared",
                    details={"field": "grade_boundaries"},
                )
            boundaries = self._validate_boundaries(request.grade_boundaries)

        for field, value in changes.items():
            setattr(course, field, value)
        boundaries_changed = boundaries is not None
        if boundaries_changed:
            course.grade_boundaries = [b.to_dict() for b in boundaries]

        try:
            await self.db.commit()
            await self.db.refresh(course)
        except SQLAlchemyError as e:
            raise await storage_failure(self.db, "update course", e) from e

        logger.info(
            "Updated course: course=%s, fields=%s, boundaries_changed=%s, by=%s",
            course.id,
            sorted(request.model_fields_set),
            boundaries_changed,
            principal.id,
        )

        await self.event_bus.publish(
            EventTypes.Course.UPDATED,
            {
                "course_id": course.id,
                "fields": sorted(request.model_fields_set),
                "boundaries_changed": boundaries_changed,
            },
            actor_id=principal.id,
        )

        return self._to_response(course)

    async def get_course(self, course_id: str) -> CourseResponse:
        """Get a course by ID.

        Raises:
            NotFoundError: If the course does not exist.
        """
        course = await self._get_course(course_id)
        return self._to_response(course)

    async def list_courses(self, active_only: bool = False) -> list[CourseResponse]:
        """List courses, newest first.

        Args:
            active_only: Only return courses accepting enrollments.

        Returns:
            List of courses.
        """
        query = select(Course)
        if active_only:
            query = query.where(Course.is_active.is_(True))
        query = query.order_by(Course.created_at.desc(), Course.id)

        result = await self.db.execute(query)
        return [self._to_response(course) for course in result.scalars().all()]

    async def delete_course(self, principal: Principal, course_id: str) -> None:
        """Remove a course that has no enrollments.

        Args:
            principal: Acting principal, must be an admin.
            course_id: Course identifier.

        Raises:
            AuthorizationError: If the principal is not an admin.
            NotFoundError: If the course does not exist.
            StateConflictError: If any enrollment references the course.
        """
        require_role(principal, Role.ADMIN, action="delete courses")
        course = await self._get_course(course_id)

        enrollment_count = await self._count_enrollments(course_id)
        if enrollment_count:
            logger.warning(
                "Refused course deletion: course=%s, enrollments=%d, by=%s",
                course_id,
                enrollment_count,
                principal.id,
            )
            raise StateConflictError(
                "Course has enrollments and cannot be deleted",
                details={"course_id": course_id, "enrollments": enrollment_count},
            )

        try:
            await self.db.delete(course)
            await self.db.commit()
        except IntegrityError as e:
            # An enrollment slipped in after the count; the foreign key refused.
            await self.db.rollback()
            logger.warning("Course deletion lost race: course=%s, by=%s", course_id, principal.id)
            raise StateConflictError(
                "Course has enrollments and cannot be deleted",
                details={"course_id": course_id},
            ) from e
        except SQLAlchemyError as e:
            raise await storage_failure(self.db, "delete course", e) from e

        logger.info("Deleted course: course=%s, by=%s", course_id, principal.id)

        await self.event_bus.publish(
            EventTypes.Course.DELETED,
            {"course_id": course_id},
            actor_id=principal.id,
        )

    # =========================================================================
    # Helper Methods
    # =========================================================================

    def _validate_boundaries(
        self,
        boundaries: list[GradeBoundarySchema],
    ) -> tuple[GradeBoundary, ...]:
        grading = self.settings.grading
        return validate_boundaries(
            [b.to_domain() for b in boundaries],
            max_total=grading.max_total,
            fail_grade=grading.fail_grade,
        )

    async def _get_course(self, course_id: str) -> Course:
        result = await self.db.execute(select(Course).where(Course.id == str(course_id)))
        course = result.scalar_one_or_none()

        if not course:
            raise NotFoundError(f"Course {course_id} not found", details={"course_id": course_id})

        return course

    async def _count_enrollments(self, course_id: str) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(Enrollment).where(Enrollment.course_id == course_id)
        )
        return result.scalar() or 0

    def _to_response(self, course: Course) -> CourseResponse:
        return CourseResponse.model_validate(course)
