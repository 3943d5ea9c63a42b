# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the course catalog."""

from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from gradeledger.domains.catalog import CourseCatalogService
from gradeledger.domains.exceptions import NotFoundError, StateConflictError, ValidationError
from gradeledger.infrastructure.database.models import Enrollment, new_uuid

pytestmark = pytest.mark.integration


class TestCatalogPersistence:
    """Course definitions round trip through the database."""

    @pytest.mark.asyncio
    async def test_boundaries_persisted(self, course, service_factory):
        stored = await service_factory(CourseCatalogService).get_course(course.id)

        assert [(b.letter, b.minimum_total) for b in stored.grade_boundaries] == [
            ("O", Decimal("90")),
            ("A+", Decimal("80")),
            ("A", Decimal("70")),
            ("B+", Decimal("60")),
            ("B", Decimal("50")),
            ("C", Decimal("40")),
        ]
        assert stored.duration_weeks == 12
        assert stored.created_by == "admin-1"

    @pytest.mark.asyncio
    async def test_update_course(self, catalog, course, admin, service_factory, recorded_events):
        await catalog.update_course(
            admin, course.id, {"instructor": "Prof. Iyer", "duration_weeks": 8}
        )

        stored = await service_factory(CourseCatalogService).get_course(course.id)
        assert stored.instructor == "Prof. Iyer"
        assert stored.duration_weeks == 8
        assert recorded_events.types[-1] == "course.updated"
        assert recorded_events.events[-1].payload["fields"] == ["duration_weeks", "instructor"]

    @pytest.mark.asyncio
    async def test_rejected_update_changes_nothing(
        self, catalog, course, admin, course_definition, service_factory, recorded_events
    ):
        """Fields sent alongside an invalid boundary table are not persisted later."""
        with pytest.raises(ValidationError):
            await catalog.update_course(
                admin,
                course.id,
                {
                    "instructor": "Half Applied",
                    "grade_boundaries": [
                        {"letter": "A", "minimum_total": "50"},
                        {"letter": "B", "minimum_total": "60"},
                    ],
                },
            )
        with pytest.raises(ValidationError, match="is_active cannot be cleared"):
            await catalog.update_course(
                admin, course.id, {"department": "Physics", "is_active": None}
            )

        # A later write on the same session commits whatever is dirty in it
        await catalog.add_course(admin, {**course_definition, "name": "Networks"})

        stored = await service_factory(CourseCatalogService).get_course(course.id)
        assert stored.instructor == "Prof. Rao"
        assert stored.department == "Computer Science"
        assert stored.is_active is True
        assert stored.grade_boundaries == course.grade_boundaries
        assert "course.updated" not in recorded_events.types

    @pytest.mark.asyncio
    async def test_list_courses(self, catalog, admin, course_definition):
        first = await catalog.add_course(admin, {**course_definition, "name": "Operating Systems"})
        second = await catalog.add_course(admin, {**course_definition, "name": "Networks"})
        await catalog.update_course(admin, first.id, {"is_active": False})

        everything = await catalog.list_courses()
        active = await catalog.list_courses(active_only=True)

        assert [c.id for c in everything] == [second.id, first.id]
        assert [c.id for c in active] == [second.id]


class TestCatalogDeletion:
    """Courses are removable only while nobody is enrolled."""

    @pytest.mark.asyncio
    async def test_delete_unused_course(self, catalog, course, admin):
        await catalog.delete_course(admin, course.id)

        with pytest.raises(NotFoundError):
            await catalog.get_course(course.id)

    @pytest.mark.asyncio
    async def test_delete_refused_with_enrollments(
        self, catalog, enrollments, course, admin, student
    ):
        await enrollments.create_enrollment(
            student,
            {
                "course_id": course.id,
                "assessment_marks": 30,
                "exam_marks": 30,
                "completion_status": "in_progress",
            },
        )

        with pytest.raises(StateConflictError):
            await catalog.delete_course(admin, course.id)

        assert (await catalog.get_course(course.id)).id == course.id

    @pytest.mark.asyncio
    async def test_foreign_key_enforced(self, db_session):
        db_session.add(
            Enrollment(
                id=new_uuid(),
                student_id="7",
                course_id="missing-course",
                assessment_marks=Decimal("10"),
                exam_marks=Decimal("10"),
                total_marks=Decimal("20"),
                grade="F",
                completion_status="completed",
                credit_transfer_requested="no",
                verification_state="pending",
                version=1,
            )
        )

        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()
