# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course ORM model."""

from typing import Any

from sqlalchemy import JSON, Boolean, CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from gradeledger.domains.grading import GradeBoundary, to_decimal
from gradeledger.infrastructure.database.models.base import Base, TimestampMixin, UUIDMixin


class Course(Base, UUIDMixin, TimestampMixin):
    """Course offered for enrollment.

    Attributes:
        name: Course title.
        provider: Offering platform, NPTEL unless stated otherwise.
        instructor: Instructor name.
        department: Owning department, if any.
        duration_weeks: Course length in weeks.
        grade_boundaries: Ordered list of {"letter", "minimum_total"} dicts,
            highest band first. Minimums are stored as strings to keep
            decimal precision through JSON.
        is_active: Whether new enrollments are accepted.
        created_by: Admin who defined the course.
    """

    __tablename__ = "courses"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    provider: Mapped[str] = mapped_column(String(255), nullable=False, default="NPTEL")
    instructor: Mapped[str] = mapped_column(String(255), nullable=False)
    department: Mapped[str | None] = mapped_column(String(255), nullable=True)
    duration_weeks: Mapped[int] = mapped_column(Integer, nullable=False, default=12)
    grade_boundaries: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by: Mapped[str] = mapped_column(String(36), nullable=False)

    __table_args__ = (
        CheckConstraint("duration_weeks > 0", name="positive_duration"),
    )

    @property
    def boundaries(self) -> tuple[GradeBoundary, ...]:
        """Stored boundary table as calculator value objects."""
        return tuple(
            GradeBoundary(item["letter"], to_decimal(item["minimum_total"], "minimum_total"))
            for item in self.grade_boundaries
        )

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, name={self.name})>"
