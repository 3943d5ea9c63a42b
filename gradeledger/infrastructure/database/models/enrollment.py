# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment ORM model."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from gradeledger.infrastructure.database.models.base import Base, TimestampMixin, UUIDMixin


class Enrollment(Base, UUIDMixin, TimestampMixin):
    """A student's graded enrollment in one course.

    total_marks and grade are derived at write time and never set
    independently. credit_transfer_grade is written only by an approving
    verification and never changes afterwards.

    Attributes:
        student_id: Owning student.
        course_id: Enrolled course.
        assessment_marks: Assessment component.
        exam_marks: Exam component.
        total_marks: assessment_marks + exam_marks.
        grade: Letter derived from the course boundaries at write time.
        completion_status: in_progress, completed or not_completed.
        credit_transfer_requested: yes or no.
        credit_transfer_grade: Grade frozen at approval, if transfer was requested.
        verification_state: pending, verified or rejected.
        verifier_id: Tutor or admin who decided.
        verification_comments: Verifier remarks.
        verified_at: When the decision was recorded.
        version: Incremented on every write.
    """

    __tablename__ = "enrollments"

    student_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    course_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("courses.id", ondelete="RESTRICT"),
        nullable=False,
    )
    assessment_marks: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    exam_marks: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    total_marks: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    grade: Mapped[str] = mapped_column(String(10), nullable=False)
    completion_status: Mapped[str] = mapped_column(String(20), nullable=False)
    credit_transfer_requested: Mapped[str] = mapped_column(
        String(3), nullable=False, default="no"
    )
    credit_transfer_grade: Mapped[str | None] = mapped_column(String(10), nullable=True)
    verification_state: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending"
    )
    verifier_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    verification_comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollments_student_course"),
        CheckConstraint(
            "verification_state IN ('pending', 'verified', 'rejected')",
            name="valid_verification_state",
        ),
        CheckConstraint(
            "completion_status IN ('in_progress', 'completed', 'not_completed')",
            name="valid_completion_status",
        ),
        CheckConstraint(
            "credit_transfer_requested IN ('yes', 'no')",
            name="valid_credit_transfer",
        ),
        CheckConstraint(
            "assessment_marks >= 0 AND exam_marks >= 0",
            name="non_negative_marks",
        ),
        Index("ix_enrollments_state_created", "verification_state", "created_at"),
    )

    @property
    def is_pending(self) -> bool:
        """Check if the record can still be edited or adjudicated."""
        return self.verification_state == "pending"

    def __repr__(self) -> str:
        return (
            f"<Enrollment(id={self.id}, student={self.student_id}, "
            f"course={self.course_id}, state={self.verification_state})>"
        )
