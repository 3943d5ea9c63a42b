# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial schema: course catalog and enrollments.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2025-01-15

Column types are portable so the same migration runs on PostgreSQL
and SQLite.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create courses and enrollments tables."""
    # ==========================================================================
    # 1. courses table
    # ==========================================================================
    op.create_table(
        "courses",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("provider", sa.String(255), nullable=False, server_default="NPTEL"),
        sa.Column("instructor", sa.String(255), nullable=False),
        sa.Column("department", sa.String(255), nullable=True),
        sa.Column("duration_weeks", sa.Integer, nullable=False, server_default="12"),
        sa.Column("grade_boundaries", sa.JSON, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_by", sa.String(36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("duration_weeks > 0", name="ck_courses_positive_duration"),
    )

    # ==========================================================================
    # 2. enrollments table
    # ==========================================================================
    op.create_table(
        "enrollments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("student_id", sa.String(36), nullable=False),
        sa.Column(
            "course_id",
            sa.String(36),
            sa.ForeignKey(
                "courses.id",
                ondelete="RESTRICT",
                name="fk_enrollments_course_id_courses",
            ),
            nullable=False,
        ),
        sa.Column("assessment_marks", sa.Numeric(5, 2), nullable=False),
        sa.Column("exam_marks", sa.Numeric(5, 2), nullable=False),
        sa.Column("total_marks", sa.Numeric(6, 2), nullable=False),
        sa.Column("grade", sa.String(10), nullable=False),
        sa.Column("completion_status", sa.String(20), nullable=False),
        sa.Column(
            "credit_transfer_requested", sa.String(3), nullable=False, server_default="no"
        ),
        sa.Column("credit_transfer_grade", sa.String(10), nullable=True),
        sa.Column(
            "verification_state", sa.String(20), nullable=False, server_default="pending"
        ),
        sa.Column("verifier_id", sa.String(36), nullable=True),
        sa.Column("verification_comments", sa.Text, nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("student_id", "course_id", name="uq_enrollments_student_course"),
        sa.CheckConstraint(
            "verification_state IN ('pending', 'verified', 'rejected')",
            name="ck_enrollments_valid_verification_state",
        ),
        sa.CheckConstraint(
            "completion_status IN ('in_progress', 'completed', 'not_completed')",
            name="ck_enrollments_valid_completion_status",
        ),
        sa.CheckConstraint(
            "credit_transfer_requested IN ('yes', 'no')",
            name="ck_enrollments_valid_credit_transfer",
        ),
        sa.CheckConstraint(
            "assessment_marks >= 0 AND exam_marks >= 0",
            name="ck_enrollments_non_negative_marks",
        ),
    )
    op.create_index("ix_enrollments_student_id", "enrollments", ["student_id"])
    op.create_index(
        "ix_enrollments_state_created",
        "enrollments",
        ["verification_state", "created_at"],
    )


def downgrade() -> None:
    """Drop enrollments and courses tables."""
    op.drop_index("ix_enrollments_state_created", table_name="enrollments")
    op.drop_index("ix_enrollments_student_id", table_name="enrollments")
    op.drop_table("enrollments")
    op.drop_table("courses")
