# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models for the course catalog and enrollment records."""

from gradeledger.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDMixin,
    new_uuid,
)
from gradeledger.infrastructure.database.models.course import Course
from gradeledger.infrastructure.database.models.enrollment import Enrollment

__all__ = [
    "Base",
    "Course",
    "Enrollment",
    "TimestampMixin",
    "UUIDMixin",
    "new_uuid",
]
