# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course catalog request and response models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from gradeledger.domains.grading import DEFAULT_GRADE_BOUNDARIES, GradeBoundary
from gradeledger.models.common import RequestModel
from gradeledger.utils.datetime import ensure_utc


class GradeBoundarySchema(BaseModel):
    """A (letter, minimum total) pair as exchanged with callers."""

    letter: str = Field(min_length=1, max_length=10)
    minimum_total: Decimal = Field(ge=0, decimal_places=2)

    def to_domain(self) -> GradeBoundary:
        """Convert to the calculator's value object."""
        return GradeBoundary(self.letter.strip(), self.minimum_total)

    @classmethod
    def from_domain(cls, boundary: GradeBoundary) -> GradeBoundarySchema:
        """Build from the calculator's value object."""
        return cls(letter=boundary.letter, minimum_total=boundary.minimum_total)


def _default_boundaries() -> list[GradeBoundarySchema]:
    return [GradeBoundarySchema.from_domain(b) for b in DEFAULT_GRADE_BOUNDARIES]


class CourseCreateRequest(RequestModel):
    """Course definition authored by an administrator.

    When no boundary table is supplied the standard O/A+/A/B+/B/C table
    is used.
    """

    name: str = Field(min_length=1, max_length=255)
    provider: str = Field(default="NPTEL", min_length=1, max_length=255)
    instructor: str = Field(min_length=1, max_length=255)
    department: str | None = Field(default=None, max_length=255)
    duration_weeks: int = Field(default=12, gt=0, le=104)
    grade_boundaries: list[GradeBoundarySchema] = Field(default_factory=_default_boundaries)


class CourseUpdateRequest(RequestModel):
    """Partial course update. Only fields that are set are applied."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    provider: str | None = Field(default=None, min_length=1, max_length=255)
    instructor: str | None = Field(default=None, min_length=1, max_length=255)
    department: str | None = Field(default=None, max_length=255)
    duration_weeks: int | None = Field(default=None, gt=0, le=104)
    grade_boundaries: list[GradeBoundarySchema] | None = None
    is_active: bool | None = None


class CourseResponse(BaseModel):
    """Course as returned to callers."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    provider: str
    instructor: str
    department: str | None
    duration_weeks: int
    grade_boundaries: list[GradeBoundarySchema]
    is_active: bool
    created_by: str
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="after")
    def normalize_timestamps(self) -> Self:
        """Report timestamps as UTC even where the driver returns naive values."""
        self.created_at = ensure_utc(self.created_at)
        self.updated_at = ensure_utc(self.updated_at)
        return self
