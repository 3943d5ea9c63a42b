# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment request and response models.

Upper mark bounds come from GradingSettings and are enforced by the
enrollment service; these models only check shape, sign and precision.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from gradeledger.models.common import (
    CompletionStatus,
    CreditTransfer,
    RequestModel,
    VerificationDecision,
    VerificationState,
)
from gradeledger.utils.datetime import ensure_utc


class EnrollmentCreateRequest(RequestModel):
    """Student-submitted enrollment record."""

    course_id: str = Field(min_length=1)
    assessment_marks: Decimal = Field(ge=0, max_digits=5, decimal_places=2)
    exam_marks: Decimal = Field(ge=0, max_digits=5, decimal_places=2)
    completion_status: CompletionStatus
    credit_transfer_requested: CreditTransfer = CreditTransfer.NO


class EnrollmentPatch(RequestModel):
    """Owner edit of a pending enrollment.

    Only these four fields may change after creation. Total marks,
    grade and every verification field are out of reach.
    """

    assessment_marks: Decimal | None = Field(default=None, ge=0, max_digits=5, decimal_places=2)
    exam_marks: Decimal | None = Field(default=None, ge=0, max_digits=5, decimal_places=2)
    completion_status: CompletionStatus | None = None
    credit_transfer_requested: CreditTransfer | None = None

    def changes(self) -> dict:
        """Fields explicitly set by the caller, excluding nulls."""
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None
        }

    @property
    def touches_marks(self) -> bool:
        changes = self.changes()
        return "assessment_marks" in changes or "exam_marks" in changes


class VerificationRequest(RequestModel):
    """A verifier's one-shot decision."""

    decision: VerificationDecision
    comments: str | None = Field(default=None, max_length=2000)


class EnrollmentResponse(BaseModel):
    """Enrollment as returned to callers."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    course_id: str
    assessment_marks: Decimal
    exam_marks: Decimal
    total_marks: Decimal
    grade: str
    completion_status: CompletionStatus
    credit_transfer_requested: CreditTransfer
    credit_transfer_grade: str | None
    verification_state: VerificationState
    verifier_id: str | None
    verification_comments: str | None
    verified_at: datetime | None
    version: int
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="after")
    def normalize_timestamps(self) -> Self:
        """Report timestamps as UTC even where the driver returns naive values."""
        self.created_at = ensure_utc(self.created_at)
        self.updated_at = ensure_utc(self.updated_at)
        self.verified_at = ensure_utc(self.verified_at)
        return self
