# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Request and response models exchanged with the calling layer."""

from gradeledger.models.common import (
    CompletionStatus,
    CreditTransfer,
    RequestModel,
    VerificationDecision,
    VerificationState,
)
from gradeledger.models.course import (
    CourseCreateRequest,
    CourseResponse,
    CourseUpdateRequest,
    GradeBoundarySchema,
)
from gradeledger.models.enrollment import (
    EnrollmentCreateRequest,
    EnrollmentPatch,
    EnrollmentResponse,
    VerificationRequest,
)

__all__ = [
    "CompletionStatus",
    "CourseCreateRequest",
    "CourseResponse",
    "CourseUpdateRequest",
    "CreditTransfer",
    "EnrollmentCreateRequest",
    "EnrollmentPatch",
    "EnrollmentResponse",
    "GradeBoundarySchema",
    "RequestModel",
    "VerificationDecision",
    "VerificationRequest",
    "VerificationState",
]
