# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grading domain package.

Pure grade derivation: marks to total, total to letter grade.
"""

from gradeledger.domains.grading.calculator import (
    DEFAULT_GRADE_BOUNDARIES,
    FAIL_GRADE,
    GradeBoundary,
    compute_grade,
    compute_total,
    to_decimal,
    validate_boundaries,
    validate_marks,
)

__all__ = [
    "DEFAULT_GRADE_BOUNDARIES",
    "FAIL_GRADE",
    "GradeBoundary",
    "compute_grade",
    "compute_total",
    "to_decimal",
    "validate_boundaries",
    "validate_marks",
]
