# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade calculator.

Pure functions mapping raw marks to a letter grade through a course's
ordered boundary table. No state and no I/O: identical inputs always
produce the identical letter.

Example:
    >>> from gradeledger.domains.grading import compute_grade, DEFAULT_GRADE_BOUNDARIES
    >>> compute_grade(95, DEFAULT_GRADE_BOUNDARIES)
    'O'
    >>> compute_grade(35, DEFAULT_GRADE_BOUNDARIES)
    'F'
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Union

from gradeledger.domains.exceptions import ValidationError

FAIL_GRADE = "F"

Number = Union[int, float, Decimal]


@dataclass(frozen=True)
class GradeBoundary:
    """A (letter, minimum total) pair.

    Attributes:
        letter: Letter awarded when the total reaches minimum_total.
        minimum_total: Inclusive lower bound of the band.
    """

    letter: str
    minimum_total: Decimal

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-storable dictionary."""
        return {"letter": self.letter, "minimum_total": str(self.minimum_total)}


DEFAULT_GRADE_BOUNDARIES: tuple[GradeBoundary, ...] = (
    GradeBoundary("O", Decimal("90")),
    GradeBoundary("A+", Decimal("80")),
    GradeBoundary("A", Decimal("70")),
    GradeBoundary("B+", Decimal("60")),
    GradeBoundary("B", Decimal("50")),
    GradeBoundary("C", Decimal("40")),
)


def to_decimal(value: Any, field: str = "value") -> Decimal:
    """Convert a numeric value to a finite Decimal.

    Floats go through their shortest repr so 0.1 stays 0.1.

    Args:
        value: int, float, Decimal or numeric string.
        field: Field name used in the error message.

    Returns:
        Finite Decimal.

    Raises:
        ValidationError: If the value is not numeric or not finite.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number", details={field: value})

    try:
        if isinstance(value, float):
            result = Decimal(repr(value))
        else:
            result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a number", details={field: value}) from None

    if not result.is_finite():
        raise ValidationError(f"{field} must be finite", details={field: str(value)})

    return result


def _coerce_boundary(item: Any) -> GradeBoundary:
    """Accept GradeBoundary, (letter, minimum) pairs, mappings or objects."""
    if isinstance(item, GradeBoundary):
        return item
    if isinstance(item, dict):
        letter, minimum = item.get("letter"), item.get("minimum_total")
    elif isinstance(item, (tuple, list)) and len(item) == 2:
        letter, minimum = item
    else:
        letter = getattr(item, "letter", None)
        minimum = getattr(item, "minimum_total", None)

    if not isinstance(letter, str) or not letter.strip():
        raise ValidationError("Grade boundary letter must be a non-empty string")
    return GradeBoundary(letter.strip(), to_decimal(minimum, "minimum_total"))


def validate_boundaries(
    boundaries: Iterable[Any],
    max_total: Number | None = None,
    fail_grade: str = FAIL_GRADE,
) -> tuple[GradeBoundary, ...]:
    """Check the boundary-table invariant.

    The table must be non-empty, sorted by minimum_total strictly
    descending, with unique letters and every minimum inside
    [0, max_total]. The fail letter is implicit and may not appear.

    Args:
        boundaries: Boundary entries in rank order.
        max_total: Optional top of the grading scale.
        fail_grade: Letter reserved for totals below every boundary.

    Returns:
        The table as an immutable tuple of GradeBoundary.

    Raises:
        ValidationError: If the invariant does not hold.
    """
    if boundaries is None:
        raise ValidationError("Grade boundary table must not be empty")

    table = tuple(_coerce_boundary(item) for item in boundaries)
    if not table:
        raise ValidationError("Grade boundary table must not be empty")

    ceiling = to_decimal(max_total, "max_total") if max_total is not None else None
    seen: set[str] = set()
    previous: GradeBoundary | None = None

    for boundary in table:
        if boundary.letter == fail_grade:
            raise ValidationError(
                f"'{fail_grade}' is reserved for totals below every boundary"
            )
        if boundary.letter in seen:
            raise ValidationError(
                f"Duplicate grade letter '{boundary.letter}'",
                details={"letter": boundary.letter},
            )
        seen.add(boundary.letter)

        if boundary.minimum_total < 0:
            raise ValidationError(
                f"Minimum total for '{boundary.letter}' must not be negative",
                details={"minimum_total": str(boundary.minimum_total)},
            )
        if ceiling is not None and boundary.minimum_total > ceiling:
            raise ValidationError(
                f"Minimum total for '{boundary.letter}' exceeds the grading scale",
                details={
                    "minimum_total": str(boundary.minimum_total),
                    "max_total": str(ceiling),
                },
            )
        if previous is not None and boundary.minimum_total >= previous.minimum_total:
            raise ValidationError(
                "Grade boundaries must be sorted by minimum total, strictly descending",
                details={
                    "previous": previous.to_dict(),
                    "current": boundary.to_dict(),
                },
            )
        previous = boundary

    return table


def compute_total(assessment_marks: Number, exam_marks: Number) -> Decimal:
    """Derive total marks from the two components.

    Args:
        assessment_marks: Assessment component.
        exam_marks: Exam component.

    Returns:
        Sum of both components.

    Raises:
        ValidationError: If either component is not a finite number.
    """
    return to_decimal(assessment_marks, "assessment_marks") + to_decimal(
        exam_marks, "exam_marks"
    )


def validate_marks(
    assessment_marks: Number,
    exam_marks: Number,
    assessment_max: Number,
    exam_max: Number,
) -> tuple[Decimal, Decimal]:
    """Check both mark components against their bounds.

    Args:
        assessment_marks: Assessment component.
        exam_marks: Exam component.
        assessment_max: Inclusive upper bound for the assessment component.
        exam_max: Inclusive upper bound for the exam component.

    Returns:
        Both components as Decimals.

    Raises:
        ValidationError: If a component is not a finite number or lies
            outside [0, max].
    """
    checked = []
    for field, value, ceiling in (
        ("assessment_marks", assessment_marks, assessment_max),
        ("exam_marks", exam_marks, exam_max),
    ):
        marks = to_decimal(value, field)
        upper = to_decimal(ceiling, f"{field}_max")
        if marks < 0 or marks > upper:
            raise ValidationError(
                f"{field} must be between 0 and {upper}",
                details={field: str(marks), "max": str(upper)},
            )
        checked.append(marks)
    return checked[0], checked[1]


def compute_grade(
    total: Number,
    boundaries: Sequence[Any],
    fail_grade: str = FAIL_GRADE,
) -> str:
    """Map a total to a letter grade.

    Returns the letter of the highest-ranked boundary whose minimum_total
    is at or below the total, or the fail grade when no boundary qualifies.

    Args:
        total: Total marks.
        boundaries: Boundary table ordered by minimum_total descending.
        fail_grade: Letter returned when no boundary qualifies.

    Returns:
        Letter grade.

    Raises:
        ValidationError: If the total is negative or not finite, or the
            table violates the boundary invariant.
    """
    value = to_decimal(total, "total")
    if value < 0:
        raise ValidationError("Total marks must not be negative", details={"total": str(value)})

    for boundary in validate_boundaries(boundaries, fail_grade=fail_grade):
        if boundary.minimum_total <= value:
            return boundary.letter
    return fail_grade
