# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Error taxonomy for the grading and verification domains.

Every failure is reported as a distinct exception type so the calling
layer can render the precise reason:
- ValidationError: Malformed marks, patch or boundary table
- NotFoundError: Unknown course or enrollment id
- DuplicateEnrollmentError: Student already enrolled in the course
- StateConflictError: Record is no longer pending, or a race was lost
- AuthorizationError: Wrong role or non-owner actor
- InfrastructureError: Storage fault not otherwise classified
"""

from typing import Any


class GradeLedgerError(Exception):
    """Base exception for all domain errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation with details if available."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ValidationError(GradeLedgerError):
    """Raised when marks, a patch or a boundary table is malformed."""

    pass


class NotFoundError(GradeLedgerError):
    """Raised when a course or enrollment does not exist."""

    pass


class DuplicateEnrollmentError(GradeLedgerError):
    """Raised when the student already holds an enrollment for the course."""

    pass


class StateConflictError(GradeLedgerError):
    """Raised when an operation requires a pending record but it is not.

    Also raised to the loser of two racing state changes on the same
    enrollment.
    """

    pass


class AuthorizationError(GradeLedgerError):
    """Raised when the principal's role or ownership does not permit the action."""

    pass


class InfrastructureError(GradeLedgerError):
    """Raised for storage-layer faults.

    Shown to end users as an opaque failure; the underlying error is kept
    for operators.

    Attributes:
        original_error: The underlying SQLAlchemy or driver error.
    """

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the infrastructure error.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception that caused this error.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message, details)
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message
