# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the principal value object, role guards and error taxonomy."""

import pytest

from gradeledger.domains.auth import Principal, Role, require_role
from gradeledger.domains.exceptions import (
    AuthorizationError,
    DuplicateEnrollmentError,
    GradeLedgerError,
    InfrastructureError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)


class TestPrincipal:
    """Tests for Principal role helpers."""

    def test_student(self) -> None:
        principal = Principal(id="7", role=Role.STUDENT)

        assert principal.is_student
        assert not principal.is_verifier
        assert not principal.is_admin

    @pytest.mark.parametrize("role", [Role.TUTOR, Role.ADMIN])
    def test_verifiers(self, role: Role) -> None:
        principal = Principal(id="v", role=role)

        assert principal.is_verifier
        assert not principal.is_student

    def test_role_from_string(self) -> None:
        """Roles compare equal to their wire values."""
        assert Role("tutor") is Role.TUTOR
        assert Role.ADMIN == "admin"

    def test_is_immutable(self) -> None:
        principal = Principal(id="7", role=Role.STUDENT)

        with pytest.raises(AttributeError):
            principal.role = Role.ADMIN  # type: ignore[misc]


class TestRequireRole:
    """Tests for require_role."""

    def test_allowed_role_passes(self, admin: Principal) -> None:
        require_role(admin, Role.ADMIN, action="add courses")

    def test_any_of_several_roles_passes(self, tutor: Principal) -> None:
        require_role(tutor, Role.TUTOR, Role.ADMIN, action="verify enrollments")

    def test_other_role_refused(self, student: Principal) -> None:
        with pytest.raises(AuthorizationError) as exc_info:
            require_role(student, Role.TUTOR, Role.ADMIN, action="verify enrollments")

        assert "verify enrollments" in exc_info.value.message
        assert exc_info.value.details["allowed_roles"] == "tutor, admin"


class TestErrorTaxonomy:
    """Tests for the domain exceptions."""

    @pytest.mark.parametrize(
        "error_class",
        [
            ValidationError,
            NotFoundError,
            DuplicateEnrollmentError,
            StateConflictError,
            AuthorizationError,
            InfrastructureError,
        ],
    )
    def test_all_share_base(self, error_class) -> None:
        assert issubclass(error_class, GradeLedgerError)

    def test_errors_are_distinguishable(self) -> None:
        """No error type is a subclass of another."""
        assert not issubclass(StateConflictError, ValidationError)
        assert not issubclass(DuplicateEnrollmentError, StateConflictError)
        assert not issubclass(NotFoundError, AuthorizationError)

    def test_str_includes_details(self) -> None:
        error = NotFoundError("Course 3 not found", details={"course_id": "3"})

        assert str(error) == "Course 3 not found - Details: {'course_id': '3'}"

    def test_infrastructure_error_keeps_original(self) -> None:
        original = RuntimeError("connection reset")
        error = InfrastructureError("Failed to verify enrollment", original)

        assert error.original_error is original
        assert str(error) == "Failed to verify enrollment: connection reset"
