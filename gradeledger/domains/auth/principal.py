# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authenticated principal supplied by the authentication layer.

The authentication layer is an external collaborator; it hands every
operation a Principal carrying the actor's id and role. This module only
holds the value object and the role guards the domain services share.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from gradeledger.domains.exceptions import AuthorizationError

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Roles recognized by the grading workflow."""

    STUDENT = "student"
    TUTOR = "tutor"
    ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    """Current authenticated actor.

    Attributes:
        id: Actor identifier (student id, tutor id or admin id).
        role: Actor role.
    """

    id: str
    role: Role

    @property
    def is_student(self) -> bool:
        """Check if the principal is a student."""
        return self.role == Role.STUDENT

    @property
    def is_verifier(self) -> bool:
        """Check if the principal may adjudicate enrollments."""
        return self.role in (Role.TUTOR, Role.ADMIN)

    @property
    def is_admin(self) -> bool:
        """Check if the principal is an administrator."""
        return self.role == Role.ADMIN

    def has_any_role(self, *roles: Role) -> bool:
        """Check if the principal has any of the specified roles.

        Args:
            roles: Roles to check.

        Returns:
            True if the principal has one of the roles.
        """
        return self.role in roles


def require_role(principal: Principal, *roles: Role, action: str) -> None:
    """Ensure the principal holds one of the given roles.

    Args:
        principal: Acting principal.
        roles: Roles allowed to perform the action.
        action: Short action name used in the error message and log.

    Raises:
        AuthorizationError: If the principal's role is not allowed.
    """
    if principal.has_any_role(*roles):
        return

    logger.warning(
        "Denied %s: principal=%s, role=%s",
        action,
        principal.id,
        principal.role.value,
    )
    allowed = ", ".join(role.value for role in roles)
    raise AuthorizationError(
        f"Role '{principal.role.value}' may not {action}",
        details={"allowed_roles": allowed},
    )
