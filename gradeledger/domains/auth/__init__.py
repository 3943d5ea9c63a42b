# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Auth domain package.

Principal value object and role guards shared by the domain services.
"""

from gradeledger.domains.auth.principal import Principal, Role, require_role

__all__ = [
    "Principal",
    "Role",
    "require_role",
]
