# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment workflow domain."""

from gradeledger.domains.enrollment.service import EnrollmentService

__all__ = ["EnrollmentService"]
