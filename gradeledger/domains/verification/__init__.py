# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Verification domain."""

from gradeledger.domains.verification.service import VerificationService

__all__ = ["VerificationService"]
