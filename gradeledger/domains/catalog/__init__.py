# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course catalog domain."""

from gradeledger.domains.catalog.service import CourseCatalogService

__all__ = ["CourseCatalogService"]
