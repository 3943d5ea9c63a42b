# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for gradeledger.

Each domain module provides a service that owns one part of the
grading workflow.

Domains:
    auth: Principal value object and role guards.
    catalog: Course definitions and grade boundary tables.
    enrollment: Student enrollment records and owner edits.
    grading: Pure grade derivation.
    verification: Tutor/admin adjudication of enrollments.
"""
