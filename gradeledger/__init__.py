"""gradeledger.

Course-enrollment grading and verification workflow: per-course grade
boundaries, derived letter grades, and the tutor/admin verification step
that locks an enrollment record once it has been adjudicated.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
