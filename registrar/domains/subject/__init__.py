# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject domain package.

This package provides:
- Cohort subject assignment resolution
- Grade-sheet synchronization that preserves recorded grades
"""

from registrar.domains.subject.assignment import SubjectAssignmentResolver, matches_cohort
from registrar.domains.subject.grade_sheet import (
    GradeSheetPatch,
    GradeSheetSynchronizer,
    build_metadata,
    format_level,
)

__all__ = [
    "SubjectAssignmentResolver",
    "matches_cohort",
    "GradeSheetSynchronizer",
    "GradeSheetPatch",
    "build_metadata",
    "format_level",
]
