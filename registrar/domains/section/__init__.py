# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Section domain package.

Keeps section rosters (sections/{sectionId}.students) and the sectionId
of enrollment records in agreement.
"""

from registrar.domains.section.service import SectionAssignmentManager

__all__ = [
    "SectionAssignmentManager",
]
