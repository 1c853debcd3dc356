# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific domain.

Modules:
    enrollments: Enrollment submission, lifecycle and lookup endpoints.
    students: Student profile lookup.
    sections: Section roster assignment endpoints.
    system_config: Active academic year, semester and student id counter.
"""

from fastapi import APIRouter

from registrar.api.v1 import enrollments, sections, students, system_config

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(enrollments.router, prefix="/enrollments", tags=["Enrollments"])
router.include_router(students.router, prefix="/students", tags=["Students"])
router.include_router(sections.router, prefix="/sections", tags=["Sections"])
router.include_router(system_config.router, prefix="/system-config", tags=["System Config"])

__all__ = ["router"]
