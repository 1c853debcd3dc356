# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Section roster API endpoints.

This module provides endpoints for section assignment:
- PUT /{section_id}/students/{student_id} - Assign a student to a section
- DELETE /{section_id}/students/{student_id} - Remove a student from a section

Assigning moves the student out of any previous section.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends

from registrar.api.dependencies import get_enrollment_service, unwrap
from registrar.domains.enrollment.service import EnrollmentService
from registrar.utils.logging import bind_context

logger = logging.getLogger(__name__)

router = APIRouter()


@router.put(
    "/{section_id}/students/{student_id}",
    summary="Assign section",
    description="Assign a student to a section, leaving any previous section.",
)
async def assign_section(
    section_id: str,
    student_id: str,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> dict[str, Any]:
    """Assign a student to a section.

    Args:
        section_id: Target section.
        student_id: Student (user) id.
        service: Enrollment service.

    Returns:
        Operation result with any partial-consistency warnings.

    Raises:
        HTTPException: 404 if the section or enrollment does not exist.
    """
    bind_context(student_id=student_id)
    logger.info("Assigning section %s to %s", section_id, student_id)
    return unwrap(await service.assign_section(student_id, section_id))


@router.delete(
    "/{section_id}/students/{student_id}",
    summary="Unassign section",
    description="Remove a student from a section. Repeating the call is a no-op.",
)
async def unassign_section(
    section_id: str,
    student_id: str,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> dict[str, Any]:
    bind_context(student_id=student_id)
    logger.info("Unassigning section %s from %s", section_id, student_id)
    return unwrap(await service.unassign_section(student_id, section_id))
