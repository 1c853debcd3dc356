# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student profile API endpoints.

- GET /{student_id} - Get a student profile
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends

from registrar.api.dependencies import get_enrollment_service, unwrap
from registrar.domains.enrollment.service import EnrollmentService
from registrar.utils.logging import bind_context

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/{student_id}",
    summary="Get student",
    description="Get the student profile document.",
)
async def get_student(
    student_id: str,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> dict[str, Any]:
    bind_context(student_id=student_id)
    return unwrap(await service.get_student(student_id))
