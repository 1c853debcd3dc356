# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""System configuration API endpoints.

This module provides endpoints for the config/system singleton:
- GET / - Get the active academic year, semester and enrollment windows
- PUT / - Update them
- GET /latest-student-id - Get the last issued student id
- PUT /latest-student-id - Record a newly issued student id
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends

from registrar.api.dependencies import get_enrollment_service, unwrap
from registrar.domains.enrollment.service import EnrollmentService
from registrar.models.system_config import LatestStudentIdRequest, UpdateSystemConfigRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    summary="Get system config",
    description="Get the active academic year, semester and enrollment windows.",
)
async def get_system_config(
    service: EnrollmentService = Depends(get_enrollment_service),
) -> dict[str, Any]:
    return unwrap(await service.get_system_config())


@router.put(
    "",
    summary="Update system config",
    description="Set the active academic year (AY####), semester (1 or 2) and windows.",
)
async def update_system_config(
    data: UpdateSystemConfigRequest,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> dict[str, Any]:
    """Update the system configuration.

    Args:
        data: New academic year, semester and windows.
        service: Enrollment service.

    Returns:
        The configuration as stored after the update.

    Raises:
        HTTPException: 400 if the AY code or semester is malformed.
    """
    logger.info("Updating system config: ay=%s, semester=%s", data.ay, data.semester)
    return unwrap(await service.update_system_config(data.ay, data.semester, data.windows))


@router.get(
    "/latest-student-id",
    summary="Get latest student id",
)
async def get_latest_student_id(
    service: EnrollmentService = Depends(get_enrollment_service),
) -> dict[str, Any]:
    return unwrap(await service.get_latest_student_id())


@router.put(
    "/latest-student-id",
    summary="Update latest student id",
)
async def update_latest_student_id(
    data: LatestStudentIdRequest,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> dict[str, Any]:
    return unwrap(await service.update_latest_student_id(data.latest_id))
