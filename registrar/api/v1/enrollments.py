# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment API endpoints.

This module provides endpoints for enrollment management:
- GET / - List enrollments of an academic year
- POST /batch - Resolve the current enrollment of several students
- POST /{student_id} - Submit an enrollment
- GET /{student_id} - Get a student's enrollment
- DELETE /{student_id} - Delete a student's enrollment
- POST /{student_id}/enroll - Enroll a pending student
- POST /{student_id}/revoke - Return an enrolled student to pending
- GET /{student_id}/subjects - Subjects of the current enrollment
- GET /{student_id}/latest-high-school - Previous high-school enrollment
- POST /{student_id}/grade-sheet/refresh - Recompute grade-sheet metadata
- POST /{student_id}/reconcile - Repair replicas and roster membership

Callers are already authorized; these handlers only translate HTTP to
EnrollmentService calls.
"""

import logging
from typing import Annotated, Any, Literal

from fastapi import APIRouter, Depends, Query, status

from registrar.api.dependencies import get_enrollment_service, unwrap
from registrar.domains.enrollment.service import EnrollmentService
from registrar.models.enrollment import (
    EnrollStudentRequest,
    StudentBatchRequest,
    SubmitEnrollmentRequest,
)
from registrar.utils.logging import bind_context

logger = logging.getLogger(__name__)

router = APIRouter()

SemesterParam = Annotated[
    Literal["first-sem", "second-sem"] | None,
    Query(description="Semester of a college or SHS enrollment"),
]
LevelParam = Annotated[
    Literal["college", "high-school"] | None,
    Query(description="Enrollment level"),
]
AYParam = Annotated[
    str | None,
    Query(alias="ayCode", description="Academic year code; the active one when omitted"),
]


@router.get(
    "",
    summary="List enrollments",
    description="List top-level enrollments of an academic year, most recent first.",
)
async def list_enrollments(
    ay_code: AYParam = None,
    enrolled_only: Annotated[
        bool, Query(alias="enrolledOnly", description="Only students with status enrolled")
    ] = False,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> dict[str, Any]:
    """List enrollments.

    Args:
        ay_code: Academic year to list.
        enrolled_only: Restrict to enrolled students.
        service: Enrollment service.

    Returns:
        Enrollments and their count.
    """
    if enrolled_only:
        result = await service.get_all_enrolled_students(ay_code)
    else:
        result = await service.get_all_enrollments(ay_code)
    body = unwrap(result)
    body["count"] = len(body["data"] or [])
    return body


@router.post(
    "/batch",
    summary="Resolve enrollments for students",
    description="Resolve the current enrollment of each student; students without one are omitted.",
)
async def get_enrollments_for_students(
    data: StudentBatchRequest,
    ay_code: AYParam = None,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> dict[str, Any]:
    return unwrap(await service.get_enrollments_for_students(data.student_ids, ay_code))


@router.post(
    "/{student_id}",
    status_code=status.HTTP_201_CREATED,
    summary="Submit enrollment",
    description="Submit a new pending enrollment for the active academic year.",
)
async def submit_enrollment(
    student_id: str,
    data: SubmitEnrollmentRequest,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> dict[str, Any]:
    """Submit an enrollment.

    Args:
        student_id: Student (user) id.
        data: Personal info, enrollment info, selected subjects and documents.
        service: Enrollment service.

    Returns:
        The new enrollment id, academic year and semester.

    Raises:
        HTTPException: 400 on invalid data, 409 if already submitted for the period.
    """
    bind_context(student_id=student_id)
    logger.info("Submitting enrollment for %s", student_id)
    payload = data.model_dump(by_alias=True, exclude_none=True)
    return unwrap(await service.submit_enrollment(student_id, payload))


@router.get(
    "/{student_id}",
    summary="Get enrollment",
    description="Resolve a student's enrollment across all stored key formats.",
)
async def get_enrollment(
    student_id: str,
    ay_code: AYParam = None,
    semester: SemesterParam = None,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> dict[str, Any]:
    bind_context(student_id=student_id)
    return unwrap(await service.get_enrollment(student_id, ay_code, semester))


@router.delete(
    "/{student_id}",
    summary="Delete enrollment",
    description="Permanently remove a student's enrollment. Repeating the call succeeds.",
)
async def delete_enrollment(
    student_id: str,
    level: LevelParam = None,
    semester: SemesterParam = None,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> dict[str, Any]:
    bind_context(student_id=student_id)
    logger.info("Deleting enrollment for %s (level=%s, semester=%s)", student_id, level, semester)
    return unwrap(await service.delete_enrollment(student_id, level, semester))


@router.post(
    "/{student_id}/enroll",
    summary="Enroll student",
    description="Mark a pending enrollment as enrolled and build the student's grade sheet.",
)
async def enroll_student(
    student_id: str,
    data: EnrollStudentRequest,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> dict[str, Any]:
    """Enroll a student.

    Args:
        student_id: Student (user) id.
        data: Subjects, OR number, scholarship, official student id and type.
        service: Enrollment service.

    Returns:
        Assigned subjects and the enrollment date.

    Raises:
        HTTPException: 404 if the student has no enrollment to enroll.
    """
    bind_context(student_id=student_id)
    logger.info("Enrolling %s", student_id)
    return unwrap(
        await service.enroll_student(
            student_id,
            subject_ids=data.subject_ids,
            or_number=data.or_number,
            scholarship=data.scholarship,
            external_student_id=data.external_student_id,
            student_type=data.student_type,
            level=data.level,
            semester=data.semester,
        )
    )


@router.post(
    "/{student_id}/revoke",
    summary="Revoke enrollment",
    description="Return an enrolled student to pending and drop their grade sheet.",
)
async def revoke_enrollment(
    student_id: str,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> dict[str, Any]:
    bind_context(student_id=student_id)
    logger.info("Revoking enrollment for %s", student_id)
    return unwrap(await service.revoke_enrollment(student_id))


@router.get(
    "/{student_id}/subjects",
    summary="Get enrolled subjects",
)
async def get_enrolled_subjects(
    student_id: str,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> dict[str, Any]:
    bind_context(student_id=student_id)
    return unwrap(await service.get_enrolled_subjects(student_id))


@router.get(
    "/{student_id}/latest-high-school",
    summary="Get latest high-school enrollment",
    description="Most recent high-school enrollment from a previous academic year.",
)
async def get_latest_high_school_enrollment(
    student_id: str,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> dict[str, Any]:
    bind_context(student_id=student_id)
    return unwrap(await service.get_latest_high_school_enrollment(student_id))


@router.post(
    "/{student_id}/grade-sheet/refresh",
    summary="Refresh grade-sheet metadata",
)
async def refresh_grade_sheet_metadata(
    student_id: str,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> dict[str, Any]:
    bind_context(student_id=student_id)
    return unwrap(await service.refresh_grade_sheet_metadata(student_id))


@router.post(
    "/{student_id}/reconcile",
    summary="Reconcile enrollment replicas",
    description="Re-mirror the enrollment onto its top-level replica and repair roster membership.",
)
async def reconcile_enrollment(
    student_id: str,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> dict[str, Any]:
    bind_context(student_id=student_id)
    logger.info("Reconciling enrollment for %s", student_id)
    return unwrap(await service.reconcile_enrollment(student_id))
