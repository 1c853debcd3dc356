# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic models for stored documents and API payloads."""

from registrar.models.common import OperationResult, RegistrarModel
from registrar.models.enrollment import (
    CollegeEnrollmentInfo,
    Department,
    EnrollmentInfo,
    EnrollmentRecord,
    EnrollmentStatus,
    EnrollmentView,
    HighSchoolEnrollmentInfo,
    LegacyEnrollmentInfo,
    Level,
    PersonalInfo,
    Semester,
    StudentType,
    parse_enrollment_info,
)
from registrar.models.grades import METADATA_FIELDS, PERIOD_FIELDS, grade_stub, subject_ids
from registrar.models.system_config import EnrollmentWindows, SystemConfig

__all__ = [
    "OperationResult",
    "RegistrarModel",
    "Level",
    "Department",
    "EnrollmentStatus",
    "Semester",
    "StudentType",
    "PersonalInfo",
    "CollegeEnrollmentInfo",
    "HighSchoolEnrollmentInfo",
    "LegacyEnrollmentInfo",
    "EnrollmentInfo",
    "EnrollmentRecord",
    "EnrollmentView",
    "parse_enrollment_info",
    "METADATA_FIELDS",
    "PERIOD_FIELDS",
    "grade_stub",
    "subject_ids",
    "EnrollmentWindows",
    "SystemConfig",
]
