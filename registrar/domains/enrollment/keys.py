# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment document key scheme.

Pure functions deriving deterministic document ids from an enrollment's
identity. The cohort key identifies the period and cohort and is used
inside a student's own subcollections; the student-scoped key prefixes it
with the student id for the top-level enrollments collection.

    college, with semester          {ay}_{first|second}_semester_{courseCode}_{yearLevel}
    high school SHS, with semester  {ay}_{first|second}_semester_{strand}_{gradeLevel}
    high school JHS                 {ay}_JHS_{gradeLevel}
    anything else                   {ay}

The bare ``{ay}`` key is shared by every record whose info is incomplete
or predates cohort-aware keys.

Example:
    >>> info = CollegeEnrollmentInfo(course_code="BSIT", year_level=1, semester="first-sem")
    >>> cohort_key("AY2526", info)
    'AY2526_first_semester_BSIT_1'
"""

from registrar.core.exceptions import ValidationError
from registrar.domains.system_config.service import (  # noqa: F401
    CONFIG_SEMESTERS,
    is_valid_ay_code,
    semester_from_config,
)
from registrar.models.enrollment import (
    CollegeEnrollmentInfo,
    Department,
    EnrollmentInfo,
    HighSchoolEnrollmentInfo,
    Semester,
)

SEMESTER_WORDS = {
    Semester.FIRST.value: "first_semester",
    Semester.SECOND.value: "second_semester",
}

JHS_MARKER = "JHS"


def validate_ay_code(ay_code: str) -> str:
    """Return the AY code unchanged, or raise ValidationError if malformed."""
    if not is_valid_ay_code(ay_code):
        raise ValidationError(f"Invalid academic-year code: {ay_code!r}", details={"ay": ay_code})
    return ay_code


def semester_word(semester: str) -> str:
    """Map a stored semester ("first-sem") to its key word ("first_semester").

    Raises:
        ValidationError: If the semester is not recognised.
    """
    try:
        return SEMESTER_WORDS[semester]
    except KeyError:
        raise ValidationError(
            f"Invalid semester: {semester!r}", details={"semester": semester}
        ) from None


def cohort_key(ay_code: str, info: EnrollmentInfo) -> str:
    """Derive the cohort key of an enrollment for one academic year.

    Args:
        ay_code: Academic-year code, e.g. AY2526.
        info: Enrollment info of any level variant.

    Returns:
        The cohort key.

    Raises:
        ValidationError: If the AY code or semester is malformed.
    """
    validate_ay_code(ay_code)

    if isinstance(info, CollegeEnrollmentInfo):
        if info.semester and info.course_code and info.year_level is not None:
            return f"{ay_code}_{semester_word(info.semester)}_{info.course_code}_{info.year_level}"
        return ay_code

    if isinstance(info, HighSchoolEnrollmentInfo):
        if info.department == Department.SHS.value:
            if info.semester and info.strand and info.grade_level:
                return f"{ay_code}_{semester_word(info.semester)}_{info.strand}_{info.grade_level}"
            return ay_code
        if info.department == Department.JHS.value and info.grade_level:
            return f"{ay_code}_{JHS_MARKER}_{info.grade_level}"

    return ay_code


def student_scoped_key(student_id: str, ay_code: str, info: EnrollmentInfo) -> str:
    """Derive the top-level enrollments document id: ``{studentId}_{cohortKey}``."""
    if not student_id:
        raise ValidationError("Student id must not be empty")
    return f"{student_id}_{cohort_key(ay_code, info)}"


def jhs_key_prefix(ay_code: str) -> str:
    """Prefix shared by every JHS cohort key of one academic year."""
    return f"{ay_code}_{JHS_MARKER}_"

