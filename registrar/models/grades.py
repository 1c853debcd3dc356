# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade sheet document shape.

A grade sheet lives at ``students/{studentId}/studentGrades/{cohortKey}``.
Every top-level key is a subject id mapping to
``{subjectName, period1, period2, period3, period4}``, except for the
denormalized metadata fields listed in METADATA_FIELDS.
"""

from typing import Any

from pydantic import BaseModel

METADATA_FIELDS: frozenset[str] = frozenset(
    {
        "studentName",
        "studentOfficialId",
        "studentSection",
        "studentLevel",
        "studentSemester",
        "createdAt",
        "updatedAt",
        "transfereeRecord",
        "recordSource",
        "recordNotes",
        "recordLevelType",
        "recordSemesterLabel",
        "ayDisplayLabel",
    }
)

PERIOD_FIELDS: tuple[str, ...] = ("period1", "period2", "period3", "period4")


class SubjectGrade(BaseModel):
    """One subject entry of a grade sheet."""

    subjectName: str
    period1: float | str | None = None
    period2: float | str | None = None
    period3: float | str | None = None
    period4: float | str | None = None


class GradeSheetMetadata(BaseModel):
    """Denormalized student fields stored on a grade sheet for reporting."""

    studentName: str = ""
    studentOfficialId: str = ""
    studentSection: str = ""
    studentLevel: str = ""
    studentSemester: str = ""


def grade_stub(subject_name: str) -> dict[str, Any]:
    """Fresh grade entry with every period slot empty."""
    return SubjectGrade(subjectName=subject_name).model_dump()


def subject_ids(sheet: dict[str, Any]) -> set[str]:
    """Subject ids present on a grade sheet document."""
    return {key for key in sheet if key not in METADATA_FIELDS}
