# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade-sheet synchronization.

A student's grade sheet is patched, never overwritten: subjects newly
assigned get an empty four-period stub, subjects no longer assigned are
deleted, and subjects in both the old and new assignment are not written
at all so their recorded grades survive.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from registrar.domains.paths import grade_sheet_path
from registrar.domains.subject.assignment import SubjectAssignmentResolver
from registrar.infrastructure.store import (
    DELETE_FIELD,
    SERVER_TIMESTAMP,
    DocumentNotFoundError,
    DocumentStore,
)
from registrar.models.enrollment import (
    CollegeEnrollmentInfo,
    EnrollmentInfo,
    EnrollmentRecord,
    HighSchoolEnrollmentInfo,
    Semester,
)
from registrar.models.grades import GradeSheetMetadata, grade_stub, subject_ids

logger = logging.getLogger(__name__)


def format_level(info: EnrollmentInfo) -> str:
    """Human-readable level label used on grade sheets.

    College: "BSIT 1 - S1". High school: "Grade 11 STEM" or "Grade 8".
    """
    if isinstance(info, CollegeEnrollmentInfo):
        term = "S2" if info.semester == Semester.SECOND.value else "S1"
        return f"{info.course_code or ''} {info.year_level or ''} - {term}".strip()
    if isinstance(info, HighSchoolEnrollmentInfo):
        label = f"Grade {info.grade_level or ''}".strip()
        if info.is_senior_high and info.strand:
            label = f"{label} {info.strand}"
        return label
    return ""


def build_metadata(
    record: EnrollmentRecord,
    section_name: str | None = None,
    official_id: str | None = None,
) -> dict[str, Any]:
    """Denormalized student fields for a grade sheet."""
    info = record.enrollment_info
    return GradeSheetMetadata(
        studentName=record.personal_info.full_name,
        studentOfficialId=official_id or info.student_id or "",
        studentSection=section_name or "",
        studentLevel=format_level(info),
        studentSemester=info.semester or "",
    ).model_dump()


@dataclass
class GradeSheetPatch:
    """Outcome of one synchronization.

    Attributes:
        path: Grade sheet document path.
        added: Subject ids that received a fresh stub.
        removed: Subject ids whose fields were deleted.
        kept: Subject ids left untouched.
        created: Whether the grade sheet document was created.
    """

    path: str
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    kept: list[str] = field(default_factory=list)
    created: bool = False


class GradeSheetSynchronizer:
    """Applies subject-set changes to grade sheets.

    Attributes:
        store: Document store.
        subjects: Resolver used to look up subject display names.
    """

    def __init__(self, store: DocumentStore, subjects: SubjectAssignmentResolver) -> None:
        self.store = store
        self.subjects = subjects

    async def sync(
        self,
        student_id: str,
        key: str,
        assigned_subjects: list[str],
        metadata: dict[str, Any] | None = None,
    ) -> GradeSheetPatch:
        """Diff the grade sheet against the assigned subjects and patch it.

        Args:
            student_id: Student (user) id.
            key: Cohort key of the enrollment the grade sheet belongs to.
            assigned_subjects: Subject ids the student should have.
            metadata: Denormalized fields to write alongside the patch.

        Returns:
            What was added, removed and kept.
        """
        path = grade_sheet_path(student_id, key)
        snapshot = await self.store.get(path)
        existing = subject_ids(snapshot.to_dict())

        assigned = list(dict.fromkeys(assigned_subjects))
        patch = GradeSheetPatch(
            path=path,
            added=[s for s in assigned if s not in existing],
            removed=sorted(existing - set(assigned)),
            kept=[s for s in assigned if s in existing],
            created=not snapshot.exists,
        )

        update: dict[str, Any] = {}
        for subject_id in patch.added:
            update[subject_id] = grade_stub(await self.subjects.get_subject_name(subject_id))
        for subject_id in patch.removed:
            update[subject_id] = DELETE_FIELD
        update.update(metadata or {})
        update["updatedAt"] = SERVER_TIMESTAMP
        if patch.created:
            update["createdAt"] = SERVER_TIMESTAMP

        await self.store.set(path, update, merge=True)

        logger.info(
            "Grade sheet synced: path=%s, added=%d, removed=%d, kept=%d",
            path,
            len(patch.added),
            len(patch.removed),
            len(patch.kept),
        )
        return patch

    async def update_metadata(self, student_id: str, key: str, fields: dict[str, Any]) -> bool:
        """Patch denormalized fields of an existing grade sheet.

        Returns:
            False when the grade sheet does not exist.
        """
        try:
            await self.store.update(
                grade_sheet_path(student_id, key), {**fields, "updatedAt": SERVER_TIMESTAMP}
            )
        except DocumentNotFoundError:
            return False
        return True

    async def delete(self, student_id: str, key: str) -> None:
        await self.store.delete(grade_sheet_path(student_id, key))
