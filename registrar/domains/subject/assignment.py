# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Cohort subject assignment resolution.

A subject assignment binds a cohort to a subject set:

- college: courseCode + yearLevel + semester
- SHS: gradeLevel + semester + strand
- JHS: gradeLevel, with no semester

The bound subject set lists the subject ids the cohort takes. When no
assignment matches, the enrollment's own selected subjects are used.
"""

from __future__ import annotations

import logging
from typing import Any

from registrar.infrastructure.store import DocumentStore, StoreError
from registrar.models.enrollment import (
    CollegeEnrollmentInfo,
    EnrollmentInfo,
    HighSchoolEnrollmentInfo,
    Level,
)

logger = logging.getLogger(__name__)

ASSIGNMENTS_COLLECTION = "subject-assignments"
SUBJECT_SETS_COLLECTION = "subject-sets"
SUBJECTS_COLLECTION = "subjects"


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def matches_cohort(assignment: dict[str, Any], info: EnrollmentInfo) -> bool:
    """Check whether a subject assignment targets the enrollment's cohort."""
    if isinstance(info, CollegeEnrollmentInfo):
        return (
            assignment.get("level") == Level.COLLEGE.value
            and assignment.get("courseCode") == info.course_code
            and _as_int(assignment.get("yearLevel")) == (info.year_level or 1)
            and assignment.get("semester") == info.semester
        )

    if isinstance(info, HighSchoolEnrollmentInfo):
        if assignment.get("level") != Level.HIGH_SCHOOL.value:
            return False
        if _as_int(assignment.get("gradeLevel")) != (_as_int(info.grade_level) or 0):
            return False
        if info.is_senior_high:
            return (
                assignment.get("semester") == info.semester
                and assignment.get("strand") == info.strand
            )
        return not assignment.get("semester")

    return False


class SubjectAssignmentResolver:
    """Maps an enrollment's cohort onto its assigned subject ids.

    Attributes:
        store: Document store.
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def find_assignment(self, info: EnrollmentInfo) -> dict[str, Any] | None:
        """Find the subject assignment matching the enrollment's cohort.

        Args:
            info: Enrollment info.

        Returns:
            Assignment document fields with its id, or None.
        """
        if not isinstance(info, (CollegeEnrollmentInfo, HighSchoolEnrollmentInfo)):
            return None

        snapshots = await self.store.query(ASSIGNMENTS_COLLECTION, [("level", info.level)])
        for snapshot in snapshots:
            data = snapshot.to_dict()
            if matches_cohort(data, info):
                return {**data, "id": snapshot.id}
        return None

    async def resolve_assigned_subjects(
        self,
        info: EnrollmentInfo,
        fallback: list[str] | None = None,
    ) -> list[str]:
        """Resolve the subject ids assigned to the enrollment's cohort.

        Args:
            info: Enrollment info.
            fallback: Subject ids to use when no assignment applies,
                normally the record's selected subjects.

        Returns:
            Subject ids in assignment order.
        """
        fallback = list(fallback or [])
        assignment = await self.find_assignment(info)
        if assignment is None:
            return fallback

        subject_set_id = assignment.get("subjectSetId")
        subject_set = (
            await self.store.get(f"{SUBJECT_SETS_COLLECTION}/{subject_set_id}")
            if subject_set_id
            else None
        )
        if subject_set is None or not subject_set.exists:
            logger.warning(
                "Subject assignment %s references missing subject set %s",
                assignment["id"],
                subject_set_id,
            )
            return fallback

        subjects = subject_set.to_dict().get("subjects") or []
        logger.debug(
            "Resolved %d subjects from assignment %s", len(subjects), assignment["id"]
        )
        return [str(s) for s in subjects]

    async def get_subject_name(self, subject_id: str) -> str:
        """Display name of a subject; the id itself when it cannot be read."""
        try:
            snapshot = await self.store.get(f"{SUBJECTS_COLLECTION}/{subject_id}")
        except StoreError as e:
            logger.warning("Failed to get details for subject %s: %s", subject_id, e)
            return subject_id
        return snapshot.to_dict().get("name") or subject_id

    async def get_subjects(self, subject_ids: list[str]) -> list[dict[str, Any]]:
        """Subject details for the given ids, skipping ones that no longer exist."""
        subjects = []
        for subject_id in subject_ids:
            snapshot = await self.store.get(f"{SUBJECTS_COLLECTION}/{subject_id}")
            if snapshot.exists:
                subjects.append({**snapshot.to_dict(), "id": subject_id})
        return subjects
