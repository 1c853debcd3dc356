# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Section assignment management.

This module provides the SectionAssignmentManager class for:
- Moving a student into a section roster
- Removing a student from a section roster

A student is listed in at most one roster at a time. On assignment the
old roster is left before the enrollment document is updated, and the new
roster is joined last, so a failure part-way can leave the student in no
roster but never in two.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from registrar.core.exceptions import NotFoundError, PartialConsistencyWarning
from registrar.domains.paths import enrollment_collection, section_path
from registrar.domains.system_config.service import semester_from_config
from registrar.infrastructure.store import (
    DELETE_FIELD,
    SERVER_TIMESTAMP,
    ArrayRemove,
    ArrayUnion,
    DocumentNotFoundError,
    DocumentStore,
    StoreError,
)
from registrar.models.enrollment import EnrollmentRecord
from registrar.models.system_config import SystemConfig

if TYPE_CHECKING:
    from registrar.domains.enrollment.resolver import EnrollmentResolver, ResolvedEnrollment
    from registrar.domains.subject.grade_sheet import GradeSheetSynchronizer

logger = logging.getLogger(__name__)


class SectionAssignmentManager:
    """Keeps section rosters and enrollment section ids in agreement.

    Attributes:
        store: Document store.
        resolver: Enrollment resolver used to locate the student's record.
        grade_sheets: Synchronizer used to patch the grade sheet's section label.
    """

    def __init__(
        self,
        store: DocumentStore,
        resolver: EnrollmentResolver,
        grade_sheets: GradeSheetSynchronizer,
    ) -> None:
        self.store = store
        self.resolver = resolver
        self.grade_sheets = grade_sheets

    async def locate(self, student_id: str, config: SystemConfig) -> ResolvedEnrollment:
        """Find the enrollment a section change applies to.

        Tries regular resolution (semester-aware, then semester-less). When
        that misses, scans the student's enrollment subcollection and picks
        the document matching the configured academic year and semester
        best, falling back to the first document found.

        Raises:
            NotFoundError: If the student has no enrollment documents at all.
        """
        try:
            return await self.resolver.resolve_current(student_id, config)
        except NotFoundError:
            pass

        # Deferred: the enrollment package imports this module through EnrollmentService.
        from registrar.domains.enrollment.resolver import ResolvedEnrollment

        snapshots = await self.store.list_documents(enrollment_collection(student_id))
        if not snapshots:
            raise NotFoundError(
                "No enrollment found for this user", details={"student_id": student_id}
            )

        semester = semester_from_config(config.semester)

        def score(data: dict[str, Any]) -> int:
            info = data.get("enrollmentInfo") or {}
            points = 2 if info.get("schoolYear") == config.ay_code else 0
            if info.get("semester") == semester:
                points += 1
            return points

        best = max(snapshots, key=lambda s: score(s.to_dict()))
        logger.debug("Section change falls back to %s for %s", best.path, student_id)
        return ResolvedEnrollment(
            student_id=student_id,
            ay_code=config.ay_code,
            record=EnrollmentRecord.from_document(best.to_dict()),
            path=best.path,
            tier="section-scan",
            data=best.to_dict(),
        )

    async def _secondary(
        self,
        warnings: list[PartialConsistencyWarning],
        replica: str,
        path: str,
        write: Any,
    ) -> None:
        try:
            await write
        except Exception as e:
            warning = PartialConsistencyWarning(replica, path, e)
            logger.warning("Partial consistency: %s", warning)
            warnings.append(warning)

    async def _set_section_field(self, resolved: ResolvedEnrollment, value: Any) -> None:
        await self.store.update(
            resolved.path,
            {
                f"{resolved.field_prefix}enrollmentInfo.sectionId": value,
                "updatedAt": SERVER_TIMESTAMP,
            },
        )

    async def _mirror_section_field(self, resolved: ResolvedEnrollment, value: Any) -> None:
        replica = await self.resolver.find_replica(resolved)
        if replica is None:
            logger.debug("No replica of %s to mirror section change onto", resolved.path)
            return
        prefix = "" if resolved.is_top_level else "enrollmentData."
        await self.store.update(
            replica.path,
            {f"{prefix}enrollmentInfo.sectionId": value, "updatedAt": SERVER_TIMESTAMP},
        )

    async def assign(
        self,
        student_id: str,
        section_id: str,
        config: SystemConfig,
    ) -> list[PartialConsistencyWarning]:
        """Move a student into a section.

        Args:
            student_id: Student (user) id.
            section_id: Target section id.
            config: System config snapshot.

        Returns:
            Secondary writes that failed.

        Raises:
            NotFoundError: If the section or the student's enrollment does not exist.
            StoreError: If leaving the old roster or updating the enrollment fails.
        """
        section = await self.store.get(section_path(section_id))
        if not section.exists:
            raise NotFoundError("Section not found", details={"section_id": section_id})

        resolved = await self.locate(student_id, config)
        warnings: list[PartialConsistencyWarning] = []

        current = resolved.record.enrollment_info.section_id
        if current and current != section_id:
            try:
                await self.store.update(
                    section_path(current),
                    {"students": ArrayRemove([student_id]), "updatedAt": SERVER_TIMESTAMP},
                )
                logger.info("Removed student %s from old section %s", student_id, current)
            except DocumentNotFoundError:
                logger.debug("Old section %s no longer exists", current)

        await self._set_section_field(resolved, section_id)
        await self._secondary(
            warnings,
            "top-level mirror",
            resolved.path,
            self._mirror_section_field(resolved, section_id),
        )
        await self._secondary(
            warnings,
            "roster",
            section.path,
            self.store.update(
                section.path,
                {"students": ArrayUnion([student_id]), "updatedAt": SERVER_TIMESTAMP},
            ),
        )

        section_name = section.to_dict().get("sectionName")
        if section_name:
            await self._secondary(
                warnings,
                "grade sheet",
                resolved.key,
                self.grade_sheets.update_metadata(
                    student_id, resolved.key, {"studentSection": section_name}
                ),
            )

        logger.info(
            "Section %s assigned to student %s in %s", section_id, student_id, config.ay_code
        )
        return warnings

    async def unassign(
        self,
        student_id: str,
        section_id: str,
        config: SystemConfig,
    ) -> list[PartialConsistencyWarning]:
        """Remove a student from a section.

        The enrollment's sectionId is deleted only when it references this
        section (or is already absent); a student already moved elsewhere
        keeps their new assignment. Running it twice is a no-op.

        Raises:
            NotFoundError: If the student's enrollment does not exist.
            StoreError: If updating the enrollment fails.
        """
        resolved = await self.locate(student_id, config)
        warnings: list[PartialConsistencyWarning] = []

        current = resolved.record.enrollment_info.section_id
        clears_record = current in (None, "", section_id)
        if clears_record:
            await self._set_section_field(resolved, DELETE_FIELD)
            await self._secondary(
                warnings,
                "top-level mirror",
                resolved.path,
                self._mirror_section_field(resolved, DELETE_FIELD),
            )
        else:
            logger.info(
                "Student %s is assigned to %s, not %s; leaving enrollment unchanged",
                student_id,
                current,
                section_id,
            )

        try:
            await self.store.update(
                section_path(section_id),
                {"students": ArrayRemove([student_id]), "updatedAt": SERVER_TIMESTAMP},
            )
        except DocumentNotFoundError:
            logger.debug("Section %s no longer exists", section_id)
        except StoreError as e:
            warning = PartialConsistencyWarning("roster", section_path(section_id), e)
            logger.warning("Partial consistency: %s", warning)
            warnings.append(warning)

        if clears_record:
            await self._secondary(
                warnings,
                "grade sheet",
                resolved.key,
                self.grade_sheets.update_metadata(student_id, resolved.key, {"studentSection": ""}),
            )

        logger.info(
            "Section %s unassigned from student %s in %s", section_id, student_id, config.ay_code
        )
        return warnings
