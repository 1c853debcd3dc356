# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Replica reconciliation.

Lifecycle operations tolerate failed secondary writes, so the top-level
replica and section rosters may drift from the subcollection record.
EnrollmentReconciler repairs one student's drift on demand. It treats the
located record as the truth and re-applies it everywhere else; running it
again changes nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from registrar.domains.enrollment.lifecycle import strip_unset
from registrar.domains.enrollment.resolver import (
    EnrollmentResolver,
    ResolvedEnrollment,
    is_semestered,
)
from registrar.domains.paths import SECTIONS_COLLECTION
from registrar.infrastructure.store import (
    SERVER_TIMESTAMP,
    ArrayRemove,
    ArrayUnion,
    DocumentStore,
)
from registrar.models.system_config import SystemConfig

logger = logging.getLogger(__name__)


@dataclass
class ReconcileReport:
    """What a reconciliation changed.

    Attributes:
        path: Path of the record treated as the truth.
        mirrored_to: Path of the replica that was rewritten, if any.
        mirror_created: Whether the replica had to be created.
        removed_from: Sections the student was wrongly listed in.
        added_to: Section the student was added to, if any.
    """

    path: str
    mirrored_to: str | None = None
    mirror_created: bool = False
    removed_from: list[str] = field(default_factory=list)
    added_to: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "mirroredTo": self.mirrored_to,
            "mirrorCreated": self.mirror_created,
            "removedFrom": self.removed_from,
            "addedTo": self.added_to,
        }


class EnrollmentReconciler:
    """Re-applies a student's enrollment record to its replicas and roster."""

    def __init__(self, store: DocumentStore, resolver: EnrollmentResolver) -> None:
        self.store = store
        self.resolver = resolver

    async def reconcile(self, student_id: str, config: SystemConfig) -> ReconcileReport:
        """Repair the top-level replica and roster membership of a student.

        Raises:
            NotFoundError: If the student has no record in the current AY.
            StoreError: If any repair write fails.
        """
        resolved = await self.resolver.resolve_current(student_id, config)
        report = ReconcileReport(path=resolved.path)

        await self._remirror(resolved, report)
        await self._fix_rosters(student_id, resolved.record.enrollment_info.section_id, report)

        logger.info(
            "Enrollment reconciled: student=%s, mirrored_to=%s, removed_from=%s, added_to=%s",
            student_id,
            report.mirrored_to,
            report.removed_from,
            report.added_to,
        )
        return report

    async def _remirror(self, resolved: ResolvedEnrollment, report: ReconcileReport) -> None:
        record = strip_unset(resolved.record.to_document())
        replica = await self.resolver.find_replica(resolved)

        if resolved.is_top_level:
            # The envelope is the located record; copy it down.
            target = replica.path if replica else self.resolver.replica_candidates(resolved)[0]
            await self.store.set(target, {**record, "updatedAt": SERVER_TIMESTAMP}, merge=True)
            report.mirrored_to = target
            report.mirror_created = replica is None
            return

        if replica is not None:
            await self.store.update(
                replica.path,
                {
                    "enrollmentData": record,
                    "ayCode": resolved.ay_code,
                    "updatedAt": SERVER_TIMESTAMP,
                },
            )
            report.mirrored_to = replica.path
            return

        target = self.resolver.replica_candidates(resolved)[0]
        envelope: dict[str, Any] = {
            "userId": resolved.student_id,
            "ayCode": resolved.ay_code,
            "enrollmentData": record,
            "createdAt": SERVER_TIMESTAMP,
            "updatedAt": SERVER_TIMESTAMP,
        }
        if is_semestered(resolved.data.get("enrollmentInfo") or {}) and resolved.record.semester:
            envelope["semester"] = resolved.record.semester
        await self.store.set(target, envelope)
        report.mirrored_to = target
        report.mirror_created = True

    async def _fix_rosters(
        self,
        student_id: str,
        section_id: str | None,
        report: ReconcileReport,
    ) -> None:
        sections = await self.store.list_documents(SECTIONS_COLLECTION)
        for section in sections:
            students = section.to_dict().get("students") or []
            if section.id != section_id and student_id in students:
                await self.store.update(
                    section.path,
                    {"students": ArrayRemove([student_id]), "updatedAt": SERVER_TIMESTAMP},
                )
                report.removed_from.append(section.id)

        if not section_id:
            return
        own = next((s for s in sections if s.id == section_id), None)
        if own is None:
            logger.warning("Student %s references missing section %s", student_id, section_id)
            return
        if student_id not in (own.to_dict().get("students") or []):
            await self.store.update(
                own.path,
                {"students": ArrayUnion([student_id]), "updatedAt": SERVER_TIMESTAMP},
            )
            report.added_to = section_id
