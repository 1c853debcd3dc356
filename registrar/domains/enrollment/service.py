# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment service.

This module provides the EnrollmentService class, the public boundary of
the registrar core. It wires the config accessor, resolver, lifecycle
coordinator, section manager and subject components onto one store and
exposes every operation callers use.

Public operations never raise. Each returns an OperationResult; domain
and store failures become ``success=False`` with the error message and
class name, and failed secondary writes become ``warnings`` on an
otherwise successful result.

Example:
    service = EnrollmentService(store)
    result = await service.submit_enrollment("u1", payload)
    if not result.success:
        ...
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable
from typing import Any

from registrar.core.config.settings import RegistrarSettings
from registrar.core.exceptions import (
    NotFoundError,
    PartialConsistencyWarning,
    RegistrarError,
)
from registrar.domains.enrollment.lifecycle import LifecycleCoordinator
from registrar.domains.enrollment.reconcile import EnrollmentReconciler
from registrar.domains.enrollment.resolver import (
    EnrollmentResolver,
    ResolvedEnrollment,
    record_data,
)
from registrar.domains.paths import (
    TOP_LEVEL_COLLECTION,
    enrollment_collection,
    section_path,
    student_path,
)
from registrar.domains.section.service import SectionAssignmentManager
from registrar.domains.subject.assignment import SubjectAssignmentResolver
from registrar.domains.subject.grade_sheet import GradeSheetSynchronizer, build_metadata
from registrar.domains.system_config.service import SystemConfigService
from registrar.infrastructure.store import DocumentSnapshot, DocumentStore, StoreError
from registrar.models.common import OperationResult
from registrar.models.enrollment import EnrollmentStatus, EnrollmentView, Level
from registrar.models.system_config import EnrollmentWindows
from registrar.utils.datetime import to_timestamp

logger = logging.getLogger(__name__)

_AY_RANK_RE = re.compile(r"^AY(\d{2})(\d{2})$")


def ay_rank(ay_code: str | None) -> int:
    """Sortable rank of an AY code: AY2526 -> 2526. Unknown codes rank lowest."""
    match = _AY_RANK_RE.match(ay_code or "")
    if not match:
        return -1
    return int(match.group(1)) * 100 + int(match.group(2))


def _warnings(warnings: list[PartialConsistencyWarning]) -> list[str]:
    return [str(w) for w in warnings]


def _view(resolved: ResolvedEnrollment) -> dict[str, Any]:
    return EnrollmentView(
        id=resolved.doc_id, path=resolved.path, record=resolved.data
    ).model_dump()


class EnrollmentService:
    """Public registrar operations over one document store.

    Attributes:
        store: Document store.
        config: System config accessor.
        resolver: Enrollment resolver.
        subjects: Cohort subject assignment resolver.
        grade_sheets: Grade-sheet synchronizer.
        lifecycle: Lifecycle coordinator.
        sections: Section assignment manager.
        reconciler: Replica reconciler.
    """

    def __init__(self, store: DocumentStore, settings: RegistrarSettings | None = None) -> None:
        """Initialize enrollment service.

        Args:
            store: Document store.
            settings: Registrar defaults. Loaded from the environment when omitted.
        """
        self.store = store
        self.config = SystemConfigService(store, settings)
        self.resolver = EnrollmentResolver(store)
        self.subjects = SubjectAssignmentResolver(store)
        self.grade_sheets = GradeSheetSynchronizer(store, self.subjects)
        self.lifecycle = LifecycleCoordinator(
            store, self.resolver, self.subjects, self.grade_sheets
        )
        self.sections = SectionAssignmentManager(store, self.resolver, self.grade_sheets)
        self.reconciler = EnrollmentReconciler(store, self.resolver)

    async def _run(
        self,
        operation: str,
        call: Callable[[], Awaitable[OperationResult]],
    ) -> OperationResult:
        """Run an operation, converting every failure into a failed result."""
        try:
            return await call()
        except RegistrarError as e:
            logger.info("%s failed: %s", operation, e)
            return OperationResult.fail(e)
        except StoreError as e:
            logger.error("%s failed on store access: %s", operation, e, exc_info=True)
            return OperationResult.fail(e)
        except Exception as e:
            logger.exception("Unexpected error in %s", operation)
            return OperationResult.fail(e)

    # ========== System config ==========

    async def get_system_config(self) -> OperationResult:
        async def call() -> OperationResult:
            config = await self.config.get()
            return OperationResult.ok(config.model_dump(by_alias=True))

        return await self._run("get_system_config", call)

    async def update_system_config(
        self,
        ay: str,
        semester: str | None = None,
        windows: EnrollmentWindows | dict[str, Any] | None = None,
    ) -> OperationResult:
        """Set the active academic year, semester and enrollment windows."""

        async def call() -> OperationResult:
            parsed = (
                EnrollmentWindows.model_validate(windows) if isinstance(windows, dict) else windows
            )
            config = await self.config.update(ay, semester, parsed)
            return OperationResult.ok(config.model_dump(by_alias=True))

        return await self._run("update_system_config", call)

    async def get_latest_student_id(self) -> OperationResult:
        async def call() -> OperationResult:
            return OperationResult.ok({"latestId": await self.config.get_latest_student_id()})

        return await self._run("get_latest_student_id", call)

    async def update_latest_student_id(self, latest_id: str) -> OperationResult:
        async def call() -> OperationResult:
            await self.config.update_latest_student_id(latest_id)
            return OperationResult.ok({"latestId": latest_id})

        return await self._run("update_latest_student_id", call)

    # ========== Enrollment reads ==========

    async def get_enrollment(
        self,
        student_id: str,
        ay_code: str | None = None,
        semester: str | None = None,
    ) -> OperationResult:
        """Resolve a student's enrollment.

        Args:
            student_id: Student (user) id.
            ay_code: Academic year; the configured one when omitted.
            semester: "first-sem"/"second-sem" for college and SHS records.
        """

        async def call() -> OperationResult:
            ay = ay_code or (await self.config.get()).ay_code
            resolved = await self.resolver.resolve(student_id, ay, semester)
            return OperationResult.ok(_view(resolved))

        return await self._run("get_enrollment", call)

    async def get_all_enrollments(self, ay_code: str | None = None) -> OperationResult:
        """Every top-level enrollment of an academic year, most recently updated first."""

        async def call() -> OperationResult:
            ay = ay_code or (await self.config.get()).ay_code
            snapshots = await self.store.query(TOP_LEVEL_COLLECTION, [("ayCode", ay)])
            return OperationResult.ok(self._flatten(snapshots))

        return await self._run("get_all_enrollments", call)

    async def get_all_enrolled_students(self, ay_code: str | None = None) -> OperationResult:
        """Top-level enrollments with status enrolled in the (configured) academic year."""

        async def call() -> OperationResult:
            ay = ay_code or (await self.config.get()).ay_code
            snapshots = await self.store.query(
                TOP_LEVEL_COLLECTION,
                [
                    ("ayCode", ay),
                    ("enrollmentData.enrollmentInfo.status", EnrollmentStatus.ENROLLED.value),
                ],
            )
            return OperationResult.ok(self._flatten(snapshots))

        return await self._run("get_all_enrolled_students", call)

    @staticmethod
    def _flatten(snapshots: list[DocumentSnapshot]) -> list[dict[str, Any]]:
        enrollments = []
        for snapshot in snapshots:
            data = record_data(snapshot)
            if data is not None:
                enrollments.append({**data, "id": snapshot.id})
        enrollments.sort(key=lambda e: to_timestamp(e.get("updatedAt")), reverse=True)
        return enrollments

    async def get_enrollments_for_students(
        self,
        student_ids: list[str],
        ay_code: str | None = None,
    ) -> OperationResult:
        """Resolve the current enrollment of several students. Misses are skipped."""

        async def call() -> OperationResult:
            config = await self.config.get()
            if ay_code:
                config = config.model_copy(update={"ay_code": ay_code})

            found: dict[str, Any] = {}
            for student_id in dict.fromkeys(student_ids):
                try:
                    resolved = await self.resolver.resolve_current(student_id, config)
                except NotFoundError:
                    continue
                found[student_id] = _view(resolved)
            return OperationResult.ok(found)

        return await self._run("get_enrollments_for_students", call)

    async def get_student(self, student_id: str) -> OperationResult:
        async def call() -> OperationResult:
            snapshot = await self.store.get(student_path(student_id))
            if not snapshot.exists:
                raise NotFoundError("Student not found", details={"student_id": student_id})
            return OperationResult.ok({**snapshot.to_dict(), "id": snapshot.id})

        return await self._run("get_student", call)

    async def get_enrolled_subjects(self, student_id: str) -> OperationResult:
        """Subjects of the student's current enrollment, in assignment order."""

        async def call() -> OperationResult:
            config = await self.config.get()
            resolved = await self.resolver.resolve_current(student_id, config)
            record = resolved.record
            subject_ids = await self.subjects.resolve_assigned_subjects(
                record.enrollment_info, record.selected_subjects
            )
            subjects = await self.subjects.get_subjects(subject_ids)
            info = resolved.data.get("enrollmentInfo") or {}
            summary = {
                name: info.get(name)
                for name in (
                    "level",
                    "semester",
                    "schoolYear",
                    "yearLevel",
                    "courseCode",
                    "gradeLevel",
                    "department",
                    "strand",
                )
            }
            return OperationResult.ok({"subjects": subjects, "enrollmentInfo": summary})

        return await self._run("get_enrolled_subjects", call)

    async def get_latest_high_school_enrollment(self, student_id: str) -> OperationResult:
        """Most recent high-school enrollment from an academic year other than the current one.

        Used to prefill a returning high-school student's next submission.
        """

        async def call() -> OperationResult:
            config = await self.config.get()
            candidates: list[dict[str, Any]] = []

            for snapshot in await self.store.list_documents(enrollment_collection(student_id)):
                candidates.append({**snapshot.to_dict(), "id": snapshot.id})
            for snapshot in await self.store.query(
                TOP_LEVEL_COLLECTION, [("userId", student_id)]
            ):
                data = record_data(snapshot)
                if data is not None:
                    candidates.append({**data, "id": snapshot.id})

            def is_high_school(data: dict[str, Any]) -> bool:
                info = data.get("enrollmentInfo") or {}
                level = info.get("level")
                return level == Level.HIGH_SCHOOL.value or (not level and not info.get("semester"))

            previous = [
                c
                for c in candidates
                if is_high_school(c)
                and (c.get("enrollmentInfo") or {}).get("schoolYear") != config.ay_code
            ]
            if not previous:
                raise NotFoundError(
                    "No previous high school enrollment found", details={"student_id": student_id}
                )

            previous.sort(
                key=lambda c: (
                    ay_rank((c.get("enrollmentInfo") or {}).get("schoolYear")),
                    to_timestamp(c.get("updatedAt")),
                ),
                reverse=True,
            )
            return OperationResult.ok(previous[0])

        return await self._run("get_latest_high_school_enrollment", call)

    # ========== Lifecycle ==========

    async def submit_enrollment(self, student_id: str, payload: dict[str, Any]) -> OperationResult:
        """Submit a new pending enrollment.

        Args:
            student_id: Student (user) id.
            payload: personalInfo, enrollmentInfo, selectedSubjects and documents.
        """

        async def call() -> OperationResult:
            config = await self.config.get()
            outcome = await self.lifecycle.submit(student_id, payload, config)
            return OperationResult.ok(outcome.data, _warnings(outcome.warnings))

        return await self._run("submit_enrollment", call)

    async def enroll_student(
        self,
        student_id: str,
        subject_ids: list[str] | None = None,
        or_number: str | None = None,
        scholarship: str | None = None,
        external_student_id: str | None = None,
        student_type: str | None = None,
        level: str | None = None,
        semester: str | None = None,
    ) -> OperationResult:
        async def call() -> OperationResult:
            config = await self.config.get()
            outcome = await self.lifecycle.enroll(
                student_id,
                config,
                subject_ids=subject_ids,
                or_number=or_number,
                scholarship=scholarship,
                external_student_id=external_student_id,
                student_type=student_type,
                level=level,
                semester=semester,
            )
            return OperationResult.ok(outcome.data, _warnings(outcome.warnings))

        return await self._run("enroll_student", call)

    async def revoke_enrollment(self, student_id: str) -> OperationResult:
        async def call() -> OperationResult:
            config = await self.config.get()
            outcome = await self.lifecycle.revoke(student_id, config)
            return OperationResult.ok({"path": outcome.path}, _warnings(outcome.warnings))

        return await self._run("revoke_enrollment", call)

    async def delete_enrollment(
        self,
        student_id: str,
        level: str | None = None,
        semester: str | None = None,
    ) -> OperationResult:
        async def call() -> OperationResult:
            config = await self.config.get()
            outcome = await self.lifecycle.delete(student_id, config, level, semester)
            return OperationResult.ok({"path": outcome.path}, _warnings(outcome.warnings))

        return await self._run("delete_enrollment", call)

    # ========== Sections ==========

    async def assign_section(self, student_id: str, section_id: str) -> OperationResult:
        async def call() -> OperationResult:
            config = await self.config.get()
            warnings = await self.sections.assign(student_id, section_id, config)
            return OperationResult.ok({"sectionId": section_id}, _warnings(warnings))

        return await self._run("assign_section", call)

    async def unassign_section(self, student_id: str, section_id: str) -> OperationResult:
        async def call() -> OperationResult:
            config = await self.config.get()
            warnings = await self.sections.unassign(student_id, section_id, config)
            return OperationResult.ok({"sectionId": section_id}, _warnings(warnings))

        return await self._run("unassign_section", call)

    # ========== Maintenance ==========

    async def refresh_grade_sheet_metadata(self, student_id: str) -> OperationResult:
        """Recompute the denormalized student fields of the current grade sheet."""

        async def call() -> OperationResult:
            config = await self.config.get()
            resolved = await self.resolver.resolve_current(student_id, config)
            record = resolved.record

            section_name = None
            section_id = record.enrollment_info.section_id
            if section_id:
                section = await self.store.get(section_path(section_id))
                section_name = section.to_dict().get("sectionName")

            metadata = build_metadata(record, section_name=section_name)
            if not await self.grade_sheets.update_metadata(student_id, resolved.key, metadata):
                raise NotFoundError(
                    "Grade sheet not found", details={"student_id": student_id, "key": resolved.key}
                )
            return OperationResult.ok({"key": resolved.key, **metadata})

        return await self._run("refresh_grade_sheet_metadata", call)

    async def reconcile_enrollment(self, student_id: str) -> OperationResult:
        """Repair the top-level replica and roster membership of a student."""

        async def call() -> OperationResult:
            config = await self.config.get()
            report = await self.reconciler.reconcile(student_id, config)
            return OperationResult.ok(report.to_dict())

        return await self._run("reconcile_enrollment", call)

    async def check_connection(self) -> OperationResult:
        async def call() -> OperationResult:
            if not await self.store.ping():
                raise StoreError("Document store is not reachable")
            return OperationResult.ok({"connected": True})

        return await self._run("check_connection", call)

