# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment lifecycle transitions.

    submit   (new)              -> pending
    enroll   pending|enrolled   -> enrolled
    revoke   enrolled|pending   -> pending
    delete   pending|enrolled   -> removed

Each transition writes the same fact to every replica with sequential,
independent store calls; there is no multi-document transaction. The
primary write goes to the located record (normally the per-student
subcollection document). Failures of the writes that follow it (top-level
mirror, profile, grade sheet, roster) are logged and collected as
PartialConsistencyWarning on the outcome instead of failing the
transition. Every write is safe to re-apply.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field, replace
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from registrar.core.exceptions import (
    AlreadyEnrolledError,
    NotFoundError,
    PartialConsistencyWarning,
    ValidationError,
)
from registrar.domains.enrollment.keys import (
    cohort_key,
    semester_from_config,
    student_scoped_key,
    validate_ay_code,
)
from registrar.domains.enrollment.resolver import (
    EnrollmentResolver,
    ResolvedEnrollment,
    is_semestered,
)
from registrar.domains.paths import (
    enrollment_path,
    section_path,
    student_path,
    top_level_path,
)
from registrar.domains.subject.assignment import SubjectAssignmentResolver
from registrar.domains.subject.grade_sheet import GradeSheetSynchronizer, build_metadata
from registrar.infrastructure.store import (
    DELETE_FIELD,
    SERVER_TIMESTAMP,
    ArrayRemove,
    DocumentNotFoundError,
    DocumentStore,
    StoreError,
)
from registrar.models.enrollment import (
    Department,
    EnrollmentRecord,
    EnrollmentStatus,
    Level,
    StudentType,
)
from registrar.models.system_config import SystemConfig
from registrar.utils.datetime import format_iso, utc_now

logger = logging.getLogger(__name__)


def strip_unset(value: Any) -> Any:
    """Drop None entries from (nested) maps. Sentinels are kept as they are."""
    if isinstance(value, dict):
        return {k: strip_unset(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [strip_unset(v) for v in value]
    return value


@dataclass
class LifecycleOutcome:
    """Result of a lifecycle transition.

    Attributes:
        student_id: Student the transition applied to.
        path: Path of the primary document written.
        key: Cohort key of the record.
        warnings: Secondary writes that failed after the primary write.
        data: Transition-specific details.
    """

    student_id: str
    path: str | None = None
    key: str | None = None
    warnings: list[PartialConsistencyWarning] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)


class LifecycleCoordinator:
    """Executes submit, enroll, revoke and delete across all replicas.

    The SystemConfig snapshot is passed into every call and is not
    re-read during the transition.

    Attributes:
        store: Document store.
        resolver: Enrollment resolver.
        subjects: Cohort subject assignment resolver.
        grade_sheets: Grade-sheet synchronizer.
    """

    def __init__(
        self,
        store: DocumentStore,
        resolver: EnrollmentResolver,
        subjects: SubjectAssignmentResolver,
        grade_sheets: GradeSheetSynchronizer,
    ) -> None:
        self.store = store
        self.resolver = resolver
        self.subjects = subjects
        self.grade_sheets = grade_sheets

    async def _secondary(
        self,
        outcome: LifecycleOutcome,
        replica: str,
        path: str,
        write: Awaitable[Any],
    ) -> bool:
        """Await a secondary write, recording its failure instead of raising."""
        try:
            await write
        except Exception as e:
            warning = PartialConsistencyWarning(replica, path, e)
            logger.warning("Partial consistency: %s", warning)
            outcome.warnings.append(warning)
            return False
        return True

    async def _resolve_requested(
        self,
        student_id: str,
        config: SystemConfig,
        level: str | None = None,
        semester: str | None = None,
    ) -> ResolvedEnrollment:
        """Resolve the record a caller names by level and semester.

        With neither given, the configured semester is tried before a
        semester-less lookup. Otherwise only the named period is looked up,
        and a record of another level (or of no level) counts as a miss.

        Raises:
            NotFoundError: If no record of the requested level and period exists.
        """
        if not level and not semester:
            return await self.resolver.resolve_current(student_id, config)

        if level == Level.COLLEGE.value and not semester:
            semester = semester_from_config(config.semester)
        try:
            resolved = await self.resolver.resolve(student_id, config.ay_code, semester)
        except NotFoundError:
            if semester or level != Level.HIGH_SCHOOL.value:
                raise
            # JHS is yearly, SHS is per semester
            resolved = await self.resolver.resolve(
                student_id, config.ay_code, semester_from_config(config.semester)
            )

        if level and resolved.record.level != level:
            raise NotFoundError(
                f"No {level} enrollment found for this user",
                details={"path": resolved.path, "level": resolved.record.level},
            )
        return resolved

    # ========== submit ==========

    def _validate_submission(self, student_id: str, info: dict[str, Any]) -> None:
        if not student_id:
            raise ValidationError("Student id must not be empty")

        level = info.get("level")
        if level == Level.COLLEGE.value:
            required = ("courseCode", "yearLevel", "semester")
        elif level == Level.HIGH_SCHOOL.value:
            required = ("gradeLevel", "department")
            if info.get("department") == Department.SHS.value:
                required += ("semester",)
        else:
            raise ValidationError(
                "Enrollment level must be 'college' or 'high-school'", details={"level": level}
            )

        missing = [name for name in required if info.get(name) in (None, "")]
        if missing:
            raise ValidationError(
                f"Missing required fields for {level} enrollment: {', '.join(missing)}",
                details={"missing": missing},
            )

    async def submit(
        self,
        student_id: str,
        payload: dict[str, Any],
        config: SystemConfig,
    ) -> LifecycleOutcome:
        """Write a new pending enrollment to both replicas.

        Args:
            student_id: Student (user) id.
            payload: Record fields (personalInfo, enrollmentInfo,
                selectedSubjects, documents).
            config: System config snapshot.

        Returns:
            Outcome with the cohort key and top-level id in ``data``.

        Raises:
            ValidationError: If the enrollment info is incomplete or malformed.
            AlreadyEnrolledError: If a record already exists for the period.
            StoreError: If the subcollection write fails.
        """
        info = dict(payload.get("enrollmentInfo") or {})
        self._validate_submission(student_id, info)

        ay_code = validate_ay_code(info.get("schoolYear") or config.ay_code)
        info["schoolYear"] = ay_code
        info["status"] = EnrollmentStatus.PENDING.value
        info.pop("enrollmentDate", None)
        if info.get("level") == Level.HIGH_SCHOOL.value and info.get("department") != Department.SHS.value:
            info.pop("semester", None)

        try:
            record = EnrollmentRecord.model_validate(
                {**payload, "userId": student_id, "enrollmentInfo": info}
            )
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid enrollment data: {e}") from e

        semester = record.semester if is_semestered(info) else None
        try:
            existing = await self.resolver.resolve(student_id, ay_code, semester)
        except NotFoundError:
            existing = None
        if existing is not None:
            period = f"{ay_code} {semester}" if semester else ay_code
            raise AlreadyEnrolledError(
                f"Student {student_id} already has an enrollment for {period}",
                details={"path": existing.path},
            )

        key = cohort_key(ay_code, record.enrollment_info)
        top_key = student_scoped_key(student_id, ay_code, record.enrollment_info)

        document = strip_unset(record.to_document())
        document["submittedAt"] = SERVER_TIMESTAMP
        document["updatedAt"] = SERVER_TIMESTAMP

        primary = enrollment_path(student_id, key)
        await self.store.set(primary, document)

        envelope = strip_unset(
            {
                "userId": student_id,
                "ayCode": ay_code,
                "semester": semester,
                "enrollmentData": document,
                "createdAt": SERVER_TIMESTAMP,
                "updatedAt": SERVER_TIMESTAMP,
            }
        )
        outcome = LifecycleOutcome(
            student_id=student_id,
            path=primary,
            key=key,
            data={"enrollmentId": top_key, "ayCode": ay_code, "semester": semester},
        )
        await self._secondary(
            outcome,
            "top-level mirror",
            top_level_path(top_key),
            self.store.set(top_level_path(top_key), envelope),
        )

        logger.info(
            "Enrollment submitted: student=%s, ay=%s, semester=%s, key=%s",
            student_id,
            ay_code,
            semester,
            key,
        )
        return outcome

    # ========== enroll ==========

    async def _ensure_subcollection_copy(self, resolved: ResolvedEnrollment) -> str:
        """Return the subcollection path of the record, copying it from the
        top-level envelope when only the envelope exists."""
        if not resolved.is_top_level:
            return resolved.path

        replica = await self.resolver.find_replica(resolved)
        if replica is not None:
            return replica.path

        path = enrollment_path(resolved.student_id, resolved.key)
        document = strip_unset(resolved.record.to_document())
        document["userId"] = resolved.student_id
        document.setdefault("submittedAt", SERVER_TIMESTAMP)
        document["updatedAt"] = SERVER_TIMESTAMP
        await self.store.set(path, document)
        logger.info("Created missing enrollment copy %s from %s", path, resolved.path)
        return path

    async def _section_name(self, section_id: str | None) -> str | None:
        if not section_id:
            return None
        snapshot = await self.store.get(section_path(section_id))
        return snapshot.to_dict().get("sectionName")

    async def _sync_grades(
        self,
        student_id: str,
        key: str,
        assigned: list[str],
        record: EnrollmentRecord,
        official_id: str | None,
    ) -> None:
        section_name = await self._section_name(record.enrollment_info.section_id)
        metadata = build_metadata(record, section_name=section_name, official_id=official_id)
        await self.grade_sheets.sync(student_id, key, assigned, metadata)

    async def _mirror(
        self,
        resolved: ResolvedEnrollment,
        fields: dict[str, Any],
        create: dict[str, Any] | None = None,
    ) -> None:
        """Apply record fields to the top-level envelope; create it from
        ``create`` when it does not exist."""
        replica = await self.resolver.find_replica(resolved)
        if replica is not None:
            update = {f"enrollmentData.{name}": value for name, value in fields.items()}
            update["updatedAt"] = SERVER_TIMESTAMP
            await self.store.update(replica.path, update)
        elif create is not None:
            await self.store.set(self.resolver.replica_candidates(resolved)[0], create)

    async def enroll(
        self,
        student_id: str,
        config: SystemConfig,
        subject_ids: list[str] | None = None,
        or_number: str | None = None,
        scholarship: str | None = None,
        external_student_id: str | None = None,
        student_type: str | None = None,
        level: str | None = None,
        semester: str | None = None,
    ) -> LifecycleOutcome:
        """Mark a submitted enrollment as enrolled.

        The cohort's formally assigned subjects replace ``subject_ids`` when
        an assignment exists. The grade sheet is patched to match them.

        Raises:
            NotFoundError: If no record exists for the student in the current AY,
                or the located record is of a different level.
            StoreError: If the primary write fails.
        """
        resolved = await self._resolve_requested(student_id, config, level, semester)
        record = resolved.record

        if resolved.is_top_level:
            resolved = replace(resolved, path=await self._ensure_subcollection_copy(resolved))
        primary = resolved.path
        key = resolved.key

        fallback = list(subject_ids) if subject_ids else record.selected_subjects
        assigned = await self.subjects.resolve_assigned_subjects(record.enrollment_info, fallback)

        fields: dict[str, Any] = {
            "enrollmentInfo.status": EnrollmentStatus.ENROLLED.value,
            "enrollmentInfo.enrollmentDate": format_iso(utc_now()),
            "enrollmentInfo.orNumber": or_number or "",
            "enrollmentInfo.scholarship": scholarship or "",
            "enrollmentInfo.studentType": student_type or StudentType.REGULAR.value,
        }
        if external_student_id:
            fields["enrollmentInfo.studentId"] = external_student_id

        await self.store.update(
            primary,
            {**fields, "selectedSubjects": assigned, "updatedAt": SERVER_TIMESTAMP},
        )

        outcome = LifecycleOutcome(
            student_id=student_id,
            path=primary,
            key=key,
            data={"subjects": assigned, "enrollmentDate": fields["enrollmentInfo.enrollmentDate"]},
        )

        if external_student_id:
            await self._secondary(
                outcome,
                "student profile",
                student_path(student_id),
                self.store.set(
                    student_path(student_id),
                    {"studentId": external_student_id, "updatedAt": SERVER_TIMESTAMP},
                    merge=True,
                ),
            )

        enrolled_info = record.enrollment_info.model_copy(
            update={"student_id": external_student_id or record.enrollment_info.student_id}
        )
        enrolled = record.model_copy(update={"enrollment_info": enrolled_info})
        await self._secondary(
            outcome,
            "grade sheet",
            key,
            self._sync_grades(student_id, key, assigned, enrolled, external_student_id),
        )

        mirror_create = {
            "userId": student_id,
            "ayCode": config.ay_code,
            "enrollmentData": strip_unset(enrolled.to_document()),
            "createdAt": SERVER_TIMESTAMP,
            "updatedAt": SERVER_TIMESTAMP,
        }
        if record.semester and is_semestered(resolved.data.get("enrollmentInfo") or {}):
            mirror_create["semester"] = record.semester
        mirror_info = mirror_create["enrollmentData"].setdefault("enrollmentInfo", {})
        for name, value in fields.items():
            mirror_info[name.split(".", 1)[1]] = value
        mirror_create["enrollmentData"]["selectedSubjects"] = assigned

        await self._secondary(
            outcome,
            "top-level mirror",
            student_id,
            self._mirror(resolved, fields, create=mirror_create),
        )

        logger.info(
            "Student enrolled: student=%s, key=%s, subjects=%d",
            student_id,
            key,
            len(assigned),
        )
        return outcome

    # ========== revoke ==========

    async def revoke(self, student_id: str, config: SystemConfig) -> LifecycleOutcome:
        """Return an enrolled record to pending.

        Deletes the grade sheet, sets status back to pending and removes the
        enrollmentDate field on both replicas.

        Raises:
            NotFoundError: If no record exists for the student in the current AY.
            StoreError: If the primary write fails.
        """
        resolved = await self.resolver.resolve_current(student_id, config)
        outcome = LifecycleOutcome(student_id=student_id, path=resolved.path, key=resolved.key)

        await self._secondary(
            outcome,
            "grade sheet",
            resolved.key,
            self.grade_sheets.delete(student_id, resolved.key),
        )

        fields = {
            "enrollmentInfo.status": EnrollmentStatus.PENDING.value,
            "enrollmentInfo.enrollmentDate": DELETE_FIELD,
        }
        prefix = resolved.field_prefix
        await self.store.update(
            resolved.path,
            {**{prefix + k: v for k, v in fields.items()}, "updatedAt": SERVER_TIMESTAMP},
        )

        await self._secondary(
            outcome,
            "replica",
            student_id,
            self._revoke_replica(resolved, fields),
        )

        logger.info("Enrollment revoked: student=%s, key=%s", student_id, resolved.key)
        return outcome

    async def _revoke_replica(self, resolved: ResolvedEnrollment, fields: dict[str, Any]) -> None:
        replica = await self.resolver.find_replica(resolved)
        if replica is None:
            return
        prefix = "" if resolved.is_top_level else "enrollmentData."
        await self.store.update(
            replica.path,
            {**{prefix + k: v for k, v in fields.items()}, "updatedAt": SERVER_TIMESTAMP},
        )

    # ========== delete ==========

    async def _delete_quietly(self, outcome: LifecycleOutcome, path: str) -> bool:
        try:
            await self.store.delete(path)
        except StoreError as e:
            logger.warning("Could not delete %s: %s", path, e)
            outcome.warnings.append(PartialConsistencyWarning("delete", path, e))
            return False
        return True

    async def delete(
        self,
        student_id: str,
        config: SystemConfig,
        level: str | None = None,
        semester: str | None = None,
    ) -> LifecycleOutcome:
        """Permanently remove an enrollment from both replicas.

        When no record resolves, the documents at the keys implied by
        ``level`` and ``semester`` are deleted instead, so deleting twice
        succeeds both times.
        """
        if level == Level.COLLEGE.value and not semester:
            semester = semester_from_config(config.semester)

        try:
            resolved = await self._resolve_requested(student_id, config, level, semester)
        except NotFoundError:
            resolved = None

        outcome = LifecycleOutcome(student_id=student_id)
        if resolved is None:
            ay_code = config.ay_code
            if level == Level.COLLEGE.value and semester:
                paths = [
                    enrollment_path(student_id, f"{ay_code}_{semester}"),
                    top_level_path(f"{student_id}_{ay_code}_{semester}"),
                ]
            else:
                paths = [
                    enrollment_path(student_id, ay_code),
                    top_level_path(f"{student_id}_{ay_code}"),
                ]
            for path in paths:
                await self._delete_quietly(outcome, path)
            logger.info("No enrollment resolved for %s; deleted fallback keys", student_id)
            return outcome

        outcome.path = resolved.path
        outcome.key = resolved.key

        paths = [resolved.path]
        try:
            replica = await self.resolver.find_replica(resolved)
        except StoreError as e:
            logger.warning("Could not locate replica of %s: %s", resolved.path, e)
            replica = None
        if replica is not None:
            paths.append(replica.path)
        for path in paths:
            await self._delete_quietly(outcome, path)

        section_id = resolved.record.enrollment_info.section_id
        if section_id:
            await self._secondary(
                outcome,
                "roster",
                section_path(section_id),
                self._remove_from_roster(student_id, section_id),
            )

        logger.info("Enrollment deleted: student=%s, paths=%s", student_id, paths)
        return outcome

    async def _remove_from_roster(self, student_id: str, section_id: str) -> None:
        try:
            await self.store.update(
                section_path(section_id),
                {"students": ArrayRemove([student_id]), "updatedAt": SERVER_TIMESTAMP},
            )
        except DocumentNotFoundError:
            logger.debug("Section %s no longer exists", section_id)
