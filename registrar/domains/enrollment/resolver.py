# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment record resolution.

Enrollment documents have been written under several key formats over
the product's life, so a student's record for a period may live under
any of them. The resolver probes the known locations in a fixed order,
cheap direct lookups first and the collection-wide query last:

1. enrollments/{studentId}_{ay}_{semester}        (semester requested)
2. scan of students/{studentId}/enrollment         (semester requested)
3. enrollments/{studentId}_{ay}                   (legacy)
4. students/{studentId}/enrollment/{ay}, then any {ay}_JHS_* document
                                                   (no semester requested)
5. query enrollments where userId and ayCode match

Each tier is a strategy object returning a match or None. A located
document only counts as a match when its own schoolYear, semester and
level agree with the request.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from registrar.core.exceptions import NotFoundError, ValidationError
from registrar.domains.enrollment.keys import (
    SEMESTER_WORDS,
    cohort_key,
    jhs_key_prefix,
    semester_from_config,
    validate_ay_code,
)
from registrar.domains.paths import (
    TOP_LEVEL_COLLECTION,
    enrollment_collection,
    enrollment_path,
    top_level_path,
)
from registrar.infrastructure.store import DocumentSnapshot, DocumentStore
from registrar.models.enrollment import Department, EnrollmentRecord, Level
from registrar.models.system_config import SystemConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionRequest:
    """Identity of the enrollment being looked up."""

    student_id: str
    ay_code: str
    semester: str | None = None


@dataclass
class ResolvedEnrollment:
    """A located enrollment record.

    Attributes:
        student_id: Student the record belongs to.
        ay_code: Academic year the lookup was made for.
        record: Parsed enrollment record.
        path: Path of the document it was read from.
        tier: Name of the tier that located it.
        data: Raw stored record fields (the enrollmentData of a top-level
            envelope, or the subcollection document itself).
    """

    student_id: str
    ay_code: str
    record: EnrollmentRecord
    path: str
    tier: str
    data: dict[str, Any]

    @property
    def doc_id(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def is_top_level(self) -> bool:
        return self.path.startswith(f"{TOP_LEVEL_COLLECTION}/")

    @property
    def key(self) -> str:
        """Cohort key of the record: its subcollection document id, or derived from its info."""
        if not self.is_top_level:
            return self.doc_id
        return cohort_key(self.ay_code, self.record.enrollment_info)

    @property
    def field_prefix(self) -> str:
        """Prefix for dotted field paths into the record on the located document."""
        return "enrollmentData." if self.is_top_level else ""


# ========== Matching rules ==========


def _info(data: dict[str, Any]) -> dict[str, Any]:
    return data.get("enrollmentInfo") or {}


def record_data(snapshot: DocumentSnapshot) -> dict[str, Any] | None:
    """Record fields of a located document, unwrapping top-level envelopes."""
    if not snapshot.exists:
        return None
    data = snapshot.to_dict()
    if snapshot.path.startswith(f"{TOP_LEVEL_COLLECTION}/"):
        wrapped = data.get("enrollmentData")
        return wrapped if isinstance(wrapped, dict) else None
    return data


def is_semestered(info: dict[str, Any]) -> bool:
    """College or SHS records: the ones keyed per semester."""
    level = info.get("level")
    return level == Level.COLLEGE.value or (
        level == Level.HIGH_SCHOOL.value and info.get("department") == Department.SHS.value
    )


def matches_semestered(info: dict[str, Any], ay_code: str, semester: str) -> bool:
    return (
        is_semestered(info)
        and info.get("schoolYear") == ay_code
        and info.get("semester") == semester
    )


def matches_yearly(info: dict[str, Any], ay_code: str) -> bool:
    """JHS or legacy record for a whole academic year."""
    return (
        not info.get("semester")
        and info.get("department") != Department.SHS.value
        and info.get("level") != Level.COLLEGE.value
        and info.get("schoolYear") == ay_code
    )


def matches_request(info: dict[str, Any], request: ResolutionRequest) -> bool:
    """Branch on the record's own level to decide if it satisfies the request."""
    if request.semester:
        return matches_semestered(info, request.ay_code, request.semester)
    return matches_yearly(info, request.ay_code)


# ========== Tiers ==========


class ResolutionTier(ABC):
    """One candidate lookup in the resolution chain."""

    name: str = "tier"

    @abstractmethod
    async def attempt(
        self, store: DocumentStore, request: ResolutionRequest
    ) -> ResolvedEnrollment | None:
        """Return the matching record, or None on a miss."""

    def _accept(
        self,
        snapshot: DocumentSnapshot,
        data: dict[str, Any],
        request: ResolutionRequest,
    ) -> ResolvedEnrollment | None:
        try:
            record = EnrollmentRecord.from_document(data)
        except PydanticValidationError as e:
            logger.warning("Skipping unreadable enrollment %s: %s", snapshot.path, e)
            return None
        return ResolvedEnrollment(
            student_id=request.student_id,
            ay_code=request.ay_code,
            record=record,
            path=snapshot.path,
            tier=self.name,
            data=data,
        )

    def _first_match(
        self,
        snapshots: list[DocumentSnapshot],
        request: ResolutionRequest,
    ) -> ResolvedEnrollment | None:
        for snapshot in snapshots:
            data = record_data(snapshot)
            if data is not None and matches_request(_info(data), request):
                resolved = self._accept(snapshot, data, request)
                if resolved is not None:
                    return resolved
        return None


class SemesterTopLevelTier(ResolutionTier):
    """Direct lookup of enrollments/{studentId}_{ay}_{semester}; college only."""

    name = "top-level-semester"

    async def attempt(self, store, request):
        if not request.semester:
            return None
        key = f"{request.student_id}_{request.ay_code}_{request.semester}"
        snapshot = await store.get(top_level_path(key))
        data = record_data(snapshot)
        if data is None:
            return None
        info = _info(data)
        if (
            info.get("level") == Level.COLLEGE.value
            and info.get("schoolYear") == request.ay_code
            and info.get("semester") == request.semester
        ):
            return self._accept(snapshot, data, request)
        return None


class SubcollectionSemesterTier(ResolutionTier):
    """Scan of the student's own enrollment subcollection for a college/SHS record."""

    name = "subcollection-semester"

    async def attempt(self, store, request):
        if not request.semester:
            return None
        snapshots = await store.list_documents(enrollment_collection(request.student_id))
        return self._first_match(snapshots, request)


class LegacyTopLevelTier(ResolutionTier):
    """Direct lookup of the legacy enrollments/{studentId}_{ay} key."""

    name = "top-level-legacy"

    async def attempt(self, store, request):
        snapshot = await store.get(top_level_path(f"{request.student_id}_{request.ay_code}"))
        return self._first_match([snapshot], request)


class SubcollectionYearTier(ResolutionTier):
    """Legacy students/{studentId}/enrollment/{ay}, then the {ay}_JHS_ prefix."""

    name = "subcollection-year"

    async def attempt(self, store, request):
        if request.semester:
            return None

        snapshot = await store.get(enrollment_path(request.student_id, request.ay_code))
        resolved = self._first_match([snapshot], request)
        if resolved is not None:
            return resolved

        prefix = jhs_key_prefix(request.ay_code)
        snapshots = await store.list_documents(enrollment_collection(request.student_id))
        return self._first_match([s for s in snapshots if s.id.startswith(prefix)], request)


class QueryTier(ResolutionTier):
    """Collection-wide query by userId and ayCode."""

    name = "query"

    async def attempt(self, store, request):
        snapshots = await store.query(
            TOP_LEVEL_COLLECTION,
            [("userId", request.student_id), ("ayCode", request.ay_code)],
        )
        return self._first_match(snapshots, request)


DEFAULT_TIERS: tuple[type[ResolutionTier], ...] = (
    SemesterTopLevelTier,
    SubcollectionSemesterTier,
    LegacyTopLevelTier,
    SubcollectionYearTier,
    QueryTier,
)


class EnrollmentResolver:
    """Resolves a student's canonical enrollment record for a period.

    Attributes:
        store: Document store.
        tiers: Lookup strategies tried in order.
    """

    def __init__(
        self,
        store: DocumentStore,
        tiers: list[ResolutionTier] | None = None,
    ) -> None:
        self.store = store
        self.tiers = tiers if tiers is not None else [tier() for tier in DEFAULT_TIERS]

    async def resolve(
        self,
        student_id: str,
        ay_code: str,
        semester: str | None = None,
    ) -> ResolvedEnrollment:
        """Locate the enrollment for (student, AY, semester).

        Args:
            student_id: Student (user) id.
            ay_code: Academic-year code.
            semester: "first-sem" or "second-sem" for college/SHS; None for
                JHS and legacy records.

        Returns:
            The located record.

        Raises:
            ValidationError: If the AY code or semester is malformed.
            NotFoundError: If no tier yields a match.
        """
        if not student_id:
            raise ValidationError("Student id must not be empty")
        validate_ay_code(ay_code)
        if semester is not None and semester not in SEMESTER_WORDS:
            raise ValidationError(
                f"Invalid semester: {semester!r}", details={"semester": semester}
            )

        request = ResolutionRequest(student_id=student_id, ay_code=ay_code, semester=semester)
        for tier in self.tiers:
            resolved = await tier.attempt(self.store, request)
            if resolved is not None:
                logger.debug(
                    "Resolved enrollment: student=%s, ay=%s, semester=%s, tier=%s, path=%s",
                    student_id,
                    ay_code,
                    semester,
                    resolved.tier,
                    resolved.path,
                )
                return resolved

        raise NotFoundError(
            "No enrollment found for this user",
            details={"student_id": student_id, "ay_code": ay_code, "semester": semester},
        )

    async def resolve_current(
        self,
        student_id: str,
        config: SystemConfig,
        semester: str | None = None,
    ) -> ResolvedEnrollment:
        """Resolve within the configured academic year.

        Tries the given semester (or the configured one) first, then a
        semester-less lookup so JHS and legacy records are still found.

        Raises:
            NotFoundError: If neither lookup matches.
        """
        semester = semester or semester_from_config(config.semester)
        if semester:
            try:
                return await self.resolve(student_id, config.ay_code, semester)
            except NotFoundError:
                pass
        return await self.resolve(student_id, config.ay_code)

    # ========== Replicas ==========

    def replica_candidates(self, resolved: ResolvedEnrollment) -> list[str]:
        """Plausible paths of the other replica of a located record, most specific first."""
        sid = resolved.student_id
        ay_code = resolved.ay_code
        semester = resolved.record.semester
        if resolved.is_top_level:
            keys = [resolved.key, f"{ay_code}_{semester}" if semester else None, ay_code]
            paths = [enrollment_path(sid, key) for key in keys if key]
        else:
            keys = [
                f"{sid}_{resolved.key}",
                f"{sid}_{ay_code}_{semester}" if semester else None,
                f"{sid}_{ay_code}",
            ]
            paths = [top_level_path(key) for key in keys if key]
        return list(dict.fromkeys(paths))

    async def find_replica(self, resolved: ResolvedEnrollment) -> DocumentSnapshot | None:
        """Locate the other replica of a record: the top-level envelope of a
        subcollection document, or the subcollection document of an envelope.

        Only a document holding the same period (schoolYear and semester)
        counts, so a legacy key shared with another record is never picked.

        Returns:
            Snapshot of the replica, or None when no candidate exists.
        """
        own = _info(resolved.data)
        for path in self.replica_candidates(resolved):
            snapshot = await self.store.get(path)
            data = record_data(snapshot)
            if data is None:
                continue
            other = _info(data)
            if other.get("schoolYear") == own.get("schoolYear") and (
                other.get("semester") or None
            ) == (own.get("semester") or None):
                return snapshot
        return None
