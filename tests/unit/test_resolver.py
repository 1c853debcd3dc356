# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for tiered enrollment resolution."""

import pytest

from registrar.core.exceptions import NotFoundError, ValidationError
from registrar.domains.enrollment.resolver import (
    EnrollmentResolver,
    QueryTier,
    matches_request,
    ResolutionRequest,
)
from registrar.models.system_config import SystemConfig

COLLEGE_INFO = {
    "level": "college",
    "courseCode": "BSIT",
    "yearLevel": 1,
    "semester": "first-sem",
    "schoolYear": "AY2526",
    "status": "pending",
}

JHS_INFO = {
    "level": "high-school",
    "department": "JHS",
    "gradeLevel": "8",
    "schoolYear": "AY2526",
    "status": "pending",
}


def envelope(info: dict, student_id: str = "u1") -> dict:
    return {
        "userId": student_id,
        "ayCode": info["schoolYear"],
        "enrollmentData": {"userId": student_id, "enrollmentInfo": info},
    }


@pytest.fixture
def resolver(store):
    return EnrollmentResolver(store)


class TestTierIndependence:
    """The same logical record resolves under every stored key format."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path, top_level, tier",
        [
            ("enrollments/u1_AY2526_first-sem", True, "top-level-semester"),
            ("students/u1/enrollment/AY2526_first_semester_BSIT_1", False, "subcollection-semester"),
            ("students/u1/enrollment/AY2526_first-sem", False, "subcollection-semester"),
            ("enrollments/u1_AY2526", True, "top-level-legacy"),
            ("enrollments/some-generated-id", True, "query"),
        ],
    )
    async def test_college_record(self, store, resolver, path, top_level, tier):
        data = envelope(COLLEGE_INFO) if top_level else {"userId": "u1", "enrollmentInfo": COLLEGE_INFO}
        await store.set(path, data)

        resolved = await resolver.resolve("u1", "AY2526", "first-sem")

        assert resolved.path == path
        assert resolved.tier == tier
        assert resolved.record.level == "college"
        assert resolved.record.school_year == "AY2526"
        assert resolved.record.semester == "first-sem"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path, top_level",
        [
            ("enrollments/u1_AY2526", True),
            ("students/u1/enrollment/AY2526", False),
            ("students/u1/enrollment/AY2526_JHS_8", False),
            ("enrollments/u1_AY2526_JHS_8", True),
        ],
    )
    async def test_yearly_record(self, store, resolver, path, top_level):
        data = envelope(JHS_INFO) if top_level else {"userId": "u1", "enrollmentInfo": JHS_INFO}
        await store.set(path, data)

        resolved = await resolver.resolve("u1", "AY2526")

        assert resolved.path == path
        assert resolved.record.enrollment_info.grade_level == "8"

    @pytest.mark.asyncio
    async def test_legacy_top_level_college_document(self, store, resolver):
        """A record only under enrollments/{sid}_{ay} is still found."""
        await store.set(
            "enrollments/u1_AY2526",
            envelope({"level": "college", "semester": "first-sem", "schoolYear": "AY2526"}),
        )

        resolved = await resolver.resolve("u1", "AY2526", "first-sem")

        assert resolved.tier == "top-level-legacy"
        assert resolved.is_top_level
        assert resolved.field_prefix == "enrollmentData."


class TestMatching:
    """A located document only counts when its identity fields agree."""

    @pytest.mark.asyncio
    async def test_wrong_school_year_is_a_miss(self, store, resolver):
        await store.set("enrollments/u1_AY2526", envelope({**COLLEGE_INFO, "schoolYear": "AY2425"}))

        with pytest.raises(NotFoundError):
            await resolver.resolve("u1", "AY2526", "first-sem")

    @pytest.mark.asyncio
    async def test_wrong_semester_is_a_miss(self, store, resolver):
        await store.set(
            "students/u1/enrollment/AY2526_second_semester_BSIT_1",
            {"enrollmentInfo": {**COLLEGE_INFO, "semester": "second-sem"}},
        )

        with pytest.raises(NotFoundError):
            await resolver.resolve("u1", "AY2526", "first-sem")

    @pytest.mark.asyncio
    async def test_college_record_not_returned_without_semester(self, store, resolver):
        await store.set("enrollments/u1_AY2526", envelope(COLLEGE_INFO))

        with pytest.raises(NotFoundError):
            await resolver.resolve("u1", "AY2526")

    @pytest.mark.asyncio
    async def test_other_student_is_ignored(self, store, resolver):
        await store.set("enrollments/u2_AY2526", envelope(COLLEGE_INFO, student_id="u2"))

        with pytest.raises(NotFoundError):
            await resolver.resolve("u1", "AY2526", "first-sem")

    def test_matches_request_for_legacy_info(self):
        info = {"schoolYear": "AY2526"}

        assert matches_request(info, ResolutionRequest("u1", "AY2526"))
        assert not matches_request(info, ResolutionRequest("u1", "AY2526", "first-sem"))

    def test_senior_high_requires_semester(self):
        info = {
            "level": "high-school",
            "department": "SHS",
            "semester": "first-sem",
            "schoolYear": "AY2526",
        }

        assert matches_request(info, ResolutionRequest("u1", "AY2526", "first-sem"))
        assert not matches_request(info, ResolutionRequest("u1", "AY2526"))


class TestResolveValidation:
    """Tests for request validation."""

    @pytest.mark.asyncio
    async def test_invalid_ay(self, resolver):
        with pytest.raises(ValidationError):
            await resolver.resolve("u1", "2526")

    @pytest.mark.asyncio
    async def test_invalid_semester(self, resolver):
        with pytest.raises(ValidationError):
            await resolver.resolve("u1", "AY2526", "summer")

    @pytest.mark.asyncio
    async def test_empty_student(self, resolver):
        with pytest.raises(ValidationError):
            await resolver.resolve("", "AY2526")


class TestResolveCurrent:
    """Tests for resolution within the configured period."""

    @pytest.mark.asyncio
    async def test_falls_back_to_semesterless_lookup(self, store, resolver):
        await store.set("students/u1/enrollment/AY2526_JHS_8", {"enrollmentInfo": JHS_INFO})

        resolved = await resolver.resolve_current(
            "u1", SystemConfig(ay_code="AY2526", semester="1")
        )

        assert resolved.key == "AY2526_JHS_8"

    @pytest.mark.asyncio
    async def test_uses_configured_semester(self, store, resolver):
        second = {**COLLEGE_INFO, "semester": "second-sem"}
        await store.set("students/u1/enrollment/AY2526_first_semester_BSIT_1", {"enrollmentInfo": COLLEGE_INFO})
        await store.set("students/u1/enrollment/AY2526_second_semester_BSIT_1", {"enrollmentInfo": second})

        resolved = await resolver.resolve_current(
            "u1", SystemConfig(ay_code="AY2526", semester="2")
        )

        assert resolved.key == "AY2526_second_semester_BSIT_1"


class TestCustomTiers:
    """Tiers are pluggable strategy objects."""

    @pytest.mark.asyncio
    async def test_only_configured_tiers_are_tried(self, store):
        await store.set("students/u1/enrollment/AY2526_first_semester_BSIT_1", {"enrollmentInfo": COLLEGE_INFO})
        resolver = EnrollmentResolver(store, tiers=[QueryTier()])

        with pytest.raises(NotFoundError):
            await resolver.resolve("u1", "AY2526", "first-sem")


class TestReplicas:
    """Tests for locating the other replica of a record."""

    @pytest.mark.asyncio
    async def test_finds_top_level_replica_of_subcollection_record(self, store, resolver):
        await store.set("students/u1/enrollment/AY2526_first_semester_BSIT_1", {"enrollmentInfo": COLLEGE_INFO})
        await store.set("enrollments/u1_AY2526_first_semester_BSIT_1", envelope(COLLEGE_INFO))

        resolved = await resolver.resolve("u1", "AY2526", "first-sem")
        replica = await resolver.find_replica(resolved)

        assert replica is not None
        assert replica.path == "enrollments/u1_AY2526_first_semester_BSIT_1"

    @pytest.mark.asyncio
    async def test_finds_subcollection_replica_of_top_level_record(self, store, resolver):
        await store.set("enrollments/u1_AY2526", envelope(JHS_INFO))
        await store.set("students/u1/enrollment/AY2526_JHS_8", {"enrollmentInfo": JHS_INFO})

        resolved = await resolver.resolve("u1", "AY2526")
        replica = await resolver.find_replica(resolved)

        assert resolved.is_top_level
        assert replica.path == "students/u1/enrollment/AY2526_JHS_8"

    @pytest.mark.asyncio
    async def test_ignores_candidate_from_another_period(self, store, resolver):
        await store.set("students/u1/enrollment/AY2526_first_semester_BSIT_1", {"enrollmentInfo": COLLEGE_INFO})
        await store.set("enrollments/u1_AY2526", envelope({**COLLEGE_INFO, "semester": "second-sem"}))

        resolved = await resolver.resolve("u1", "AY2526", "first-sem")

        assert await resolver.find_replica(resolved) is None
