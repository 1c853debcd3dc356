# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the enrollment key scheme."""

import pytest

from registrar.core.exceptions import ValidationError
from registrar.domains.enrollment.keys import (
    cohort_key,
    jhs_key_prefix,
    semester_from_config,
    semester_word,
    student_scoped_key,
    validate_ay_code,
)
from registrar.models.enrollment import (
    CollegeEnrollmentInfo,
    HighSchoolEnrollmentInfo,
    LegacyEnrollmentInfo,
)


class TestCohortKey:
    """Tests for cohort key derivation."""

    def test_college_key(self) -> None:
        info = CollegeEnrollmentInfo(course_code="BSIT", year_level=1, semester="first-sem")

        assert cohort_key("AY2526", info) == "AY2526_first_semester_BSIT_1"

    def test_college_second_semester(self) -> None:
        info = CollegeEnrollmentInfo(course_code="BSCS", year_level=3, semester="second-sem")

        assert cohort_key("AY2526", info) == "AY2526_second_semester_BSCS_3"

    def test_senior_high_key(self) -> None:
        info = HighSchoolEnrollmentInfo(
            department="SHS", strand="STEM", grade_level="11", semester="first-sem"
        )

        assert cohort_key("AY2526", info) == "AY2526_first_semester_STEM_11"

    def test_junior_high_key(self) -> None:
        info = HighSchoolEnrollmentInfo(department="JHS", grade_level=8)

        assert cohort_key("AY2526", info) == "AY2526_JHS_8"

    def test_incomplete_college_info_uses_bare_key(self) -> None:
        info = CollegeEnrollmentInfo(course_code="BSIT", semester="first-sem")

        assert cohort_key("AY2526", info) == "AY2526"

    def test_incomplete_senior_high_info_uses_bare_key(self) -> None:
        info = HighSchoolEnrollmentInfo(department="SHS", grade_level="11", semester="first-sem")

        assert cohort_key("AY2526", info) == "AY2526"

    def test_legacy_info_uses_bare_key(self) -> None:
        assert cohort_key("AY2526", LegacyEnrollmentInfo()) == "AY2526"

    def test_deterministic(self) -> None:
        info = CollegeEnrollmentInfo(course_code="BSIT", year_level=2, semester="second-sem")

        assert cohort_key("AY2526", info) == cohort_key("AY2526", info.model_copy())

    def test_distinct_cohorts_do_not_collide(self) -> None:
        infos = [
            CollegeEnrollmentInfo(course_code="BSIT", year_level=1, semester="first-sem"),
            CollegeEnrollmentInfo(course_code="BSIT", year_level=1, semester="second-sem"),
            CollegeEnrollmentInfo(course_code="BSIT", year_level=2, semester="first-sem"),
            CollegeEnrollmentInfo(course_code="BSCS", year_level=1, semester="first-sem"),
            HighSchoolEnrollmentInfo(
                department="SHS", strand="STEM", grade_level="11", semester="first-sem"
            ),
            HighSchoolEnrollmentInfo(
                department="SHS", strand="ABM", grade_level="11", semester="first-sem"
            ),
            HighSchoolEnrollmentInfo(
                department="SHS", strand="STEM", grade_level="12", semester="first-sem"
            ),
            HighSchoolEnrollmentInfo(department="JHS", grade_level="7"),
            HighSchoolEnrollmentInfo(department="JHS", grade_level="8"),
        ]
        keys = {cohort_key(ay, info) for ay in ("AY2526", "AY2627") for info in infos}

        assert len(keys) == 2 * len(infos)

    def test_invalid_ay_code_rejected(self) -> None:
        info = CollegeEnrollmentInfo(course_code="BSIT", year_level=1, semester="first-sem")

        with pytest.raises(ValidationError):
            cohort_key("2025-2026", info)


class TestStudentScopedKey:
    """Tests for the top-level document id."""

    def test_prefixes_student_id(self) -> None:
        info = CollegeEnrollmentInfo(course_code="BSIT", year_level=1, semester="first-sem")

        assert student_scoped_key("u1", "AY2526", info) == "u1_AY2526_first_semester_BSIT_1"

    def test_empty_student_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            student_scoped_key("", "AY2526", LegacyEnrollmentInfo())


class TestSemesterHelpers:
    """Tests for semester vocabulary conversions."""

    def test_semester_word(self) -> None:
        assert semester_word("first-sem") == "first_semester"
        assert semester_word("second-sem") == "second_semester"

    def test_unknown_semester_rejected(self) -> None:
        with pytest.raises(ValidationError):
            semester_word("summer")

    def test_semester_from_config(self) -> None:
        assert semester_from_config("1") == "first-sem"
        assert semester_from_config("2") == "second-sem"
        assert semester_from_config(None) is None
        assert semester_from_config("3") is None

    @pytest.mark.parametrize("ay_code", ["AY2526", "AY0001"])
    def test_valid_ay_codes(self, ay_code: str) -> None:
        assert validate_ay_code(ay_code) == ay_code

    @pytest.mark.parametrize("ay_code", ["", "AY25", "ay2526", "AY25261", "2526"])
    def test_invalid_ay_codes(self, ay_code: str) -> None:
        with pytest.raises(ValidationError):
            validate_ay_code(ay_code)

    def test_jhs_prefix(self) -> None:
        assert jhs_key_prefix("AY2526") == "AY2526_JHS_"
