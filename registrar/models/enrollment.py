# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment record models.

An EnrollmentRecord is one student's enrollment for one academic period.
Its enrollmentInfo is a tagged union discriminated on ``level``:

- CollegeEnrollmentInfo: course code/name, year level and semester
- HighSchoolEnrollmentInfo: grade level and department; SHS adds strand
  and semester, JHS has no semester
- LegacyEnrollmentInfo: records without a usable level, written before
  cohort-aware keys existed

The same record is stored twice: as the document itself under
``students/{studentId}/enrollment/{cohortKey}`` and wrapped in a
top-level envelope under ``enrollments/{studentScopedKey}``.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
)

from registrar.models.common import RegistrarModel


class Level(str, Enum):
    """Enrollment level."""

    COLLEGE = "college"
    HIGH_SCHOOL = "high-school"


class Department(str, Enum):
    """High-school department."""

    JHS = "JHS"
    SHS = "SHS"


class EnrollmentStatus(str, Enum):
    """Enrollment lifecycle status.

    A deleted record is removed from the store and has no status.
    """

    PENDING = "pending"
    ENROLLED = "enrolled"


class Semester(str, Enum):
    """Semester as stored on enrollment records."""

    FIRST = "first-sem"
    SECOND = "second-sem"


class StudentType(str, Enum):
    """Student load type."""

    REGULAR = "regular"
    IRREGULAR = "irregular"


class PersonalInfo(RegistrarModel):
    """Personal-info snapshot taken at submission."""

    first_name: str | None = None
    middle_name: str | None = None
    last_name: str | None = None
    name_extension: str | None = None
    email: str | None = None
    phone: str | None = None
    birth_month: str | None = None
    birth_day: str | None = None
    birth_year: str | None = None

    @property
    def full_name(self) -> str:
        """First, middle, last name and extension joined by spaces."""
        parts = [self.first_name, self.middle_name, self.last_name, self.name_extension]
        return " ".join(p.strip() for p in parts if p and p.strip())


class _EnrollmentInfoBase(RegistrarModel):
    school_year: str | None = None
    status: EnrollmentStatus = EnrollmentStatus.PENDING
    enrollment_date: Any = None
    or_number: str | None = None
    scholarship: str | None = None
    student_id: str | None = None
    section_id: str | None = None
    student_type: StudentType | None = None


class CollegeEnrollmentInfo(_EnrollmentInfoBase):
    """College enrollment: keyed by course code, year level and semester."""

    level: Literal["college"] = "college"
    course_id: str | None = None
    course_code: str | None = None
    course_name: str | None = None
    year_level: int | None = None
    semester: Semester | None = None


class HighSchoolEnrollmentInfo(_EnrollmentInfoBase):
    """High-school enrollment.

    JHS records carry no semester. SHS records carry strand and semester.
    """

    level: Literal["high-school"] = "high-school"
    grade_level: str | None = None
    grade_id: str | None = None
    department: Department | None = None
    strand: str | None = None
    semester: Semester | None = None

    @property
    def is_senior_high(self) -> bool:
        return self.department == Department.SHS.value


class LegacyEnrollmentInfo(_EnrollmentInfoBase):
    """Enrollment info without a recognised level."""

    level: str | None = None
    department: str | None = None
    semester: str | None = None


def _info_tag(value: Any) -> str:
    if isinstance(value, dict):
        level = value.get("level")
    else:
        level = getattr(value, "level", None)
    if level == Level.COLLEGE.value:
        return "college"
    if level == Level.HIGH_SCHOOL.value:
        return "high-school"
    return "legacy"


EnrollmentInfo = Annotated[
    Union[
        Annotated[CollegeEnrollmentInfo, Tag("college")],
        Annotated[HighSchoolEnrollmentInfo, Tag("high-school")],
        Annotated[LegacyEnrollmentInfo, Tag("legacy")],
    ],
    Discriminator(_info_tag),
]

_info_adapter: TypeAdapter[EnrollmentInfo] = TypeAdapter(EnrollmentInfo)


def parse_enrollment_info(data: dict[str, Any] | None) -> EnrollmentInfo:
    """Validate a stored enrollmentInfo map into its level variant."""
    return _info_adapter.validate_python(data or {})


class EnrollmentRecord(RegistrarModel):
    """One student's enrollment for one academic period.

    Attributes:
        user_id: Student (user) id owning the record.
        personal_info: Personal-info snapshot.
        enrollment_info: Level-specific enrollment details.
        selected_subjects: Subject ids chosen at submission or assigned at enrollment.
        documents: Uploaded document references, passed through untouched.
        submitted_at: Submission timestamp.
        updated_at: Last update timestamp.
    """

    user_id: str | None = None
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    enrollment_info: EnrollmentInfo = Field(default_factory=LegacyEnrollmentInfo)
    selected_subjects: list[str] = Field(default_factory=list)
    documents: Any = None
    submitted_at: Any = None
    updated_at: Any = None

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "EnrollmentRecord":
        """Build a record from either a subcollection document or a top-level envelope."""
        if isinstance(data.get("enrollmentData"), dict):
            envelope = data
            data = dict(data["enrollmentData"])
            data.setdefault("userId", envelope.get("userId"))
        return cls.model_validate(data)

    @property
    def level(self) -> str | None:
        return self.enrollment_info.level

    @property
    def school_year(self) -> str | None:
        return self.enrollment_info.school_year

    @property
    def semester(self) -> str | None:
        return self.enrollment_info.semester

    @property
    def status(self) -> str:
        return self.enrollment_info.status


class EnrollmentView(BaseModel):
    """A resolved enrollment as returned to callers.

    Attributes:
        id: Document id of the located replica.
        path: Document path of the located replica.
        record: The enrollment record.
    """

    id: str
    path: str
    record: dict[str, Any]


# ========== Request schemas ==========


class SubmitEnrollmentRequest(BaseModel):
    """Request body for submitting an enrollment."""

    personal_info: dict[str, Any] = Field(default_factory=dict, alias="personalInfo")
    enrollment_info: dict[str, Any] = Field(alias="enrollmentInfo")
    selected_subjects: list[str] = Field(default_factory=list, alias="selectedSubjects")
    documents: Any = None

    model_config = ConfigDict(populate_by_name=True)


class EnrollStudentRequest(BaseModel):
    """Request body for enrolling a pending student."""

    subject_ids: list[str] = Field(default_factory=list, alias="subjectIds")
    or_number: str | None = Field(default=None, alias="orNumber")
    scholarship: str | None = None
    external_student_id: str | None = Field(default=None, alias="studentId")
    student_type: StudentType | None = Field(default=None, alias="studentType")
    level: Level | None = None
    semester: Semester | None = None

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


class StudentBatchRequest(BaseModel):
    """Request body for resolving several students at once."""

    student_ids: list[str] = Field(alias="studentIds")

    model_config = ConfigDict(populate_by_name=True)
