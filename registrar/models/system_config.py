# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""System configuration models.

The config/system document is a singleton holding the active academic
year, the active semester ("1" or "2") and the enrollment windows for
high school and college.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

AY_PATTERN = r"^AY\d{4}$"


class EnrollmentWindows(BaseModel):
    """Enrollment open/close periods per level.

    Values are passed through as stored (ISO date strings).
    """

    model_config = ConfigDict(populate_by_name=True)

    enrollment_start_period_hs: str | None = Field(
        default=None, alias="enrollmentStartPeriodHS"
    )
    enrollment_end_period_hs: str | None = Field(default=None, alias="enrollmentEndPeriodHS")
    enrollment_start_period_college: str | None = Field(
        default=None, alias="enrollmentStartPeriodCollege"
    )
    enrollment_end_period_college: str | None = Field(
        default=None, alias="enrollmentEndPeriodCollege"
    )


class SystemConfig(BaseModel):
    """Snapshot of the system configuration.

    A snapshot is read once per operation and passed explicitly to the
    resolver and lifecycle components. Concurrent config changes are not
    observed by an operation already in flight.

    Attributes:
        ay_code: Active academic-year code, e.g. AY2526.
        semester: Active semester, "1" or "2".
        windows: Enrollment windows.
        latest_id: Last issued external student id, if any.
    """

    model_config = ConfigDict(populate_by_name=True)

    ay_code: str = Field(alias="ayCode", pattern=AY_PATTERN)
    semester: Literal["1", "2"] = "1"
    windows: EnrollmentWindows = Field(default_factory=EnrollmentWindows)
    latest_id: str | None = Field(default=None, alias="latestId")


class UpdateSystemConfigRequest(BaseModel):
    """Request body for updating the system configuration.

    Validation of the AY code and semester happens in the service so
    that malformed values are reported as a failed operation result.
    """

    model_config = ConfigDict(populate_by_name=True)

    ay: str
    semester: str | None = None
    windows: EnrollmentWindows | None = None


class LatestStudentIdRequest(BaseModel):
    """Request body for updating the latest issued student id."""

    model_config = ConfigDict(populate_by_name=True)

    latest_id: str = Field(alias="latestId", min_length=1)
