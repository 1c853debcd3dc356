# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the system config service."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from registrar.core.exceptions import NotFoundError, ValidationError
from registrar.domains.system_config.service import (
    SystemConfigService,
    is_valid_ay_code,
    semester_from_config,
)
from registrar.infrastructure.store import StoreError
from registrar.models.system_config import EnrollmentWindows


@pytest.fixture
def config_service(store, registrar_settings):
    """System config service over an empty memory store."""
    return SystemConfigService(store, registrar_settings)


class TestSystemConfigGet:
    """Tests for reading the config snapshot."""

    @pytest.mark.asyncio
    async def test_defaults_when_document_missing(self, config_service):
        config = await config_service.get()

        assert config.ay_code == "AY2526"
        assert config.semester == "1"
        assert config.latest_id is None

    @pytest.mark.asyncio
    async def test_reads_stored_values(self, store, config_service):
        await store.set(
            "config/system",
            {
                "AY": "AY2627",
                "semester": "2",
                "latestId": "026-001",
                "enrollmentStartPeriodHS": "2026-05-01",
            },
        )

        config = await config_service.get()

        assert config.ay_code == "AY2627"
        assert config.semester == "2"
        assert config.latest_id == "026-001"
        assert config.windows.enrollment_start_period_hs == "2026-05-01"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["currentAY", "academicYear", "AYCode", "activeAY"])
    async def test_alternate_ay_field_names(self, store, config_service, field):
        await store.set("config/system", {field: "AY2728"})

        config = await config_service.get()

        assert config.ay_code == "AY2728"

    @pytest.mark.asyncio
    async def test_first_alias_wins(self, store, config_service):
        await store.set("config/system", {"AY": "AY2425", "currentAY": "AY2526"})

        config = await config_service.get()

        assert config.ay_code == "AY2526"

    @pytest.mark.asyncio
    async def test_malformed_ay_falls_back_to_default(self, store, config_service):
        await store.set("config/system", {"AY": "2025-2026", "semester": "2"})

        config = await config_service.get()

        assert config.ay_code == "AY2526"
        assert config.semester == "2"

    @pytest.mark.asyncio
    async def test_unknown_semester_falls_back_to_default(self, store, config_service):
        await store.set("config/system", {"AY": "AY2526", "semester": "summer"})

        config = await config_service.get()

        assert config.semester == "1"

    @pytest.mark.asyncio
    async def test_store_failure_falls_back_to_defaults(self, registrar_settings):
        store = AsyncMock()
        store.get.side_effect = StoreError("unavailable")

        config = await SystemConfigService(store, registrar_settings).get()

        assert config.ay_code == "AY2526"

    @pytest.mark.asyncio
    async def test_numeric_window_is_coerced(self, store, config_service):
        await store.set(
            "config/system",
            {
                "AY": "AY2627",
                "semester": "2",
                "enrollmentStartPeriodHS": 20250601,
                "enrollmentEndPeriodHS": "2025-06-30",
            },
        )

        config = await config_service.get()

        assert config.ay_code == "AY2627"
        assert config.semester == "2"
        assert config.windows.enrollment_start_period_hs == "20250601"
        assert config.windows.enrollment_end_period_hs == "2025-06-30"
        assert config.windows.enrollment_start_period_college is None

    @pytest.mark.asyncio
    async def test_timestamp_window_is_formatted(self, store, config_service):
        opens = datetime(2025, 6, 1, tzinfo=timezone.utc)
        await store.set("config/system", {"AY": "AY2526", "enrollmentStartPeriodCollege": opens})

        config = await config_service.get()

        assert config.windows.enrollment_start_period_college == "2025-06-01T00:00:00+00:00"


class TestConfigSemester:
    """Tests for mapping the config semester to the enrollment form."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("1", "first-sem"), ("2", "second-sem"), (None, None), ("", None), ("3", None)],
    )
    def test_semester_from_config(self, value, expected):
        assert semester_from_config(value) == expected


class TestSystemConfigUpdate:
    """Tests for updating the config."""

    @pytest.mark.asyncio
    async def test_update_writes_and_reads_back(self, store, config_service):
        config = await config_service.update(
            "AY2627",
            "2",
            EnrollmentWindows(enrollment_end_period_college="2026-06-30"),
        )

        assert config.ay_code == "AY2627"
        assert config.semester == "2"
        stored = (await store.get("config/system")).to_dict()
        assert stored["AY"] == "AY2627"
        assert stored["enrollmentEndPeriodCollege"] == "2026-06-30"
        assert "enrollmentStartPeriodHS" not in stored

    @pytest.mark.asyncio
    async def test_update_keeps_other_fields(self, store, config_service):
        await store.set("config/system", {"AY": "AY2526", "semester": "1", "latestId": "025-100"})

        await config_service.update("AY2627")

        stored = (await store.get("config/system")).to_dict()
        assert stored["latestId"] == "025-100"
        assert stored["semester"] == "1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ay", ["2526", "AY25", "AY2526X", ""])
    async def test_invalid_ay_rejected(self, store, config_service, ay):
        with pytest.raises(ValidationError):
            await config_service.update(ay, "1")

        assert not (await store.get("config/system")).exists

    @pytest.mark.asyncio
    async def test_invalid_semester_rejected(self, config_service):
        with pytest.raises(ValidationError):
            await config_service.update("AY2526", "3")


class TestLatestStudentId:
    """Tests for the latest issued student id."""

    @pytest.mark.asyncio
    async def test_missing_document(self, config_service):
        with pytest.raises(NotFoundError):
            await config_service.get_latest_student_id()

    @pytest.mark.asyncio
    async def test_missing_field(self, store, config_service):
        await store.set("config/system", {"AY": "AY2526"})

        with pytest.raises(NotFoundError):
            await config_service.get_latest_student_id()

    @pytest.mark.asyncio
    async def test_update_then_read(self, store, config_service):
        await store.set("config/system", {"AY": "AY2526"})

        await config_service.update_latest_student_id("025-010")

        assert await config_service.get_latest_student_id() == "025-010"

    @pytest.mark.asyncio
    async def test_update_requires_document(self, config_service):
        with pytest.raises(NotFoundError):
            await config_service.update_latest_student_id("025-010")

    @pytest.mark.asyncio
    async def test_update_rejects_empty(self, store, config_service):
        await store.set("config/system", {"AY": "AY2526"})

        with pytest.raises(ValidationError):
            await config_service.update_latest_student_id("")


def test_is_valid_ay_code():
    assert is_valid_ay_code("AY2526")
    assert not is_valid_ay_code(None)
    assert not is_valid_ay_code(2526)
    assert not is_valid_ay_code("AY-2526")
