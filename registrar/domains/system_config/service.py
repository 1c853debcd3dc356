# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""System configuration accessor.

This module provides the SystemConfigService class for:
- Reading the active academic year, semester and enrollment windows
- Updating them with strict AY/semester validation
- Reading and updating the latest issued student id

The config document has accumulated several names for the active
academic year over time. The first present of currentAY, academicYear,
AYCode, activeAY and AY wins; failing that, any field whose name is
itself an AY code is used.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from registrar.core.config.settings import RegistrarSettings
from registrar.core.exceptions import NotFoundError, ValidationError
from registrar.infrastructure.store import (
    SERVER_TIMESTAMP,
    DocumentNotFoundError,
    DocumentStore,
    StoreError,
)
from registrar.models.enrollment import Semester
from registrar.models.system_config import AY_PATTERN, EnrollmentWindows, SystemConfig
from registrar.utils.datetime import format_iso

logger = logging.getLogger(__name__)

AY_FIELD_ALIASES = ("currentAY", "academicYear", "AYCode", "activeAY", "AY")
VALID_SEMESTERS = ("1", "2")
CONFIG_SEMESTERS = {
    "1": Semester.FIRST.value,
    "2": Semester.SECOND.value,
}

_AY_RE = re.compile(AY_PATTERN)


def is_valid_ay_code(value: Any) -> bool:
    """Check a value against the strict AY code pattern (e.g. AY2526)."""
    return isinstance(value, str) and bool(_AY_RE.match(value))


def semester_from_config(value: str | None) -> str | None:
    """Map the config semester ("1"/"2") to the enrollment form ("first-sem"/"second-sem")."""
    return CONFIG_SEMESTERS.get(value) if value else None


def _window_value(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, datetime):
        return format_iso(value)
    return str(value)


class SystemConfigService:
    """Reads and writes the singleton system configuration document.

    Attributes:
        store: Document store.
        settings: Registrar defaults and config document location.
    """

    def __init__(self, store: DocumentStore, settings: RegistrarSettings | None = None) -> None:
        """Initialize system config service.

        Args:
            store: Document store.
            settings: Registrar settings. Defaults are used when omitted.
        """
        self.store = store
        self.settings = settings or RegistrarSettings()

    @property
    def path(self) -> str:
        return self.settings.config_path

    def _defaults(self) -> SystemConfig:
        return SystemConfig(
            ay_code=self.settings.default_ay_code,
            semester=self.settings.default_semester,
        )

    def _extract_ay_code(self, data: dict[str, Any]) -> str:
        ay_code = next((data[f] for f in AY_FIELD_ALIASES if data.get(f)), None)
        if not ay_code:
            ay_code = next((key for key in data if is_valid_ay_code(key)), None)
        if not is_valid_ay_code(ay_code):
            return self.settings.default_ay_code
        return ay_code

    def _parse_windows(self, data: dict[str, Any]) -> EnrollmentWindows:
        try:
            return EnrollmentWindows.model_validate(data)
        except PydanticValidationError as e:
            logger.warning("Malformed enrollment windows in system config, coercing: %s", e)
        fields = EnrollmentWindows.model_fields
        return EnrollmentWindows.model_validate(
            {
                info.alias: _window_value(data.get(info.alias))
                for info in fields.values()
                if info.alias
            }
        )

    async def get(self) -> SystemConfig:
        """Read the current configuration snapshot.

        Falls back to the configured defaults when the document is absent,
        its AY value is malformed, or the store cannot be read.

        Returns:
            SystemConfig snapshot.
        """
        try:
            snapshot = await self.store.get(self.path)
        except StoreError as e:
            logger.warning("Could not read system config, using defaults: %s", e)
            return self._defaults()

        if not snapshot.exists:
            return self._defaults()

        data = snapshot.to_dict()
        semester = str(data.get("semester") or self.settings.default_semester)
        if semester not in VALID_SEMESTERS:
            semester = self.settings.default_semester

        return SystemConfig(
            ay_code=self._extract_ay_code(data),
            semester=semester,
            windows=self._parse_windows(data),
            latest_id=data.get("latestId") or None,
        )

    async def update(
        self,
        ay: str,
        semester: str | None = None,
        windows: EnrollmentWindows | None = None,
    ) -> SystemConfig:
        """Validate and merge-write the active academic year and semester.

        Args:
            ay: Academic-year code, e.g. AY2526.
            semester: "1" or "2"; left unchanged when None.
            windows: Enrollment windows; only the periods that are set are written.

        Returns:
            The configuration as read back after the write.

        Raises:
            ValidationError: If the AY code or semester is malformed.
            StoreError: If the write fails.
        """
        if not is_valid_ay_code(ay):
            raise ValidationError(
                "Invalid AY format. Expected format: AY2526", details={"ay": ay}
            )
        if semester is not None and semester not in VALID_SEMESTERS:
            raise ValidationError(
                "Invalid semester. Must be 1 or 2", details={"semester": semester}
            )

        update: dict[str, Any] = {"AY": ay, "updatedAt": SERVER_TIMESTAMP}
        if semester is not None:
            update["semester"] = semester
        if windows is not None:
            update.update(windows.model_dump(by_alias=True, exclude_none=True))

        await self.store.set(self.path, update, merge=True)

        logger.info("System config updated: ay=%s, semester=%s", ay, semester)
        return await self.get()

    async def get_latest_student_id(self) -> str:
        """Read the last issued external student id.

        Raises:
            NotFoundError: If the config document or its latestId field is missing.
        """
        snapshot = await self.store.get(self.path)
        if not snapshot.exists:
            raise NotFoundError("System configuration not found")

        latest_id = snapshot.to_dict().get("latestId")
        if not latest_id:
            raise NotFoundError("latestId field not found in system configuration")
        return str(latest_id)

    async def update_latest_student_id(self, latest_id: str) -> None:
        """Record the last issued external student id.

        Raises:
            ValidationError: If the id is empty.
            NotFoundError: If the config document does not exist.
        """
        if not latest_id:
            raise ValidationError("Latest student id must not be empty")

        try:
            await self.store.update(
                self.path, {"latestId": latest_id, "updatedAt": SERVER_TIMESTAMP}
            )
        except DocumentNotFoundError as e:
            raise NotFoundError("System configuration not found") from e

        logger.info("Latest student id updated: %s", latest_id)
