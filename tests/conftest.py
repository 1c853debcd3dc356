# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

from typing import Any

import pytest
import pytest_asyncio

from registrar.core.config.settings import RegistrarSettings
from registrar.domains.enrollment.service import EnrollmentService
from registrar.infrastructure.store import MemoryDocumentStore, StoreError


# =============================================================================
# Store Fixtures
# =============================================================================


class FlakyDocumentStore(MemoryDocumentStore):
    """Memory store whose writes fail for paths under the given prefixes."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_prefixes: tuple[str, ...] = ()

    def _check(self, path: str) -> None:
        if path.startswith(self.fail_prefixes):
            raise StoreError(f"Simulated write failure for {path}")

    async def set(self, path: str, data: dict[str, Any], merge: bool = False) -> None:
        self._check(path)
        await super().set(path, data, merge=merge)

    async def update(self, path: str, data: dict[str, Any]) -> None:
        self._check(path)
        await super().update(path, data)


@pytest.fixture
def registrar_settings() -> RegistrarSettings:
    """Registrar defaults independent of the environment."""
    return RegistrarSettings(default_ay_code="AY2526", default_semester="1")


@pytest.fixture
def store() -> MemoryDocumentStore:
    """Empty in-memory document store."""
    return MemoryDocumentStore()


@pytest.fixture
def flaky_store() -> FlakyDocumentStore:
    """In-memory store with switchable write failures."""
    return FlakyDocumentStore()


@pytest_asyncio.fixture
async def configured_store(store: MemoryDocumentStore) -> MemoryDocumentStore:
    """Store holding a config/system document for AY2526, first semester."""
    await store.set("config/system", {"AY": "AY2526", "semester": "1"})
    return store


@pytest.fixture
def service(configured_store: MemoryDocumentStore, registrar_settings: RegistrarSettings):
    """EnrollmentService over the configured memory store."""
    return EnrollmentService(configured_store, registrar_settings)


# =============================================================================
# Payload Fixtures
# =============================================================================


@pytest.fixture
def college_payload() -> dict[str, Any]:
    """First-semester BSIT 1 submission."""
    return {
        "personalInfo": {"firstName": "Ana", "middleName": "Reyes", "lastName": "Cruz"},
        "enrollmentInfo": {
            "level": "college",
            "courseCode": "BSIT",
            "courseName": "BS Information Technology",
            "yearLevel": 1,
            "semester": "first-sem",
            "schoolYear": "AY2526",
            "status": "pending",
        },
        "selectedSubjects": ["SUBJ-A", "SUBJ-B"],
    }


@pytest.fixture
def jhs_payload() -> dict[str, Any]:
    """Grade 8 junior high submission."""
    return {
        "personalInfo": {"firstName": "Ben", "lastName": "Santos"},
        "enrollmentInfo": {
            "level": "high-school",
            "department": "JHS",
            "gradeLevel": "8",
            "schoolYear": "AY2526",
        },
        "selectedSubjects": ["MATH8"],
    }


@pytest.fixture
def shs_payload() -> dict[str, Any]:
    """Grade 11 STEM first-semester submission."""
    return {
        "personalInfo": {"firstName": "Cara", "lastName": "Lim"},
        "enrollmentInfo": {
            "level": "high-school",
            "department": "SHS",
            "strand": "STEM",
            "gradeLevel": "11",
            "semester": "first-sem",
            "schoolYear": "AY2526",
        },
        "selectedSubjects": ["GENMATH"],
    }


@pytest_asyncio.fixture
async def bsit_assignment(configured_store: MemoryDocumentStore) -> list[str]:
    """Subject assignment for BSIT 1 first semester bound to two subjects."""
    await configured_store.set(
        "subject-assignments/A1",
        {
            "level": "college",
            "courseCode": "BSIT",
            "yearLevel": 1,
            "semester": "first-sem",
            "subjectSetId": "SET1",
        },
    )
    await configured_store.set("subject-sets/SET1", {"subjects": ["MATH101", "ENG101"]})
    await configured_store.set("subjects/MATH101", {"name": "Mathematics", "code": "MATH101"})
    await configured_store.set("subjects/ENG101", {"name": "English", "code": "ENG101"})
    return ["MATH101", "ENG101"]


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an API-level test")
