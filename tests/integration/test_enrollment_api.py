# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the registrar API endpoints."""

import asyncio

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from registrar.api.dependencies import get_document_store, get_enrollment_service
from registrar.api.routes import health
from registrar.api.v1 import router as v1_router
from registrar.core.config.settings import RegistrarSettings
from registrar.domains.enrollment.service import EnrollmentService
from registrar.infrastructure.store import MemoryDocumentStore

pytestmark = pytest.mark.integration


@pytest.fixture
def memory_store():
    """Store shared by every request of one test."""
    return MemoryDocumentStore()


@pytest.fixture
def app(memory_store):
    """Create test FastAPI app."""
    app = FastAPI()
    app.include_router(health.router)
    app.include_router(v1_router)
    app.dependency_overrides[get_document_store] = lambda: memory_store
    app.dependency_overrides[get_enrollment_service] = lambda: EnrollmentService(
        memory_store, RegistrarSettings(default_ay_code="AY2526", default_semester="1")
    )
    return app


@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def configured(client):
    response = client.put("/api/v1/system-config", json={"ay": "AY2526", "semester": "1"})
    assert response.status_code == 200
    return client


class TestRouting:
    """Tests for route registration."""

    def test_routes_registered(self, app):
        routes = [route.path for route in app.routes]

        assert "/health" in routes
        assert "/health/ready" in routes
        assert "/api/v1/enrollments" in routes
        assert "/api/v1/enrollments/batch" in routes
        assert "/api/v1/enrollments/{student_id}" in routes
        assert "/api/v1/enrollments/{student_id}/enroll" in routes
        assert "/api/v1/enrollments/{student_id}/revoke" in routes
        assert "/api/v1/enrollments/{student_id}/reconcile" in routes
        assert "/api/v1/sections/{section_id}/students/{student_id}" in routes
        assert "/api/v1/students/{student_id}" in routes
        assert "/api/v1/system-config" in routes
        assert "/api/v1/system-config/latest-student-id" in routes


class TestHealth:
    """Tests for health endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["ready"] is True
        assert body["checks"]["store"]["status"] == "healthy"


class TestSystemConfigAPI:
    """Tests for system config endpoints."""

    def test_update_and_get(self, configured):
        response = configured.get("/api/v1/system-config")

        assert response.status_code == 200
        assert response.json()["data"]["ayCode"] == "AY2526"

    def test_invalid_ay(self, client):
        response = client.put("/api/v1/system-config", json={"ay": "2025-2026"})

        assert response.status_code == 400

    def test_latest_student_id(self, configured):
        assert configured.get("/api/v1/system-config/latest-student-id").status_code == 404

        response = configured.put(
            "/api/v1/system-config/latest-student-id", json={"latestId": "025-011"}
        )
        assert response.status_code == 200

        response = configured.get("/api/v1/system-config/latest-student-id")
        assert response.json()["data"] == {"latestId": "025-011"}


class TestEnrollmentAPI:
    """Tests for the enrollment lifecycle over HTTP."""

    def test_submit_and_get(self, configured, college_payload):
        response = configured.post("/api/v1/enrollments/u1", json=college_payload)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["enrollmentId"] == "u1_AY2526_first_semester_BSIT_1"

        response = configured.get("/api/v1/enrollments/u1", params={"semester": "first-sem"})
        assert response.status_code == 200
        assert response.json()["data"]["id"] == "AY2526_first_semester_BSIT_1"

    def test_duplicate_submit_conflicts(self, configured, college_payload):
        configured.post("/api/v1/enrollments/u1", json=college_payload)

        response = configured.post("/api/v1/enrollments/u1", json=college_payload)

        assert response.status_code == 409

    def test_invalid_submission(self, configured, college_payload):
        college_payload["enrollmentInfo"]["level"] = "graduate"

        response = configured.post("/api/v1/enrollments/u1", json=college_payload)

        assert response.status_code == 400

    def test_unknown_student(self, configured):
        assert configured.get("/api/v1/enrollments/ghost").status_code == 404
        assert configured.get("/api/v1/students/ghost").status_code == 404

    def test_invalid_semester_param(self, configured):
        response = configured.get("/api/v1/enrollments/u1", params={"semester": "summer"})

        assert response.status_code == 422

    def test_enroll_and_list(self, configured, college_payload, jhs_payload):
        configured.post("/api/v1/enrollments/u1", json=college_payload)
        configured.post("/api/v1/enrollments/u2", json=jhs_payload)

        response = configured.post(
            "/api/v1/enrollments/u1/enroll",
            json={"subjectIds": ["SUBJ-A"], "orNumber": "OR1", "studentId": "025-010"},
        )
        assert response.status_code == 200
        assert response.json()["data"]["subjects"] == ["SUBJ-A"]

        response = configured.get("/api/v1/enrollments")
        assert response.json()["count"] == 2

        response = configured.get("/api/v1/enrollments", params={"enrolledOnly": "true"})
        body = response.json()
        assert body["count"] == 1
        assert body["data"][0]["enrollmentInfo"]["studentId"] == "025-010"

        response = configured.get("/api/v1/students/u1")
        assert response.json()["data"]["studentId"] == "025-010"

    def test_batch(self, configured, college_payload):
        configured.post("/api/v1/enrollments/u1", json=college_payload)

        response = configured.post(
            "/api/v1/enrollments/batch", json={"studentIds": ["u1", "ghost"]}
        )

        assert response.status_code == 200
        assert list(response.json()["data"]) == ["u1"]

    def test_revoke(self, configured, college_payload):
        configured.post("/api/v1/enrollments/u1", json=college_payload)
        configured.post("/api/v1/enrollments/u1/enroll", json={})

        response = configured.post("/api/v1/enrollments/u1/revoke")

        assert response.status_code == 200
        response = configured.get("/api/v1/enrollments/u1", params={"semester": "first-sem"})
        assert response.json()["data"]["record"]["enrollmentInfo"]["status"] == "pending"

    def test_delete_twice(self, configured, college_payload):
        configured.post("/api/v1/enrollments/u1", json=college_payload)

        first = configured.delete(
            "/api/v1/enrollments/u1", params={"level": "college", "semester": "first-sem"}
        )
        second = configured.delete(
            "/api/v1/enrollments/u1", params={"level": "college", "semester": "first-sem"}
        )

        assert first.status_code == 200
        assert second.status_code == 200
        assert configured.get("/api/v1/enrollments/u1").status_code == 404

    def test_subjects_and_grade_sheet(self, configured, college_payload):
        configured.post("/api/v1/enrollments/u1", json=college_payload)

        assert configured.post("/api/v1/enrollments/u1/grade-sheet/refresh").status_code == 404

        configured.post("/api/v1/enrollments/u1/enroll", json={})
        response = configured.post("/api/v1/enrollments/u1/grade-sheet/refresh")
        assert response.status_code == 200
        assert response.json()["data"]["studentLevel"] == "BSIT 1 - S1"

        response = configured.get("/api/v1/enrollments/u1/subjects")
        assert response.status_code == 200
        assert response.json()["data"]["enrollmentInfo"]["courseCode"] == "BSIT"

    def test_latest_high_school_missing(self, configured, jhs_payload):
        configured.post("/api/v1/enrollments/u2", json=jhs_payload)

        response = configured.get("/api/v1/enrollments/u2/latest-high-school")

        assert response.status_code == 404

    def test_reconcile(self, configured, college_payload):
        configured.post("/api/v1/enrollments/u1", json=college_payload)

        response = configured.post("/api/v1/enrollments/u1/reconcile")

        assert response.status_code == 200
        assert response.json()["data"]["mirroredTo"] == "enrollments/u1_AY2526_first_semester_BSIT_1"


class TestSectionAPI:
    """Tests for section assignment endpoints."""

    def test_assign_and_unassign(self, configured, memory_store, college_payload):
        asyncio.run(memory_store.set("sections/S1", {"sectionName": "BSIT 1-A", "students": []}))
        configured.post("/api/v1/enrollments/u1", json=college_payload)

        response = configured.put("/api/v1/sections/S1/students/u1")
        assert response.status_code == 200
        assert response.json()["data"] == {"sectionId": "S1"}
        roster = asyncio.run(memory_store.get("sections/S1")).to_dict()["students"]
        assert roster == ["u1"]

        assert configured.delete("/api/v1/sections/S1/students/u1").status_code == 200
        assert configured.delete("/api/v1/sections/S1/students/u1").status_code == 200
        roster = asyncio.run(memory_store.get("sections/S1")).to_dict()["students"]
        assert roster == []

    def test_missing_section(self, configured, college_payload):
        configured.post("/api/v1/enrollments/u1", json=college_payload)

        response = configured.put("/api/v1/sections/NOPE/students/u1")

        assert response.status_code == 404
