# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Health check endpoints.

This module provides health and readiness endpoints for the API.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from registrar import __version__
from registrar.api.dependencies import get_document_store
from registrar.core.config import get_settings
from registrar.infrastructure.store import DocumentStore, StoreError

logger = logging.getLogger(__name__)

router = APIRouter()

# Track server start time for uptime calculation
_server_start_time = time.time()


class ComponentHealth(BaseModel):
    """Individual component health status."""

    status: str = Field(description="Component status")
    latency_ms: float | None = Field(None, description="Response latency in ms")
    message: str | None = Field(None, description="Additional status message")


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str = Field(description="Overall health status")
    timestamp: datetime = Field(description="Current server timestamp")
    version: str = Field(description="API version")
    environment: str = Field(description="Deployment environment")
    uptime_seconds: int = Field(description="Server uptime in seconds")


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    ready: bool = Field(description="Whether the service is ready")
    checks: dict[str, Any] = Field(description="Individual check results")


async def check_store(store: DocumentStore) -> ComponentHealth:
    """Check document store reachability."""
    start = time.time()
    try:
        reachable = await store.ping()
    except StoreError as e:
        logger.error("Document store health check failed: %s", e)
        return ComponentHealth(status="unhealthy", message=str(e))

    latency = (time.time() - start) * 1000
    if not reachable:
        return ComponentHealth(status="unhealthy", latency_ms=round(latency, 2))
    return ComponentHealth(status="healthy", latency_ms=round(latency, 2))


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check if the API process is alive.

    Returns:
        HealthResponse with version and uptime.
    """
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        environment=settings.environment,
        uptime_seconds=int(time.time() - _server_start_time),
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(
    store: DocumentStore = Depends(get_document_store),
) -> ReadinessResponse:
    """Check if the API is ready to accept traffic.

    Returns:
        ReadinessResponse with individual check results.
    """
    store_health = await check_store(store)
    checks = {
        "store": {"status": store_health.status, "latency_ms": store_health.latency_ms},
    }
    return ReadinessResponse(ready=store_health.status == "healthy", checks=checks)
