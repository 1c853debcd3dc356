# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints:
- The process-wide document store
- The EnrollmentService bound to it
- Conversion of failed operation results into HTTP errors

Example:
    @router.get("/{student_id}")
    async def get_enrollment(
        student_id: str,
        service: EnrollmentService = Depends(get_enrollment_service),
    ):
        ...
"""

import logging
from typing import Any

from fastapi import Depends, HTTPException, status

from registrar.core.config import get_settings
from registrar.domains.enrollment.service import EnrollmentService
from registrar.infrastructure.store import DocumentStore, StoreError, get_store
from registrar.models.common import OperationResult

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR_TYPE = {
    "ValidationError": status.HTTP_400_BAD_REQUEST,
    "AlreadyEnrolledError": status.HTTP_409_CONFLICT,
    "NotFoundError": status.HTTP_404_NOT_FOUND,
}


def get_document_store() -> DocumentStore:
    """Get the process-wide document store.

    Raises:
        HTTPException: 503 if the store has not been initialized.
    """
    try:
        return get_store()
    except StoreError as e:
        logger.error("Document store unavailable: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Document store unavailable",
        )


def get_enrollment_service(
    store: DocumentStore = Depends(get_document_store),
) -> EnrollmentService:
    """Get an EnrollmentService bound to the document store."""
    return EnrollmentService(store, get_settings().registrar)


def unwrap(result: OperationResult) -> dict[str, Any]:
    """Return the response body of a result, or raise the matching HTTP error.

    ValidationError maps to 400, AlreadyEnrolledError to 409, NotFoundError
    to 404 and every other failure to 500.

    Raises:
        HTTPException: If the operation failed.
    """
    if not result.success:
        raise HTTPException(
            status_code=_STATUS_BY_ERROR_TYPE.get(
                result.error_type or "", status.HTTP_500_INTERNAL_SERVER_ERROR
            ),
            detail=result.error,
        )
    return result.model_dump(exclude={"error", "error_type"})
