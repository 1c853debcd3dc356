# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Custom exceptions for the registrar core.

This module defines the exception hierarchy for enrollment operations:
- RegistrarError: Base exception for all registrar domain errors
- ValidationError: Malformed academic-year, semester or enrollment input
- AlreadyEnrolledError: A record already exists for the requested period
- NotFoundError: Resolution found no matching record
- PartialConsistencyWarning: A secondary replica write failed after the
  primary write committed

Store failures are reported by StoreError from registrar.infrastructure.store.
"""


class RegistrarError(Exception):
    """Base exception for all registrar domain errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
    """

    def __init__(self, message: str, details: dict | None = None):
        """Initialize registrar error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return the error message."""
        return self.message


class ValidationError(RegistrarError):
    """Raised when academic-year, semester or enrollment input is malformed."""

    pass


class AlreadyEnrolledError(ValidationError):
    """Raised when a submission targets a period the student already has a record for."""

    pass


class NotFoundError(RegistrarError):
    """Raised when no enrollment, section or config record matches the request."""

    pass


class PartialConsistencyWarning(UserWarning):
    """A secondary replica write failed after the primary write succeeded.

    This is recorded and logged, never raised across an operation boundary.

    Attributes:
        replica: Short name of the replica that failed (top-level mirror,
            roster, grade sheet, profile).
        path: Document path of the failed write.
        cause: The underlying exception.
    """

    def __init__(self, replica: str, path: str, cause: Exception):
        self.replica = replica
        self.path = path
        self.cause = cause
        super().__init__(f"{replica} update failed for {path}: {cause}")
