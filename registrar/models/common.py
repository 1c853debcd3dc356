# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared model bases and result envelopes.

Stored documents use camelCase field names while Python code uses
snake_case. RegistrarModel bridges the two with an alias generator and
keeps unknown stored fields so that round-tripping a document never
drops data this service does not model.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")

INTERNAL_ERROR = "InternalError"


class RegistrarModel(BaseModel):
    """Base for stored document shapes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
        coerce_numbers_to_str=True,
        extra="allow",
    )

    def to_document(self) -> dict[str, Any]:
        """Dump to the stored (camelCase) shape with unset optionals removed."""
        return self.model_dump(by_alias=True, exclude_none=True)


class OperationResult(BaseModel, Generic[T]):
    """Outcome of a public registrar operation.

    Public operations never raise; failures are reported here instead.

    Attributes:
        success: Whether the primary read or write succeeded.
        data: Operation payload on success.
        error: Human-readable failure description.
        error_type: Registrar exception class name of the failure, or InternalError.
        warnings: Secondary replica failures that did not fail the operation.
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_type: str | None = None
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def ok(cls, data: T | None = None, warnings: list[str] | None = None) -> "OperationResult[T]":
        """Build a successful result."""
        return cls(success=True, data=data, warnings=warnings or [])

    @classmethod
    def fail(cls, error: Exception) -> "OperationResult[T]":
        """Build a failed result from an exception.

        Registrar exceptions keep their class name as the error type.
        Anything else, such as a pydantic ValidationError, is reported as
        ``InternalError``.
        """
        error_class = type(error)
        if error_class.__module__.split(".")[0] == "registrar":
            error_type = error_class.__name__
        else:
            error_type = INTERNAL_ERROR
        return cls(success=False, error=str(error), error_type=error_type)
