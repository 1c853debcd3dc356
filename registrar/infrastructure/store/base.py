# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Document store interface used by the registrar core.

The registrar data lives in a schemaless document store addressed by
slash-separated paths (``collection/doc/subcollection/doc``). This module
defines the async interface the domain services depend on, the write
sentinels they use and the store exception types.

Sentinels mirror the Firestore field transforms so that the Firestore
adapter can translate them one-to-one:

- DELETE_FIELD: remove the field entirely (not blank it)
- SERVER_TIMESTAMP: replaced with the commit time by the store
- ArrayUnion / ArrayRemove: set-like array membership updates

Example:
    store = get_store()
    snapshot = await store.get("students/u1/enrollment/AY2526")
    if snapshot.exists:
        await store.update(snapshot.path, {"enrollmentInfo.sectionId": DELETE_FIELD})
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


class StoreError(Exception):
    """Exception raised for document store failures.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying client error.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        """Initialize the store error.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class DocumentNotFoundError(StoreError):
    """Raised when an update targets a document that does not exist."""

    pass


class _Sentinel:
    """Named marker value for field transforms."""

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return self._name


DELETE_FIELD = _Sentinel("DELETE_FIELD")
SERVER_TIMESTAMP = _Sentinel("SERVER_TIMESTAMP")


class ArrayUnion:
    """Add values to an array field, skipping ones already present."""

    def __init__(self, values: list[Any]) -> None:
        self.values = list(values)

    def __repr__(self) -> str:
        return f"ArrayUnion({self.values!r})"


class ArrayRemove:
    """Remove every occurrence of the given values from an array field."""

    def __init__(self, values: list[Any]) -> None:
        self.values = list(values)

    def __repr__(self) -> str:
        return f"ArrayRemove({self.values!r})"


def split_path(path: str) -> tuple[str, str]:
    """Split a document path into its parent collection path and id.

    Args:
        path: Document path with an even number of segments.

    Returns:
        Tuple of (collection_path, document_id).

    Raises:
        StoreError: If the path does not address a document.
    """
    segments = [s for s in path.split("/") if s]
    if not segments or len(segments) % 2 != 0:
        raise StoreError(f"Not a document path: {path!r}")
    return "/".join(segments[:-1]), segments[-1]


@dataclass
class DocumentSnapshot:
    """A point-in-time read of one document.

    Attributes:
        id: Document id (last path segment).
        path: Full document path.
        data: Document fields, or None when the document does not exist.
    """

    id: str
    path: str
    data: Optional[dict[str, Any]] = field(default=None)

    @property
    def exists(self) -> bool:
        """Whether the document existed at read time."""
        return self.data is not None

    def to_dict(self) -> dict[str, Any]:
        """Return the document fields, or an empty dict for a missing document."""
        return dict(self.data) if self.data is not None else {}


class DocumentStore(ABC):
    """Async document store interface.

    Implementations must honour these semantics:
    - ``set`` without merge replaces the document; with merge, nested maps
      are merged field by field and sentinels are applied
    - ``update`` accepts dotted field paths and fails with
      DocumentNotFoundError when the document is missing
    - ``delete`` of a missing document is a no-op
    - ``query`` supports equality filters on (possibly dotted) field paths
    """

    @abstractmethod
    async def get(self, path: str) -> DocumentSnapshot:
        """Read one document.

        Args:
            path: Document path.

        Returns:
            Snapshot; ``exists`` is False when the document is absent.
        """

    @abstractmethod
    async def set(self, path: str, data: dict[str, Any], merge: bool = False) -> None:
        """Create or overwrite a document.

        Args:
            path: Document path.
            data: Fields to write. May contain sentinels.
            merge: Merge into the existing document instead of replacing it.
        """

    @abstractmethod
    async def update(self, path: str, data: dict[str, Any]) -> None:
        """Update fields of an existing document.

        Args:
            path: Document path.
            data: Field paths (dotted for nested fields) to values or sentinels.

        Raises:
            DocumentNotFoundError: If the document does not exist.
        """

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Delete a document. Deleting a missing document succeeds."""

    @abstractmethod
    async def list_documents(self, collection_path: str) -> list[DocumentSnapshot]:
        """Read every document of a collection.

        Args:
            collection_path: Collection path (odd number of segments).

        Returns:
            Snapshots of the existing documents.
        """

    @abstractmethod
    async def query(
        self,
        collection_path: str,
        filters: list[tuple[str, Any]],
    ) -> list[DocumentSnapshot]:
        """Read the documents of a collection matching all equality filters.

        Args:
            collection_path: Collection path.
            filters: (field_path, value) pairs combined with AND.

        Returns:
            Matching snapshots.
        """

    @abstractmethod
    async def ping(self) -> bool:
        """Check whether the store is reachable."""

    async def close(self) -> None:
        """Release client resources."""
        return None
