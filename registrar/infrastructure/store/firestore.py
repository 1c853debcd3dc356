# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Firestore-backed document store.

Wraps google.cloud.firestore.AsyncClient behind the DocumentStore
interface. Registrar sentinels are translated to the Firestore field
transforms and google.api_core errors are wrapped in StoreError.

Example:
    store = FirestoreDocumentStore(settings)
    await store.connect()
    snapshot = await store.get("config/system")
    await store.close()
"""

import logging
import os
from typing import TYPE_CHECKING, Any, Optional

from google.api_core import exceptions as gcp_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from registrar.infrastructure.store.base import (
    DELETE_FIELD,
    SERVER_TIMESTAMP,
    ArrayRemove,
    ArrayUnion,
    DocumentNotFoundError,
    DocumentSnapshot,
    DocumentStore,
    StoreError,
)

if TYPE_CHECKING:
    from registrar.core.config.settings import Settings

logger = logging.getLogger(__name__)


def _to_firestore(value: Any) -> Any:
    """Translate registrar sentinels (at any depth) to Firestore transforms."""
    if value is DELETE_FIELD:
        return firestore.DELETE_FIELD
    if value is SERVER_TIMESTAMP:
        return firestore.SERVER_TIMESTAMP
    if isinstance(value, ArrayUnion):
        return firestore.ArrayUnion(value.values)
    if isinstance(value, ArrayRemove):
        return firestore.ArrayRemove(value.values)
    if isinstance(value, dict):
        return {key: _to_firestore(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_to_firestore(item) for item in value]
    return value


def _to_snapshot(document: Any) -> DocumentSnapshot:
    return DocumentSnapshot(
        id=document.id,
        path=document.reference.path,
        data=document.to_dict() if document.exists else None,
    )


class FirestoreDocumentStore(DocumentStore):
    """DocumentStore implementation on the Firestore async client.

    Attributes:
        timeout: Per-call timeout in seconds.
    """

    def __init__(self, settings: "Settings") -> None:
        """Initialize the store.

        Args:
            settings: Application settings containing store configuration.
        """
        self._settings = settings
        self._client: Optional[firestore.AsyncClient] = None
        self.timeout = settings.store.timeout

    async def connect(self) -> None:
        """Create the Firestore client.

        Raises:
            StoreError: If the client cannot be created.
        """
        store_settings = self._settings.store
        if store_settings.emulator_host:
            os.environ["FIRESTORE_EMULATOR_HOST"] = store_settings.emulator_host

        try:
            self._client = firestore.AsyncClient(
                project=store_settings.project_id,
                database=store_settings.database,
            )
        except (gcp_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as e:
            raise StoreError("Failed to create Firestore client", e) from e

        logger.info(
            "Firestore client created: project=%s, database=%s",
            store_settings.project_id,
            store_settings.database,
        )

    async def close(self) -> None:
        """Release the Firestore client."""
        self._client = None

    def _ensure_connected(self) -> firestore.AsyncClient:
        if self._client is None:
            raise StoreError("Firestore client not connected. Call connect() first.")
        return self._client

    async def get(self, path: str) -> DocumentSnapshot:
        client = self._ensure_connected()
        try:
            document = await client.document(path).get(timeout=self.timeout)
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Failed to read document: {path}", e) from e
        return _to_snapshot(document)

    async def set(self, path: str, data: dict[str, Any], merge: bool = False) -> None:
        client = self._ensure_connected()
        try:
            await client.document(path).set(
                _to_firestore(data), merge=merge, timeout=self.timeout
            )
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Failed to write document: {path}", e) from e

    async def update(self, path: str, data: dict[str, Any]) -> None:
        client = self._ensure_connected()
        try:
            await client.document(path).update(_to_firestore(data), timeout=self.timeout)
        except gcp_exceptions.NotFound as e:
            raise DocumentNotFoundError(f"No document to update: {path}", e) from e
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Failed to update document: {path}", e) from e

    async def delete(self, path: str) -> None:
        client = self._ensure_connected()
        try:
            await client.document(path).delete(timeout=self.timeout)
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Failed to delete document: {path}", e) from e

    async def list_documents(self, collection_path: str) -> list[DocumentSnapshot]:
        client = self._ensure_connected()
        try:
            return [
                _to_snapshot(document)
                async for document in client.collection(collection_path).stream(
                    timeout=self.timeout
                )
            ]
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Failed to list collection: {collection_path}", e) from e

    async def query(
        self,
        collection_path: str,
        filters: list[tuple[str, Any]],
    ) -> list[DocumentSnapshot]:
        client = self._ensure_connected()
        query = client.collection(collection_path)
        for field_path, value in filters:
            query = query.where(filter=FieldFilter(field_path, "==", value))
        try:
            return [
                _to_snapshot(document)
                async for document in query.stream(timeout=self.timeout)
            ]
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Failed to query collection: {collection_path}", e) from e

    async def ping(self) -> bool:
        """Check if Firestore is reachable.

        Returns:
            True if a read of the config document succeeds, False otherwise.
        """
        try:
            client = self._ensure_connected()
            await client.document(self._settings.registrar.config_path).get(
                timeout=self.timeout
            )
            return True
        except (StoreError, gcp_exceptions.GoogleAPIError):
            return False
