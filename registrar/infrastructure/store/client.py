# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Process-wide document store lifecycle.

Example:
    from registrar.infrastructure.store import init_store, get_store, close_store

    # Initialize at startup
    await init_store(settings)

    store = get_store()
    snapshot = await store.get("config/system")

    # Cleanup at shutdown
    await close_store()
"""

import logging
from typing import TYPE_CHECKING, Optional

from registrar.infrastructure.store.base import DocumentStore, StoreError
from registrar.infrastructure.store.memory import MemoryDocumentStore

if TYPE_CHECKING:
    from registrar.core.config.settings import Settings

logger = logging.getLogger(__name__)

# Module-level state
_store: Optional[DocumentStore] = None


async def init_store(settings: "Settings") -> DocumentStore:
    """Initialize the global document store.

    This should be called once at application startup.

    Args:
        settings: Application settings containing store configuration.

    Returns:
        The opened store.

    Raises:
        StoreError: If the store cannot be opened.
    """
    global _store

    if settings.store.backend == "firestore":
        from registrar.infrastructure.store.firestore import FirestoreDocumentStore

        firestore_store = FirestoreDocumentStore(settings)
        await firestore_store.connect()
        _store = firestore_store
    else:
        _store = MemoryDocumentStore()

    logger.info("Document store initialized: backend=%s", settings.store.backend)
    return _store


async def close_store() -> None:
    """Close the global document store.

    This should be called at application shutdown.
    """
    global _store

    if _store is not None:
        await _store.close()
        _store = None


def get_store() -> DocumentStore:
    """Get the global document store.

    Returns:
        The DocumentStore instance.

    Raises:
        StoreError: If the store has not been initialized.
    """
    if _store is None:
        raise StoreError("Document store not initialized. Call init_store() first.")
    return _store
