# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Document store infrastructure.

This package provides the async DocumentStore interface, its Firestore and
in-memory implementations, the write sentinels and the process-wide store
lifecycle helpers.

Example:
    from registrar.infrastructure.store import init_store, get_store, DELETE_FIELD

    await init_store(settings)
    store = get_store()
    await store.update("sections/S1", {"students": ArrayRemove(["u1"])})
"""

from registrar.infrastructure.store.base import (
    DELETE_FIELD,
    SERVER_TIMESTAMP,
    ArrayRemove,
    ArrayUnion,
    DocumentNotFoundError,
    DocumentSnapshot,
    DocumentStore,
    StoreError,
    split_path,
)
from registrar.infrastructure.store.client import close_store, get_store, init_store
from registrar.infrastructure.store.memory import MemoryDocumentStore

__all__ = [
    "DocumentStore",
    "DocumentSnapshot",
    "MemoryDocumentStore",
    "StoreError",
    "DocumentNotFoundError",
    "DELETE_FIELD",
    "SERVER_TIMESTAMP",
    "ArrayUnion",
    "ArrayRemove",
    "split_path",
    "init_store",
    "get_store",
    "close_store",
]
