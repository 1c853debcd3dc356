# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-process document store.

Implements the DocumentStore semantics on a plain dict keyed by document
path. Used for local development (STORE_BACKEND=memory) and by the test
suite. Reads and writes deep-copy their payloads so callers can never
mutate stored state by reference.
"""

import copy
from typing import Any

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
from registrar.utils.datetime import utc_now


def _transform(value: Any, current: Any) -> Any:
    """Resolve a field transform against the current field value."""
    if value is SERVER_TIMESTAMP:
        return utc_now()
    if isinstance(value, ArrayUnion):
        existing = list(current) if isinstance(current, list) else []
        for item in value.values:
            if item not in existing:
                existing.append(item)
        return existing
    if isinstance(value, ArrayRemove):
        existing = list(current) if isinstance(current, list) else []
        return [item for item in existing if item not in value.values]
    if isinstance(value, dict):
        resolved: dict[str, Any] = {}
        _merge_into(resolved, value, allow_delete=False)
        return resolved
    if isinstance(value, list):
        return [_transform(item, None) for item in value]
    return copy.deepcopy(value)


def _merge_into(target: dict[str, Any], data: dict[str, Any], allow_delete: bool) -> None:
    for key, value in data.items():
        if value is DELETE_FIELD:
            if not allow_delete:
                raise StoreError(f"DELETE_FIELD is only valid in update or merge writes ({key})")
            target.pop(key, None)
        elif isinstance(value, dict) and allow_delete:
            nested = target.get(key)
            if not isinstance(nested, dict):
                nested = {}
                target[key] = nested
            _merge_into(nested, value, allow_delete=True)
        else:
            target[key] = _transform(value, target.get(key))


def _get_field(data: dict[str, Any], field_path: str) -> tuple[bool, Any]:
    current: Any = data
    for part in field_path.split("."):
        if not isinstance(current, dict) or part not in current:
            return False, None
        current = current[part]
    return True, current


class MemoryDocumentStore(DocumentStore):
    """Dict-backed DocumentStore.

    Example:
        store = MemoryDocumentStore()
        await store.set("config/system", {"AY": "AY2526", "semester": "1"})
        snapshot = await store.get("config/system")
    """

    def __init__(self) -> None:
        self._documents: dict[str, dict[str, Any]] = {}

    @staticmethod
    def _normalize(path: str) -> str:
        collection_path, doc_id = split_path(path)
        return f"{collection_path}/{doc_id}"

    def _snapshot(self, path: str) -> DocumentSnapshot:
        _, doc_id = split_path(path)
        data = self._documents.get(path)
        return DocumentSnapshot(
            id=doc_id,
            path=path,
            data=copy.deepcopy(data) if data is not None else None,
        )

    async def get(self, path: str) -> DocumentSnapshot:
        return self._snapshot(self._normalize(path))

    async def set(self, path: str, data: dict[str, Any], merge: bool = False) -> None:
        path = self._normalize(path)
        if merge:
            target = copy.deepcopy(self._documents.get(path, {}))
            _merge_into(target, data, allow_delete=True)
        else:
            target = {}
            _merge_into(target, data, allow_delete=False)
        self._documents[path] = target

    async def update(self, path: str, data: dict[str, Any]) -> None:
        path = self._normalize(path)
        if path not in self._documents:
            raise DocumentNotFoundError(f"No document to update: {path}")

        target = copy.deepcopy(self._documents[path])
        for field_path, value in data.items():
            *parents, leaf = field_path.split(".")
            node = target
            for part in parents:
                child = node.get(part)
                if not isinstance(child, dict):
                    if value is DELETE_FIELD:
                        node = None
                        break
                    child = {}
                    node[part] = child
                node = child
            if node is None:
                continue
            if value is DELETE_FIELD:
                node.pop(leaf, None)
            else:
                node[leaf] = _transform(value, node.get(leaf))
        self._documents[path] = target

    async def delete(self, path: str) -> None:
        self._documents.pop(self._normalize(path), None)

    async def list_documents(self, collection_path: str) -> list[DocumentSnapshot]:
        collection_path = collection_path.strip("/")
        paths = sorted(
            path for path in self._documents if split_path(path)[0] == collection_path
        )
        return [self._snapshot(path) for path in paths]

    async def query(
        self,
        collection_path: str,
        filters: list[tuple[str, Any]],
    ) -> list[DocumentSnapshot]:
        matches = []
        for snapshot in await self.list_documents(collection_path):
            data = snapshot.data or {}
            if all(_get_field(data, f) == (True, v) for f, v in filters):
                matches.append(snapshot)
        return matches

    async def ping(self) -> bool:
        return True

    def clear(self) -> None:
        """Drop every stored document."""
        self._documents.clear()
