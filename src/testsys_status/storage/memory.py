"""In-memory record store for tests and local runs."""

from __future__ import annotations

import copy
import threading
from collections.abc import Sequence
from typing import Any

from testsys_status.errors import AlreadyExistsError, ConflictError, NotFoundError
from testsys_status.patch import JsonPatch, apply_patch
from testsys_status.storage.base import Subresource, check_patch_scope, record_name


class InMemoryRecordStore:
    """Versioned key/value store with atomic patch and optimistic concurrency."""

    def __init__(self) -> None:
        self._records: dict[tuple[str, str], dict[str, Any]] = {}
        # (kind, name, resource_version, reason) for every applied patch.
        self._audit: list[tuple[str, str, str, str]] = []
        self._lock = threading.Lock()

    def migrate(self) -> None:
        return None

    def get(self, kind: str, name: str) -> dict[str, Any] | None:
        with self._lock:
            record = self._records.get((kind, name))
            return copy.deepcopy(record) if record is not None else None

    def audit_trail(self, kind: str, name: str) -> list[str]:
        """Return the reasons of every patch applied to one record, oldest first."""
        with self._lock:
            return [entry[3] for entry in self._audit if entry[:2] == (kind, name)]

    def create(self, kind: str, record: dict[str, Any]) -> dict[str, Any]:
        name = record_name(record)
        body = copy.deepcopy(record)
        body["metadata"]["resource_version"] = "1"
        with self._lock:
            if (kind, name) in self._records:
                raise AlreadyExistsError(kind, name)
            self._records[(kind, name)] = body
            return copy.deepcopy(body)

    def patch(
        self,
        kind: str,
        name: str,
        operations: Sequence[JsonPatch],
        *,
        reason: str,
        subresource: Subresource | None = None,
        resource_version: str | None = None,
    ) -> dict[str, Any]:
        check_patch_scope(operations, subresource=subresource)
        with self._lock:
            current = self._records.get((kind, name))
            if current is None:
                raise NotFoundError(kind, name)
            actual = current["metadata"]["resource_version"]
            if resource_version is not None and resource_version != actual:
                raise ConflictError(kind, name, expected=resource_version, actual=actual)

            patched = apply_patch(current, operations)
            patched["metadata"]["resource_version"] = str(int(actual) + 1)
            self._records[(kind, name)] = patched
            self._audit.append((kind, name, patched["metadata"]["resource_version"], reason))
            return copy.deepcopy(patched)
