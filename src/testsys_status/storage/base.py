"""Record store interface consumed by the status clients."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Literal, Protocol

from testsys_status.errors import InvalidPatchError
from testsys_status.patch import JsonPatch

Subresource = Literal["status"]


class RecordStore(Protocol):
    def migrate(self) -> None: ...

    def get(self, kind: str, name: str) -> dict[str, Any] | None: ...

    def create(self, kind: str, record: dict[str, Any]) -> dict[str, Any]: ...

    def patch(
        self,
        kind: str,
        name: str,
        operations: Sequence[JsonPatch],
        *,
        reason: str,
        subresource: Subresource | None = None,
        resource_version: str | None = None,
    ) -> dict[str, Any]: ...


def record_name(record: dict[str, Any]) -> str:
    metadata = record.get("metadata")
    name = metadata.get("name") if isinstance(metadata, dict) else None
    if not isinstance(name, str) or not name:
        raise ValueError("record metadata.name is required")
    return name


def check_patch_scope(
    operations: Sequence[JsonPatch],
    *,
    subresource: Subresource | None,
) -> None:
    """Reject operations a store must never apply.

    Metadata is store-owned (immutable name, managed version token); a status
    patch may only touch the ``/status`` sub-tree.
    """
    if not operations:
        raise InvalidPatchError("patch must contain at least one operation")
    for operation in operations:
        path = operation.path
        if path == "/metadata" or path.startswith("/metadata/"):
            raise InvalidPatchError(f"patch path '{path}' targets store-managed metadata")
        if subresource == "status" and not (path == "/status" or path.startswith("/status/")):
            raise InvalidPatchError(f"status patch path '{path}' is outside /status")
