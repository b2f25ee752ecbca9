"""Generic get/create/patch protocol shared by every record kind."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Generic, TypeVar

from pydantic import BaseModel

from testsys_status.errors import AlreadyInitializedError, NotFoundError
from testsys_status.models import Record
from testsys_status.patch import JsonPatch
from testsys_status.storage.base import RecordStore, Subresource

RecordT = TypeVar("RecordT", bound=Record)
StatusT = TypeVar("StatusT", bound=BaseModel)

logger = logging.getLogger(__name__)


class RecordClient(Generic[RecordT, StatusT]):
    """Typed access to one record kind in a ``RecordStore``.

    Domain clients hold an instance of this class rather than subclass it; the
    record and status models decide how store dicts are validated.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        kind: str,
        record_model: type[RecordT],
        status_model: type[StatusT],
    ) -> None:
        self.store = store
        self.kind = kind
        self.record_model = record_model
        self.status_model = status_model

    def get(self, name: str) -> RecordT:
        raw = self.store.get(self.kind, name)
        if raw is None:
            raise NotFoundError(self.kind, name)
        return self.record_model.model_validate(raw)

    def create(self, record: RecordT) -> RecordT:
        payload = record.model_dump(mode="json")
        payload["metadata"].pop("resource_version", None)
        created = self.store.create(self.kind, payload)
        logger.info("record_client event=create kind=%s name=%s", self.kind, record.metadata.name)
        return self.record_model.model_validate(created)

    def patch(
        self,
        name: str,
        operations: Sequence[JsonPatch],
        reason: str,
        *,
        resource_version: str | None = None,
    ) -> RecordT:
        return self._submit(name, operations, reason, None, resource_version)

    def patch_status(
        self,
        name: str,
        operations: Sequence[JsonPatch],
        reason: str,
        *,
        resource_version: str | None = None,
    ) -> RecordT:
        return self._submit(name, operations, reason, "status", resource_version)

    def initialize_status(self, name: str) -> RecordT:
        """Write the default status sub-document exactly once.

        The write is conditioned on the version token read here, so a racing
        initializer fails with ``ConflictError`` rather than resetting status;
        re-reading afterwards reports ``AlreadyInitializedError``.
        """
        current = self.get(name)
        if getattr(current, "status", None) is not None:
            raise AlreadyInitializedError(self.kind, name)
        return self.patch_status(
            name,
            [JsonPatch.add("/status", self.status_model())],
            "initialize status",
            resource_version=current.metadata.resource_version,
        )

    def _submit(
        self,
        name: str,
        operations: Sequence[JsonPatch],
        reason: str,
        subresource: Subresource | None,
        resource_version: str | None,
    ) -> RecordT:
        logger.debug(
            "record_client event=patch kind=%s name=%s subresource=%s reason=%r paths=%s",
            self.kind,
            name,
            subresource or "-",
            reason,
            [operation.path for operation in operations],
        )
        raw = self.store.patch(
            self.kind,
            name,
            list(operations),
            reason=reason,
            subresource=subresource,
            resource_version=resource_version,
        )
        return self.record_model.model_validate(raw)
