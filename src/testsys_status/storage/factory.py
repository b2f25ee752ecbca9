"""Select a record store backend from settings."""

from __future__ import annotations

from testsys_status.config.settings import Settings
from testsys_status.storage.base import RecordStore
from testsys_status.storage.memory import InMemoryRecordStore
from testsys_status.storage.postgres import PostgresRecordStore


def build_record_store(settings: Settings) -> RecordStore:
    if settings.store_backend == "postgres":
        store = PostgresRecordStore(settings.resolved_database_url())
        store.migrate()
        return store
    return InMemoryRecordStore()
