"""Record store backends."""

from testsys_status.storage.base import RecordStore
from testsys_status.storage.factory import build_record_store
from testsys_status.storage.memory import InMemoryRecordStore
from testsys_status.storage.postgres import PostgresRecordStore

__all__ = [
    "InMemoryRecordStore",
    "PostgresRecordStore",
    "RecordStore",
    "build_record_store",
]
