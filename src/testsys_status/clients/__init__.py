"""Typed clients over the record store."""

from testsys_status.clients.record_client import RecordClient
from testsys_status.clients.retry import retry_on_conflict
from testsys_status.clients.test_client import TestClient

__all__ = ["RecordClient", "TestClient", "retry_on_conflict"]
