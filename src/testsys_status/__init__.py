"""Status synchronization clients for distributed test runs."""

from testsys_status.clients import RecordClient, TestClient, retry_on_conflict
from testsys_status.errors import (
    AlreadyExistsError,
    AlreadyInitializedError,
    ConflictError,
    InvalidPatchError,
    NotFoundError,
    PathNotFoundError,
    StatusClientError,
    TransportError,
)
from testsys_status.models import (
    Agent,
    AgentStatus,
    ControllerStatus,
    ObjectMeta,
    TaskState,
    Test,
    TestSpec,
    TestStatus,
)
from testsys_status.patch import JsonPatch, json_pointer

__all__ = [
    "Agent",
    "AgentStatus",
    "AlreadyExistsError",
    "AlreadyInitializedError",
    "ConflictError",
    "ControllerStatus",
    "InvalidPatchError",
    "JsonPatch",
    "NotFoundError",
    "ObjectMeta",
    "PathNotFoundError",
    "RecordClient",
    "StatusClientError",
    "TaskState",
    "Test",
    "TestClient",
    "TestSpec",
    "TestStatus",
    "TransportError",
    "json_pointer",
    "retry_on_conflict",
]
