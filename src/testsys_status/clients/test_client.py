"""Status transitions for Test records.

Agents own ``status.agent`` and controllers own ``status.controller``. Every
method below writes inside exactly one of those halves, and transitions that
set several fields at once (state + results, state + error) go out as a
single patch so readers never see one without the other.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, TypeVar

from pydantic import Field, TypeAdapter, ValidationError

from testsys_status.clients.record_client import RecordClient
from testsys_status.models import (
    TASK_STATES,
    AgentStatus,
    ControllerStatus,
    TaskState,
    Test,
    TestStatus,
)
from testsys_status.patch import JsonPatch
from testsys_status.storage.base import RecordStore

logger = logging.getLogger(__name__)

TEST_KIND = "test"

T = TypeVar("T")

# Payloads are checked before writing so a rejected report never reaches the store.
_KEEP_RUNNING = TypeAdapter(bool)
_RESULTS = TypeAdapter(dict[str, Any])
_MESSAGE = TypeAdapter(Annotated[str, Field(min_length=1)])


def _validated(adapter: TypeAdapter[T], value: Any, what: str) -> T:
    try:
        return adapter.validate_python(value)
    except ValidationError as exc:
        raise ValueError(f"Invalid {what}: {value!r}") from exc


class TestClient:
    """Client for reading and reporting the state of Test records."""

    __test__ = False

    def __init__(self, store: RecordStore) -> None:
        self.records: RecordClient[Test, TestStatus] = RecordClient(
            store,
            kind=TEST_KIND,
            record_model=Test,
            status_model=TestStatus,
        )

    def get(self, name: str) -> Test:
        return self.records.get(name)

    def create(self, test: Test) -> Test:
        return self.records.create(test)

    def initialize_status(self, name: str) -> Test:
        return self.records.initialize_status(name)

    def send_keep_running(self, name: str, keep_running: bool) -> Test:
        """Set ``spec.agent.keep_running``; False marks the test as ok to delete."""
        keep_running = _validated(_KEEP_RUNNING, keep_running, "keep_running flag")
        logger.info("test_client event=keep_running test=%s value=%s", name, keep_running)
        return self.records.patch(
            name,
            [JsonPatch.replace("/spec/agent/keep_running", keep_running)],
            "set 'keep running'",
        )

    def get_agent_status(self, name: str) -> AgentStatus:
        return self.get(name).agent_status()

    def get_controller_status(self, name: str) -> ControllerStatus:
        return self.get(name).controller_status()

    def send_resource_error(self, name: str, error: str) -> Test:
        error = _validated(_MESSAGE, error, "resource error message")
        logger.info("test_client event=resource_error test=%s", name)
        return self.records.patch_status(
            name,
            [JsonPatch.add("/status/controller/resource_error", error)],
            "send resource error",
        )

    def send_agent_task_state(self, name: str, task_state: TaskState) -> Test:
        if task_state not in TASK_STATES:
            raise ValueError(f"Unknown task state: {task_state!r}")
        logger.info("test_client event=task_state test=%s task_state=%s", name, task_state)
        return self.records.patch_status(
            name,
            [JsonPatch.add("/status/agent/task_state", task_state)],
            "send agent task state",
        )

    def send_test_completed(self, name: str, results: dict[str, Any]) -> Test:
        results = _validated(_RESULTS, results, "results payload")
        logger.info("test_client event=completed test=%s", name)
        return self.records.patch_status(
            name,
            [
                JsonPatch.add("/status/agent/task_state", "completed"),
                JsonPatch.add("/status/agent/results", results),
            ],
            "send test completion results",
        )

    def send_agent_error(self, name: str, error: str) -> Test:
        error = _validated(_MESSAGE, error, "agent error message")
        logger.info("test_client event=agent_error test=%s", name)
        return self.records.patch_status(
            name,
            [
                JsonPatch.add("/status/agent/task_state", "error"),
                JsonPatch.add("/status/agent/error", error),
            ],
            "send agent error",
        )
