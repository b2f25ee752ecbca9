from __future__ import annotations

from collections.abc import Callable

import pytest

from testsys_status.clients.test_client import TestClient
from testsys_status.models import Agent, ObjectMeta, Test, TestSpec
from testsys_status.storage.memory import InMemoryRecordStore

TEST_NAME = "my-test"


def _build_test(name: str = TEST_NAME, *, keep_running: bool = True) -> Test:
    return Test(
        metadata=ObjectMeta(name=name),
        spec=TestSpec(
            agent=Agent(
                name="my-agent",
                image="foo:v0.1.0",
                configuration={"field_a": 13, "field_b": 14},
                keep_running=keep_running,
            )
        ),
    )


@pytest.fixture
def build_test() -> Callable[..., Test]:
    return _build_test


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def status_client(store: InMemoryRecordStore) -> TestClient:
    return TestClient(store)


@pytest.fixture
def created_test(status_client: TestClient) -> Test:
    return status_client.create(_build_test())
