"""Pydantic models for Test records shared by stores, clients, and the API.

A Test record carries three parts:
- metadata: the immutable name plus the store-managed version token.
- spec: declared intent written by the submitter (which agent to run and how).
- status: observed state, split into an agent-owned and a controller-owned half.
"""

from __future__ import annotations

from typing import Any, Literal, get_args

from pydantic import BaseModel, Field

# Agent task lifecycle: unknown -> running -> {completed, error}.
TaskState = Literal["unknown", "running", "completed", "error"]
TASK_STATES: tuple[str, ...] = get_args(TaskState)
TERMINAL_TASK_STATES: frozenset[str] = frozenset({"completed", "error"})


def is_terminal(task_state: str) -> bool:
    """Return True for states agents treat as final by convention."""
    return task_state in TERMINAL_TASK_STATES


class ObjectMeta(BaseModel):
    """Identity of a record inside the store."""

    name: str = Field(min_length=1)
    # Opaque token assigned by the store; ignored on create.
    resource_version: str | None = None


class Record(BaseModel):
    """Base shape every record kind shares."""

    metadata: ObjectMeta


class Agent(BaseModel):
    """The agent container that executes a test."""

    name: str
    image: str
    # Free-form payload handed to the agent as its configuration.
    configuration: dict[str, Any] | None = None
    # Controller keeps the agent alive after completion while this is True.
    keep_running: bool = True
    timeout: int | None = Field(default=None, ge=1)


class TestSpec(BaseModel):
    agent: Agent
    # Names of resources the test expects to exist before it runs.
    resources: list[str] = Field(default_factory=list)


class AgentStatus(BaseModel):
    """Status fields written only by the executing agent."""

    task_state: TaskState = "unknown"
    results: dict[str, Any] | None = None
    error: str | None = None


class ControllerStatus(BaseModel):
    """Status fields written only by the controller."""

    resource_error: str | None = None


class TestStatus(BaseModel):
    agent: AgentStatus = Field(default_factory=AgentStatus)
    controller: ControllerStatus = Field(default_factory=ControllerStatus)


class Test(Record):
    """Canonical Test record shape returned by stores and clients."""

    spec: TestSpec
    status: TestStatus | None = None

    def agent_status(self) -> AgentStatus:
        if self.status is None:
            return AgentStatus()
        return self.status.agent

    def controller_status(self) -> ControllerStatus:
        if self.status is None:
            return ControllerStatus()
        return self.status.controller
