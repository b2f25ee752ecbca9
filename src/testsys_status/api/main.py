"""FastAPI app exposing Test status reporting over HTTP."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from testsys_status.clients.test_client import TestClient
from testsys_status.config.settings import Settings, get_settings
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
from testsys_status.logging_setup import configure_logging
from testsys_status.models import AgentStatus, ControllerStatus, TaskState, Test
from testsys_status.storage.base import RecordStore
from testsys_status.storage.factory import build_record_store

ERROR_STATUS_CODES: dict[type[StatusClientError], int] = {
    NotFoundError: 404,
    AlreadyExistsError: 409,
    AlreadyInitializedError: 409,
    ConflictError: 409,
    PathNotFoundError: 422,
    InvalidPatchError: 422,
    TransportError: 503,
}


class KeepRunningRequest(BaseModel):
    keep_running: bool


class TaskStateRequest(BaseModel):
    task_state: TaskState


class ResultsRequest(BaseModel):
    results: dict[str, Any]


class ErrorRequest(BaseModel):
    error: str = Field(min_length=1)


def _ensure_runtime_state(
    app: FastAPI,
    *,
    settings: Settings,
    store_override: RecordStore | None,
) -> None:
    if not hasattr(app.state, "test_client"):
        store = store_override or build_record_store(settings)
        app.state.test_client = TestClient(store)

    if not hasattr(app.state, "settings"):
        app.state.settings = settings


def create_app(
    *,
    store: RecordStore | None = None,
    settings_override: Settings | None = None,
) -> FastAPI:
    settings = settings_override or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _ensure_runtime_state(app, settings=settings, store_override=store)
        yield

    app_lifespan = lifespan if store is None else None
    app = FastAPI(title=settings.app_name, lifespan=app_lifespan)

    # Keep test paths reliable when lifespan is not executed by the client.
    if store is not None:
        _ensure_runtime_state(app, settings=settings, store_override=store)

    def _client(request: Request) -> TestClient:
        if not hasattr(request.app.state, "test_client"):
            _ensure_runtime_state(request.app, settings=settings, store_override=store)
        return request.app.state.test_client

    @app.exception_handler(StatusClientError)
    async def status_client_error(_: Request, exc: StatusClientError) -> JSONResponse:
        status_code = ERROR_STATUS_CODES.get(type(exc), 500)
        return JSONResponse(
            status_code=status_code,
            content={"detail": str(exc), "error": exc.code},
        )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "service": settings.app_name}

    @app.post("/tests", response_model=Test)
    def create_test(payload: Test, request: Request) -> Test:
        return _client(request).create(payload)

    @app.get("/tests/{name}", response_model=Test)
    def get_test(name: str, request: Request) -> Test:
        return _client(request).get(name)

    @app.get("/tests/{name}/agent-status", response_model=AgentStatus)
    def get_agent_status(name: str, request: Request) -> AgentStatus:
        return _client(request).get_agent_status(name)

    @app.get("/tests/{name}/controller-status", response_model=ControllerStatus)
    def get_controller_status(name: str, request: Request) -> ControllerStatus:
        return _client(request).get_controller_status(name)

    @app.post("/tests/{name}/status/initialize", response_model=Test)
    def initialize_status(name: str, request: Request) -> Test:
        return _client(request).initialize_status(name)

    @app.put("/tests/{name}/keep-running", response_model=Test)
    def send_keep_running(name: str, payload: KeepRunningRequest, request: Request) -> Test:
        return _client(request).send_keep_running(name, payload.keep_running)

    @app.put("/tests/{name}/agent/task-state", response_model=Test)
    def send_agent_task_state(name: str, payload: TaskStateRequest, request: Request) -> Test:
        return _client(request).send_agent_task_state(name, payload.task_state)

    @app.post("/tests/{name}/agent/results", response_model=Test)
    def send_test_completed(name: str, payload: ResultsRequest, request: Request) -> Test:
        return _client(request).send_test_completed(name, payload.results)

    @app.post("/tests/{name}/agent/error", response_model=Test)
    def send_agent_error(name: str, payload: ErrorRequest, request: Request) -> Test:
        return _client(request).send_agent_error(name, payload.error)

    @app.post("/tests/{name}/controller/resource-error", response_model=Test)
    def send_resource_error(name: str, payload: ErrorRequest, request: Request) -> Test:
        return _client(request).send_resource_error(name, payload.error)

    return app


app = create_app()
