"""PostgreSQL-backed record store with automatic table migration."""

from __future__ import annotations

import copy
import json
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

from testsys_status.errors import (
    AlreadyExistsError,
    ConflictError,
    NotFoundError,
    TransportError,
)
from testsys_status.patch import JsonPatch, apply_patch
from testsys_status.storage.base import Subresource, check_patch_scope, record_name


class PostgresRecordStore:
    """Persist records as JSONB rows versioned by a monotonically increasing counter."""

    def __init__(self, database_url: str) -> None:
        if not database_url:
            raise ValueError("TESTSYS_DATABASE_URL is required")
        self.database_url = database_url
        self._lock = threading.Lock()
        self._psycopg, self._dict_row, self._json_wrapper = self._load_psycopg()

    def migrate(self) -> None:
        with self._transaction() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS records (
                    kind TEXT NOT NULL,
                    name TEXT NOT NULL,
                    resource_version BIGINT NOT NULL,
                    body JSONB NOT NULL,
                    last_reason TEXT,
                    created_at TIMESTAMPTZ NOT NULL,
                    updated_at TIMESTAMPTZ NOT NULL,
                    PRIMARY KEY (kind, name)
                )
                """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_records_updated_at
                ON records(updated_at DESC)
                """)
            conn.commit()

    def get(self, kind: str, name: str) -> dict[str, Any] | None:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT body, resource_version FROM records WHERE kind = %s AND name = %s",
                (kind, name),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_record(row)

    def create(self, kind: str, record: dict[str, Any]) -> dict[str, Any]:
        name = record_name(record)
        body = self._strip_version(record)
        now = datetime.now(tz=UTC)
        with self._transaction() as conn:
            row = conn.execute(
                """
                INSERT INTO records (
                    kind,
                    name,
                    resource_version,
                    body,
                    last_reason,
                    created_at,
                    updated_at
                ) VALUES (%s, %s, %s, %s, %s, %s, %s)
                ON CONFLICT (kind, name) DO NOTHING
                RETURNING body, resource_version
                """,
                (kind, name, 1, self._json_wrapper(body), "create", now, now),
            ).fetchone()
            conn.commit()
        if row is None:
            raise AlreadyExistsError(kind, name)
        return self._row_to_record(row)

    def patch(
        self,
        kind: str,
        name: str,
        operations: Sequence[JsonPatch],
        *,
        reason: str,
        subresource: Subresource | None = None,
        resource_version: str | None = None,
    ) -> dict[str, Any]:
        check_patch_scope(operations, subresource=subresource)
        with self._transaction() as conn:
            # Row lock serializes concurrent patches of the same record.
            row = conn.execute(
                """
                SELECT body, resource_version
                FROM records
                WHERE kind = %s AND name = %s
                FOR UPDATE
                """,
                (kind, name),
            ).fetchone()
            if row is None:
                raise NotFoundError(kind, name)
            actual = str(row["resource_version"])
            if resource_version is not None and resource_version != actual:
                raise ConflictError(kind, name, expected=resource_version, actual=actual)

            patched = apply_patch(self._parse_json_object(row["body"]), operations)
            next_version = int(actual) + 1
            cursor = conn.execute(
                """
                UPDATE records
                SET body = %s,
                    resource_version = %s,
                    last_reason = %s,
                    updated_at = %s
                WHERE kind = %s AND name = %s AND resource_version = %s
                """,
                (
                    self._json_wrapper(self._strip_version(patched)),
                    next_version,
                    reason,
                    datetime.now(tz=UTC),
                    kind,
                    name,
                    int(actual),
                ),
            )
            if cursor.rowcount != 1:
                raise ConflictError(kind, name, expected=actual, actual="unknown")
            conn.commit()
        return self._with_version(patched, next_version)

    @contextmanager
    def _transaction(self) -> Iterator[Any]:
        """Open a connection and translate driver connectivity errors."""
        try:
            with self._lock, self._connect() as conn:
                yield conn
        except self._psycopg.OperationalError as exc:
            raise TransportError(f"record store unavailable: {exc}") from exc

    def _connect(self) -> Any:
        return self._psycopg.connect(self.database_url, row_factory=self._dict_row)

    @staticmethod
    def _load_psycopg() -> tuple[Any, Any, Any]:
        try:
            import psycopg
            from psycopg.rows import dict_row
            from psycopg.types.json import Json
        except ImportError as exc:  # pragma: no cover
            raise RuntimeError(
                "PostgreSQL record store requires psycopg. "
                'Install with: python -m pip install "psycopg[binary]>=3.2,<4.0"'
            ) from exc
        return psycopg, dict_row, Json

    @staticmethod
    def _parse_json_object(raw: Any) -> dict[str, Any]:
        if isinstance(raw, str):
            parsed = json.loads(raw)
        else:
            parsed = raw
        if isinstance(parsed, dict):
            return parsed
        raise TypeError(f"Unsupported record body: {type(parsed)!r}")

    @staticmethod
    def _strip_version(record: dict[str, Any]) -> dict[str, Any]:
        body = copy.deepcopy(record)
        body.get("metadata", {}).pop("resource_version", None)
        return body

    @staticmethod
    def _with_version(body: dict[str, Any], version: int) -> dict[str, Any]:
        body.setdefault("metadata", {})["resource_version"] = str(version)
        return body

    @classmethod
    def _row_to_record(cls, row: Any) -> dict[str, Any]:
        return cls._with_version(
            cls._parse_json_object(row["body"]),
            int(row["resource_version"]),
        )
