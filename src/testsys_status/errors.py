"""Error kinds raised by the record store and the status clients."""

from __future__ import annotations


class StatusClientError(Exception):
    """Base class for every failure surfaced by this package."""

    code = "status_client_error"


class NotFoundError(StatusClientError):
    code = "not_found"

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"{kind} '{name}' does not exist")
        self.kind = kind
        self.name = name


class AlreadyExistsError(StatusClientError):
    code = "already_exists"

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"{kind} '{name}' already exists")
        self.kind = kind
        self.name = name


class AlreadyInitializedError(StatusClientError):
    """Raised when a record's status sub-document has already been written."""

    code = "already_initialized"

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"status of {kind} '{name}' is already initialized")
        self.kind = kind
        self.name = name


class PathNotFoundError(StatusClientError):
    """A replace/remove operation targeted a field that does not exist."""

    code = "path_not_found"

    def __init__(self, path: str) -> None:
        super().__init__(f"patch path '{path}' does not exist")
        self.path = path


class InvalidPatchError(StatusClientError):
    code = "invalid_patch"


class ConflictError(StatusClientError):
    """The stored version token no longer matches the one the caller read."""

    code = "conflict"

    def __init__(self, kind: str, name: str, *, expected: str, actual: str) -> None:
        super().__init__(
            f"{kind} '{name}' was modified concurrently "
            f"(expected version {expected}, found {actual})"
        )
        self.kind = kind
        self.name = name
        self.expected = expected
        self.actual = actual


class TransportError(StatusClientError):
    code = "transport_failure"


__all__ = [
    "AlreadyExistsError",
    "AlreadyInitializedError",
    "ConflictError",
    "InvalidPatchError",
    "NotFoundError",
    "PathNotFoundError",
    "StatusClientError",
    "TransportError",
]
