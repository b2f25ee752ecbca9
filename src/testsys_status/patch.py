"""JSON-patch style field operations and the engine that applies them.

Builders produce ordered ``JsonPatch`` lists; every store applies them through
``apply_patch`` so add/replace/remove behave the same in memory and in Postgres.

``add`` is an upsert: missing (or null) intermediate objects are created.
``replace`` and ``remove`` require the full path to exist already.
"""

from __future__ import annotations

import copy
from collections.abc import Sequence
from typing import Any, Literal, NoReturn

from pydantic import BaseModel, ConfigDict
from pydantic_core import to_jsonable_python

from testsys_status.errors import InvalidPatchError, PathNotFoundError

PatchOp = Literal["add", "replace", "remove"]


class JsonPatch(BaseModel):
    """One field-level operation addressed by a JSON Pointer path."""

    model_config = ConfigDict(frozen=True)

    op: PatchOp
    path: str
    value: Any = None

    @classmethod
    def add(cls, path: str, value: Any) -> JsonPatch:
        return cls(op="add", path=path, value=to_jsonable_python(value))

    @classmethod
    def replace(cls, path: str, value: Any) -> JsonPatch:
        return cls(op="replace", path=path, value=to_jsonable_python(value))

    @classmethod
    def remove(cls, path: str) -> JsonPatch:
        return cls(op="remove", path=path)


def json_pointer(*segments: str) -> str:
    """Join raw field names into an escaped JSON Pointer."""
    escaped = (segment.replace("~", "~0").replace("/", "~1") for segment in segments)
    return "/" + "/".join(escaped)


def parse_pointer(path: str) -> list[str]:
    if not path.startswith("/"):
        raise InvalidPatchError(f"patch path '{path}' must start with '/'")
    return [token.replace("~1", "/").replace("~0", "~") for token in path[1:].split("/")]


def apply_patch(document: dict[str, Any], operations: Sequence[JsonPatch]) -> dict[str, Any]:
    """Apply ``operations`` in order and return the patched copy.

    The input document is never mutated, so a failure part-way through leaves
    the caller holding the original state.
    """
    patched = copy.deepcopy(document)
    for operation in operations:
        tokens = parse_pointer(operation.path)
        if operation.op == "add":
            _add(patched, tokens, operation.path, copy.deepcopy(operation.value))
        elif operation.op == "replace":
            _replace(patched, tokens, operation.path, copy.deepcopy(operation.value))
        elif operation.op == "remove":
            _remove(patched, tokens, operation.path)
        else:  # pragma: no cover - guarded by the PatchOp literal
            raise InvalidPatchError(f"unsupported patch op '{operation.op}'")
    return patched


def _add(document: dict[str, Any], tokens: list[str], path: str, value: Any) -> None:
    parent: Any = document
    for token in tokens[:-1]:
        if isinstance(parent, dict):
            child = parent.get(token)
            if child is None:
                child = {}
                parent[token] = child
        elif isinstance(parent, list):
            child = parent[_list_index(parent, token, path)]
        else:
            raise InvalidPatchError(f"cannot add '{path}': parent is not a container")
        parent = child

    last = tokens[-1]
    if isinstance(parent, dict):
        parent[last] = value
    elif isinstance(parent, list):
        if last == "-":
            parent.append(value)
        else:
            parent.insert(_list_index(parent, last, path, allow_end=True), value)
    else:
        raise InvalidPatchError(f"cannot add '{path}': parent is not a container")


def _replace(document: dict[str, Any], tokens: list[str], path: str, value: Any) -> None:
    parent = _existing_parent(document, tokens, path)
    last = tokens[-1]
    if isinstance(parent, dict):
        if last not in parent:
            raise PathNotFoundError(path)
        parent[last] = value
    else:
        parent[_list_index(parent, last, path)] = value


def _remove(document: dict[str, Any], tokens: list[str], path: str) -> None:
    parent = _existing_parent(document, tokens, path)
    last = tokens[-1]
    if isinstance(parent, dict):
        if last not in parent:
            raise PathNotFoundError(path)
        del parent[last]
    else:
        del parent[_list_index(parent, last, path)]


def _existing_parent(document: dict[str, Any], tokens: list[str], path: str) -> Any:
    parent: Any = document
    for token in tokens[:-1]:
        if isinstance(parent, dict):
            if token not in parent:
                raise PathNotFoundError(path)
            parent = parent[token]
        elif isinstance(parent, list):
            parent = parent[_list_index(parent, token, path)]
        else:
            _raise_not_container(parent, path)
    if not isinstance(parent, (dict, list)):
        _raise_not_container(parent, path)
    return parent


def _raise_not_container(value: Any, path: str) -> NoReturn:
    # A null field counts as absent; any other scalar cannot hold children.
    if value is None:
        raise PathNotFoundError(path)
    raise InvalidPatchError(f"cannot resolve '{path}': parent is not a container")


def _list_index(items: list[Any], token: str, path: str, *, allow_end: bool = False) -> int:
    if not token.isdigit() or (len(token) > 1 and token.startswith("0")):
        raise PathNotFoundError(path)
    index = int(token)
    limit = len(items) + 1 if allow_end else len(items)
    if index >= limit:
        raise PathNotFoundError(path)
    return index
