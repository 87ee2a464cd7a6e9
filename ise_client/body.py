"""Fluent builder for JSON request payloads.

Body is the write-side counterpart of Document: it sets values at
dot-separated paths and creates intermediate objects and arrays on the way.

Path rules:
    - Each segment names an object key; ``\\.`` escapes a literal dot.
    - A numeric segment indexes into an existing array, or creates an array
      when the parent does not exist yet; gaps are filled with null.
    - ``-1`` appends to an array.

Example:
    >>> body = (
    ...     Body()
    ...     .set("InternalUser.name", "jdoe")
    ...     .set("InternalUser.identityGroups.-1", "group-a")
    ...     .set_raw("InternalUser.customAttributes", '{"site": "hq"}')
    ... )
    >>> str(body)
    '{"InternalUser":{"name":"jdoe","identityGroups":["group-a"],"customAttributes":{"site":"hq"}}}'
"""

import copy
import json
from typing import Any, Mapping

from ise_client.document import is_index, split_path

_APPEND = "-1"


def _is_array_key(key: str) -> bool:
    return key == _APPEND or is_index(key)


def _assign(node: Any, keys: list[str], value: Any) -> Any:
    if not keys:
        return value

    key, rest = keys[0], keys[1:]

    if isinstance(node, list):
        if not _is_array_key(key):
            raise ValueError(f"Cannot set key {key!r} on an array")
        index = len(node) if key == _APPEND else int(key)
        while len(node) <= index:
            node.append(None)
        node[index] = _assign(node[index], rest, value)
        return node

    if not isinstance(node, dict):
        node = [] if _is_array_key(key) else {}
        return _assign(node, keys, value)

    node[key] = _assign(node.get(key), rest, value)
    return node


def _remove(node: Any, keys: list[str]) -> None:
    key, rest = keys[0], keys[1:]

    if isinstance(node, dict):
        if key not in node:
            return
        if rest:
            _remove(node[key], rest)
        else:
            del node[key]
    elif isinstance(node, list):
        if key == _APPEND:
            index = len(node) - 1
        elif is_index(key):
            index = int(key)
        else:
            return
        if not 0 <= index < len(node):
            return
        if rest:
            _remove(node[index], rest)
        else:
            del node[index]


class Body:
    """A mutable JSON payload edited through paths.

    Setters return the Body itself so calls can be chained. ``str(body)``
    yields compact JSON suitable for ``ISEClient.post`` and ``ISEClient.put``.
    """

    __slots__ = ("_data",)

    def __init__(self, data: str | Mapping[str, Any] | None = None) -> None:
        """Initialize the body.

        Args:
            data: Initial content, either JSON text or a mapping. Defaults
                to an empty object.

        Raises:
            ValueError: If ``data`` is a string that is not valid JSON.
        """
        if data is None:
            self._data: Any = {}
        elif isinstance(data, str):
            self._data = json.loads(data) if data.strip() else {}
        else:
            self._data = copy.deepcopy(dict(data))

    def set(self, path: str, value: Any) -> "Body":
        """Set ``value`` (any JSON-serializable object) at ``path``."""
        self._data = _assign(self._data, split_path(path), copy.deepcopy(value))
        return self

    def set_raw(self, path: str, raw: str) -> "Body":
        """Set a value given as JSON text at ``path``.

        Raises:
            ValueError: If ``raw`` is not valid JSON.
        """
        return self.set(path, json.loads(raw))

    def delete(self, path: str) -> "Body":
        """Remove the value at ``path``; absent paths are ignored."""
        _remove(self._data, split_path(path))
        return self

    @property
    def data(self) -> Any:
        """A copy of the payload as Python objects."""
        return copy.deepcopy(self._data)

    def encode(self) -> bytes:
        """UTF-8 encoded JSON payload."""
        return str(self).encode("utf-8")

    def __str__(self) -> str:
        return json.dumps(self._data, separators=(",", ":"), ensure_ascii=False)

    def __repr__(self) -> str:
        return f"Body({self})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Body):
            return NotImplemented
        return self._data == other._data

    __hash__ = None  # type: ignore[assignment]
