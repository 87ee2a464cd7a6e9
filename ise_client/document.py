"""Path-queryable JSON documents.

Every completed HTTP exchange is exposed to callers as a Document: the raw
response text plus a read-only view of the parsed JSON that can be queried
with dot-separated paths. Queries never raise; an absent field resolves to
a "missing" Result whose conversions return zero values.

Path syntax:
    - ``a.b.c``: object key traversal.
    - ``items.0.name``: numeric segments index into arrays.
    - ``items.#``: as the last segment, the length of the array.
    - ``items.#.name``: projects the rest of the path across every element
      of the array and collects the matches into a new array.
    - ``*`` and ``?`` inside a segment match object keys like shell globs;
      the first matching key wins.
    - ``\\.`` escapes a literal dot (``\\*`` and ``\\?`` likewise).

Example:
    >>> doc = Document('{"collection": {"items": [{"name": "x"}, {"name": "y"}]}}')
    >>> doc.get("collection.items.#.name").value()
    ['x', 'y']
    >>> doc.get("collection.items.#").as_int()
    2
    >>> doc.get("a.b.c").exists
    False
"""

import copy
import json
import math
from fnmatch import fnmatchcase
from typing import Any, Iterator, Mapping, NamedTuple


class _Missing:
    """Sentinel type for values absent from a document."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "<missing>"


MISSING: Any = _Missing()

_GLOB_CHARS = {"*", "?", "["}
_TRUE_STRINGS = {"1", "t", "true"}


class PathSegment(NamedTuple):
    """One dot-separated component of a query path.

    Attributes:
        key: The literal key with escapes removed.
        pattern: An fnmatch pattern when the segment holds an unescaped
            wildcard, otherwise None.
    """

    key: str
    pattern: str | None = None


def parse_path(path: str) -> list[PathSegment]:
    """Split a query path into segments, honouring backslash escapes.

    Args:
        path: Dot-separated path string.

    Returns:
        The list of segments in traversal order.
    """
    segments: list[PathSegment] = []
    key: list[str] = []
    pattern: list[str] = []
    wildcard = False
    escaped = False

    for char in path:
        if escaped:
            key.append(char)
            pattern.append(f"[{char}]" if char in _GLOB_CHARS else char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == ".":
            segments.append(PathSegment("".join(key), "".join(pattern) if wildcard else None))
            key, pattern, wildcard = [], [], False
        else:
            key.append(char)
            if char in ("*", "?"):
                wildcard = True
                pattern.append(char)
            else:
                pattern.append(f"[{char}]" if char == "[" else char)

    if escaped:
        key.append("\\")
        pattern.append("\\")
    segments.append(PathSegment("".join(key), "".join(pattern) if wildcard else None))
    return segments


def split_path(path: str) -> list[str]:
    """Split a path into its literal keys (escapes removed, no wildcards)."""
    return [segment.key for segment in parse_path(path)]


def is_index(key: str) -> bool:
    """Return True if a path segment addresses an array position."""
    return key.isascii() and key.isdigit()


def _resolve(value: Any, segments: list[PathSegment]) -> Any:
    if not segments:
        return value

    head, rest = segments[0], segments[1:]

    if isinstance(value, list):
        if head.key == "#" and head.pattern is None:
            if not rest:
                return len(value)
            projected = []
            for item in value:
                found = _resolve(item, rest)
                if found is not MISSING:
                    projected.append(found)
            return projected
        if is_index(head.key):
            index = int(head.key)
            if index < len(value):
                return _resolve(value[index], rest)
        return MISSING

    if isinstance(value, dict):
        if head.pattern is not None:
            for key, item in value.items():
                if fnmatchcase(key, head.pattern):
                    return _resolve(item, rest)
            return MISSING
        if head.key in value:
            return _resolve(value[head.key], rest)
        return MISSING

    return MISSING


def _compact(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _number_from_string(text: str) -> float | None:
    try:
        number = float(text.strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


class Result:
    """A read-only value located inside a Document.

    Conversions are best effort: asking for a type the value does not have
    returns that type's zero value instead of raising.
    """

    __slots__ = ("_value",)

    def __init__(self, value: Any = MISSING) -> None:
        self._value = value

    @property
    def exists(self) -> bool:
        """Whether the path resolved to a value (JSON null counts as a value)."""
        return self._value is not MISSING

    @property
    def type(self) -> str:
        """JSON type name: null, bool, number, string, array, object or missing."""
        value = self._value
        if value is MISSING:
            return "missing"
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "bool"
        if isinstance(value, (int, float)):
            return "number"
        if isinstance(value, str):
            return "string"
        if isinstance(value, list):
            return "array"
        return "object"

    @property
    def raw(self) -> str:
        """Compact JSON text of the value, or an empty string when missing."""
        if self._value is MISSING:
            return ""
        return _compact(self._value)

    def get(self, path: str) -> "Result":
        """Resolve a path relative to this value.

        Args:
            path: Dot-separated query path.

        Returns:
            The located Result; a missing Result if any segment is absent.
        """
        if not path or self._value is MISSING:
            return Result()
        return Result(_resolve(self._value, parse_path(path)))

    def value(self) -> Any:
        """Return a copy of the underlying Python value (None when missing)."""
        if self._value is MISSING:
            return None
        return copy.deepcopy(self._value)

    def as_str(self) -> str:
        value = self._value
        if value is MISSING or value is None:
            return ""
        if isinstance(value, str):
            return value
        return _compact(value)

    def as_int(self) -> int:
        value = self._value
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value) if math.isfinite(value) else 0
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                number = _number_from_string(value)
                return int(number) if number is not None else 0
        return 0

    def as_float(self) -> float:
        value = self._value
        if isinstance(value, (bool, int, float)):
            return float(value)
        if isinstance(value, str):
            number = _number_from_string(value)
            return number if number is not None else 0.0
        return 0.0

    def as_bool(self) -> bool:
        value = self._value
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value != 0
        if isinstance(value, str):
            return value.strip().lower() in _TRUE_STRINGS
        return False

    def as_list(self) -> list["Result"]:
        """Return array elements as Results.

        Null and missing values give an empty list; any other non-array value
        gives a single-element list containing this Result.
        """
        value = self._value
        if value is MISSING or value is None:
            return []
        if isinstance(value, list):
            return [Result(item) for item in value]
        return [self]

    def as_dict(self) -> dict[str, "Result"]:
        """Return object members as Results; empty for anything but an object."""
        if isinstance(self._value, dict):
            return {key: Result(item) for key, item in self._value.items()}
        return {}

    def pretty(self, indent: int = 2) -> str:
        """Indented JSON text for diagnostics."""
        if self._value is MISSING:
            return ""
        return json.dumps(self._value, indent=indent, ensure_ascii=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return self._value == other._value and self.exists == other.exists

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return self.as_str()

    def __repr__(self) -> str:
        if self._value is MISSING:
            return f"{type(self).__name__}(<missing>)"
        return f"{type(self).__name__}({self.raw})"


class ResponseHeaders(Mapping[str, str]):
    """Read-only, case-insensitive snapshot of response headers.

    Repeated headers are joined with ", " as httpx does for ``Headers.items``.
    """

    __slots__ = ("_store",)

    def __init__(self, headers: Mapping[str, str] | None = None) -> None:
        self._store = {name.lower(): (name, value) for name, value in (headers or {}).items()}

    def __getitem__(self, key: str) -> str:
        return self._store[key.lower()][1]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._store

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"


def _parse(text: str) -> Any:
    if not text.strip():
        return MISSING
    try:
        return json.loads(text)
    except ValueError:
        return MISSING


class Document(Result):
    """The parsed body of one HTTP exchange.

    Malformed or empty bodies produce a Document whose queries all resolve
    to missing; construction itself never fails.

    Attributes:
        status_code: HTTP status of the exchange, if one was received.
        headers: Case-insensitive snapshot of the response headers.
    """

    __slots__ = ("_text", "_status_code", "_headers")

    def __init__(
        self,
        text: str = "",
        *,
        status_code: int | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(_parse(text))
        self._text = text
        self._status_code = status_code
        self._headers = ResponseHeaders(headers)

    @classmethod
    def from_bytes(
        cls,
        content: bytes,
        *,
        status_code: int | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> "Document":
        """Build a Document from a raw response body."""
        return cls(
            content.decode("utf-8", errors="replace"),
            status_code=status_code,
            headers=headers,
        )

    @property
    def status_code(self) -> int | None:
        return self._status_code

    @property
    def headers(self) -> ResponseHeaders:
        return self._headers

    @property
    def raw(self) -> str:
        """The response text exactly as received."""
        return self._text

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Document):
            return self._text == other._text and self.status_code == other.status_code
        return super().__eq__(other)

    __hash__ = None  # type: ignore[assignment]
