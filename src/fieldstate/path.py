"""Paths into a value tree, and the resolver that walks them.

A Path is an ordered tuple of string segments. Whether a segment acts as a
mapping key or a sequence index is decided when it meets a node: against a
mapping it is a key, against a sequence it must be a run of decimal digits.

Dotted strings ("users.0.age") are parsed once at the API boundary; the
resolver and the cells only ever see Path objects.

Usage:
    tree = {"users": [{"age": 30}, {"age": 25}]}
    resolve(tree, Path.parse("users.1.age"))   # 25
    resolve(tree, Path.parse("users.5.age"))   # NOT_FOUND
    set_in(tree, "users.0.age", 31)            # new tree, tree untouched
"""

from __future__ import annotations

from typing import Any, ClassVar, Iterable, Iterator

from fieldstate.errors import PathError
from fieldstate.value import NodeKind, deep_copy, kind_of

SEPARATOR = "."


class _NotFound:
    """Sentinel type for a path that does not resolve."""

    __slots__ = ()
    _instance: ClassVar[_NotFound | None] = None

    def __new__(cls) -> _NotFound:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = _NotFound()


class Path:
    """Immutable, hashable sequence of path segments."""

    __slots__ = ("_segments",)

    ROOT: ClassVar[Path]

    def __init__(self, segments: Iterable[str | int] = ()) -> None:
        if isinstance(segments, str):
            raise PathError(f"Use Path.parse() for dotted strings: {segments!r}", path=segments)
        self._segments: tuple[str, ...] = tuple(_normalize(s) for s in segments)

    @classmethod
    def of(cls, *segments: str | int) -> Path:
        """Path.of("users", 0, "age")"""
        return cls(segments)

    @classmethod
    def parse(cls, text: str) -> Path:
        """Parse the dotted grammar: segment ('.' segment)*."""
        if not isinstance(text, str):
            raise PathError(f"Path must be a string, got {type(text).__name__}", path=text)
        if not text:
            raise PathError("Path must not be empty", path=text)
        parts = text.split(SEPARATOR)
        if any(part == "" for part in parts):
            raise PathError(f"Empty segment in path: {text!r}", path=text)
        return cls(parts)

    @property
    def segments(self) -> tuple[str, ...]:
        return self._segments

    def __iter__(self) -> Iterator[str]:
        return iter(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __bool__(self) -> bool:
        return bool(self._segments)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Path):
            return self._segments == other._segments
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._segments)

    def __str__(self) -> str:
        return SEPARATOR.join(self._segments)

    def __repr__(self) -> str:
        return f"Path({str(self)!r})"


Path.ROOT = Path()


def _normalize(segment: str | int) -> str:
    if isinstance(segment, bool):
        raise PathError(f"Invalid path segment: {segment!r}", path=segment)
    if isinstance(segment, int):
        if segment < 0:
            raise PathError(f"Sequence index must be non-negative: {segment}", path=segment)
        return str(segment)
    if isinstance(segment, str):
        return segment
    raise PathError(f"Invalid path segment: {segment!r}", path=segment)


def as_path(path: Path | str | Iterable[str | int]) -> Path:
    """Accept a Path, a dotted string, or an iterable of segments."""
    if isinstance(path, Path):
        return path
    if isinstance(path, str):
        return Path.parse(path)
    return Path(path)


def _index(segment: str) -> int | None:
    """Parse a sequence index segment. None when it is not decimal digits."""
    if segment.isascii() and segment.isdigit():
        return int(segment)
    return None


def resolve(root: Any, path: Path) -> Any:
    """Walk root along path. Returns the node found, or NOT_FOUND."""
    node = root
    for segment in path:
        kind = kind_of(node)
        if kind is NodeKind.MAPPING:
            if segment not in node:
                return NOT_FOUND
            node = node[segment]
        elif kind is NodeKind.SEQUENCE:
            index = _index(segment)
            if index is None or index >= len(node):
                return NOT_FOUND
            node = node[index]
        elif kind is NodeKind.SCALAR:
            return NOT_FOUND
        else:
            raise AssertionError(f"unhandled node kind: {kind}")
    return node


def set_in(root: Any, path: Path | str, value: Any) -> Any:
    """Return a full copy of root with the node at path replaced by value.

    Missing intermediate mapping keys are created as empty dicts. Sequence
    slots are never created: an index past the end raises PathError, as
    does any segment that lands on a scalar.
    """
    path = as_path(path)
    if not path:
        raise PathError("Cannot set value at an empty path", path=path)
    return _assign(deep_copy(root), path.segments, deep_copy(value), path)


def _assign(node: Any, segments: tuple[str, ...], value: Any, path: Path) -> Any:
    head, rest = segments[0], segments[1:]
    kind = kind_of(node)
    if kind is NodeKind.MAPPING:
        if rest:
            child = node[head] if head in node else {}
            node[head] = _assign(child, rest, value, path)
        else:
            node[head] = value
        return node
    if kind is NodeKind.SEQUENCE:
        index = _index(head)
        if index is None or index >= len(node):
            raise PathError(f"Invalid list index {head!r} in path: {path}", path=path)
        item = _assign(node[index], rest, value, path) if rest else value
        if isinstance(node, tuple):
            return node[:index] + (item,) + node[index + 1:]
        node[index] = item
        return node
    if kind is NodeKind.SCALAR:
        raise PathError(f"Cannot navigate path {path}: {head!r} is applied to a scalar", path=path)
    raise AssertionError(f"unhandled node kind: {kind}")
