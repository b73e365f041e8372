"""Exception hierarchy for fieldstate.

Every failure is raised synchronously at the call site. Each class also
derives from the closest builtin so callers can catch `KeyError` or
`ValueError` without importing this module.
"""

from __future__ import annotations


class StateError(Exception):
    """Base exception for all fieldstate errors."""


class NotFoundError(StateError, KeyError):
    """No entry is registered under the requested key."""

    def __init__(self, key: str, *, namespace: str = "state") -> None:
        self.key = key
        self.namespace = namespace
        super().__init__(f"{namespace.capitalize()} with key {key!r} not found. Register it first.")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message.
        return self.args[0]


class TypeMismatchError(StateError, TypeError):
    """A stored value is used as a type it is not."""

    def __init__(self, key: str, expected: type, actual: type) -> None:
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Type mismatch for {key!r}: expected {expected.__name__}, got {actual.__name__}"
        )


class PathError(StateError, ValueError):
    """A path cannot be parsed, traversed, or written."""

    def __init__(self, message: str, *, path: object = None) -> None:
        self.path = path
        super().__init__(message)


class DisposedError(StateError, RuntimeError):
    """Operation on a cell that has already been disposed."""
