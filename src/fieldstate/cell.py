"""Cells — a current value plus the observers that want to hear about it.

StateCell notifies whole-value observers. ComplexStateCell holds a nested
tree and also notifies observers of a single path, only when the sub-value
at that path actually changed.

Every update is gated by deep_equal(): writing a value equal to the current
one notifies nobody.

Notification is synchronous and runs inside update(). Within one update,
whole-value observers run first, then path groups in the order they were
first subscribed, each group in subscription order. An observer removed
during a round is never called after its removal. An observer that raises
aborts the rest of the round and the exception reaches the caller of
update(); the new value has already been committed.

An update made from inside an observer commits its value at once, but its
round is queued and runs after the current round finishes, so every
observer sees values in call order and its last notification matches the
cell. If an observer raises, queued rounds are dropped along with the rest
of the current round. Disposing the cell from an observer ends the round.

Each cell serializes its own updates with a re-entrant lock, so a
multithreaded host cannot interleave two rounds on one cell.

Usage:
    cell = ComplexStateCell({"user": {"name": "J", "age": 30}})
    cell.subscribe_path("user.age", lambda age: print("age", age))
    cell.update_field("user.name", "K")   # age observer stays quiet
    cell.update_field("user.age", 31)     # prints "age 31"
"""

from __future__ import annotations

import collections
import itertools
import threading
from typing import Any, Callable, Generic, TypeVar

from fieldstate.errors import DisposedError
from fieldstate.path import NOT_FOUND, Path, as_path, resolve, set_in
from fieldstate.value import deep_equal

T = TypeVar("T")

Observer = Callable[[Any], None]
Unsubscribe = Callable[[], None]

# Subscription tokens are unique across all cells.
_token_counter = itertools.count(1)


def _deliver(group: dict[int, Observer], value: Any) -> None:
    """Call every observer in group, skipping any removed mid-round."""
    for token, observer in list(group.items()):
        if token in group:
            observer(value)


class StateCell(Generic[T]):
    """A single value with whole-value change notification."""

    __slots__ = ("_value", "_observers", "_disposed", "_lock", "_pending", "_notifying")

    def __init__(self, value: T) -> None:
        self._value = value
        self._observers: dict[int, Observer] = {}
        self._disposed = False
        self._lock = threading.RLock()
        self._pending: collections.deque[tuple[T, T]] = collections.deque()
        self._notifying = False

    @property
    def value(self) -> T:
        self._check_alive()
        return self._value

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def subscribe_whole(self, observer: Callable[[T], None]) -> Unsubscribe:
        """Call observer(new_value) on every change. Returns an unsubscribe function."""
        with self._lock:
            self._check_alive()
            token = next(_token_counter)
            self._observers[token] = observer

        def _unsubscribe() -> None:
            with self._lock:
                self._observers.pop(token, None)

        return _unsubscribe

    def update(self, new_value: T) -> None:
        """Replace the value and notify, unless new_value deep-equals the current one."""
        with self._lock:
            self._check_alive()
            old_value = self._value
            if deep_equal(old_value, new_value):
                return
            self._value = new_value
            self._pending.append((old_value, new_value))
            if self._notifying:
                return
            self._notifying = True
            try:
                while self._pending and not self._disposed:
                    old, new = self._pending.popleft()
                    self._notify(old, new)
            finally:
                self._notifying = False
                self._pending.clear()

    def update_with(self, fn: Callable[[T], T]) -> None:
        """update(fn(current_value))"""
        with self._lock:
            self.update(fn(self.value))

    def dispose(self) -> None:
        """Drop all observers. Later reads and writes raise DisposedError."""
        with self._lock:
            self._disposed = True
            self._observers.clear()

    def _notify(self, old_value: T, new_value: T) -> None:
        _deliver(self._observers, new_value)

    def _check_alive(self) -> None:
        if self._disposed:
            raise DisposedError(f"{type(self).__name__} has been disposed")

    def __repr__(self) -> str:
        if self._disposed:
            return f"{type(self).__name__}(<disposed>)"
        return f"{type(self).__name__}({self._value!r})"


class ComplexStateCell(StateCell[T]):
    """A nested value tree with whole-value and per-path notification.

    Path groups are created on the first subscription to a path and removed
    when the last subscriber to that path unsubscribes.
    """

    __slots__ = ("_paths",)

    def __init__(self, value: T) -> None:
        super().__init__(value)
        self._paths: dict[Path, dict[int, Observer]] = {}

    @property
    def path_count(self) -> int:
        return len(self._paths)

    def subscribed_paths(self) -> list[Path]:
        return list(self._paths)

    def path_ref_count(self, path: Path | str) -> int:
        group = self._paths.get(as_path(path))
        return len(group) if group is not None else 0

    def subscribe_path(self, path: Path | str, observer: Callable[[Any], None]) -> Unsubscribe:
        """Call observer(sub_value) whenever the value at path changes.

        Changes are only reported when path resolves both before and after
        the update; a path that appears or disappears notifies nothing.
        """
        path = as_path(path)
        with self._lock:
            self._check_alive()
            token = next(_token_counter)
            self._paths.setdefault(path, {})[token] = observer

        def _unsubscribe() -> None:
            with self._lock:
                group = self._paths.get(path)
                if group is None or token not in group:
                    return
                del group[token]
                if not group:
                    del self._paths[path]

        return _unsubscribe

    def get_field(self, path: Path | str, default: Any = None) -> Any:
        """The sub-value at path, or default when the path does not resolve."""
        found = resolve(self.value, as_path(path))
        return default if found is NOT_FOUND else found

    def update_field(self, path: Path | str, value: Any) -> None:
        """Copy the whole tree, set the node at path, then update() with the copy.

        Raises PathError for a path through a scalar or past the end of a
        sequence; the current value is left untouched in that case.
        """
        with self._lock:
            self.update(set_in(self.value, path, value))

    def _notify(self, old_value: T, new_value: T) -> None:
        _deliver(self._observers, new_value)
        for path, group in list(self._paths.items()):
            if self._disposed:
                return
            old_field = resolve(old_value, path)
            new_field = resolve(new_value, path)
            if old_field is NOT_FOUND or new_field is NOT_FOUND:
                continue
            if not deep_equal(old_field, new_field):
                _deliver(group, new_field)

    def dispose(self) -> None:
        with self._lock:
            super().dispose()
            for group in self._paths.values():
                group.clear()
            self._paths.clear()
