"""Store — a keyed, reference-counted registry of cells.

A Store has two independent namespaces: plain StateCells and
ComplexStateCells. The same key may name one cell of each kind.

register() creates the cell on first use and counts holders; the initial
value of a repeated registration is ignored, so a second consumer of the
same logical state never resets it. The cell is disposed when the last
holder unregisters.

register() returns a Registration scope handle. Releasing it (explicitly or
by leaving its `with` block) unregisters exactly once.

Usage:
    store = Store.named("checkout")

    with store.register_complex("cart", {"items": [], "total": 0}) as cart:
        cart.subscribe_path("total", lambda total: print("total", total))
        store.update_field("cart", "total", 10)   # prints "total 10"

    store.has_complex("cart")   # False, the only holder released it

default_store is the process-wide instance. It is an ordinary Store; tests
and features may create their own with Store.named().
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Generic, TypeVar

from fieldstate.cell import ComplexStateCell, StateCell
from fieldstate.errors import NotFoundError, TypeMismatchError
from fieldstate.path import Path

logger = logging.getLogger("fieldstate.store")

C = TypeVar("C", bound=StateCell)


class _Entry:
    __slots__ = ("cell", "ref_count")

    def __init__(self, cell: StateCell) -> None:
        self.cell = cell
        self.ref_count = 0


class _Namespace:
    """Entries of one cell kind."""

    __slots__ = ("label", "factory", "entries")

    def __init__(self, label: str, factory: Callable[[Any], StateCell]) -> None:
        self.label = label
        self.factory = factory
        self.entries: dict[str, _Entry] = {}


class Registration(Generic[C]):
    """One holder's claim on a store entry.

    release() is idempotent and only ever affects the entry it was issued
    for: once that entry is gone (last holder released, or dispose_all()),
    releasing is a no-op even if the key has been registered again.

    A holder that keeps its Registration should release through it and not
    also call Store.unregister(); the store counts claims, not holders.
    """

    __slots__ = ("_store", "_namespace", "_key", "_entry", "_released")

    def __init__(self, store: Store, namespace: _Namespace, key: str, entry: _Entry) -> None:
        self._store = store
        self._namespace = namespace
        self._key = key
        self._entry = entry
        self._released = False

    @property
    def key(self) -> str:
        return self._key

    @property
    def cell(self) -> C:
        return self._entry.cell

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        with self._store._lock:
            if self._released:
                return
            self._released = True
            if self._namespace.entries.get(self._key) is not self._entry:
                return
            cell = self._store._release_entry(self._namespace, self._key)
        if cell is not None:
            cell.dispose()

    def __enter__(self) -> C:
        return self.cell

    def __exit__(self, *exc_info) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "released" if self._released else "held"
        return f"Registration({self._namespace.label} {self._key!r}, {state})"


class Store:
    """Keyed registry of StateCells and ComplexStateCells."""

    def __init__(self, name: str = "global") -> None:
        self.name = name
        self._lock = threading.RLock()
        self._states = _Namespace("state", StateCell)
        self._complex_states = _Namespace("complex state", ComplexStateCell)

    @classmethod
    def named(cls, name: str) -> Store:
        """A new store, isolated from every other store."""
        return cls(name)

    # --- Shared namespace machinery ---

    def _register(self, namespace: _Namespace, key: str, initial: Any) -> Registration:
        with self._lock:
            entry = namespace.entries.get(key)
            if entry is None:
                entry = _Entry(namespace.factory(initial))
                namespace.entries[key] = entry
            entry.ref_count += 1
            logger.debug(
                "Store %r: registered %s %r, ref count: %d",
                self.name, namespace.label, key, entry.ref_count,
            )
            return Registration(self, namespace, key, entry)

    def _release_entry(self, namespace: _Namespace, key: str) -> StateCell | None:
        """Drop one holder. Returns the cell to dispose when it was the last one.

        The caller disposes the cell after letting go of the store lock:
        dispose() takes the cell lock, and an observer running under the
        cell lock may call back into the store.
        """
        with self._lock:
            entry = namespace.entries.get(key)
            if entry is None:
                logger.debug("Store %r: unregister of unknown %s %r ignored", self.name, namespace.label, key)
                return None
            entry.ref_count -= 1
            logger.debug(
                "Store %r: unregistered %s %r, ref count: %d",
                self.name, namespace.label, key, entry.ref_count,
            )
            if entry.ref_count > 0:
                return None
            del namespace.entries[key]
            logger.debug("Store %r: disposed %s %r", self.name, namespace.label, key)
            return entry.cell

    def _unregister(self, namespace: _Namespace, key: str) -> None:
        cell = self._release_entry(namespace, key)
        if cell is not None:
            cell.dispose()

    def _get(self, namespace: _Namespace, key: str, type_: type | None) -> StateCell:
        with self._lock:
            entry = namespace.entries.get(key)
            if entry is None:
                raise NotFoundError(key, namespace=namespace.label)
            cell = entry.cell
        if type_ is not None and not isinstance(cell.value, type_):
            raise TypeMismatchError(key, type_, type(cell.value))
        return cell

    def _has(self, namespace: _Namespace, key: str) -> bool:
        with self._lock:
            return key in namespace.entries

    def _keys(self, namespace: _Namespace) -> list[str]:
        with self._lock:
            return list(namespace.entries)

    def _ref_count(self, namespace: _Namespace, key: str) -> int:
        with self._lock:
            entry = namespace.entries.get(key)
            return entry.ref_count if entry is not None else 0

    # --- Scalar states ---

    def register(self, key: str, initial: Any) -> Registration[StateCell]:
        return self._register(self._states, key, initial)

    def has(self, key: str) -> bool:
        return self._has(self._states, key)

    def get(self, key: str, type_: type | None = None) -> StateCell:
        """The cell under key. NotFoundError if absent; TypeMismatchError if
        type_ is given and the value is not an instance of it."""
        return self._get(self._states, key, type_)

    def get_value(self, key: str, type_: type | None = None) -> Any:
        return self.get(key, type_).value

    def set_value(self, key: str, value: Any) -> None:
        self.get(key).update(value)

    def update_value(self, key: str, fn: Callable[[Any], Any]) -> None:
        self.get(key).update_with(fn)

    def unregister(self, key: str) -> None:
        """Drop one holder of key.

        Holders release either through their Registration or through
        unregister(), never both: unregister() cannot tell holders apart, so
        a holder that does both drops two claims.
        """
        self._unregister(self._states, key)

    def ref_count(self, key: str) -> int:
        return self._ref_count(self._states, key)

    def keys(self) -> list[str]:
        return self._keys(self._states)

    # --- Complex states ---

    def register_complex(self, key: str, initial: Any) -> Registration[ComplexStateCell]:
        return self._register(self._complex_states, key, initial)

    def has_complex(self, key: str) -> bool:
        return self._has(self._complex_states, key)

    def get_complex(self, key: str, type_: type | None = None) -> ComplexStateCell:
        return self._get(self._complex_states, key, type_)

    def get_complex_value(self, key: str, type_: type | None = None) -> Any:
        return self.get_complex(key, type_).value

    def set_complex_value(self, key: str, value: Any) -> None:
        self.get_complex(key).update(value)

    def update_complex_value(self, key: str, fn: Callable[[Any], Any]) -> None:
        self.get_complex(key).update_with(fn)

    def update_field(self, key: str, path: Path | str, value: Any) -> None:
        """Set the node at path inside the complex state under key."""
        self.get_complex(key).update_field(path, value)

    def unregister_complex(self, key: str) -> None:
        """Drop one holder of the complex state under key. See unregister()."""
        self._unregister(self._complex_states, key)

    def complex_ref_count(self, key: str) -> int:
        return self._ref_count(self._complex_states, key)

    def complex_keys(self) -> list[str]:
        return self._keys(self._complex_states)

    # --- Whole store ---

    def dispose_all(self) -> None:
        """Dispose every cell in both namespaces and forget all entries."""
        with self._lock:
            cells = []
            for namespace in (self._states, self._complex_states):
                cells.extend(entry.cell for entry in namespace.entries.values())
                namespace.entries.clear()
            logger.debug("Store %r: disposed all (%d entries)", self.name, len(cells))
        for cell in cells:
            cell.dispose()

    # Aliases kept from the original API.
    def reset_state(self, key: str) -> None:
        self.unregister(key)

    def reset_complex_state(self, key: str) -> None:
        self.unregister_complex(key)

    def clear_all_states(self) -> None:
        self.dispose_all()

    def __repr__(self) -> str:
        return (
            f"Store({self.name!r}, states={len(self._states.entries)}, "
            f"complex_states={len(self._complex_states.entries)})"
        )


default_store = Store("global")
