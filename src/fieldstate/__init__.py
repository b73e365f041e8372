"""fieldstate: reactive state cells with path-level change notification."""

from importlib.metadata import version as _version

__version__ = _version("fieldstate")

from fieldstate.errors import StateError, NotFoundError, TypeMismatchError, PathError, DisposedError
from fieldstate.value import NodeKind, kind_of, deep_equal, deep_copy
from fieldstate.path import Path, NOT_FOUND, as_path, resolve, set_in
from fieldstate.cell import StateCell, ComplexStateCell, Observer, Unsubscribe
from fieldstate.store import Store, Registration, default_store
from fieldstate.async_state import AsyncState, AsyncStatus, execute
from fieldstate import keys
# textual NOT auto-imported — opt-in only

__all__ = [
    "StateError",
    "NotFoundError",
    "TypeMismatchError",
    "PathError",
    "DisposedError",
    "NodeKind",
    "kind_of",
    "deep_equal",
    "deep_copy",
    "Path",
    "NOT_FOUND",
    "as_path",
    "resolve",
    "set_in",
    "StateCell",
    "ComplexStateCell",
    "Observer",
    "Unsubscribe",
    "Store",
    "Registration",
    "default_store",
    "AsyncState",
    "AsyncStatus",
    "execute",
    "keys",
]
