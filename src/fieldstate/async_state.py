"""Status tracking for asynchronous operations, stored in a plain state cell.

Usage:
    async def load_profile():
        ...

    await execute("profile.load", load_profile, store=store)
    store.get_value("profile.load").is_success
"""

from __future__ import annotations

import dataclasses
import enum
import logging
from typing import Any, Awaitable, Callable, Generic, TypeVar

from fieldstate.store import Store, default_store

logger = logging.getLogger("fieldstate.async_state")

T = TypeVar("T")

_UNSET: Any = object()


class AsyncStatus(enum.Enum):
    INITIAL = "initial"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclasses.dataclass(frozen=True)
class AsyncState(Generic[T]):
    status: AsyncStatus = AsyncStatus.INITIAL
    data: T | None = None
    error: BaseException | None = None

    def copy_with(
        self,
        *,
        status: AsyncStatus = _UNSET,
        data: T | None = _UNSET,
        error: BaseException | None = None,
    ) -> AsyncState[T]:
        """Copy with changes. error is always replaced, so omitting it clears it."""
        return AsyncState(
            status=self.status if status is _UNSET else status,
            data=self.data if data is _UNSET else data,
            error=error,
        )

    @property
    def is_initial(self) -> bool:
        return self.status is AsyncStatus.INITIAL

    @property
    def is_loading(self) -> bool:
        return self.status is AsyncStatus.LOADING

    @property
    def is_success(self) -> bool:
        return self.status is AsyncStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status is AsyncStatus.ERROR


async def execute(
    key: str,
    fn: Callable[[], Awaitable[T]],
    *,
    store: Store | None = None,
    on_success: Callable[[T], None] | None = None,
    on_error: Callable[[Exception], None] | None = None,
) -> AsyncState[T]:
    """Run fn() and mirror its progress into the state under key.

    The state is registered with AsyncState() if the key is not in the
    store yet. It moves to LOADING, then to SUCCESS with the result or to
    ERROR with the exception. Exceptions are captured in the state rather
    than raised; cancellation still propagates.
    """
    store = store if store is not None else default_store
    if not store.has(key):
        store.register(key, AsyncState())

    store.set_value(key, AsyncState(status=AsyncStatus.LOADING))
    try:
        result = await fn()
    except Exception as exc:
        logger.debug("Async operation %r failed: %r", key, exc)
        state = AsyncState(status=AsyncStatus.ERROR, error=exc)
        store.set_value(key, state)
        if on_error is not None:
            on_error(exc)
        return state

    state = AsyncState(status=AsyncStatus.SUCCESS, data=result)
    store.set_value(key, state)
    if on_success is not None:
        on_success(result)
    return state
