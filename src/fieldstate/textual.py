"""Textual integration for fieldstate. Opt-in — requires textual.

Binds cell notifications to widget updates. Every effect is guarded: it is
skipped while the app is not running or is paused for widget replacement,
NoMatches from widget queries is swallowed, and notifications raised on a
background thread are marshaled through app.call_from_thread.

Usage:
    class ProfileScreen(Screen):
        def on_mount(self):
            cell = store.get_complex("profile")
            self._unbind = stx.bind_path(
                self.app, cell, "user.name",
                lambda name: self.query_one("#name", Label).update(name),
                fire_immediately=True,
            )

        def on_unmount(self):
            self._unbind()
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Callable

from textual.css.query import NoMatches

from fieldstate.cell import ComplexStateCell, StateCell, Unsubscribe
from fieldstate.path import NOT_FOUND, Path, as_path, resolve

# Module-owned pause state, keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend bound effects during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def _guard(app, effect: Callable[[Any], None]) -> Callable[[Any], None]:
    main = threading.get_ident()

    def _safe(value):
        try:
            effect(value)
        except NoMatches:
            pass

    def _guarded(value):
        if not is_safe(app):
            return
        if threading.get_ident() != main:
            app.call_from_thread(_safe, value)
        else:
            _safe(value)

    return _guarded


def bind(app, cell: StateCell, effect: Callable[[Any], None], *, fire_immediately: bool = False) -> Unsubscribe:
    """Run effect(value) whenever the cell's value changes."""
    guarded = _guard(app, effect)
    unsubscribe = cell.subscribe_whole(guarded)
    if fire_immediately:
        guarded(cell.value)
    return unsubscribe


def bind_path(
    app,
    cell: ComplexStateCell,
    path: Path | str,
    effect: Callable[[Any], None],
    *,
    fire_immediately: bool = False,
) -> Unsubscribe:
    """Run effect(sub_value) whenever the value at path changes.

    With fire_immediately, the current sub-value is delivered right away
    when the path resolves.
    """
    path = as_path(path)
    guarded = _guard(app, effect)
    unsubscribe = cell.subscribe_path(path, guarded)
    if fire_immediately:
        current = resolve(cell.value, path)
        if current is not NOT_FOUND:
            guarded(current)
    return unsubscribe
