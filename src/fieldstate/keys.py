"""Helpers for hierarchical store keys such as "checkout.cart.items"."""

from __future__ import annotations

from typing import Iterable

SEPARATOR = "."


def create(parts: Iterable[str]) -> str:
    return SEPARATOR.join(parts)


def parts(key: str) -> list[str]:
    return key.split(SEPARATOR)


def parent(key: str) -> str | None:
    """The key one level up, or None for a top-level key."""
    segments = parts(key)
    if len(segments) <= 1:
        return None
    return create(segments[:-1])


def name(key: str) -> str:
    """The last part of the key."""
    return parts(key)[-1]


def is_child_of(child_key: str, parent_key: str) -> bool:
    """True for any descendant, not only direct children."""
    return child_key.startswith(parent_key + SEPARATOR)


def for_feature(feature: str, name: str) -> str:
    return create([feature, name])


def for_subfeature(feature: str, subfeature: str, name: str) -> str:
    return create([feature, subfeature, name])
