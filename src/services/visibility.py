"""Visibility filtering: drop content authored by users the viewer blocked."""
from __future__ import annotations

from collections.abc import Collection, Iterable, Mapping
from typing import Any, Callable, Optional, TypeVar

T = TypeVar("T")


def author_of(item: Any) -> Optional[str]:
    """Author id of a feed item: ``user_id``/``userId`` key, or a ``user_id`` attribute."""
    if isinstance(item, Mapping):
        return item.get("user_id", item.get("userId"))
    return getattr(item, "user_id", None)


def filter_visible(
    items: Iterable[T],
    blocked_ids: Collection[str],
    author: Callable[[T], Optional[str]] = author_of,
) -> list[T]:
    """Items whose author is not in ``blocked_ids``, in their original order.

    Pure: neither ``items`` nor ``blocked_ids`` is modified. Items without a
    resolvable author are kept.
    """
    if not blocked_ids:
        return list(items)
    return [item for item in items if author(item) not in blocked_ids]
