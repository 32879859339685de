from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Generic, Mapping, Sequence, TypeVar

from .config import PAGE_SIZES

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Cursor:
    page: int = 1
    per_page: int = 25


@dataclass(frozen=True, slots=True)
class Page(Generic[T]):
    items: list[T]
    page: int
    per_page: int
    total_pages: int
    total_items: int = 0


Cursors = Mapping[str, Cursor]


def default_cursors() -> dict[str, Cursor]:
    return {view: Cursor(page=1, per_page=size) for view, size in PAGE_SIZES.items()}


def _cursor(cursors: Cursors, view: str) -> Cursor:
    if view not in PAGE_SIZES:
        raise ValueError(f"Unknown pagination view: {view}")
    return cursors.get(view) or Cursor(page=1, per_page=PAGE_SIZES[view])


def total_pages(count: int, per_page: int) -> int:
    return math.ceil(count / per_page) if per_page > 0 else 0


def get_page(cursors: Cursors, view: str, items: Sequence[T]) -> Page[T]:
    """Slice ``items`` for ``view``; an out-of-range page yields an empty slice."""
    cursor = _cursor(cursors, view)
    start = (cursor.page - 1) * cursor.per_page
    end = cursor.page * cursor.per_page
    sliced = list(items[start:end]) if start >= 0 else []
    return Page(
        items=sliced,
        page=cursor.page,
        per_page=cursor.per_page,
        total_pages=total_pages(len(items), cursor.per_page),
        total_items=len(items),
    )


def set_page(cursors: Cursors, view: str, page: int) -> dict[str, Cursor]:
    cursor = _cursor(cursors, view)
    updated = dict(cursors)
    updated[view] = replace(cursor, page=page)
    return updated


def set_per_page(cursors: Cursors, view: str, per_page: int) -> dict[str, Cursor]:
    if per_page <= 0:
        raise ValueError("per_page must be positive")
    cursor = _cursor(cursors, view)
    updated = dict(cursors)
    updated[view] = replace(cursor, page=1, per_page=per_page)
    return updated


def reset_page(cursors: Cursors, view: str) -> dict[str, Cursor]:
    return set_page(cursors, view, 1)


def reset_all(cursors: Cursors) -> dict[str, Cursor]:
    updated = default_cursors()
    for view, cursor in cursors.items():
        updated[view] = replace(cursor, page=1)
    return updated


def clamp_page(page: int, pages: int) -> int:
    return max(1, min(page, max(pages, 1)))


def page_window(current: int, total: int, max_visible: int = 5) -> list[int | None]:
    """Page buttons to show; ``None`` marks an ellipsis.

    A window of up to ``max_visible`` pages is centred on ``current`` and the
    first and last pages are always reachable.
    """
    if total <= 1:
        return []
    start = max(1, current - max_visible // 2)
    end = min(total, start + max_visible - 1)
    if end - start + 1 < max_visible:
        start = max(1, end - max_visible + 1)

    buttons: list[int | None] = []
    if start > 1:
        buttons.append(1)
        if start > 2:
            buttons.append(None)
    buttons.extend(range(start, end + 1))
    if end < total:
        if end < total - 1:
            buttons.append(None)
        buttons.append(total)
    return buttons
