"""Page slicing and the page-number window shown by the pager."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any, NamedTuple


class PageSlice(NamedTuple):
    """The records on one page and the page count for the whole list."""

    slice: list[Any]
    total_pages: int


def total_pages(total_items: int, page_size: int) -> int:
    if page_size < 1:
        raise ValueError("page_size must be a positive integer")
    return max(1, math.ceil(total_items / page_size))


def paginate(records: Sequence[Any], page: int, page_size: int) -> PageSlice:
    """Slice ``records`` for 1-based ``page``.

    ``page`` is not clamped: out-of-range values (including zero and
    negatives) give an empty slice. Callers clamp with ``total_pages``.
    """

    pages = total_pages(len(records), page_size)
    if page < 1:
        return PageSlice([], pages)
    return PageSlice(list(records[(page - 1) * page_size : page * page_size]), pages)


def clamp_page(page: int, pages: int) -> int:
    return max(1, min(page, pages))


def page_window(current_page: int, pages: int, *, max_visible: int = 5) -> list[int]:
    """Page numbers to show as buttons, centered on ``current_page`` where possible."""

    if max_visible < 1:
        raise ValueError("max_visible must be a positive integer")
    start = max(1, current_page - max_visible // 2)
    end = start + max_visible - 1
    if end > pages:
        end = pages
        start = max(1, end - max_visible + 1)
    return list(range(start, end + 1))


__all__ = ["PageSlice", "clamp_page", "page_window", "paginate", "total_pages"]
