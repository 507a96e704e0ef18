"""
Page slicing for event tables.

PURPOSE: Split an ordered list into fixed-size pages with clamped navigation.
AI CONTEXT: Pure function; an out-of-range page number is clamped, never an error.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

from .errors import InvalidArgument
from .models import PaginatedPage

__all__ = ["paginate", "page_bounds"]


def paginate(items: Sequence[Any], page_size: int, page_number: int) -> PaginatedPage:
    """
    Return one page of items.

    total_pages = ceil(len(items) / page_size), at least 1, and page_number
    is clamped into [1, total_pages]. A non-empty list therefore never
    yields an empty page, and an empty list yields page 1 of 1.

    Business context: The recent fatigue events table has Previous/Next
    buttons. Clamping means a stale page number (for example after a date
    filter shrank the result) still shows real rows instead of a blank table.

    Args:
        items: Ordered items (newest first for event tables).
        page_size: Rows per page, >= 1.
        page_number: Requested 1-based page.

    Returns:
        PaginatedPage with the slice and the clamped page number.

    Raises:
        InvalidArgument: If page_size < 1.

    Example:
        >>> page = paginate(list(range(23)), 10, 9)
        >>> page.page_number, page.total_pages, page.items
        (3, 3, [20, 21, 22])
    """
    if page_size < 1:
        raise InvalidArgument(f"page_size must be >= 1, got {page_size}")

    total_items = len(items)
    total_pages = max(1, math.ceil(total_items / page_size))
    clamped = min(max(1, page_number), total_pages)
    offset = (clamped - 1) * page_size

    return PaginatedPage(
        items=list(items[offset : offset + page_size]),
        page_number=clamped,
        total_pages=total_pages,
        page_size=page_size,
        total_items=total_items,
    )


def page_bounds(page: PaginatedPage) -> tuple[int, int]:
    """
    Previous and next page numbers for navigation controls.

    Both values stay within [1, total_pages]; on the first page "previous"
    is the page itself, on the last page "next" is the page itself.

    Example:
        >>> page_bounds(paginate(list(range(23)), 10, 1))
        (1, 2)
    """
    return max(1, page.page_number - 1), min(page.total_pages, page.page_number + 1)
