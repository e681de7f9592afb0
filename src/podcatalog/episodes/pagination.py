"""Windowing arithmetic over an ordered episode sequence."""

import math
from collections.abc import Sequence

from podcatalog.episodes.models import UNLIMITED, Episode, EpisodeWindow, PageSize, PaginationWindow
from podcatalog.utils.errors import InvalidPageSizeError


def parse_page_size(value: int | str) -> PageSize:
    """Normalize a user supplied page size.

    Accepts positive integers, numeric strings and "unlimited" (any case).
    Zero also means unlimited.

    Raises:
        InvalidPageSizeError: For negative numbers and other strings
    """
    if isinstance(value, str):
        text = value.strip().lower()
        if text in (UNLIMITED, "all"):
            return UNLIMITED
        try:
            value = int(text)
        except ValueError:
            raise InvalidPageSizeError(
                f"Invalid page size: {value!r}",
                suggestion="Use a positive number or 'unlimited'",
            ) from None

    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidPageSizeError(
            f"Invalid page size: {value!r}",
            suggestion="Use a positive number or 'unlimited'",
        )
    if value == 0:
        return UNLIMITED
    return value


def total_pages_for(total_items: int, page_size: PageSize) -> int:
    if page_size == UNLIMITED:
        return 1
    return math.ceil(total_items / page_size)


def clamp_page(page: int, total_pages: int) -> int:
    """Clamp a page number into ``[1, total_pages]`` (page 1 when empty)."""
    return min(max(page, 1), max(total_pages, 1))


def window(items: Sequence[Episode], page: int, page_size: PageSize) -> EpisodeWindow:
    """Cut one page out of an ordered episode list.

    Out-of-range page numbers are clamped rather than rejected.

    Args:
        items: Ordered episodes (newest first)
        page: Requested 1-based page
        page_size: Positive int or "unlimited"

    Returns:
        The episodes on the page and their pagination metadata
    """
    total_items = len(items)
    total_pages = total_pages_for(total_items, page_size)
    current_page = clamp_page(page, total_pages)

    if page_size == UNLIMITED:
        page_items = list(items)
        start = 0
    else:
        start = (current_page - 1) * page_size
        page_items = list(items[start:start + page_size])

    return EpisodeWindow(
        episodes=page_items,
        pagination=PaginationWindow(
            current_page=current_page,
            page_size=page_size,
            total_items=total_items,
            total_pages=total_pages,
            has_next=current_page < total_pages,
            has_previous=current_page > 1,
            start_index=start + 1 if page_items else 0,
            end_index=start + len(page_items),
        ),
    )


def reposition_on_resize(old_start_index: int, new_page_size: PageSize) -> int:
    """Page to show after a page size change.

    Keeps the item that was first on screen visible:
    ``floor(old_start_index / new_page_size) + 1``.

    Args:
        old_start_index: 0-based index of the first item on the old page,
            i.e. ``(old_page - 1) * old_page_size``
        new_page_size: New page size

    Returns:
        1-based page number for the new page size
    """
    if new_page_size == UNLIMITED:
        return 1
    return old_start_index // new_page_size + 1


def page_containing(episode_number: int, page_size: PageSize) -> int:
    """1-based page on which the given 1-based episode number appears."""
    if page_size == UNLIMITED:
        return 1
    return math.ceil(episode_number / page_size)
