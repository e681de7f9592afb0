"""Reverse-chronological ordering and numbering of episodes."""

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from podcatalog.episodes.models import DEFAULT_DESCRIPTION_LENGTH, Episode
from podcatalog.utils.datetime import EPOCH_DATE, parse_release_date

logger = logging.getLogger(__name__)


def _release_sort_key(raw: dict[str, Any]):
    # Missing or unparsable dates sort as the epoch, i.e. last
    return parse_release_date(raw.get("release_date")) or EPOCH_DATE


def sort_newest_first(raw_items: Iterable[dict[str, Any] | None]) -> list[dict[str, Any]]:
    """Drop null items and sort the rest newest first.

    ``sorted`` is stable, so episodes sharing a release date keep the
    relative order the source returned them in.
    """
    raw_items = list(raw_items)
    items = [item for item in raw_items if item is not None]
    if len(items) != len(raw_items):
        logger.debug(f"Dropped {len(raw_items) - len(items)} unavailable episode(s)")
    return sorted(items, key=_release_sort_key, reverse=True)


def order_and_number(
    raw_items: Iterable[dict[str, Any] | None],
    description_max_length: int = DEFAULT_DESCRIPTION_LENGTH,
) -> list[Episode]:
    """Sort a full catalog newest first and number it from 1.

    Args:
        raw_items: Raw upstream episodes, merged in page order
        description_max_length: Display truncation for descriptions

    Returns:
        Episodes with ``episode_number = index + 1``
    """
    ordered = sort_newest_first(raw_items)
    return [
        Episode.from_raw(raw, episode_number=index + 1, description_max_length=description_max_length)
        for index, raw in enumerate(ordered)
    ]


def number_page(
    raw_items: Sequence[dict[str, Any] | None],
    page: int,
    page_size: int,
    description_max_length: int = DEFAULT_DESCRIPTION_LENGTH,
) -> list[Episode]:
    """Sort and number a single upstream page.

    Only this page is sorted, so numbers are globally correct only when the
    source already returns episodes newest first.

    Args:
        raw_items: Raw episodes of one page
        page: 1-based page number the items came from
        page_size: Page size used for the request

    Returns:
        Episodes numbered ``((page - 1) * page_size) + index + 1``
    """
    offset = (page - 1) * page_size
    ordered = sort_newest_first(raw_items)
    return [
        Episode.from_raw(
            raw,
            episode_number=offset + index + 1,
            description_max_length=description_max_length,
        )
        for index, raw in enumerate(ordered)
    ]
