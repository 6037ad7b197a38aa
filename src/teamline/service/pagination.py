# SPDX-License-Identifier: MIT

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from teamline.model.work_item import ItemPage, WorkItem

logger = logging.getLogger(__name__)

T = TypeVar("T")

PageFetcher = Callable[[Optional[str]], Awaitable[tuple[list[T], Optional[str]]]]


async def fetch_all_pages(fetch_page: PageFetcher[T], entity_key: str) -> list[T]:
    """
    Follow a cursor until the server has no further page.

    A failing page ends the pagination and whatever was already collected is
    returned. One entity's transient failure must not abort a whole timeline
    load, so the error is only logged.

    Args:
        fetch_page: Coroutine function taking a cursor (None for the first
            page) and returning the page's results and the next cursor (None
            when there are no more pages)
        entity_key: Identifies the paginated entity in log messages

    Returns:
        All results in page order
    """
    results: list[T] = []
    cursor: Optional[str] = None
    page_count = 0

    while True:
        try:
            page, cursor = await fetch_page(cursor)
        except Exception as e:
            logger.warning(
                "Stopped paginating %s after %d page(s), keeping %d result(s): %s",
                entity_key,
                page_count,
                len(results),
                e,
            )
            break

        page_count += 1
        results.extend(page)

        if cursor is None:
            break

    logger.debug("Fetched %d result(s) for %s", len(results), entity_key)
    return results


def item_page_fetcher(
    fetch: Callable[[Optional[str]], Awaitable[ItemPage]],
) -> PageFetcher[WorkItem]:
    """Adapt an ItemPage-returning fetch to the (results, cursor) shape."""

    async def fetch_page(cursor: Optional[str]) -> tuple[list[WorkItem], Optional[str]]:
        page = await fetch(cursor)
        return page["items"], page["next_cursor"]

    return fetch_page
