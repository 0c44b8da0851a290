# skyanki/pagination.py
from __future__ import annotations

import logging
from typing import Awaitable, Callable, List, TypeVar

from .schema import Page

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

PAGE_SIZE = 100

FetchPage = Callable[[int], Awaitable[Page[T]]]


async def collect_pages(fetch_page: FetchPage[T]) -> List[T]:
    """Walk a listing endpoint from page 1 until it reports its last page.

    Items are accumulated in arrival order. Any failing page aborts the whole
    walk, there are no partial results and no retries.
    """
    items: List[T] = []
    page_number = 1
    while True:
        page = await fetch_page(page_number)
        items.extend(page.data)
        meta = page.meta
        LOGGER.debug("Fetched page %s/%s (%d items)", meta.current_page, meta.last_page, len(page.data))
        # ">=" so a server reporting current_page past last_page cannot loop us forever
        if meta.current_page >= meta.last_page:
            return items
        page_number += 1
