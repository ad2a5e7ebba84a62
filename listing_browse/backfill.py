"""Decides when the working set needs another remote page, and fetches it."""

import logging
from enum import Enum
from typing import Optional

from .cache import RecordCache
from .models import QueryKey
from .pager import RemotePager

logger = logging.getLogger(__name__)


class BackfillState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    ERROR = "error"


class BackfillController:
    """idle → fetching → idle | error, with at most one fetch in flight.

    A failed fetch leaves the cache un-exhausted so the next trigger
    retries. A response that lands after the cache was reset is dropped.
    """

    def __init__(self, pager: RemotePager, cache: RecordCache) -> None:
        self.pager = pager
        self.cache = cache
        self.state = BackfillState.IDLE
        self.error: Optional[Exception] = None
        self.fetches = 0

    def reset(self) -> None:
        """Forget state belonging to the previous query key."""
        self.state = BackfillState.IDLE
        self.error = None
        self.fetches = 0

    @property
    def in_flight(self) -> bool:
        return self.state is BackfillState.FETCHING

    def needs_fetch(self, view_size: int, matched_count: int) -> bool:
        if self.cache.exhausted or self.in_flight:
            return False
        return view_size > len(self.cache) or matched_count < view_size

    async def request(self, key: QueryKey, view_size: int, matched_count: int) -> bool:
        """Fetch one page if the view is short; True if a page was absorbed."""
        if not self.needs_fetch(view_size, matched_count):
            return False
        logger.debug(
            "Backfill for %s: view=%d loaded=%d matched=%d",
            key,
            view_size,
            len(self.cache),
            matched_count,
        )
        return await self.fetch_next(key)

    async def fetch_next(self, key: QueryKey) -> bool:
        if self.in_flight or self.cache.exhausted:
            return False

        generation = self.cache.generation
        self.state = BackfillState.FETCHING
        self.fetches += 1
        try:
            page = await self.pager.fetch_page(key, self.cache.cursor)
        except Exception as e:
            if generation != self.cache.generation:
                logger.debug("Dropping failure from a superseded fetch: %s", e)
                return False
            logger.warning("Fetching listings for %s failed: %s", key, e)
            self.state = BackfillState.ERROR
            self.error = e
            return False

        if generation != self.cache.generation:
            logger.debug("Dropping stale page of %d listings for %s", len(page.records), key)
            return False

        self.cache.absorb(page.records)
        self.cache.advance(page.next_cursor, page.exhausted)
        self.state = BackfillState.IDLE
        self.error = None
        return True
