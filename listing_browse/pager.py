"""Cursor pagination over the remote listing store."""

import logging
from typing import Any, Optional

from .config import MODERATION_HIDE_STATUSES
from .errors import IndexMissingError
from .models import Page, QueryKey, Record
from .store import AbstractListingStore

logger = logging.getLogger(__name__)


def is_publicly_visible(record: Record) -> bool:
    """Active listings not held back by moderation."""
    status = str(record.get("status") or "").strip().lower()
    if status != "active":
        return False
    admin_status = str(record.get("adminStatus") or "active").strip().lower()
    if not admin_status or admin_status == "active":
        return True
    return admin_status not in MODERATION_HIDE_STATUSES


class RemotePager:
    """Fetch one page at a time for a QueryKey.

    No retries and no business logic beyond the visibility gate; the only
    recovery is the unsorted fallback when the store lacks an index.
    """

    def __init__(self, store: AbstractListingStore) -> None:
        self.store = store

    async def fetch_page(self, key: QueryKey, cursor: Any = None) -> Page:
        # One record of lookahead tells a full last page apart from a full middle page.
        try:
            raw = await self.store.query(
                key.constraints,
                sort_field=key.sort_field,
                sort_direction=key.sort_direction,
                page_size=key.page_size + 1,
                cursor=cursor,
            )
        except IndexMissingError as e:
            return await self._fetch_unsorted(key, cursor, e)

        exhausted = len(raw) <= key.page_size
        raw = raw[: key.page_size]
        page = Page(
            records=[r for r in raw if is_publicly_visible(r)],
            next_cursor=raw[-1] if raw else cursor,
            exhausted=exhausted,
        )
        logger.debug(
            "Fetched %d/%d listings for %s (exhausted=%s)",
            len(page.records),
            len(raw),
            key,
            page.exhausted,
        )
        return page

    async def _fetch_unsorted(self, key: QueryKey, cursor: Any, error: IndexMissingError) -> Page:
        if cursor is not None:
            # The single unsorted page was already served for this key.
            logger.warning("Index missing for %s past the first page; stopping: %s", key, error)
            return Page(records=[], next_cursor=cursor, exhausted=True)

        logger.warning("Index missing for %s; falling back to one unsorted page: %s", key, error)
        unsorted = key.without_sort()
        raw = await self.store.query(
            unsorted.constraints,
            page_size=unsorted.page_size,
        )
        return Page(
            records=[r for r in raw if is_publicly_visible(r)],
            next_cursor=raw[-1] if raw else None,
            exhausted=True,
        )

    async def count(self, key: QueryKey) -> Optional[int]:
        """Server-side total for the key's constraints, or None if the store won't say."""
        try:
            return await self.store.count(key.constraints)
        except Exception as e:
            logger.debug("Count unavailable for %s: %s", key.constraints, e)
            return None
