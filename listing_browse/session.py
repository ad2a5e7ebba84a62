"""Page-level controller for one listing page (category, brand or model).

Flow per update:
1. URL hydrates filters/sort/view once per navigation target
2. Filters and sort run synchronously over the cached working set
3. Backfill pulls more remote pages while the view is short
4. Non-default state is mirrored back into the URL

Entry points: BrowseSession.navigate() and the setters below it.
"""

import logging
import time
from dataclasses import replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .backfill import BackfillController, BackfillState
from .cache import RecordCache
from .config import MAX_VIEW_SIZE, PAGE_SIZE, SEARCH_DEBOUNCE_SECONDS, VIEW_SIZE_STEP
from .debounce import Debouncer
from .filters import FilterEngine
from .models import BrowseParams, BrowseView, FlagChoice, QueryKey, Record, SortMode, ViewMode
from .pager import RemotePager
from .schema import CATEGORY_SCHEMA, NAVIGATION_FIELDS, RUNTIME_SELECTS, FilterSchema
from .sorting import REMOTE_SORT, SortEngine
from .store import AbstractListingStore
from .url_state import Navigator, UrlStateSync, build_url, serialize_query

logger = logging.getLogger(__name__)

# Every listing query is pinned to publicly active listings.
BASE_CONSTRAINTS: Tuple[Tuple[str, Any], ...] = (("status", "active"),)


async def load_select_options(
    store: AbstractListingStore, variant: str, slug: str
) -> Dict[str, List[str]]:
    """Whitelists for selects that depend on the page, e.g. a brand's model ids.

    A failed lookup leaves that select empty rather than failing the page.
    """
    options: Dict[str, List[str]] = {}
    constraints = BASE_CONSTRAINTS + ((NAVIGATION_FIELDS[variant], slug),)
    for key, field in RUNTIME_SELECTS.get(variant, {}).items():
        try:
            options[key] = await store.distinct(field, constraints)
        except Exception as e:
            logger.warning("Could not load %s options for %s/%s: %s", key, variant, slug, e)
            options[key] = []
    return options


class BrowseSession:
    """Filters, sort and incremental loading for one listing page."""

    def __init__(
        self,
        store: AbstractListingStore,
        schema: FilterSchema = CATEGORY_SCHEMA,
        page_size: int = PAGE_SIZE,
        navigator: Optional[Navigator] = None,
        debounce_seconds: float = SEARCH_DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.schema = schema
        self.page_size = page_size
        self.pager = RemotePager(store)
        self.cache = RecordCache()
        self.backfill = BackfillController(self.pager, self.cache)
        self.filter_engine = FilterEngine(schema)
        self.sort_engine = SortEngine()
        self.url_sync = UrlStateSync(schema, navigator)
        self.search_input: Debouncer[str] = Debouncer(debounce_seconds, clock)

        self.params = BrowseParams()
        self.path = ""
        self.constraints: Tuple[Tuple[str, Any], ...] = BASE_CONSTRAINTS
        self.total_count: Optional[int] = None
        self._query_key: Optional[QueryKey] = None
        self._counted_key: Optional[QueryKey] = None
        self._matched: List[Record] = []

    # ---------------------------------------------------------------- navigation

    async def navigate(
        self,
        path: str,
        constraints: Mapping[str, Any],
        query_string: str = "",
        select_options: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> BrowseView:
        """Enter a listing page: hydrate from the URL, then load until the view is full.

        select_options fills runtime whitelists (e.g. a brand's model ids)
        before the URL is read, so those selections survive hydration.
        """
        for key, options in (select_options or {}).items():
            self._set_schema(self.schema.with_options(key, tuple(options)))

        if path != self.path:
            # Unsettled keystrokes belong to the page being left.
            self.search_input.cancel()
        self.path = path
        self.constraints = tuple(sorted({**dict(BASE_CONSTRAINTS), **dict(constraints)}.items()))
        self.url_sync.hydrate(path, build_url(path, query_string.lstrip("?")), self._hydrate)
        self._sync_query_key()
        # The URL may have carried junk; write back the canonical form.
        self.url_sync.push(self.path, self.params)
        return await self.refresh()

    async def refresh(self) -> BrowseView:
        """Run backfill until the view is satisfied, exhausted, or a fetch fails."""
        self._recompute()
        key = self._query_key
        while key is not None and self.backfill.needs_fetch(self.params.view_size, len(self._matched)):
            fetched = await self.backfill.request(key, self.params.view_size, len(self._matched))
            self._recompute()
            if not fetched or key != self._query_key:
                break
        await self._count_once()
        return self.view()

    async def retry(self) -> BrowseView:
        """User-initiated retry after a failed fetch."""
        return await self.refresh()

    # ---------------------------------------------------------------- filters

    async def set_query(self, text: str) -> BrowseView:
        self.search_input.cancel()
        filters = replace(self.params.filters, query=text.strip())
        return await self._update(replace(self.params, filters=filters))

    def type_query(self, text: str) -> None:
        """Record a keystroke; the text filters nothing until it settles."""
        self.search_input.push(text)

    async def poll_query(self) -> Optional[BrowseView]:
        text = self.search_input.poll()
        if text is None:
            return None
        return await self.set_query(text)

    async def settle_query(self) -> BrowseView:
        text = await self.search_input.wait()
        if text is None:
            return self.view()
        return await self.set_query(text)

    async def set_range(self, key: str, low: Optional[int] = None, high: Optional[int] = None) -> BrowseView:
        if self.schema.range(key) is None:
            raise ValueError(f"Unknown range filter: {key}")
        ranges = dict(self.params.filters.ranges)
        if low is None and high is None:
            ranges.pop(key, None)
        else:
            ranges[key] = (low, high)
        return await self._update_filters(ranges=ranges)

    async def set_select(self, key: str, value: Optional[str]) -> BrowseView:
        rule = self.schema.select(key)
        if rule is None:
            raise ValueError(f"Unknown select filter: {key}")
        selects = dict(self.params.filters.selects)
        if not value:
            selects.pop(key, None)
        elif value not in rule.options:
            raise ValueError(f"{value!r} is not an option for {key}")
        else:
            selects[key] = value
        return await self._update_filters(selects=selects)

    async def set_flag(self, key: str, choice: Optional[FlagChoice]) -> BrowseView:
        if self.schema.flag(key) is None:
            raise ValueError(f"Unknown flag filter: {key}")
        flags = dict(self.params.filters.flags)
        if choice is None:
            flags.pop(key, None)
        else:
            flags[key] = FlagChoice(choice)
        return await self._update_filters(flags=flags)

    async def toggle_flag(self, key: str) -> BrowseView:
        """Quick-filter preset: flip between "yes" and unset."""
        current = self.params.filters.flags.get(key)
        return await self.set_flag(key, None if current == FlagChoice.YES else FlagChoice.YES)

    async def clear_filter(self, key: str) -> BrowseView:
        filters = self.params.filters
        if key == "search":
            return await self.set_query("")
        if key in filters.ranges:
            return await self.set_range(key)
        if key in filters.selects:
            return await self.set_select(key, None)
        if key in filters.flags:
            return await self.set_flag(key, None)
        return self.view()

    async def clear_filters(self) -> BrowseView:
        """Back to defaults; the only path that shrinks the view size."""
        self.search_input.cancel()
        return await self._update(BrowseParams())

    # ---------------------------------------------------------------- sort / view

    async def set_sort(self, mode: SortMode) -> BrowseView:
        return await self._update(replace(self.params, sort=SortMode(mode)))

    async def set_view_mode(self, mode: ViewMode) -> BrowseView:
        return await self._update(replace(self.params, view_mode=ViewMode(mode)))

    async def set_view_size(self, size: int) -> BrowseView:
        """Grow the view up to MAX_VIEW_SIZE; requests to shrink it are ignored."""
        view_size = min(MAX_VIEW_SIZE, max(self.params.view_size, int(size)))
        return await self._update(replace(self.params, view_size=view_size))

    async def load_more(self) -> BrowseView:
        return await self.set_view_size(self.params.view_size + VIEW_SIZE_STEP)

    # ---------------------------------------------------------------- presentation

    @property
    def matched(self) -> List[Record]:
        return list(self._matched)

    def view(self) -> BrowseView:
        error = self.backfill.error if self.backfill.state is BackfillState.ERROR else None
        return BrowseView(
            records=self._matched[: self.params.view_size],
            loaded_count=len(self.cache),
            matched_count=len(self._matched),
            total_count=self.total_count,
            has_more=not self.cache.exhausted,
            loading_more=self.backfill.in_flight,
            error=str(error) if error else None,
            view_size=self.params.view_size,
            sort=self.params.sort,
            view_mode=self.params.view_mode,
            url=self.current_url(),
        )

    def current_url(self) -> str:
        return self.url_sync.current_url or self.path

    def href_for(self, path: str) -> str:
        """Link to another page that keeps the current non-default parameters."""
        return build_url(path, serialize_query(self.params, self.schema))

    def active_filters(self) -> List[Tuple[str, str]]:
        """(key, label) chips for every active constraint."""
        filters = self.params.filters
        chips: List[Tuple[str, str]] = []
        if filters.query.strip():
            chips.append(("search", f"Arama: {filters.query.strip()}"))
        for rule in self.schema.ranges:
            if rule.key not in filters.ranges:
                continue
            low, high = filters.ranges[rule.key]
            low_text = str(low) if low is not None else "0"
            high_text = str(high) if high is not None else "sonsuz"
            chips.append((rule.key, f"{rule.label}: {low_text} - {high_text}"))
        for rule in self.schema.selects:
            value = filters.selects.get(rule.key)
            if value:
                chips.append((rule.key, f"{rule.label}: {rule.option_labels.get(value, value)}"))
        for rule in self.schema.flags:
            choice = filters.flags.get(rule.key)
            if choice is not None:
                text = rule.yes_label if choice == FlagChoice.YES else rule.no_label
                chips.append((rule.key, f"{rule.label}: {text}"))
        return chips

    # ---------------------------------------------------------------- internals

    def _set_schema(self, schema: FilterSchema) -> None:
        self.schema = schema
        self.filter_engine = FilterEngine(schema)
        self.url_sync.schema = schema

    def _hydrate(self, params: BrowseParams) -> None:
        self.params = params
        self._recompute()

    def _current_key(self) -> QueryKey:
        sort_field, sort_direction = REMOTE_SORT[self.params.sort]
        return QueryKey(self.constraints, sort_field, sort_direction, self.page_size)

    def _sync_query_key(self) -> bool:
        """Reset the working set when the remote query changes. True if it did."""
        key = self._current_key()
        if key == self._query_key:
            return False
        logger.debug("Query key changed to %s; resetting working set", key)
        self._query_key = key
        self.cache.reset()
        self.backfill.reset()
        if self._counted_key is not None and self._counted_key.constraints != key.constraints:
            self.total_count = None
            self._counted_key = None
        return True

    def _recompute(self) -> None:
        filtered = self.filter_engine.apply(self.cache.all(), self.params.filters)
        self._matched = self.sort_engine.apply(filtered, self.params.sort)

    async def _update_filters(self, **changes: Any) -> BrowseView:
        filters = replace(self.params.filters, **changes)
        return await self._update(replace(self.params, filters=filters))

    async def _update(self, params: BrowseParams) -> BrowseView:
        self.params = params
        self._sync_query_key()
        self._recompute()
        self.url_sync.push(self.path, self.params)
        return await self.refresh()

    async def _count_once(self) -> None:
        key = self._query_key
        if key is None or not len(self.cache):
            return
        if self._counted_key is not None and self._counted_key.constraints == key.constraints:
            return
        self._counted_key = key
        total = await self.pager.count(key)
        if self._query_key is not None and self._query_key.constraints == key.constraints:
            self.total_count = total
