"""Two-way mirror between browse parameters and the URL query string.

parse_query / serialize_query are pure. UrlStateSync adds the page-level
bookkeeping: hydrate once per navigation target, then push changes back
with a history *replace*, skipping writes that would not change the URL.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
from urllib.parse import parse_qs, urlencode

from .config import DEFAULT_VIEW_SIZE, MAX_VIEW_SIZE
from .models import BrowseParams, FilterState, FlagChoice, SortMode, ViewMode
from .schema import FilterSchema
from .utils import clean_digits, pick_enum

logger = logging.getLogger(__name__)

QUERY_PARAM = "q"
SORT_PARAM = "sort"
VIEW_PARAM = "view"
SIZE_PARAM = "size"

FLAG_VALUES = tuple(choice.value for choice in FlagChoice)
SORT_VALUES = tuple(mode.value for mode in SortMode)
VIEW_VALUES = tuple(mode.value for mode in ViewMode)

# replace(url, scroll=False): swap the current history entry in place.
Navigator = Callable[..., None]


# Longer digit runs are junk rather than prices or sizes.
MAX_PARAM_DIGITS = 15


def _digits_to_int(value: str) -> Optional[int]:
    digits = clean_digits(value)
    if not digits or len(digits) > MAX_PARAM_DIGITS:
        return None
    return int(digits)


def parse_query(query_string: str, schema: FilterSchema) -> BrowseParams:
    """Read recognised parameters; anything malformed is dropped, never raised."""
    raw = parse_qs(query_string.lstrip("?"), keep_blank_values=False)

    def first(name: str) -> str:
        values = raw.get(name)
        return values[0] if values else ""

    filters = FilterState(query=first(QUERY_PARAM).strip())

    for rule in schema.ranges:
        low = _digits_to_int(first(rule.min_param))
        high = _digits_to_int(first(rule.max_param))
        if low is not None or high is not None:
            filters.ranges[rule.key] = (low, high)

    for rule in schema.selects:
        value = pick_enum(first(rule.param), rule.options)
        if value:
            filters.selects[rule.key] = value

    for rule in schema.flags:
        value = pick_enum(first(rule.param), FLAG_VALUES)
        if value:
            filters.flags[rule.key] = FlagChoice(value)

    sort = pick_enum(first(SORT_PARAM), SORT_VALUES) or SortMode.NEWEST.value
    view = pick_enum(first(VIEW_PARAM), VIEW_VALUES) or ViewMode.GRID.value

    view_size = _digits_to_int(first(SIZE_PARAM))
    if not view_size:
        view_size = DEFAULT_VIEW_SIZE
    view_size = min(view_size, MAX_VIEW_SIZE)

    return BrowseParams(
        filters=filters,
        sort=SortMode(sort),
        view_mode=ViewMode(view),
        view_size=view_size,
    )


def serialize_query(params: BrowseParams, schema: FilterSchema) -> str:
    """Encode only non-default values, in a fixed parameter order."""
    pairs: List[Tuple[str, str]] = []
    filters = params.filters

    if filters.query.strip():
        pairs.append((QUERY_PARAM, filters.query.strip()))

    for rule in schema.ranges:
        low, high = filters.ranges.get(rule.key, (None, None))
        if low is not None:
            pairs.append((rule.min_param, str(low)))
        if high is not None:
            pairs.append((rule.max_param, str(high)))

    for rule in schema.selects:
        value = filters.selects.get(rule.key)
        if value:
            pairs.append((rule.param, value))

    for rule in schema.flags:
        choice = filters.flags.get(rule.key)
        if choice is not None:
            pairs.append((rule.param, FlagChoice(choice).value))

    if params.sort != SortMode.NEWEST:
        pairs.append((SORT_PARAM, SortMode(params.sort).value))
    if params.view_mode != ViewMode.GRID:
        pairs.append((VIEW_PARAM, ViewMode(params.view_mode).value))
    if params.view_size != DEFAULT_VIEW_SIZE:
        pairs.append((SIZE_PARAM, str(params.view_size)))

    return urlencode(pairs)


def build_url(path: str, query_string: str) -> str:
    return f"{path}?{query_string}" if query_string else path


@dataclass
class UrlSyncState:
    """Per-navigation bookkeeping; replaced whenever the navigation key changes."""

    navigation_key: Optional[str] = None
    hydrating: bool = False
    ready: bool = False
    last_written: Optional[str] = None


class UrlStateSync:
    def __init__(self, schema: FilterSchema, navigator: Optional[Navigator] = None) -> None:
        self.schema = schema
        self.navigator = navigator
        self.state = UrlSyncState()

    def hydrate(
        self,
        navigation_key: str,
        url: str,
        apply: Callable[[BrowseParams], None],
    ) -> bool:
        """Read `url` into state through `apply`, once per navigation key.

        Returns False when this key was already hydrated.
        """
        if self.state.navigation_key == navigation_key and self.state.ready:
            return False

        _, _, query_string = url.partition("?")
        self.state = UrlSyncState(navigation_key=navigation_key, hydrating=True, last_written=url)
        try:
            apply(parse_query(query_string, self.schema))
        finally:
            self.state.hydrating = False
        self.state.ready = True
        logger.debug("Hydrated browse state for %s from %r", navigation_key, url)
        return True

    def push(self, path: str, params: BrowseParams) -> Optional[str]:
        """Mirror params into the URL; returns the URL written, or None if nothing changed."""
        if not self.state.ready or self.state.hydrating:
            return None
        url = build_url(path, serialize_query(params, self.schema))
        if url == self.state.last_written:
            return None
        self.state.last_written = url
        logger.debug("Replacing URL with %s", url)
        if self.navigator is not None:
            self.navigator(url, scroll=False)
        return url

    @property
    def current_url(self) -> Optional[str]:
        return self.state.last_written
