"""Incremental listing browsing over a cursor-paginated store."""

from .models import BrowseParams, BrowseView, FilterState, FlagChoice, Record, SortMode, ViewMode
from .schema import BRAND_SCHEMA, CATEGORY_SCHEMA, MODEL_SCHEMA, SCHEMAS
from .session import BrowseSession
from .store import AbstractListingStore, InMemoryListingStore

__all__ = [
    "AbstractListingStore",
    "BRAND_SCHEMA",
    "BrowseParams",
    "BrowseSession",
    "BrowseView",
    "CATEGORY_SCHEMA",
    "FilterState",
    "FlagChoice",
    "InMemoryListingStore",
    "MODEL_SCHEMA",
    "Record",
    "SCHEMAS",
    "SortMode",
    "ViewMode",
]
