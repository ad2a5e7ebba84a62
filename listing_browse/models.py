# Data models for listing browsing.
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .config import DEFAULT_VIEW_SIZE
from .utils import to_timestamp

# Fields lifted out of a store document into Record's core slots.
_CORE_FIELDS = {"id", "createdAt", "price"}


class SortMode(str, Enum):
    NEWEST = "newest"
    PRICE_ASC = "priceAsc"
    PRICE_DESC = "priceDesc"


class ViewMode(str, Enum):
    GRID = "grid"
    LIST = "list"


class FlagChoice(str, Enum):
    """Selection for a yes/no filter; an unset filter is simply absent."""

    YES = "yes"
    NO = "no"


@dataclass(frozen=True)
class Record:
    """One listing as fetched from the store.

    Only identity, timestamp and price are structural; everything else
    (title, category labels, condition, flags...) lives in ``attributes``.
    """

    id: str
    created_at: Optional[datetime] = None
    price: Any = None  # number, numeric string, or garbage
    attributes: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "Record":
        return cls(
            id=str(doc_id),
            created_at=to_timestamp(data.get("createdAt")),
            price=data.get("price"),
            attributes={k: v for k, v in data.items() if k not in _CORE_FIELDS},
        )

    def get(self, name: str, default: Any = None) -> Any:
        if name == "price":
            return self.price
        if name == "createdAt":
            return self.created_at
        return self.attributes.get(name, default)

    def nested(self, name: str) -> Any:
        """Look a field up in the nested ``attributes`` mapping, if any."""
        nested = self.attributes.get("attributes")
        if isinstance(nested, dict):
            return nested.get(name)
        return None


@dataclass
class FilterState:
    """Client-side constraints. A missing key never excludes anything."""

    query: str = ""
    ranges: Dict[str, Tuple[Optional[int], Optional[int]]] = field(default_factory=dict)
    selects: Dict[str, str] = field(default_factory=dict)
    flags: Dict[str, FlagChoice] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (self.query.strip() or self.ranges or self.selects or self.flags)


@dataclass
class BrowseParams:
    """Everything the URL mirrors: filters, sort, view mode and view size."""

    filters: FilterState = field(default_factory=FilterState)
    sort: SortMode = SortMode.NEWEST
    view_mode: ViewMode = ViewMode.GRID
    view_size: int = DEFAULT_VIEW_SIZE


@dataclass(frozen=True)
class QueryKey:
    """Identifies one remote pagination stream.

    constraints: sorted (field, value) equality pairs.
    sort_field/sort_direction: None when the store should use its native order.
    """

    constraints: Tuple[Tuple[str, Any], ...]
    sort_field: Optional[str]
    sort_direction: Optional[str]
    page_size: int

    def without_sort(self) -> "QueryKey":
        return QueryKey(self.constraints, None, None, self.page_size)


@dataclass
class Page:
    """One page from RemotePager."""

    records: List[Record]
    next_cursor: Any
    exhausted: bool


@dataclass
class BrowseView:
    """Snapshot handed to the presentation layer after every update."""

    records: List[Record]
    loaded_count: int
    matched_count: int
    total_count: Optional[int]
    has_more: bool
    loading_more: bool
    error: Optional[str]
    view_size: int
    sort: SortMode
    view_mode: ViewMode
    url: str
