"""Local ordering of filtered listings.

sorted() is stable, so ties keep their input order in every mode.
"""
import math
from typing import Callable, Dict, List

from .models import Record, SortMode
from .utils import timestamp_ms, to_number


def _newest_key(record: Record) -> int:
    # Missing timestamps count as epoch 0 and land last.
    return -timestamp_ms(record.created_at)


def _price_asc_key(record: Record) -> float:
    price = to_number(record.price)
    return price if price is not None else math.inf


def _price_desc_key(record: Record) -> float:
    price = to_number(record.price)
    return -price if price is not None else math.inf


SORT_KEYS: Dict[SortMode, Callable[[Record], float]] = {
    SortMode.NEWEST: _newest_key,
    SortMode.PRICE_ASC: _price_asc_key,
    SortMode.PRICE_DESC: _price_desc_key,
}

# Remote sort clause used for each mode: (field, direction).
REMOTE_SORT = {
    SortMode.NEWEST: ("createdAt", "desc"),
    SortMode.PRICE_ASC: ("price", "asc"),
    SortMode.PRICE_DESC: ("price", "desc"),
}


class SortEngine:
    def apply(self, records: List[Record], mode: SortMode) -> List[Record]:
        """Return a new list ordered by `mode`; the input is left untouched."""
        return sorted(records, key=SORT_KEYS[SortMode(mode)])
