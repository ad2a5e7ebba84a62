from datetime import datetime, timedelta, timezone
from typing import Any, List

import pytest

from listing_browse.models import Record
from listing_browse.store import InMemoryListingStore

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


def make_record(record_id: str, minutes: int = 0, price: Any = 100, **attributes: Any) -> Record:
    """Active listing created `minutes` after BASE_TIME."""
    attributes.setdefault("status", "active")
    attributes.setdefault("categoryId", "saat")
    return Record(
        id=record_id,
        created_at=BASE_TIME + timedelta(minutes=minutes),
        price=price,
        attributes=attributes,
    )


def make_catalog(count: int, **attributes: Any) -> List[Record]:
    """`count` listings, newest last, priced 1..count."""
    return [make_record(f"r{i:04d}", minutes=i, price=i + 1, **attributes) for i in range(count)]


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def catalog_145():
    return make_catalog(145)


@pytest.fixture
def store_145(catalog_145):
    return InMemoryListingStore(catalog_145)
