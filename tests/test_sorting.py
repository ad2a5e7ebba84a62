import random
from datetime import datetime, timezone

from listing_browse.models import Record, SortMode
from listing_browse.sorting import SortEngine

from .conftest import make_record


def ids(records):
    return [r.id for r in records]


def test_newest_orders_by_created_at_descending_with_missing_last():
    old = make_record("old", minutes=1)
    new = make_record("new", minutes=50)
    undated = Record(id="undated", created_at=None, price=5)

    result = SortEngine().apply([undated, old, new], SortMode.NEWEST)

    assert ids(result) == ["new", "old", "undated"]


def test_price_ascending_puts_invalid_prices_last():
    records = [
        make_record("nan", price=float("nan")),
        make_record("p30", price="30"),
        make_record("none", price=None),
        make_record("p10", price=10),
        make_record("text", price="abc"),
        make_record("p20", price=20.0),
    ]

    result = SortEngine().apply(records, SortMode.PRICE_ASC)

    assert ids(result) == ["p10", "p20", "p30", "nan", "none", "text"]


def test_price_descending_still_puts_invalid_prices_last():
    records = [
        make_record("none", price=None),
        make_record("p10", price=10),
        make_record("inf", price=float("inf")),
        make_record("p30", price=30),
    ]

    result = SortEngine().apply(records, SortMode.PRICE_DESC)

    assert ids(result) == ["p30", "p10", "none", "inf"]


def test_ties_keep_input_order():
    same_time = datetime(2025, 3, 1, tzinfo=timezone.utc)
    records = [Record(id=str(i), created_at=same_time, price=7) for i in range(6)]

    for mode in SortMode:
        assert ids(SortEngine().apply(records, mode)) == ids(records)


def test_sort_is_a_permutation_idempotent_and_leaves_input_alone():
    rng = random.Random(3)
    records = [
        make_record(f"r{i}", minutes=rng.randint(0, 5), price=rng.choice([None, 5, 10, "x", 15]))
        for i in range(40)
    ]
    snapshot = list(records)
    engine = SortEngine()

    for mode in SortMode:
        once = engine.apply(records, mode)
        assert sorted(ids(once)) == sorted(ids(records))
        assert ids(engine.apply(once, mode)) == ids(once)
    assert records == snapshot


def test_accepts_plain_string_modes():
    records = [make_record("a", price=2), make_record("b", price=1)]
    assert ids(SortEngine().apply(records, "priceAsc")) == ["b", "a"]
