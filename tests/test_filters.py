import random

import pytest

from listing_browse.filters import FilterEngine, resolve_flag
from listing_browse.coercion import Tri
from listing_browse.models import FilterState, FlagChoice
from listing_browse.schema import BRAND_SCHEMA, CATEGORY_SCHEMA, SHIPPING_FLAG, TRADABLE_FLAG

from .conftest import make_record


def ids(records):
    return [r.id for r in records]


@pytest.fixture
def engine():
    return FilterEngine(CATEGORY_SCHEMA)


def test_empty_state_passes_everything_in_order(engine):
    records = [make_record(str(i), price=None if i % 2 else i) for i in range(6)]
    assert ids(engine.apply(records, FilterState())) == ids(records)


def test_free_text_matches_title_and_category_labels(engine):
    records = [
        make_record("title", title="Rolex Submariner"),
        make_record("sub", title="Saat", subCategoryName="Dalış Saatleri"),
        make_record("cat", title="Kutu", categoryName="ROLEX aksesuar"),
        make_record("none", title="Casio"),
    ]

    assert ids(engine.apply(records, FilterState(query="  rolex "))) == ["title", "cat"]
    assert ids(engine.apply(records, FilterState(query="dalış"))) == ["sub"]


def test_free_text_uses_turkish_casing(engine):
    records = [make_record("a", title="IŞIKLI KADRAN"), make_record("b", title="Istanbul")]
    # Turkish lower-casing turns "I" into "ı", so "ışıklı" matches and "istanbul" does not.
    assert ids(engine.apply(records, FilterState(query="ışıklı"))) == ["a"]
    assert ids(engine.apply(records, FilterState(query="ıstanbul"))) == ["b"]


def test_price_range_bounds_are_independent_and_inclusive(engine):
    records = [make_record(f"p{p}", price=p) for p in (5, 10, 15, 20)]

    assert ids(engine.apply(records, FilterState(ranges={"price": (10, None)}))) == ["p10", "p15", "p20"]
    assert ids(engine.apply(records, FilterState(ranges={"price": (None, 15)}))) == ["p5", "p10", "p15"]
    assert ids(engine.apply(records, FilterState(ranges={"price": (10, 15)}))) == ["p10", "p15"]


def test_missing_price_fails_only_when_a_bound_is_set(engine):
    records = [make_record("none", price=None), make_record("text", price="n/a"), make_record("ok", price="12")]

    assert ids(engine.apply(records, FilterState(ranges={"price": (None, None)}))) == ["none", "text", "ok"]
    assert ids(engine.apply(records, FilterState(ranges={"price": (0, None)}))) == ["ok"]


def test_condition_select_requires_a_present_equal_value(engine):
    records = [
        make_record("new", conditionKey="new"),
        make_record("used", conditionKey="used"),
        make_record("blank", conditionKey="  "),
        make_record("missing"),
    ]

    assert ids(engine.apply(records, FilterState(selects={"condition": "new"}))) == ["new"]
    assert ids(engine.apply(records, FilterState(selects={"condition": ""}))) == ids(records)


def test_brand_selects_compare_case_insensitively():
    engine = FilterEngine(BRAND_SCHEMA)
    records = [
        make_record("a", gender="erkek"),
        make_record("b", gender="Kadın"),
        make_record("c", gender="Erkek Çocuk"),
    ]
    assert ids(engine.apply(records, FilterState(selects={"gender": "Erkek"}))) == ["a"]


def test_brand_year_and_diameter_ranges():
    engine = FilterEngine(BRAND_SCHEMA)
    records = [
        make_record("old", productionYear="1998", diameterMm=36),
        make_record("new", productionYear="2021", diameterMm=41),
        make_record("unknown", productionYear="", diameterMm=None),
    ]

    assert ids(engine.apply(records, FilterState(ranges={"year": (2000, None)}))) == ["new"]
    assert ids(engine.apply(records, FilterState(ranges={"diameter": (None, 40)}))) == ["old"]


def test_flag_resolution_prefers_top_level_fields():
    record = make_record("a", isTradable="yok", attributes={"tradable": True})
    assert resolve_flag(record, TRADABLE_FLAG) is Tri.FALSE


def test_flag_resolution_falls_back_to_nested_attributes():
    record = make_record("a", isTradable="belki", attributes={"isTradable": None, "tradable": "evet"})
    assert resolve_flag(record, TRADABLE_FLAG) is Tri.TRUE

    shipping = make_record("b", attributes={"kargoUygun": 0})
    assert resolve_flag(shipping, SHIPPING_FLAG) is Tri.FALSE

    assert resolve_flag(make_record("c"), SHIPPING_FLAG) is Tri.UNKNOWN


def test_flag_filters_never_match_unknown(engine):
    records = [
        make_record("yes", shippingAvailable=True),
        make_record("no", isShippable="hayır"),
        make_record("unknown", shippingAvailable="sometimes"),
    ]

    assert ids(engine.apply(records, FilterState(flags={"shipping": FlagChoice.YES}))) == ["yes"]
    assert ids(engine.apply(records, FilterState(flags={"shipping": FlagChoice.NO}))) == ["no"]


def test_unknown_filter_keys_are_ignored(engine):
    records = [make_record("a")]
    state = FilterState(ranges={"year": (2000, 2001)}, selects={"gender": "Erkek"})
    assert ids(engine.apply(records, state)) == ["a"]


def test_narrowing_a_filter_state_yields_a_subset(engine):
    rng = random.Random(11)
    records = [
        make_record(
            f"r{i}",
            price=rng.choice([None, 50, 150, 250, "x"]),
            title=rng.choice(["Rolex", "Omega", "Seiko"]),
            conditionKey=rng.choice(["new", "used", ""]),
            isTradable=rng.choice([True, False, "evet", "?", None]),
            shippingAvailable=rng.choice([1, 0, None]),
        )
        for i in range(200)
    ]
    chain = [
        FilterState(),
        FilterState(query="o"),
        FilterState(query="o", ranges={"price": (100, None)}),
        FilterState(query="o", ranges={"price": (100, None)}, selects={"condition": "used"}),
        FilterState(
            query="o",
            ranges={"price": (100, None)},
            selects={"condition": "used"},
            flags={"tradable": FlagChoice.YES},
        ),
        FilterState(
            query="o",
            ranges={"price": (100, None)},
            selects={"condition": "used"},
            flags={"tradable": FlagChoice.YES, "shipping": FlagChoice.NO},
        ),
    ]

    results = [set(ids(engine.apply(records, state))) for state in chain]
    for wider, narrower in zip(results, results[1:]):
        assert narrower <= wider
