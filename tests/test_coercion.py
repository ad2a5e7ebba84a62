import pytest

from listing_browse.coercion import FALSE_TOKENS, TRUE_TOKENS, Tri, coerce_flag, first_known


@pytest.mark.parametrize("value", [True, 1, 1.0, "true", "YES", " Evet ", "var", "uygun", "acik", "AÇIK"])
def test_affirmative_values_resolve_true(value):
    assert coerce_flag(value) is Tri.TRUE


@pytest.mark.parametrize(
    "value",
    [False, 0, 0.0, "false", "No", "hayir", "HAYIR", "yok", "uygun degil", "Uygun Değil", "kapali", "KAPALI"],
)
def test_negative_values_resolve_false(value):
    assert coerce_flag(value) is Tri.FALSE


@pytest.mark.parametrize("value", [None, "", "   ", "maybe", 2, -1, 0.5, [], {}, "evet!"])
def test_everything_else_is_unknown(value):
    assert coerce_flag(value) is Tri.UNKNOWN


def test_turkish_dotted_capital_i_lowercases_to_plain_i():
    # "AÇIK" -> "açık" needs Turkish casing (I -> ı).
    assert coerce_flag("AÇIK") is Tri.TRUE
    assert coerce_flag("KAPALI") is Tri.FALSE


def test_token_tables_do_not_overlap():
    assert not TRUE_TOKENS & FALSE_TOKENS


def test_first_known_skips_unknowns():
    assert first_known([None, "??", "yok", True]) is Tri.FALSE
    assert first_known([None, "??"]) is Tri.UNKNOWN
    assert first_known([]) is Tri.UNKNOWN
