"""Yes/no coercion for loosely typed listing flags.

Sellers and older imports store flags like "tradable" or "shipping" as
booleans, as 1/0, or as free-form words ("evet", "yok", "açık"...).
``coerce_flag`` folds all of them into a three-valued ``Tri``.
"""
from enum import Enum
from typing import Any, Iterable

from .utils import tr_lower

FLAG_TOKENS_VERSION = 1

TRUE_TOKENS = frozenset({"true", "1", "yes", "evet", "var", "uygun", "acik", "açık"})
FALSE_TOKENS = frozenset(
    {
        "false",
        "0",
        "no",
        "hayir",
        "hayır",
        "yok",
        "uygun degil",
        "uygun değil",
        "kapali",
        "kapalı",
    }
)


class Tri(Enum):
    TRUE = "true"
    FALSE = "false"
    UNKNOWN = "unknown"


def coerce_flag(value: Any) -> Tri:
    """Resolve a raw flag value.

    - bool passes through
    - numeric 1 / 0 map to TRUE / FALSE, other numbers are UNKNOWN
    - strings are trimmed, lower-cased (Turkish rules) and looked up in
      TRUE_TOKENS / FALSE_TOKENS
    - everything else is UNKNOWN
    """
    if isinstance(value, bool):
        return Tri.TRUE if value else Tri.FALSE
    if isinstance(value, (int, float)):
        if value == 1:
            return Tri.TRUE
        if value == 0:
            return Tri.FALSE
        return Tri.UNKNOWN
    if isinstance(value, str):
        token = tr_lower(value.strip())
        if token in TRUE_TOKENS:
            return Tri.TRUE
        if token in FALSE_TOKENS:
            return Tri.FALSE
    return Tri.UNKNOWN


def first_known(values: Iterable[Any]) -> Tri:
    """Coerce values in order and return the first that is not UNKNOWN."""
    for value in values:
        resolved = coerce_flag(value)
        if resolved is not Tri.UNKNOWN:
            return resolved
    return Tri.UNKNOWN
