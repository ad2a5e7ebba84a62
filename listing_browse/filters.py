"""Client-side filtering of the working set."""
from typing import List, Optional

from .coercion import Tri, first_known
from .models import FilterState, FlagChoice, Record
from .schema import FilterSchema, FlagFilter
from .utils import norm_tr, to_number, tr_lower


def resolve_flag(record: Record, flag: FlagFilter) -> Tri:
    """Top-level fields first, then the nested attributes mapping."""
    resolved = first_known(record.get(name) for name in flag.fields)
    if resolved is not Tri.UNKNOWN:
        return resolved
    return first_known(record.nested(name) for name in flag.nested_fields)


class FilterEngine:
    """Evaluate a FilterState against records, keeping their order.

    Per record: free text, then numeric ranges, then selects, then flags;
    the first failing predicate rejects it.
    """

    def __init__(self, schema: FilterSchema) -> None:
        self.schema = schema

    def apply(self, records: List[Record], state: FilterState) -> List[Record]:
        query = norm_tr(state.query)
        return [r for r in records if self.matches(r, state, query)]

    def matches(self, record: Record, state: FilterState, query: Optional[str] = None) -> bool:
        if query is None:
            query = norm_tr(state.query)
        return (
            self._text_ok(record, query)
            and self._ranges_ok(record, state)
            and self._selects_ok(record, state)
            and self._flags_ok(record, state)
        )

    def _text_ok(self, record: Record, query: str) -> bool:
        if not query:
            return True
        haystack = " ".join(str(record.get(name) or "") for name in self.schema.text_fields)
        return query in tr_lower(haystack)

    def _ranges_ok(self, record: Record, state: FilterState) -> bool:
        for key, (low, high) in state.ranges.items():
            rule = self.schema.range(key)
            if rule is None or (low is None and high is None):
                continue
            value = to_number(record.get(rule.record_field))
            if value is None:
                return False
            if low is not None and value < low:
                return False
            if high is not None and value > high:
                return False
        return True

    def _selects_ok(self, record: Record, state: FilterState) -> bool:
        for key, selected in state.selects.items():
            rule = self.schema.select(key)
            wanted = norm_tr(selected)
            if rule is None or not wanted:
                continue
            raw = record.get(rule.record_field)
            actual = norm_tr(str(raw)) if raw is not None else ""
            if not actual or actual != wanted:
                return False
        return True

    def _flags_ok(self, record: Record, state: FilterState) -> bool:
        for key, choice in state.flags.items():
            rule = self.schema.flag(key)
            if rule is None or choice is None:
                continue
            resolved = resolve_flag(record, rule)
            if choice == FlagChoice.YES and resolved is not Tri.TRUE:
                return False
            if choice == FlagChoice.NO and resolved is not Tri.FALSE:
                return False
        return True
