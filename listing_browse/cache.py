from typing import Any, Dict, Iterable, List

from .models import Record


class RecordCache:
    """Deduplicated working set for one QueryKey plus its cursor state.

    ``generation`` bumps on every reset so a fetch started before the
    reset can tell its result no longer belongs here.
    """

    def __init__(self) -> None:
        self._records: List[Record] = []
        self._index: Dict[str, Record] = {}
        self.cursor: Any = None
        self.exhausted = False
        self.generation = 0

    def reset(self) -> None:
        self._records = []
        self._index = {}
        self.cursor = None
        self.exhausted = False
        self.generation += 1

    def absorb(self, records: Iterable[Record]) -> int:
        """Append unseen records (first seen wins) and return the working-set size."""
        for record in records:
            if record.id in self._index:
                continue
            self._index[record.id] = record
            self._records.append(record)
        return len(self._records)

    def advance(self, cursor: Any, exhausted: bool) -> None:
        self.cursor = cursor
        # Exhaustion is sticky until reset.
        self.exhausted = self.exhausted or exhausted

    def all(self) -> List[Record]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._index
