"""Remote listing store interface and an in-memory implementation.

Provides:
- AbstractListingStore: what the engine needs from a document store
- InMemoryListingStore: cursor-paginated store over a list of Records,
  used by the CLI, the API and the tests"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Set, Tuple

from .errors import IndexMissingError, RemoteStoreError, RemoteUnavailableError
from .models import Record
from .utils import timestamp_ms, to_number

logger = logging.getLogger(__name__)

Constraint = Tuple[str, Any]


class AbstractListingStore:
    """Interface for remote listing stores."""

    async def query(
        self,
        constraints: Sequence[Constraint],
        sort_field: Optional[str] = None,
        sort_direction: Optional[str] = None,
        page_size: int = 60,
        cursor: Optional[Record] = None,
    ) -> List[Record]:
        # Return up to page_size records matching every (field, value) pair,
        # starting after `cursor` (the last record of the previous page).
        raise NotImplementedError

    async def count(self, constraints: Sequence[Constraint]) -> int:
        raise NotImplementedError

    async def distinct(self, field: str, constraints: Sequence[Constraint]) -> List[str]:
        # Sorted distinct non-empty values of `field` among matching records.
        raise NotImplementedError


class InMemoryListingStore(AbstractListingStore):
    """Document-store semantics over an in-memory list.

    - equality-only queries always run; equality + sort needs a composite
      index unless ``indexes`` is None (everything indexed)
    - sorted queries skip records that lack a usable sort value
    - ties break on record id, in the sort direction
    """

    def __init__(
        self,
        records: Iterable[Record],
        indexes: Optional[Set[Tuple[frozenset, str]]] = None,
        latency: float = 0.0,
    ) -> None:
        self._records: List[Record] = list(records)
        self._indexes = indexes
        self._latency = latency
        self._failures: List[RemoteStoreError] = []
        self.count_available = True
        self.query_log: List[Tuple[Tuple[Constraint, ...], Optional[str], Optional[str], int, Optional[str]]] = []

    @classmethod
    def from_json(cls, path: str, **kwargs: Any) -> "InMemoryListingStore":
        """Load a catalog file: either a list of documents with "id", or an id → document map."""
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if isinstance(raw, dict):
            docs = [(doc_id, doc) for doc_id, doc in raw.items()]
        else:
            docs = [(doc.get("id"), doc) for doc in raw]
        records = [Record.from_document(doc_id, doc) for doc_id, doc in docs if doc_id]
        logger.info("Loaded %d listings from %s", len(records), path)
        return cls(records, **kwargs)

    def fail_next(self, error: Optional[RemoteStoreError] = None, times: int = 1) -> None:
        """Make the next `times` queries raise `error` (transient by default)."""
        for _ in range(times):
            self._failures.append(error or RemoteUnavailableError("store unavailable"))

    async def query(
        self,
        constraints: Sequence[Constraint],
        sort_field: Optional[str] = None,
        sort_direction: Optional[str] = None,
        page_size: int = 60,
        cursor: Optional[Record] = None,
    ) -> List[Record]:
        constraints = tuple(constraints)
        self.query_log.append(
            (constraints, sort_field, sort_direction, page_size, cursor.id if cursor else None)
        )
        await asyncio.sleep(self._latency)

        if self._failures:
            raise self._failures.pop(0)
        if sort_field and not self._has_index(constraints, sort_field):
            raise IndexMissingError(
                f"The query requires an index on {sorted(f for f, _ in constraints)} + {sort_field}"
            )

        matching = self._matching(constraints)
        descending = sort_field is not None and sort_direction == "desc"
        if sort_field:
            keyed = [(self._sort_value(r, sort_field), r.id, r) for r in matching]
            keyed = [item for item in keyed if item[0] is not None]
        else:
            keyed = [(0, r.id, r) for r in matching]
        keyed.sort(key=lambda item: (item[0], item[1]), reverse=descending)

        if cursor is not None:
            cursor_key = (self._sort_value(cursor, sort_field) if sort_field else 0, cursor.id)
            if descending:
                keyed = [item for item in keyed if (item[0], item[1]) < cursor_key]
            else:
                keyed = [item for item in keyed if (item[0], item[1]) > cursor_key]

        return [item[2] for item in keyed[:page_size]]

    async def count(self, constraints: Sequence[Constraint]) -> int:
        await asyncio.sleep(self._latency)
        if not self.count_available:
            raise RemoteStoreError("count queries are not permitted")
        return len(self._matching(tuple(constraints)))

    async def distinct(self, field: str, constraints: Sequence[Constraint]) -> List[str]:
        await asyncio.sleep(self._latency)
        values = {r.get(field) for r in self._matching(tuple(constraints))}
        return sorted(str(v) for v in values if v not in (None, ""))

    def _matching(self, constraints: Tuple[Constraint, ...]) -> List[Record]:
        return [
            r for r in self._records if all(r.get(name) == value for name, value in constraints)
        ]

    def _has_index(self, constraints: Tuple[Constraint, ...], sort_field: str) -> bool:
        if self._indexes is None:
            return True
        fields = frozenset(name for name, _ in constraints)
        if not fields or fields == {sort_field}:
            return True
        return (fields, sort_field) in self._indexes

    @staticmethod
    def _sort_value(record: Record, sort_field: Optional[str]) -> Optional[float]:
        if sort_field == "createdAt":
            return float(timestamp_ms(record.created_at)) if record.created_at else None
        return to_number(record.get(sort_field))
