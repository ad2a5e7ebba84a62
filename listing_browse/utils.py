"""Utility functions for listing browsing."""
import math
import re
from dataclasses import asdict
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional

if TYPE_CHECKING:
    from .models import Record


def normalize_spaces(text: Optional[str]) -> str:
    """Collapse whitespace runs and strip the ends."""
    return re.sub(r"\s+", " ", text or "").strip()


def tr_lower(text: Optional[str]) -> str:
    """Lower-case with Turkish rules for dotted/dotless I."""
    value = (text or "").replace("I", "ı").replace("İ", "i")
    return value.lower()


def norm_tr(text: Optional[str]) -> str:
    return tr_lower(normalize_spaces(text))


def clean_digits(value: Optional[str]) -> str:
    return re.sub(r"[^\d]", "", value or "")


def pick_enum(value: Optional[str], allowed: Iterable[str]) -> str:
    """Return value if it is whitelisted, else the empty string."""
    if not value:
        return ""
    return value if value in set(allowed) else ""


def to_number(value: Any) -> Optional[float]:
    """Finite float from a number or numeric string, None otherwise."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _from_epoch_seconds(seconds: float) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def to_timestamp(value: Any) -> Optional[datetime]:
    """Parse the createdAt shapes the store hands back.

    Accepts a datetime, an ISO8601 string, epoch milliseconds, or a
    ``{"seconds": .., "nanoseconds": ..}`` mapping. Anything else is None.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, dict) and "seconds" in value:
        seconds = to_number(value.get("seconds"))
        if seconds is None:
            return None
        nanos = to_number(value.get("nanoseconds")) or 0.0
        return _from_epoch_seconds(seconds + nanos / 1e9)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if not math.isfinite(value):
            return None
        return _from_epoch_seconds(value / 1000.0)
    if isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def timestamp_ms(value: Optional[datetime]) -> int:
    """Milliseconds since the epoch; missing timestamps count as epoch 0."""
    if value is None:
        return 0
    return int(value.timestamp() * 1000)


def serialize_record(record: "Record") -> Dict[str, Any]:
    """Convert a Record to a JSON-serializable dict."""
    data = asdict(record)
    data["created_at"] = record.created_at.isoformat() if record.created_at else None
    price = to_number(record.price)
    data["price"] = price if price is not None else None
    return data
