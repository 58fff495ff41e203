"""
Response envelope handling and field coercion shared by both adapters.

A backend body is one of: a bare list, a bare object, or an object wrapping
either under ``result``. `unwrap_many` and `unwrap_one` are the only places
that look at the shape; everything downstream sees plain records.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Union as TypingUnion

from union_loans.utils.logger import get_logger

logger = get_logger()

Record = dict[str, Any]
# list | object | {"result": list | object}; the wrapper is itself an object.
Envelope = TypingUnion[list[Record], Record, None]


def unwrap(body: Envelope) -> Envelope:
    """Take ``body["result"]`` when the body is an object carrying it, else the body."""
    if isinstance(body, dict) and "result" in body:
        return body["result"]
    return body


def unwrap_many(body: Envelope) -> list[Record]:
    """
    Normalize any envelope to a list of records.

    A single object becomes a one-element list; null or scalar payloads become [].
    """
    data = unwrap(body)
    if isinstance(data, list):
        return [item for item in data if isinstance(item, dict)]
    if isinstance(data, dict):
        return [data]
    return []


def unwrap_one(body: Envelope) -> Record | None:
    """Normalize any envelope to one record: the first list element, or None when empty."""
    data = unwrap(body)
    if isinstance(data, list):
        data = next((item for item in data if isinstance(item, dict)), None)
    if isinstance(data, dict) and data:
        return data
    return None


def first_present(record: Record, *keys: str) -> Any:
    """Value of the first key whose value is not None."""
    for k in keys:
        v = record.get(k)
        if v is not None:
            return v
    return None


# --- Field coercion ---

def as_id(value: Any, default: str = "") -> str:
    """
    Stringify an identifier without ever raising.

    Handles numeric ids, ``[id, display_name]`` reference pairs, and the falsy
    placeholders (None, False, empty pair) some backends use for "no reference".
    """
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None or value is False:
        return default
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def as_text(value: Any) -> str:
    if value is None or value is False:
        return ""
    return str(value)


def as_int(value: Any, default: int = 0) -> int:
    if value is None or value is False:
        return default
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        try:
            return int(float(value))
        except (TypeError, ValueError, OverflowError):
            return default


def as_decimal(value: Any) -> Decimal:
    """Finite Decimal or zero; NaN and infinities count as missing."""
    if value is None or value is False:
        return Decimal("0")
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value))
        except (InvalidOperation, ValueError):
            return Decimal("0")
    return value if value.is_finite() else Decimal("0")


def _parse_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # Epoch milliseconds, as JSON encoders of JS dates emit.
        try:
            return datetime.fromtimestamp(value / 1000)
        except (OverflowError, OSError, ValueError):
            logger.debug("Out-of-range timestamp: %r", value)
            return None
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            logger.debug("Unparseable date value: %r", value)
            return None
    return None


def as_date(value: Any, default: Callable[[], datetime] = datetime.now) -> datetime:
    """Required date: parsed when present, otherwise ``default()`` (now)."""
    parsed = _parse_datetime(value)
    return parsed if parsed is not None else default()


def as_optional_date(value: Any) -> datetime | None:
    """Optional date: parsed when present, otherwise None."""
    return _parse_datetime(value)


def jsonable(value: Any) -> Any:
    """Convert canonical values (Decimal, datetime) into JSON-encodable ones."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(v) for v in value]
    return value
