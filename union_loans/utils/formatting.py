"""Presentation helpers: currency and date rendering, loan arithmetic."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

DEFAULT_CURRENCY_SYMBOL = "₦"

_CENTS = Decimal("0.01")


def _to_decimal(amount: Any) -> Decimal:
    if amount is None or amount is False:
        return Decimal("0")
    if not isinstance(amount, Decimal):
        try:
            amount = Decimal(str(amount))
        except (InvalidOperation, ValueError):
            return Decimal("0")
    return amount if amount.is_finite() else Decimal("0")


def format_currency(amount: Any, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """
    Render an amount with thousands separators and two fraction digits.

    >>> format_currency(1234.5)
    '₦1,234.50'
    >>> format_currency(-20)
    '-₦20.00'
    """
    value = _to_decimal(amount).quantize(_CENTS, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def _as_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(str(value).strip().replace("Z", "+00:00")).date()


def format_date(value: date | datetime | str) -> str:
    """
    Short month form, e.g. ``Mar 5, 2024``.

    Accepts date/datetime objects or ISO-8601 strings.
    """
    d = _as_date(value)
    return f"{d:%b} {d.day}, {d.year}"


def loan_progress(paid_installments: int, total_installments: int) -> float:
    """Percentage of installments paid, clamped to 0..100. Zero when nothing is scheduled."""
    if not total_installments or total_installments <= 0:
        return 0.0
    pct = (paid_installments or 0) / total_installments * 100
    return max(0.0, min(100.0, pct))


def days_overdue(due: date | datetime, now: datetime | None = None) -> int:
    """
    Whole days elapsed since the due date (floored). Never negative.

    Naive values are local time. When either side is aware, both are compared
    in UTC.
    """
    now = now or datetime.now()
    if not isinstance(due, datetime):
        due = datetime(due.year, due.month, due.day)
    if due.tzinfo is not None or now.tzinfo is not None:
        due = due.astimezone(timezone.utc)
        now = now.astimezone(timezone.utc)
    seconds = (now - due).total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // 86400)
