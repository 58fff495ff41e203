"""
Tests for envelope unwrapping and field coercion.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from union_loans.infrastructure.adapters.envelope import (
    as_date,
    as_decimal,
    as_id,
    as_int,
    as_optional_date,
    jsonable,
    unwrap_many,
    unwrap_one,
)


@pytest.mark.parametrize(
    "body",
    [
        [{"id": 1}],
        {"id": 1},
        {"result": [{"id": 1}]},
        {"result": {"id": 1}},
    ],
)
def test_unwrap_many_always_returns_list(body) -> None:
    assert unwrap_many(body) == [{"id": 1}]


def test_unwrap_many_empty_shapes() -> None:
    assert unwrap_many(None) == []
    assert unwrap_many({"result": None}) == []
    assert unwrap_many({"result": []}) == []


def test_unwrap_one_shapes() -> None:
    assert unwrap_one([{"id": 2}, {"id": 3}]) == {"id": 2}
    assert unwrap_one({"result": [{"id": 2}]}) == {"id": 2}
    assert unwrap_one({"id": 2}) == {"id": 2}
    assert unwrap_one([]) is None
    assert unwrap_one({"result": None}) is None
    assert unwrap_one(None) is None


def test_as_id_never_returns_non_string() -> None:
    assert as_id(7) == "7"
    assert as_id(7.0) == "7"
    assert as_id("abc") == "abc"
    assert as_id(None) == ""
    assert as_id(False) == ""
    assert as_id([4, "North Union"]) == "4"
    assert as_id([]) == ""
    assert as_id(None, default="12") == "12"


def test_numeric_coercion() -> None:
    assert as_int("3") == 3
    assert as_int("3.0") == 3
    assert as_int(None) == 0
    assert as_int("x") == 0
    assert as_decimal(1234.5) == Decimal("1234.5")
    assert as_decimal(False) == Decimal("0")


def test_dates() -> None:
    assert as_date("2024-03-05") == datetime(2024, 3, 5)
    assert as_date("2024-03-05 10:30:00") == datetime(2024, 3, 5, 10, 30)
    assert as_date(date(2024, 3, 5)) == datetime(2024, 3, 5)
    assert as_date(None, default=lambda: datetime(2000, 1, 1)) == datetime(2000, 1, 1)
    assert isinstance(as_date(None), datetime)
    assert as_optional_date(None) is None
    assert as_optional_date(False) is None
    assert as_optional_date("") is None
    assert as_optional_date("2024-03-05T08:00:00Z").tzinfo is not None


def test_jsonable() -> None:
    out = jsonable({"amount": Decimal("10.50"), "due": datetime(2024, 3, 5), "tags": (1, 2)})
    assert out == {"amount": 10.5, "due": "2024-03-05T00:00:00", "tags": [1, 2]}


def test_out_of_range_values_fall_back() -> None:
    assert as_int("1e400") == 0
    assert as_int(float("inf"), default=3) == 3
    assert as_decimal("NaN") == Decimal("0")
    assert as_decimal("-Infinity") == Decimal("0")
    assert as_decimal(Decimal("NaN")) == Decimal("0")
    assert as_optional_date(10**20) is None
    assert as_optional_date(10**400) is None
    assert as_date(10**20, default=lambda: datetime(2000, 1, 1)) == datetime(2000, 1, 1)
