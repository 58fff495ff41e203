"""
Tests for the fan-out dashboard compositions.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from union_loans.domains.models import CollectionSummary, Collector, Installment, Member, Union
from union_loans.infrastructure.adapters.base import BackendAdapter
from union_loans.infrastructure.errors import NetworkError
from union_loans.services.data_access import DataAccess
from union_loans.services.overview import DashboardSnapshot, dashboard_snapshot, union_overviews


@pytest.fixture
def adapter() -> MagicMock:
    return MagicMock(spec=BackendAdapter)


@pytest.fixture
def data(adapter: MagicMock) -> DataAccess:
    return DataAccess(adapter)


def test_union_overviews(data: DataAccess, adapter: MagicMock) -> None:
    adapter.list_unions.return_value = [
        Union(id="1", name="North", leader_id="10", member_count=0),
        Union(id="2", name="South", leader_id="", member_count=40),
    ]
    adapter.union_members.side_effect = lambda uid: [Member(id=f"{uid}-a"), Member(id=f"{uid}-b")]
    adapter.union_collectors.side_effect = lambda uid: [Collector(id=f"c{uid}")] if uid == "1" else []
    adapter.get_member.return_value = Member(id="10", name="Ada")

    overviews = union_overviews(data, max_workers=4)

    assert [o.union.id for o in overviews] == ["1", "2"]
    north, south = overviews
    assert [m.id for m in north.members] == ["1-a", "1-b"]
    assert [c.id for c in north.collectors] == ["c1"]
    assert north.leader is not None and north.leader.name == "Ada"
    assert north.member_count == 2
    assert south.leader is None
    assert south.collectors == []
    assert south.member_count == 40
    adapter.list_unions.assert_called_once()


def test_union_overviews_partial_failure(data: DataAccess, adapter: MagicMock) -> None:
    adapter.list_unions.return_value = [Union(id="1", leader_id="")]
    adapter.union_members.side_effect = NetworkError("down")
    adapter.union_collectors.return_value = [Collector(id="c1")]

    (overview,) = union_overviews(data)
    assert overview.members == []
    assert [c.id for c in overview.collectors] == ["c1"]


def test_union_overviews_empty(data: DataAccess, adapter: MagicMock) -> None:
    adapter.list_unions.return_value = []
    assert union_overviews(data) == []
    adapter.union_members.assert_not_called()


def test_dashboard_snapshot(data: DataAccess, adapter: MagicMock) -> None:
    now = datetime(2024, 3, 20)
    adapter.collection_summary.return_value = CollectionSummary(
        total_loans=4, total_amount=Decimal("1000"), total_collected=Decimal("250")
    )
    adapter.overdue_installments.return_value = [
        Installment(id="a", due_date=datetime(2024, 3, 18), status="overdue"),
        Installment(id="b", due_date=datetime(2024, 3, 1), status="overdue"),
        Installment(id="c", due_date=datetime(2024, 3, 10), status="overdue"),
    ]
    adapter.pending_installments.return_value = [Installment(id="p")]

    snap = dashboard_snapshot(data, now=now, preview=2)

    assert [r.installment.id for r in snap.overdue] == ["b", "c"]
    assert [r.days_overdue for r in snap.overdue] == [19, 10]
    assert snap.overdue_count == 3
    assert snap.pending_count == 1
    assert snap.collection_rate == 25.0


def test_collection_rate_without_lending() -> None:
    snap = DashboardSnapshot(summary=CollectionSummary(), overdue=[], overdue_count=0, pending_count=0)
    assert snap.collection_rate == 0.0
