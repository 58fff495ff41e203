"""
Fan-out/fan-in compositions over the facade for dashboard-style views.

All sub-fetches go into one thread pool from the calling thread and are then
gathered, so no worker ever waits on another worker.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from union_loans.domains.models import CollectionSummary, Collector, Installment, Member, Union
from union_loans.services.data_access import DataAccess
from union_loans.utils.logger import get_logger

logger = get_logger()

DEFAULT_WORKERS = 8
OVERDUE_PREVIEW = 5


@dataclass(frozen=True)
class UnionOverview:
    union: Union
    members: list[Member] = field(default_factory=list)
    collectors: list[Collector] = field(default_factory=list)
    leader: Optional[Member] = None

    @property
    def member_count(self) -> int:
        """Server-supplied count when present, otherwise derived from the member list."""
        return self.union.member_count or len(self.members)


@dataclass(frozen=True)
class OverdueRow:
    installment: Installment
    days_overdue: int


@dataclass(frozen=True)
class DashboardSnapshot:
    summary: CollectionSummary
    overdue: list[OverdueRow]
    overdue_count: int
    pending_count: int

    @property
    def collection_rate(self) -> float:
        """Collected share of the total lent, in percent."""
        if not self.summary.total_amount:
            return 0.0
        return float(self.summary.total_collected / self.summary.total_amount * Decimal(100))


def union_overviews(data: DataAccess, max_workers: int = DEFAULT_WORKERS) -> list[UnionOverview]:
    """
    Members, collectors and leader for every union.

    The three lookups per union run concurrently, and unions fan out across the
    pool; each overview is built only after all three of its lookups finish.
    """
    unions = data.get_all_unions()
    if not unions:
        return []
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        pending = [
            (
                union,
                pool.submit(data.get_union_members, union.id),
                pool.submit(data.get_union_collectors, union.id),
                pool.submit(data.get_union_leader, union.id),
            )
            for union in unions
        ]
        out = [
            UnionOverview(union=u, members=m.result(), collectors=c.result(), leader=lead.result())
            for u, m, c, lead in pending
        ]
    logger.info("Built overviews for %d unions", len(out))
    return out


def dashboard_snapshot(
    data: DataAccess,
    now: Optional[datetime] = None,
    preview: int = OVERDUE_PREVIEW,
) -> DashboardSnapshot:
    """Summary card figures plus the most overdue installments (up to ``preview`` rows)."""
    now = now or datetime.now()
    with ThreadPoolExecutor(max_workers=3) as pool:
        summary_f = pool.submit(data.get_collection_summary)
        overdue_f = pool.submit(data.get_overdue_installments)
        pending_f = pool.submit(data.get_pending_installments)
        summary, overdue, pending = summary_f.result(), overdue_f.result(), pending_f.result()

    rows = sorted(
        (OverdueRow(installment=i, days_overdue=i.days_overdue(now)) for i in overdue),
        key=lambda r: r.days_overdue,
        reverse=True,
    )
    return DashboardSnapshot(
        summary=summary,
        overdue=rows[:preview],
        overdue_count=len(overdue),
        pending_count=len(pending),
    )
