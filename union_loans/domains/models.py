"""
Canonical, backend-agnostic entity shapes.

Every identifier is a string regardless of how the backend encodes it; missing
references are the empty string. Instances are read projections; the only
client-built entities are create/update payloads (see `to_payload`).
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from decimal import Decimal
from typing import Any, Literal, Mapping, Optional

from union_loans.utils.formatting import days_overdue, loan_progress

MemberStatus = Literal["active", "inactive"]
UnionStatus = Literal["active", "inactive"]
LoanStatus = Literal["active", "completed", "defaulted"]
InstallmentStatus = Literal["paid", "pending", "overdue"]
SortOrder = Literal["asc", "desc"]

ZERO = Decimal("0")


class _Entity:
    """Shared payload helpers for the dataclasses below."""

    def to_payload(self) -> dict[str, Any]:
        """Field values keyed by canonical name, without the id (create/update body)."""
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name != "id"}  # type: ignore[arg-type]


@dataclass(frozen=True)
class Union(_Entity):
    id: str
    name: str = ""
    leader_id: str = ""
    purse: Decimal = ZERO
    member_count: int = 0
    created_date: datetime = field(default_factory=datetime.now)
    status: str = "active"


@dataclass(frozen=True)
class Member(_Entity):
    id: str
    name: str = ""
    contact_number: str = ""
    email: str = ""
    join_date: datetime = field(default_factory=datetime.now)
    status: str = "active"
    balance: Decimal = ZERO
    union_id: str = ""


@dataclass(frozen=True)
class Loan(_Entity):
    id: str
    member_id: str = ""
    amount: Decimal = ZERO
    issue_date: datetime = field(default_factory=datetime.now)
    total_installments: int = 0
    paid_installments: int = 0
    next_due_date: datetime = field(default_factory=datetime.now)
    status: str = "active"

    @property
    def progress(self) -> float:
        return loan_progress(self.paid_installments, self.total_installments)


@dataclass(frozen=True)
class Installment(_Entity):
    id: str
    loan_id: str = ""
    member_id: str = ""
    amount: Decimal = ZERO
    due_date: datetime = field(default_factory=datetime.now)
    paid_date: Optional[datetime] = None
    status: str = "pending"
    collector_id: str = ""

    def days_overdue(self, now: Optional[datetime] = None) -> int:
        return days_overdue(self.due_date, now)


@dataclass(frozen=True)
class Collector(_Entity):
    id: str
    name: str = ""
    contact_number: str = ""
    email: str = ""
    assigned_members: int = 0
    collections_today: int = 0
    total_collected: Decimal = ZERO
    union_id: str = ""


@dataclass(frozen=True)
class CollectionSummary:
    """Read-only aggregate; fields the backend omits stay at zero."""

    total_loans: int = 0
    active_loans: int = 0
    completed_loans: int = 0
    defaulted_loans: int = 0
    total_amount: Decimal = ZERO
    total_collected: Decimal = ZERO
    pending_amount: Decimal = ZERO


@dataclass(frozen=True)
class ListOptions:
    """Passthrough query options for list calls."""

    limit: Optional[int] = None
    offset: Optional[int] = None
    sort: Optional[str] = None
    order: Optional[SortOrder] = None
    filter: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class SessionDescriptor:
    """What the backend hands back on login. `raw` keeps the full server payload."""

    uid: str
    session_id: str
    name: str = ""
    username: str = ""
    raw: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out = dict(self.raw)
        out.update(
            {
                "uid": self.uid,
                "session_id": self.session_id,
                "name": self.name,
                "username": self.username,
            }
        )
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SessionDescriptor":
        uid = data.get("uid")
        return cls(
            uid="" if uid is None or uid is False else str(uid),
            session_id=str(data.get("session_id") or ""),
            name=str(data.get("name") or ""),
            username=str(data.get("username") or ""),
            raw=dict(data),
        )
