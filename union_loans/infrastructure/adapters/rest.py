"""
REST facade integration: resource routes under ``/api`` with camelCase bodies.

Every body passes through `unwrap_many`/`unwrap_one`, so bare arrays, bare
objects and ``{"result": ...}`` wrappers all decode to the same entities.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, TypeVar
from urllib.parse import quote

from union_loans.domains.models import (
    CollectionSummary,
    Collector,
    Installment,
    ListOptions,
    Loan,
    Member,
    SessionDescriptor,
    Union,
)
from union_loans.infrastructure.adapters.base import BackendAdapter, Changes
from union_loans.infrastructure.adapters.envelope import (
    Record,
    as_date,
    as_decimal,
    as_id,
    as_int,
    as_optional_date,
    as_text,
    first_present,
    jsonable,
    unwrap_many,
    unwrap_one,
)
from union_loans.infrastructure.adapters.rpc import authenticate, destroy_session
from union_loans.infrastructure.errors import ApplicationError, HttpStatusError
from union_loans.infrastructure.http.transport import TransportClient
from union_loans.utils.logger import get_logger

logger = get_logger()

T = TypeVar("T")


def build_query_params(options: Optional[ListOptions]) -> dict[str, str]:
    """
    Query string for list endpoints.

    Falsy limit/offset are omitted; ``filter`` is a comma-joined list of key=value.
    """
    if not options:
        return {}
    params: dict[str, str] = {}
    if options.limit:
        params["limit"] = str(options.limit)
    if options.offset:
        params["offset"] = str(options.offset)
    if options.sort:
        params["sort"] = options.sort
    if options.order:
        params["order"] = options.order
    if options.filter:
        joined = ",".join(f"{k}={v}" for k, v in options.filter.items())
        if joined:
            params["filter"] = joined
    return params


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _rest_payload(values: Mapping[str, Any]) -> dict[str, Any]:
    return {_camel(k): jsonable(v) for k, v in values.items() if k != "id"}


# --- Record decoders ---

def _union(r: Record) -> Union:
    return Union(
        id=as_id(r.get("id")),
        name=as_text(r.get("name")),
        leader_id=as_id(r.get("leaderId")),
        purse=as_decimal(r.get("purse")),
        member_count=as_int(r.get("memberCount")),
        created_date=as_date(r.get("createdDate")),
        status=as_text(r.get("status")) or "active",
    )


def _member(r: Record, union_id: str = "") -> Member:
    return Member(
        id=as_id(first_present(r, "id", "memberId")),
        name=as_text(r.get("name")),
        contact_number=as_text(r.get("contactNumber")),
        email=as_text(r.get("email")),
        join_date=as_date(r.get("joinDate")),
        status=as_text(r.get("status")) or "active",
        balance=as_decimal(r.get("balance")),
        union_id=as_id(r.get("unionId"), default=union_id),
    )


def _loan(r: Record, member_id: str = "") -> Loan:
    return Loan(
        id=as_id(r.get("id")),
        member_id=as_id(r.get("memberId"), default=member_id),
        amount=as_decimal(r.get("amount")),
        issue_date=as_date(r.get("issueDate")),
        total_installments=as_int(r.get("totalInstallments")),
        paid_installments=as_int(r.get("paidInstallments")),
        next_due_date=as_date(r.get("nextDueDate")),
        status=as_text(r.get("status")) or "active",
    )


def _installment(r: Record, *, loan_id: str = "", member_id: str = "", collector_id: str = "") -> Installment:
    return Installment(
        id=as_id(r.get("id")),
        loan_id=as_id(r.get("loanId"), default=loan_id),
        member_id=as_id(r.get("memberId"), default=member_id),
        amount=as_decimal(r.get("amount")),
        due_date=as_date(r.get("dueDate")),
        paid_date=as_optional_date(r.get("paidDate")),
        status=as_text(r.get("status")) or "pending",
        collector_id=as_id(r.get("collectorId"), default=collector_id),
    )


def _collector(r: Record, union_id: str = "") -> Collector:
    return Collector(
        id=as_id(r.get("id")),
        name=as_text(r.get("name")),
        contact_number=as_text(r.get("contactNumber")),
        email=as_text(r.get("email")),
        assigned_members=as_int(r.get("assignedMembers")),
        collections_today=as_int(r.get("collectionsToday")),
        total_collected=as_decimal(r.get("totalCollected")),
        union_id=as_id(r.get("unionId"), default=union_id),
    )


def _summary(r: Record | None) -> CollectionSummary:
    r = r or {}
    return CollectionSummary(
        total_loans=as_int(r.get("totalLoans")),
        active_loans=as_int(r.get("activeLoans")),
        completed_loans=as_int(r.get("completedLoans")),
        defaulted_loans=as_int(r.get("defaultedLoans")),
        total_amount=as_decimal(r.get("totalAmount")),
        total_collected=as_decimal(r.get("totalCollected")),
        pending_amount=as_decimal(r.get("pendingAmount")),
    )


class RestAdapter(BackendAdapter):
    """
    Adapter for the REST facade.

    Args:
        transport: Configured transport; its config supplies the API prefix and ERP db.
    """

    name = "rest"

    def __init__(self, transport: TransportClient) -> None:
        self._transport = transport
        self._prefix = "/" + transport.config.api_prefix.strip("/")

    def _path(self, *parts: str) -> str:
        return "/".join([self._prefix] + [quote(str(p), safe="") for p in parts])

    def _list(
        self,
        decode: Callable[[Record], T],
        *parts: str,
        options: Optional[ListOptions] = None,
    ) -> list[T]:
        body = self._transport.get(self._path(*parts), params=build_query_params(options))
        return [decode(r) for r in unwrap_many(body)]

    def _get_one(self, decode: Callable[[Record], T], *parts: str) -> Optional[T]:
        try:
            body = self._transport.get(self._path(*parts))
        except HttpStatusError as e:
            if e.status == 404:
                return None
            raise
        record = unwrap_one(body)
        return decode(record) if record is not None else None

    def _write(self, method: str, decode: Callable[[Record], T], values: Mapping[str, Any], *parts: str) -> T:
        body = self._transport.request(method, self._path(*parts), json=_rest_payload(values))
        record = unwrap_one(body)
        if record is None:
            raise ApplicationError(f"{method} {self._path(*parts)} returned no record", payload=body)
        return decode(record)

    def _delete(self, *parts: str) -> None:
        self._transport.delete(self._path(*parts))

    # --- Administrative ---

    def login(self, username: str, password: str) -> SessionDescriptor:
        return authenticate(self._transport, self._transport.config.erp_db, username, password)

    def logout(self) -> None:
        destroy_session(self._transport)

    # --- Unions ---

    def list_unions(self, options: Optional[ListOptions] = None) -> list[Union]:
        return self._list(_union, "unions", options=options)

    def get_union(self, union_id: str) -> Optional[Union]:
        return self._get_one(_union, "unions", union_id)

    def create_union(self, union: Union) -> Union:
        return self._write("POST", _union, union.to_payload(), "unions")

    def update_union(self, union_id: str, changes: Changes) -> Union:
        return self._write("PUT", _union, changes, "unions", union_id)

    def delete_union(self, union_id: str) -> None:
        self._delete("unions", union_id)

    def union_members(self, union_id: str, options: Optional[ListOptions] = None) -> list[Member]:
        return self._list(lambda r: _member(r, union_id=union_id), "unions", union_id, "members", options=options)

    def union_collectors(self, union_id: str) -> list[Collector]:
        return self._list(lambda r: _collector(r, union_id=union_id), "unions", union_id, "collectors")

    # --- Members ---

    def list_members(self, options: Optional[ListOptions] = None) -> list[Member]:
        return self._list(_member, "members", options=options)

    def get_member(self, member_id: str) -> Optional[Member]:
        return self._get_one(_member, "members", member_id)

    def create_member(self, member: Member) -> Member:
        return self._write("POST", _member, member.to_payload(), "members")

    def update_member(self, member_id: str, changes: Changes) -> Member:
        return self._write("PUT", _member, changes, "members", member_id)

    def delete_member(self, member_id: str) -> None:
        self._delete("members", member_id)

    def member_loans(self, member_id: str, options: Optional[ListOptions] = None) -> list[Loan]:
        return self._list(lambda r: _loan(r, member_id=member_id), "members", member_id, "loans", options=options)

    def member_installments(self, member_id: str, options: Optional[ListOptions] = None) -> list[Installment]:
        return self._list(
            lambda r: _installment(r, member_id=member_id),
            "members", member_id, "installments",
            options=options,
        )

    # --- Loans ---

    def list_loans(self, options: Optional[ListOptions] = None) -> list[Loan]:
        return self._list(_loan, "loans", options=options)

    def get_loan(self, loan_id: str) -> Optional[Loan]:
        return self._get_one(_loan, "loans", loan_id)

    def create_loan(self, loan: Loan) -> Loan:
        return self._write("POST", _loan, loan.to_payload(), "loans")

    def update_loan(self, loan_id: str, changes: Changes) -> Loan:
        return self._write("PUT", _loan, changes, "loans", loan_id)

    def delete_loan(self, loan_id: str) -> None:
        self._delete("loans", loan_id)

    def loan_installments(self, loan_id: str, options: Optional[ListOptions] = None) -> list[Installment]:
        return self._list(
            lambda r: _installment(r, loan_id=loan_id),
            "loans", loan_id, "installments",
            options=options,
        )

    # --- Installments ---

    def list_installments(self, options: Optional[ListOptions] = None) -> list[Installment]:
        return self._list(_installment, "installments", options=options)

    def get_installment(self, installment_id: str) -> Optional[Installment]:
        return self._get_one(_installment, "installments", installment_id)

    def create_installment(self, installment: Installment) -> Installment:
        return self._write("POST", _installment, installment.to_payload(), "installments")

    def update_installment(self, installment_id: str, changes: Changes) -> Installment:
        return self._write("PUT", _installment, changes, "installments", installment_id)

    def delete_installment(self, installment_id: str) -> None:
        self._delete("installments", installment_id)

    def overdue_installments(self, options: Optional[ListOptions] = None) -> list[Installment]:
        return self._list(_installment, "installments", "overdue", options=options)

    def pending_installments(self, options: Optional[ListOptions] = None) -> list[Installment]:
        return self._list(_installment, "installments", "pending", options=options)

    # --- Collectors ---

    def list_collectors(self, options: Optional[ListOptions] = None) -> list[Collector]:
        return self._list(_collector, "collectors", options=options)

    def get_collector(self, collector_id: str) -> Optional[Collector]:
        return self._get_one(_collector, "collectors", collector_id)

    def create_collector(self, collector: Collector) -> Collector:
        return self._write("POST", _collector, collector.to_payload(), "collectors")

    def update_collector(self, collector_id: str, changes: Changes) -> Collector:
        return self._write("PUT", _collector, changes, "collectors", collector_id)

    def delete_collector(self, collector_id: str) -> None:
        self._delete("collectors", collector_id)

    def collector_installments(self, collector_id: str, options: Optional[ListOptions] = None) -> list[Installment]:
        return self._list(
            lambda r: _installment(r, collector_id=collector_id),
            "collectors", collector_id, "installments",
            options=options,
        )

    # --- Summary ---

    def collection_summary(self) -> CollectionSummary:
        return _summary(unwrap_one(self._transport.get(self._path("summary", "collection"))))
