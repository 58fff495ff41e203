"""
Direct ERP integration over JSON-RPC (``call_kw`` on the loan.* models).

Reads are ``search_read`` calls with an explicit field list. Many2one fields
arrive as ``[id, display_name]`` or ``False`` and are reduced to the id string
or "".
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional, TypeVar

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
    unwrap_many,
    unwrap_one,
)
from union_loans.infrastructure.adapters.rpc import authenticate, destroy_session, rpc_call
from union_loans.infrastructure.errors import ApplicationError
from union_loans.infrastructure.http.transport import TransportClient
from union_loans.utils.logger import get_logger

logger = get_logger()

T = TypeVar("T")

CALL_KW_PATH = "/web/dataset/call_kw"

UNION_MODEL = "loan.union"
MEMBER_MODEL = "loan.member"
LOAN_MODEL = "loan.loan"
INSTALLMENT_MODEL = "loan.installment"
COLLECTOR_MODEL = "loan.collector"
SUMMARY_MODEL = "loan.collection.summary"

UNION_FIELDS = ["id", "name", "leader_id", "purse", "member_count", "create_date", "status"]
MEMBER_FIELDS = ["id", "name", "contact_number", "email", "join_date", "status", "balance", "union_id"]
LOAN_FIELDS = [
    "id", "member_id", "amount", "issue_date", "total_installments",
    "paid_installments", "next_due_date", "status",
]
INSTALLMENT_FIELDS = ["id", "loan_id", "member_id", "amount", "due_date", "paid_date", "status", "collector_id"]
COLLECTOR_FIELDS = [
    "id", "name", "contact_number", "email", "assigned_members",
    "collections_today", "total_collected", "union_id",
]

# Canonical name -> ERP field name, where they differ.
_FIELD_RENAMES = {"created_date": "create_date"}
# Computed or server-managed on the ERP side; never written.
_READ_ONLY = {"id", "created_date", "member_count"}
_REFERENCE_FIELDS = {"leader_id", "union_id", "member_id", "loan_id", "collector_id"}


def _record_id(value: str) -> Optional[int]:
    """ERP ids are integers; anything else cannot name a record."""
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _erp_value(name: str, value: Any) -> Any:
    if name in _REFERENCE_FIELDS:
        return _record_id(value) or False
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, date):
        return value.isoformat()
    if value is None:
        return False
    return value


def _erp_values(values: Mapping[str, Any]) -> dict[str, Any]:
    return {
        _FIELD_RENAMES.get(k, k): _erp_value(k, v)
        for k, v in values.items()
        if k not in _READ_ONLY
    }


def _domain(options: Optional[ListOptions]) -> list[list[Any]]:
    if not options or not options.filter:
        return []
    return [[k, "=", v] for k, v in options.filter.items()]


def _search_kwargs(fields: list[str], options: Optional[ListOptions]) -> dict[str, Any]:
    kwargs: dict[str, Any] = {"fields": fields}
    if options:
        if options.limit:
            kwargs["limit"] = options.limit
        if options.offset:
            kwargs["offset"] = options.offset
        if options.sort:
            kwargs["order"] = f"{_FIELD_RENAMES.get(options.sort, options.sort)} {options.order or 'asc'}"
    return kwargs


# --- Record decoders ---

def _union(r: Record) -> Union:
    return Union(
        id=as_id(r.get("id")),
        name=as_text(r.get("name")),
        leader_id=as_id(r.get("leader_id")),
        purse=as_decimal(r.get("purse")),
        member_count=as_int(r.get("member_count")),
        created_date=as_date(r.get("create_date")),
        status=as_text(r.get("status")) or "active",
    )


def _member(r: Record) -> Member:
    return Member(
        id=as_id(r.get("id")),
        name=as_text(r.get("name")),
        contact_number=as_text(r.get("contact_number")),
        email=as_text(r.get("email")),
        join_date=as_date(r.get("join_date")),
        status=as_text(r.get("status")) or "active",
        balance=as_decimal(r.get("balance")),
        union_id=as_id(r.get("union_id")),
    )


def _loan(r: Record) -> Loan:
    return Loan(
        id=as_id(r.get("id")),
        member_id=as_id(r.get("member_id")),
        amount=as_decimal(r.get("amount")),
        issue_date=as_date(r.get("issue_date")),
        total_installments=as_int(r.get("total_installments")),
        paid_installments=as_int(r.get("paid_installments")),
        next_due_date=as_date(r.get("next_due_date")),
        status=as_text(r.get("status")) or "active",
    )


def _installment(r: Record) -> Installment:
    return Installment(
        id=as_id(r.get("id")),
        loan_id=as_id(r.get("loan_id")),
        member_id=as_id(r.get("member_id")),
        amount=as_decimal(r.get("amount")),
        due_date=as_date(r.get("due_date")),
        paid_date=as_optional_date(r.get("paid_date")),
        status=as_text(r.get("status")) or "pending",
        collector_id=as_id(r.get("collector_id")),
    )


def _collector(r: Record) -> Collector:
    return Collector(
        id=as_id(r.get("id")),
        name=as_text(r.get("name")),
        contact_number=as_text(r.get("contact_number")),
        email=as_text(r.get("email")),
        assigned_members=as_int(r.get("assigned_members")),
        collections_today=as_int(r.get("collections_today")),
        total_collected=as_decimal(r.get("total_collected")),
        union_id=as_id(r.get("union_id")),
    )


def _summary(r: Record | None) -> CollectionSummary:
    r = r or {}
    return CollectionSummary(
        total_loans=as_int(r.get("total_loans")),
        active_loans=as_int(r.get("active_loans")),
        completed_loans=as_int(r.get("completed_loans")),
        defaulted_loans=as_int(r.get("defaulted_loans")),
        total_amount=as_decimal(r.get("total_amount")),
        total_collected=as_decimal(r.get("total_collected")),
        pending_amount=as_decimal(r.get("pending_amount")),
    )


class ErpRpcAdapter(BackendAdapter):
    """
    Adapter that talks to the ERP models directly.

    Args:
        transport: Configured transport; its config supplies the database name for login.
    """

    name = "erp"

    def __init__(self, transport: TransportClient) -> None:
        self._transport = transport

    def call(
        self,
        model: str,
        method: str,
        args: list[Any] | None = None,
        kwargs: dict[str, Any] | None = None,
    ) -> Any:
        """Invoke ``model.method(*args, **kwargs)`` on the server and return the result."""
        logger.debug("ERP call %s.%s", model, method)
        return rpc_call(
            self._transport,
            f"{CALL_KW_PATH}/{model}/{method}",
            {
                "model": model,
                "method": method,
                "args": args or [],
                "kwargs": kwargs or {},
                "context": {},
            },
        )

    def _search(
        self,
        model: str,
        fields: list[str],
        decode: Callable[[Record], T],
        domain: list[list[Any]] | None = None,
        options: Optional[ListOptions] = None,
    ) -> list[T]:
        full_domain = list(domain or []) + _domain(options)
        result = self.call(model, "search_read", [full_domain], _search_kwargs(fields, options))
        return [decode(r) for r in unwrap_many(result)]

    def _read_one(self, model: str, fields: list[str], decode: Callable[[Record], T], record_id: str) -> Optional[T]:
        rid = _record_id(record_id)
        if rid is None:
            return None
        result = self.call(model, "search_read", [[["id", "=", rid]]], {"fields": fields, "limit": 1})
        record = unwrap_one(result)
        return decode(record) if record is not None else None

    def _require_id(self, model: str, record_id: str) -> int:
        rid = _record_id(record_id)
        if rid is None:
            raise ApplicationError(f"Invalid {model} id: {record_id!r}")
        return rid

    def _reread(self, model: str, fields: list[str], decode: Callable[[Record], T], rid: int) -> T:
        out = self._read_one(model, fields, decode, str(rid))
        if out is None:
            raise ApplicationError(f"{model} record {rid} not readable after write")
        return out

    def _create(self, model: str, fields: list[str], decode: Callable[[Record], T], values: Mapping[str, Any]) -> T:
        created = self.call(model, "create", [_erp_values(values)])
        if isinstance(created, list):
            created = created[0] if created else None
        rid = _record_id(created) if created is not None else None
        if rid is None:
            raise ApplicationError(f"{model}.create returned no id", payload=created)
        return self._reread(model, fields, decode, rid)

    def _update(
        self,
        model: str,
        fields: list[str],
        decode: Callable[[Record], T],
        record_id: str,
        changes: Mapping[str, Any],
    ) -> T:
        rid = self._require_id(model, record_id)
        self.call(model, "write", [[rid], _erp_values(changes)])
        return self._reread(model, fields, decode, rid)

    def _unlink(self, model: str, record_id: str) -> None:
        self.call(model, "unlink", [[self._require_id(model, record_id)]])

    def _by_reference(self, field: str, record_id: str) -> list[list[Any]]:
        rid = _record_id(record_id)
        return [[field, "=", rid if rid is not None else record_id]]

    # --- Administrative ---

    def login(self, username: str, password: str) -> SessionDescriptor:
        return authenticate(self._transport, self._transport.config.erp_db, username, password)

    def logout(self) -> None:
        destroy_session(self._transport)

    # --- Unions ---

    def list_unions(self, options: Optional[ListOptions] = None) -> list[Union]:
        return self._search(UNION_MODEL, UNION_FIELDS, _union, options=options)

    def get_union(self, union_id: str) -> Optional[Union]:
        return self._read_one(UNION_MODEL, UNION_FIELDS, _union, union_id)

    def create_union(self, union: Union) -> Union:
        return self._create(UNION_MODEL, UNION_FIELDS, _union, union.to_payload())

    def update_union(self, union_id: str, changes: Changes) -> Union:
        return self._update(UNION_MODEL, UNION_FIELDS, _union, union_id, changes)

    def delete_union(self, union_id: str) -> None:
        self._unlink(UNION_MODEL, union_id)

    def union_members(self, union_id: str, options: Optional[ListOptions] = None) -> list[Member]:
        return self._search(
            MEMBER_MODEL, MEMBER_FIELDS, _member, self._by_reference("union_id", union_id), options
        )

    def union_collectors(self, union_id: str) -> list[Collector]:
        return self._search(COLLECTOR_MODEL, COLLECTOR_FIELDS, _collector, self._by_reference("union_id", union_id))

    # --- Members ---

    def list_members(self, options: Optional[ListOptions] = None) -> list[Member]:
        return self._search(MEMBER_MODEL, MEMBER_FIELDS, _member, options=options)

    def get_member(self, member_id: str) -> Optional[Member]:
        return self._read_one(MEMBER_MODEL, MEMBER_FIELDS, _member, member_id)

    def create_member(self, member: Member) -> Member:
        return self._create(MEMBER_MODEL, MEMBER_FIELDS, _member, member.to_payload())

    def update_member(self, member_id: str, changes: Changes) -> Member:
        return self._update(MEMBER_MODEL, MEMBER_FIELDS, _member, member_id, changes)

    def delete_member(self, member_id: str) -> None:
        self._unlink(MEMBER_MODEL, member_id)

    def member_loans(self, member_id: str, options: Optional[ListOptions] = None) -> list[Loan]:
        return self._search(LOAN_MODEL, LOAN_FIELDS, _loan, self._by_reference("member_id", member_id), options)

    def member_installments(self, member_id: str, options: Optional[ListOptions] = None) -> list[Installment]:
        return self._search(
            INSTALLMENT_MODEL, INSTALLMENT_FIELDS, _installment, self._by_reference("member_id", member_id), options
        )

    # --- Loans ---

    def list_loans(self, options: Optional[ListOptions] = None) -> list[Loan]:
        return self._search(LOAN_MODEL, LOAN_FIELDS, _loan, options=options)

    def get_loan(self, loan_id: str) -> Optional[Loan]:
        return self._read_one(LOAN_MODEL, LOAN_FIELDS, _loan, loan_id)

    def create_loan(self, loan: Loan) -> Loan:
        return self._create(LOAN_MODEL, LOAN_FIELDS, _loan, loan.to_payload())

    def update_loan(self, loan_id: str, changes: Changes) -> Loan:
        return self._update(LOAN_MODEL, LOAN_FIELDS, _loan, loan_id, changes)

    def delete_loan(self, loan_id: str) -> None:
        self._unlink(LOAN_MODEL, loan_id)

    def loan_installments(self, loan_id: str, options: Optional[ListOptions] = None) -> list[Installment]:
        return self._search(
            INSTALLMENT_MODEL, INSTALLMENT_FIELDS, _installment, self._by_reference("loan_id", loan_id), options
        )

    # --- Installments ---

    def list_installments(self, options: Optional[ListOptions] = None) -> list[Installment]:
        return self._search(INSTALLMENT_MODEL, INSTALLMENT_FIELDS, _installment, options=options)

    def get_installment(self, installment_id: str) -> Optional[Installment]:
        return self._read_one(INSTALLMENT_MODEL, INSTALLMENT_FIELDS, _installment, installment_id)

    def create_installment(self, installment: Installment) -> Installment:
        return self._create(INSTALLMENT_MODEL, INSTALLMENT_FIELDS, _installment, installment.to_payload())

    def update_installment(self, installment_id: str, changes: Changes) -> Installment:
        return self._update(INSTALLMENT_MODEL, INSTALLMENT_FIELDS, _installment, installment_id, changes)

    def delete_installment(self, installment_id: str) -> None:
        self._unlink(INSTALLMENT_MODEL, installment_id)

    def overdue_installments(self, options: Optional[ListOptions] = None) -> list[Installment]:
        return self._search(
            INSTALLMENT_MODEL, INSTALLMENT_FIELDS, _installment, [["status", "=", "overdue"]], options
        )

    def pending_installments(self, options: Optional[ListOptions] = None) -> list[Installment]:
        return self._search(
            INSTALLMENT_MODEL, INSTALLMENT_FIELDS, _installment, [["status", "=", "pending"]], options
        )

    # --- Collectors ---

    def list_collectors(self, options: Optional[ListOptions] = None) -> list[Collector]:
        return self._search(COLLECTOR_MODEL, COLLECTOR_FIELDS, _collector, options=options)

    def get_collector(self, collector_id: str) -> Optional[Collector]:
        return self._read_one(COLLECTOR_MODEL, COLLECTOR_FIELDS, _collector, collector_id)

    def create_collector(self, collector: Collector) -> Collector:
        return self._create(COLLECTOR_MODEL, COLLECTOR_FIELDS, _collector, collector.to_payload())

    def update_collector(self, collector_id: str, changes: Changes) -> Collector:
        return self._update(COLLECTOR_MODEL, COLLECTOR_FIELDS, _collector, collector_id, changes)

    def delete_collector(self, collector_id: str) -> None:
        self._unlink(COLLECTOR_MODEL, collector_id)

    def collector_installments(self, collector_id: str, options: Optional[ListOptions] = None) -> list[Installment]:
        return self._search(
            INSTALLMENT_MODEL,
            INSTALLMENT_FIELDS,
            _installment,
            self._by_reference("collector_id", collector_id),
            options,
        )

    # --- Summary ---

    def collection_summary(self) -> CollectionSummary:
        return _summary(unwrap_one(self.call(SUMMARY_MODEL, "get_summary")))
