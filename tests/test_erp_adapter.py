"""
Tests for ErpRpcAdapter: call_kw envelopes, many2one reduction, CRUD, errors.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from union_loans.domains.models import ListOptions, Loan
from union_loans.infrastructure.adapters.erp import (
    INSTALLMENT_FIELDS,
    MEMBER_FIELDS,
    ErpRpcAdapter,
)
from union_loans.infrastructure.errors import ApplicationError, PermissionDeniedError
from union_loans.utils.config import BackendConfig


@pytest.fixture
def transport() -> MagicMock:
    t = MagicMock()
    t.config = BackendConfig(backend="erp", base_url="http://erp.test", erp_db="ranchi")
    return t


@pytest.fixture
def adapter(transport: MagicMock) -> ErpRpcAdapter:
    return ErpRpcAdapter(transport)


def _params(transport: MagicMock, index: int = -1) -> dict:
    return transport.post.call_args_list[index].kwargs["json"]["params"]


def test_list_members_reduces_references(adapter: ErpRpcAdapter, transport: MagicMock) -> None:
    transport.post.return_value = {
        "jsonrpc": "2.0",
        "result": [
            {
                "id": 5,
                "name": "Ada",
                "contact_number": "0801",
                "email": False,
                "join_date": "2024-01-02",
                "status": "active",
                "balance": 10.5,
                "union_id": [2, "North Traders"],
            },
            {"id": 6, "name": "Bola", "union_id": False, "join_date": False},
        ],
    }
    members = adapter.list_members()

    assert [m.id for m in members] == ["5", "6"]
    assert members[0].union_id == "2"
    assert members[1].union_id == ""
    assert members[0].email == ""
    assert members[0].balance == Decimal("10.5")
    assert members[0].join_date == datetime(2024, 1, 2)
    assert isinstance(members[1].join_date, datetime)

    path = transport.post.call_args.args[0]
    params = _params(transport)
    assert path == "/web/dataset/call_kw/loan.member/search_read"
    assert params["model"] == "loan.member"
    assert params["method"] == "search_read"
    assert params["args"] == [[]]
    assert params["kwargs"] == {"fields": MEMBER_FIELDS}


def test_get_by_id_uses_integer_domain(adapter: ErpRpcAdapter, transport: MagicMock) -> None:
    transport.post.return_value = {"result": [{"id": 3, "name": "South", "leader_id": [9, "Ada"]}]}
    union = adapter.get_union("3")

    assert union is not None and union.leader_id == "9"
    assert _params(transport)["args"] == [[["id", "=", 3]]]


def test_get_by_id_not_found(adapter: ErpRpcAdapter, transport: MagicMock) -> None:
    transport.post.return_value = {"result": []}
    assert adapter.get_loan("99") is None


def test_non_numeric_id_is_not_found_without_call(adapter: ErpRpcAdapter, transport: MagicMock) -> None:
    assert adapter.get_member("abc") is None
    assert adapter.get_member("") is None
    transport.post.assert_not_called()


def test_relationship_domains(adapter: ErpRpcAdapter, transport: MagicMock) -> None:
    transport.post.return_value = {"result": []}
    adapter.union_members("4")
    adapter.loan_installments("8")
    adapter.overdue_installments()
    adapter.pending_installments()

    domains = [c.kwargs["json"]["params"]["args"][0] for c in transport.post.call_args_list]
    assert domains == [
        [["union_id", "=", 4]],
        [["loan_id", "=", 8]],
        [["status", "=", "overdue"]],
        [["status", "=", "pending"]],
    ]
    assert _params(transport)["kwargs"]["fields"] == INSTALLMENT_FIELDS


def test_list_options_map_to_search_kwargs(adapter: ErpRpcAdapter, transport: MagicMock) -> None:
    transport.post.return_value = {"result": []}
    adapter.list_loans(ListOptions(limit=20, offset=40, sort="issue_date", order="desc", filter={"status": "active"}))

    params = _params(transport)
    assert params["args"] == [[["status", "=", "active"]]]
    assert params["kwargs"]["limit"] == 20
    assert params["kwargs"]["offset"] == 40
    assert params["kwargs"]["order"] == "issue_date desc"


def test_installment_optional_paid_date(adapter: ErpRpcAdapter, transport: MagicMock) -> None:
    transport.post.return_value = {"result": [
        {"id": 1, "loan_id": [8, "L8"], "member_id": [5, "Ada"], "amount": 100, "due_date": "2024-02-01",
         "paid_date": False, "status": "pending", "collector_id": False},
        {"id": 2, "loan_id": [8, "L8"], "member_id": [5, "Ada"], "amount": 100, "due_date": "2024-03-01",
         "paid_date": "2024-03-01", "status": "paid", "collector_id": [3, "Kemi"]},
    ]}
    first, second = adapter.list_installments()

    assert first.paid_date is None
    assert first.collector_id == ""
    assert second.paid_date == datetime(2024, 3, 1)
    assert second.collector_id == "3"


def test_create_loan_then_reread(adapter: ErpRpcAdapter, transport: MagicMock) -> None:
    transport.post.side_effect = [
        {"result": 11},
        {"result": [{"id": 11, "member_id": [5, "Ada"], "amount": 5000, "total_installments": 10}]},
    ]
    loan = Loan(
        id="",
        member_id="5",
        amount=Decimal("5000"),
        issue_date=datetime(2024, 3, 5),
        total_installments=10,
        next_due_date=datetime(2024, 4, 5),
    )
    created = adapter.create_loan(loan)

    assert created.id == "11" and created.member_id == "5"
    create_params = _params(transport, 0)
    assert create_params["method"] == "create"
    vals = create_params["args"][0]
    assert vals["member_id"] == 5
    assert vals["amount"] == 5000.0
    assert vals["issue_date"] == "2024-03-05"
    assert "id" not in vals
    assert _params(transport, 1)["args"] == [[["id", "=", 11]]]


def test_update_and_unlink(adapter: ErpRpcAdapter, transport: MagicMock) -> None:
    transport.post.side_effect = [
        {"result": True},
        {"result": [{"id": 4, "name": "Renamed", "union_id": False}]},
        {"result": True},
    ]
    updated = adapter.update_collector("4", {"name": "Renamed", "union_id": ""})
    adapter.delete_collector("4")

    assert updated.name == "Renamed"
    write = _params(transport, 0)
    assert write["method"] == "write"
    assert write["args"] == [[4], {"name": "Renamed", "union_id": False}]
    unlink = _params(transport, 2)
    assert unlink["method"] == "unlink"
    assert unlink["args"] == [[4]]


def test_write_with_invalid_id_raises(adapter: ErpRpcAdapter, transport: MagicMock) -> None:
    with pytest.raises(ApplicationError):
        adapter.delete_member("not-a-number")
    transport.post.assert_not_called()


def test_access_error_is_permission(adapter: ErpRpcAdapter, transport: MagicMock) -> None:
    transport.post.return_value = {
        "error": {
            "code": 200,
            "message": "Odoo Server Error",
            "data": {"name": "odoo.exceptions.AccessError", "message": "You are not allowed to access loan.loan"},
        }
    }
    with pytest.raises(PermissionDeniedError, match="not allowed"):
        adapter.list_loans()


def test_other_rpc_error_is_application(adapter: ErpRpcAdapter, transport: MagicMock) -> None:
    transport.post.return_value = {"error": {"code": 200, "message": "Odoo Server Error", "data": {"name": "ValueError"}}}
    with pytest.raises(ApplicationError) as exc:
        adapter.list_unions()
    assert not isinstance(exc.value, PermissionDeniedError)


def test_summary(adapter: ErpRpcAdapter, transport: MagicMock) -> None:
    transport.post.return_value = {"result": {"total_loans": 12, "active_loans": 7, "total_collected": 3400.5}}
    s = adapter.collection_summary()

    assert s.total_loans == 12
    assert s.active_loans == 7
    assert s.defaulted_loans == 0
    assert s.total_collected == Decimal("3400.5")
    assert transport.post.call_args.args[0] == "/web/dataset/call_kw/loan.collection.summary/get_summary"


def test_logout_destroys_session(adapter: ErpRpcAdapter, transport: MagicMock) -> None:
    transport.post.return_value = {"result": None}
    adapter.logout()
    transport.post.assert_called_once_with(
        "/web/session/destroy", json={"jsonrpc": "2.0", "method": "call", "params": {}}
    )
