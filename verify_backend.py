#!/usr/bin/env python3
"""
Smoke check for a configured backend.

This script checks:
1. Configuration loads (.env / environment)
2. A stored session exists and is unexpired
3. Login works (only with --login; needs UNION_LOANS_USERNAME / UNION_LOANS_PASSWORD)
4. Every read endpoint answers and decodes
"""

from __future__ import annotations

import sys
from typing import Any, Callable

from union_loans.factory import UnionLoansClient, build_client
from union_loans.infrastructure.errors import BackendError
from union_loans.utils.config import get_required, load_backend_config
from union_loans.utils.formatting import format_currency
from union_loans.utils.logger import setup_logger


def check_config() -> tuple[bool, str, Any]:
    """Load the typed configuration."""
    try:
        config = load_backend_config()
    except ValueError as e:
        return False, f"[X] Configuration error: {e}", None
    return True, f"[OK] Backend '{config.backend}' at {config.base_url}", config


def check_session(client: UnionLoansClient) -> tuple[bool, str]:
    """Report whether a usable session is stored."""
    session = client.auth.current_session()
    if session is None:
        return False, f"[!] No unexpired session stored at {client.session_store.path}"
    return True, f"[OK] Session for uid {session.uid} ({session.username or 'unknown user'})"


def check_login(client: UnionLoansClient) -> tuple[bool, str]:
    """Log in with credentials from the environment."""
    try:
        username = get_required("UNION_LOANS_USERNAME")
        password = get_required("UNION_LOANS_PASSWORD")
    except ValueError as e:
        return False, f"[X] {e}"
    try:
        session = client.auth.login(username, password)
    except BackendError as e:
        return False, f"[X] Login failed ({e.kind}): {e}"
    return True, f"[OK] Logged in as uid {session.uid}"


def _probe(label: str, call: Callable[[], Any]) -> tuple[bool, str, Any]:
    try:
        result = call()
    except BackendError as e:
        return False, f"[X] {label}: {e.kind} error: {e}", None
    if isinstance(result, list):
        return True, f"[OK] {label}: {len(result)} record(s)", result
    return True, f"[OK] {label}: {'found' if result is not None else 'not found'}", result


def check_endpoints(client: UnionLoansClient) -> tuple[bool, list[str]]:
    """Walk the read endpoints, following the first record of each collection."""
    adapter = client.adapter
    results = []
    all_ok = True

    def run(label: str, call: Callable[[], Any]) -> Any:
        nonlocal all_ok
        ok, msg, value = _probe(label, call)
        results.append(msg)
        all_ok = all_ok and ok
        return value

    unions = run("unions", adapter.list_unions) or []
    if unions:
        uid = unions[0].id
        run(f"union {uid}", lambda: adapter.get_union(uid))
        run(f"members of union {uid}", lambda: adapter.union_members(uid))
        run(f"collectors of union {uid}", lambda: adapter.union_collectors(uid))

    members = run("members", adapter.list_members) or []
    if members:
        mid = members[0].id
        run(f"member {mid}", lambda: adapter.get_member(mid))
        run(f"loans of member {mid}", lambda: adapter.member_loans(mid))
        run(f"installments of member {mid}", lambda: adapter.member_installments(mid))

    loans = run("loans", adapter.list_loans) or []
    if loans:
        lid = loans[0].id
        run(f"loan {lid}", lambda: adapter.get_loan(lid))
        run(f"installments of loan {lid}", lambda: adapter.loan_installments(lid))

    run("installments", adapter.list_installments)
    run("overdue installments", adapter.overdue_installments)
    run("pending installments", adapter.pending_installments)

    collectors = run("collectors", adapter.list_collectors) or []
    if collectors:
        cid = collectors[0].id
        run(f"installments of collector {cid}", lambda: adapter.collector_installments(cid))

    summary = run("collection summary", adapter.collection_summary)
    if summary is not None:
        results.append(
            f"     total {format_currency(summary.total_amount, client.config.currency_symbol)}, "
            f"collected {format_currency(summary.total_collected, client.config.currency_symbol)}"
        )
    return all_ok, results


def main(argv: list[str] | None = None) -> int:
    """Run all verification checks."""
    argv = sys.argv[1:] if argv is None else argv
    if sys.platform == "win32":
        import io
        sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", errors="replace")
    setup_logger()

    print("Verifying union loans backend\n")
    print("=" * 60)

    print("\n1. Loading Configuration...")
    ok, msg, config = check_config()
    print(f"   {msg}")
    if not ok:
        return 1
    client = build_client(config)

    step = 2
    if "--login" in argv:
        print(f"\n{step}. Logging In...")
        ok, msg = check_login(client)
        print(f"   {msg}")
        if not ok:
            return 1
        step += 1

    print(f"\n{step}. Checking Stored Session...")
    ok, msg = check_session(client)
    print(f"   {msg}")
    # Some REST deployments need no session; keep going.

    print(f"\n{step + 1}. Probing Read Endpoints...")
    ok, msgs = check_endpoints(client)
    for m in msgs:
        print(f"   {m}")

    print("\n" + "=" * 60)
    if ok:
        print("\n[OK] All endpoint checks passed!")
        return 0
    print("\n[X] Some endpoint checks failed. See the messages above.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
