"""
Data-access facade: the one interface callers use for reads and writes.

Reads are memoized per collection in a `DataCache`. Bulk reads turn backend
failures into an empty list, single lookups into None; writes propagate and
never touch the cache, so call `clear_cache()` after mutating.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol, TypeVar

from union_loans.domains.models import (
    CollectionSummary,
    Collector,
    Installment,
    Loan,
    Member,
    Union,
)
from union_loans.infrastructure.adapters.base import BackendAdapter, Changes
from union_loans.infrastructure.errors import BackendError, is_permission_error
from union_loans.services.cache import CollectionSlot, DataCache
from union_loans.utils.formatting import format_currency, format_date
from union_loans.utils.logger import get_logger

logger = get_logger()

__all__ = ["DataAccess", "format_currency", "format_date"]


class _HasId(Protocol):
    id: str


E = TypeVar("E", bound=_HasId)
T = TypeVar("T")


class DataAccess:
    """
    Cached, failure-tolerant view over one backend adapter.

    Args:
        adapter: The backend integration chosen at composition time.
        cache: Shared cache object; a fresh one is created when omitted.
    """

    def __init__(self, adapter: BackendAdapter, cache: DataCache | None = None) -> None:
        self._adapter = adapter
        self._cache = cache or DataCache()

    @property
    def adapter(self) -> BackendAdapter:
        return self._adapter

    @property
    def cache(self) -> DataCache:
        return self._cache

    def clear_cache(self) -> None:
        """Drop every cached collection and the summary; the next read refetches."""
        self._cache.clear()

    # --- Internals ---

    @staticmethod
    def _log_failure(what: str, error: BackendError) -> None:
        if is_permission_error(error):
            logger.error("Permission error fetching %s: %s", what, error)
        else:
            logger.error("Error fetching %s: %s (%s)", what, error, error.kind)

    def _load(self, slot: CollectionSlot[E], fetch: Callable[[], list[E]]) -> list[E]:
        cached = slot.get()
        if cached is not None:
            return cached
        try:
            items = fetch()
        except BackendError as e:
            self._log_failure(slot.name, e)
            return []
        slot.set(items)
        return items

    def _lookup(
        self,
        slot: CollectionSlot[E],
        entity_id: str,
        fetch: Callable[[str], Optional[E]],
        label: str,
    ) -> Optional[E]:
        if not entity_id:
            return None
        cached = slot.get()
        if cached is not None:
            hit = next((item for item in cached if item.id == entity_id), None)
            if hit is not None:
                return hit
        try:
            item = fetch(entity_id)
        except BackendError as e:
            self._log_failure(f"{label} with ID {entity_id}", e)
            return None
        if item is not None:
            slot.append(item)
        return item

    def _related(self, what: str, fetch: Callable[[], list[T]]) -> list[T]:
        try:
            return fetch()
        except BackendError as e:
            self._log_failure(what, e)
            return []

    # --- Unions ---

    def get_all_unions(self) -> list[Union]:
        return self._load(self._cache.unions, self._adapter.list_unions)

    def get_union_by_id(self, union_id: str) -> Optional[Union]:
        return self._lookup(self._cache.unions, union_id, self._adapter.get_union, "union")

    def get_union_members(self, union_id: str) -> list[Member]:
        return self._related(
            f"members for union with ID {union_id}", lambda: self._adapter.union_members(union_id)
        )

    def get_union_collectors(self, union_id: str) -> list[Collector]:
        return self._related(
            f"collectors for union with ID {union_id}", lambda: self._adapter.union_collectors(union_id)
        )

    def get_union_leader(self, union_id: str) -> Optional[Member]:
        union = self.get_union_by_id(union_id)
        if union is None or not union.leader_id:
            return None
        return self.get_member_by_id(union.leader_id)

    def create_union(self, union: Union) -> Union:
        return self._adapter.create_union(union)

    def update_union(self, union_id: str, changes: Changes) -> Union:
        return self._adapter.update_union(union_id, changes)

    def delete_union(self, union_id: str) -> None:
        self._adapter.delete_union(union_id)

    # --- Members ---

    def get_all_members(self) -> list[Member]:
        return self._load(self._cache.members, self._adapter.list_members)

    def get_member_by_id(self, member_id: str) -> Optional[Member]:
        return self._lookup(self._cache.members, member_id, self._adapter.get_member, "member")

    def get_member_union(self, member_id: str) -> Optional[Union]:
        member = self.get_member_by_id(member_id)
        if member is None:
            return None
        return self.get_union_by_id(member.union_id)

    def get_member_loans(self, member_id: str) -> list[Loan]:
        return self._related(
            f"loans for member with ID {member_id}", lambda: self._adapter.member_loans(member_id)
        )

    def get_member_installments(self, member_id: str) -> list[Installment]:
        return self._related(
            f"installments for member with ID {member_id}",
            lambda: self._adapter.member_installments(member_id),
        )

    def create_member(self, member: Member) -> Member:
        return self._adapter.create_member(member)

    def update_member(self, member_id: str, changes: Changes) -> Member:
        return self._adapter.update_member(member_id, changes)

    def delete_member(self, member_id: str) -> None:
        self._adapter.delete_member(member_id)

    # --- Loans ---

    def get_all_loans(self) -> list[Loan]:
        return self._load(self._cache.loans, self._adapter.list_loans)

    def get_loan_by_id(self, loan_id: str) -> Optional[Loan]:
        return self._lookup(self._cache.loans, loan_id, self._adapter.get_loan, "loan")

    def get_loan_installments(self, loan_id: str) -> list[Installment]:
        return self._related(
            f"installments for loan with ID {loan_id}", lambda: self._adapter.loan_installments(loan_id)
        )

    def create_loan(self, loan: Loan) -> Loan:
        return self._adapter.create_loan(loan)

    def update_loan(self, loan_id: str, changes: Changes) -> Loan:
        return self._adapter.update_loan(loan_id, changes)

    def delete_loan(self, loan_id: str) -> None:
        self._adapter.delete_loan(loan_id)

    # --- Installments ---

    def get_all_installments(self) -> list[Installment]:
        return self._load(self._cache.installments, self._adapter.list_installments)

    def get_installment_by_id(self, installment_id: str) -> Optional[Installment]:
        return self._lookup(
            self._cache.installments, installment_id, self._adapter.get_installment, "installment"
        )

    def get_overdue_installments(self) -> list[Installment]:
        """Straight from the backend's overdue listing; the installment cache is not consulted."""
        return self._related("overdue installments", self._adapter.overdue_installments)

    def get_pending_installments(self) -> list[Installment]:
        """Straight from the backend's pending listing; the installment cache is not consulted."""
        return self._related("pending installments", self._adapter.pending_installments)

    def create_installment(self, installment: Installment) -> Installment:
        return self._adapter.create_installment(installment)

    def update_installment(self, installment_id: str, changes: Changes) -> Installment:
        return self._adapter.update_installment(installment_id, changes)

    def delete_installment(self, installment_id: str) -> None:
        self._adapter.delete_installment(installment_id)

    # --- Collectors ---

    def get_all_collectors(self) -> list[Collector]:
        return self._load(self._cache.collectors, self._adapter.list_collectors)

    def get_collector_by_id(self, collector_id: str) -> Optional[Collector]:
        return self._lookup(self._cache.collectors, collector_id, self._adapter.get_collector, "collector")

    def get_collector_union(self, collector_id: str) -> Optional[Union]:
        collector = self.get_collector_by_id(collector_id)
        if collector is None:
            return None
        return self.get_union_by_id(collector.union_id)

    def get_collector_installments(self, collector_id: str) -> list[Installment]:
        return self._related(
            f"installments for collector with ID {collector_id}",
            lambda: self._adapter.collector_installments(collector_id),
        )

    def create_collector(self, collector: Collector) -> Collector:
        return self._adapter.create_collector(collector)

    def update_collector(self, collector_id: str, changes: Changes) -> Collector:
        return self._adapter.update_collector(collector_id, changes)

    def delete_collector(self, collector_id: str) -> None:
        self._adapter.delete_collector(collector_id)

    # --- Summary ---

    def get_collection_summary(self) -> CollectionSummary:
        """Cached until `clear_cache()`. A failed fetch yields an all-zero summary that is not cached."""
        slot = self._cache.summary
        cached = slot.get()
        if cached is not None:
            return cached
        try:
            summary = self._adapter.collection_summary()
        except BackendError as e:
            self._log_failure("collection summary", e)
            return CollectionSummary()
        slot.set(summary)
        return summary
