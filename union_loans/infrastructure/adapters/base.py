"""
Contract every backend integration implements.

Exactly one implementation is wired into a `DataAccess` at composition time
(see `union_loans.factory`). Adapters raise `BackendError` subclasses and
return None for records that do not exist.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

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

Changes = Mapping[str, Any]


class BackendAdapter(ABC):
    """Domain operations in canonical shapes, whatever the wire format."""

    name = "backend"

    # --- Administrative ---

    @abstractmethod
    def login(self, username: str, password: str) -> SessionDescriptor: ...

    @abstractmethod
    def logout(self) -> None: ...

    # --- Unions ---

    @abstractmethod
    def list_unions(self, options: Optional[ListOptions] = None) -> list[Union]: ...

    @abstractmethod
    def get_union(self, union_id: str) -> Optional[Union]: ...

    @abstractmethod
    def create_union(self, union: Union) -> Union: ...

    @abstractmethod
    def update_union(self, union_id: str, changes: Changes) -> Union: ...

    @abstractmethod
    def delete_union(self, union_id: str) -> None: ...

    @abstractmethod
    def union_members(self, union_id: str, options: Optional[ListOptions] = None) -> list[Member]: ...

    @abstractmethod
    def union_collectors(self, union_id: str) -> list[Collector]: ...

    # --- Members ---

    @abstractmethod
    def list_members(self, options: Optional[ListOptions] = None) -> list[Member]: ...

    @abstractmethod
    def get_member(self, member_id: str) -> Optional[Member]: ...

    @abstractmethod
    def create_member(self, member: Member) -> Member: ...

    @abstractmethod
    def update_member(self, member_id: str, changes: Changes) -> Member: ...

    @abstractmethod
    def delete_member(self, member_id: str) -> None: ...

    @abstractmethod
    def member_loans(self, member_id: str, options: Optional[ListOptions] = None) -> list[Loan]: ...

    @abstractmethod
    def member_installments(
        self, member_id: str, options: Optional[ListOptions] = None
    ) -> list[Installment]: ...

    # --- Loans ---

    @abstractmethod
    def list_loans(self, options: Optional[ListOptions] = None) -> list[Loan]: ...

    @abstractmethod
    def get_loan(self, loan_id: str) -> Optional[Loan]: ...

    @abstractmethod
    def create_loan(self, loan: Loan) -> Loan: ...

    @abstractmethod
    def update_loan(self, loan_id: str, changes: Changes) -> Loan: ...

    @abstractmethod
    def delete_loan(self, loan_id: str) -> None: ...

    @abstractmethod
    def loan_installments(
        self, loan_id: str, options: Optional[ListOptions] = None
    ) -> list[Installment]: ...

    # --- Installments ---

    @abstractmethod
    def list_installments(self, options: Optional[ListOptions] = None) -> list[Installment]: ...

    @abstractmethod
    def get_installment(self, installment_id: str) -> Optional[Installment]: ...

    @abstractmethod
    def create_installment(self, installment: Installment) -> Installment: ...

    @abstractmethod
    def update_installment(self, installment_id: str, changes: Changes) -> Installment: ...

    @abstractmethod
    def delete_installment(self, installment_id: str) -> None: ...

    @abstractmethod
    def overdue_installments(self, options: Optional[ListOptions] = None) -> list[Installment]: ...

    @abstractmethod
    def pending_installments(self, options: Optional[ListOptions] = None) -> list[Installment]: ...

    # --- Collectors ---

    @abstractmethod
    def list_collectors(self, options: Optional[ListOptions] = None) -> list[Collector]: ...

    @abstractmethod
    def get_collector(self, collector_id: str) -> Optional[Collector]: ...

    @abstractmethod
    def create_collector(self, collector: Collector) -> Collector: ...

    @abstractmethod
    def update_collector(self, collector_id: str, changes: Changes) -> Collector: ...

    @abstractmethod
    def delete_collector(self, collector_id: str) -> None: ...

    @abstractmethod
    def collector_installments(
        self, collector_id: str, options: Optional[ListOptions] = None
    ) -> list[Installment]: ...

    # --- Summary ---

    @abstractmethod
    def collection_summary(self) -> CollectionSummary: ...
