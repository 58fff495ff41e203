"""
Read cache owned by a `DataAccess` instance.

One slot per top-level collection plus the summary. Slots are either empty or
populated; failures never leave anything behind. Each slot has its own lock
because fan-out helpers read and write from worker threads.
"""

from __future__ import annotations

import threading
from typing import Generic, Optional, TypeVar

from union_loans.domains.models import CollectionSummary, Collector, Installment, Loan, Member, Union

T = TypeVar("T")
E = TypeVar("E")


class CacheSlot(Generic[T]):
    def __init__(self, name: str) -> None:
        self.name = name
        self._value: Optional[T] = None
        self._lock = threading.Lock()

    @property
    def populated(self) -> bool:
        with self._lock:
            return self._value is not None

    def get(self) -> Optional[T]:
        with self._lock:
            return self._value

    def set(self, value: T) -> None:
        """Unconditional write; with overlapping fetches the last one to finish wins."""
        with self._lock:
            self._value = value

    def clear(self) -> None:
        with self._lock:
            self._value = None


class CollectionSlot(CacheSlot[list[E]]):
    def append(self, item: E) -> bool:
        """
        Add a singly-fetched record to a populated collection.

        Returns False (and stores nothing) when the collection was never loaded,
        so a lone lookup cannot masquerade as the full collection.
        """
        with self._lock:
            if self._value is None:
                return False
            # Copy so lists already handed to callers do not change under them.
            self._value = [*self._value, item]
            return True


class DataCache:
    """All cached reads; `clear()` drops every slot at once."""

    def __init__(self) -> None:
        self.unions: CollectionSlot[Union] = CollectionSlot("unions")
        self.members: CollectionSlot[Member] = CollectionSlot("members")
        self.loans: CollectionSlot[Loan] = CollectionSlot("loans")
        self.installments: CollectionSlot[Installment] = CollectionSlot("installments")
        self.collectors: CollectionSlot[Collector] = CollectionSlot("collectors")
        self.summary: CacheSlot[CollectionSummary] = CacheSlot("summary")

    def slots(self) -> list[CacheSlot]:
        return [self.unions, self.members, self.loans, self.installments, self.collectors, self.summary]

    def clear(self) -> None:
        for slot in self.slots():
            slot.clear()
