"""
Transactional store port consumed by the sequence allocator.

A store owns the Allocation Records, one per ``(namespace_key, period)``
holding the highest sequence issued so far. Implementations must make
``get_allocation_record`` hold a lock on that key until the enclosing
transaction commits or rolls back, so that no two transactions can read
the same ``last_sequence`` and both commit an increment from it.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass


@dataclass(frozen=True)
class AllocationRecord:
    namespace_key: str
    period: int
    last_sequence: int


class AllocationStore(abc.ABC):

    @abc.abstractmethod
    def atomic(self):
        """
        Context manager delimiting one transaction.

        Commits on normal exit, rolls back when the block raises. Transient
        failures surface as ``TransactionFailed`` after the rollback.
        """

    def with_transaction(self, fn):
        """Run ``fn()`` inside ``atomic()`` and return its result."""
        with self.atomic():
            return fn()

    @abc.abstractmethod
    def get_allocation_record(self, namespace_key, period):
        """Return the locked ``AllocationRecord`` or None when none exists yet."""

    @abc.abstractmethod
    def upsert_allocation_record(self, namespace_key, period, last_sequence):
        """
        Write ``last_sequence`` for the key within the active transaction.

        The allocator always passes one past the value it read. Adapters that
        cannot lock a missing row check that the stored value is still
        ``last_sequence - 1`` and raise ``TransactionFailed`` otherwise.
        """

    @abc.abstractmethod
    def record_issued(self, identifier, namespace_key, period, sequence):
        """Append to the issued-identifier ledger. Raises ``DuplicateIdentifier``."""

    @abc.abstractmethod
    def current_sequence(self, namespace_key, period):
        """Committed ``last_sequence`` for the key, 0 when absent. Takes no lock."""
