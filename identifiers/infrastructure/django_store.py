"""
Django ORM adapter for the allocation store port.

Core guarantees provided:

- Atomicity: every allocation runs inside transaction.atomic().
- Row-level locking: select_for_update() holds the Allocation Record row
  until commit, so concurrent allocators for the same key queue on the
  database instead of reading the same last_sequence.
- Compare-and-set writes: a read that finds no row locks nothing, so the
  write only inserts for sequence 1 and otherwise updates the row only if
  it still holds last_sequence - 1. A rival that got there first makes
  the write fail instead of repeating its value.
- Translation: database errors (lock timeout, deadlock, closed
  connection, two first allocations racing to insert the same row) and
  a lost compare-and-set are reported as TransactionFailed once the
  transaction has been rolled back. The allocator retries those.

On backends without SELECT ... FOR UPDATE (SQLite) Django drops the
clause; SQLite serializes writers on its database lock instead.
"""

import logging
from contextlib import contextmanager

from django.db import DatabaseError, IntegrityError, InterfaceError, transaction

from identifiers.domain.exceptions import DuplicateIdentifier, TransactionFailed
from identifiers.domain.ports import AllocationRecord, AllocationStore
from identifiers.models import IssuedIdentifier, SequenceAllocation

logger = logging.getLogger(__name__)


class DjangoAllocationStore(AllocationStore):

    def __init__(self, using="default"):
        self.using = using

    @contextmanager
    def atomic(self):
        try:
            with transaction.atomic(using=self.using):
                yield
        except (DatabaseError, InterfaceError) as exc:
            logger.debug("Allocation transaction rolled back: %s", exc)
            raise TransactionFailed(str(exc)) from exc

    def get_allocation_record(self, namespace_key, period):
        try:
            row = (
                SequenceAllocation.objects
                .using(self.using)
                .select_for_update()
                .get(namespace_key=namespace_key, period=period)
            )
        except SequenceAllocation.DoesNotExist:
            return None

        return AllocationRecord(row.namespace_key, row.period, row.last_sequence)

    def upsert_allocation_record(self, namespace_key, period, last_sequence):
        # Compare-and-set against the value the allocator read. A read that
        # found no row locked nothing, so a rival may have inserted since.
        if last_sequence == 1:
            # Losing a first-insert race surfaces as IntegrityError.
            SequenceAllocation.objects.using(self.using).create(
                namespace_key=namespace_key,
                period=period,
                last_sequence=last_sequence,
            )
            return

        updated = (
            SequenceAllocation.objects
            .using(self.using)
            .filter(namespace_key=namespace_key, period=period, last_sequence=last_sequence - 1)
            .update(last_sequence=last_sequence)
        )
        if not updated:
            raise TransactionFailed(
                f"Allocation record {namespace_key}/{period} moved past {last_sequence - 1}"
            )

    def record_issued(self, identifier, namespace_key, period, sequence):
        try:
            # Savepoint keeps the outer transaction usable for the rollback path.
            with transaction.atomic(using=self.using):
                IssuedIdentifier.objects.using(self.using).create(
                    value=identifier,
                    namespace_key=namespace_key,
                    period=period,
                    sequence=sequence,
                )
        except IntegrityError:
            raise DuplicateIdentifier(identifier)

    def current_sequence(self, namespace_key, period):
        last = (
            SequenceAllocation.objects
            .using(self.using)
            .filter(namespace_key=namespace_key, period=period)
            .values_list("last_sequence", flat=True)
            .first()
        )
        return last or 0
