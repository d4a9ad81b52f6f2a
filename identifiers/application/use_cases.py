"""
Application Use Case — Sequential Identifier Allocation

Hands out human-readable identifiers such as ``BHSPK-2025-001``,
partitioned by namespace (e.g. a purok) and period (calendar year).

Core guarantees provided:

- Uniqueness: the read-increment-write of the Allocation Record happens
  inside one store transaction that holds the record's lock, so N
  concurrent callers on the same (namespace, period) receive N distinct
  identifiers whose sequences are exactly prior+1 .. prior+N.
- No consumption on failure: a sequence counts as issued only once its
  transaction commits. Overflow and failed transactions roll back and
  leave last_sequence untouched.
- Bounded retries: TransactionFailed is retried with backoff up to
  MAX_ATTEMPTS times, then surfaced as AllocationError.
- Isolation: no in-process lock is taken, so different namespaces never
  contend here and the allocator can run in any number of processes.

The allocator never reads the clock. Callers resolve the period first;
``allocate_identifier`` does so with ``current_period()``.

A caller that times out after the store commits cannot tell whether its
sequence was consumed. There is no reconciliation token; the ledger
(``IssuedIdentifier``) is the record of what was issued.
"""

import logging
import time

from django.utils import timezone

from identifiers.conf import identifier_settings
from identifiers.domain.exceptions import (
    AllocationError,
    DuplicateIdentifier,
    SequenceOverflowError,
    TransactionFailed,
)
from identifiers.domain.formatting import (
    format_identifier,
    max_sequence_for,
    normalize_namespace,
    validate_period,
)
from identifiers.infrastructure.django_store import DjangoAllocationStore

logger = logging.getLogger(__name__)


class SequenceAllocator:
    """
    Allocates identifiers from an ``AllocationStore``.

    Stateless apart from configuration; safe to share between threads.
    """

    def __init__(self, store, width=None, max_attempts=None, backoff_seconds=None, sleep=time.sleep):
        conf = identifier_settings()
        self.store = store
        self.width = width if width is not None else conf["SEQUENCE_WIDTH"]
        self.max_attempts = max_attempts if max_attempts is not None else conf["MAX_ATTEMPTS"]
        self.backoff_seconds = tuple(
            backoff_seconds if backoff_seconds is not None else conf["BACKOFF_SECONDS"]
        )
        self._sleep = sleep

        if self.width < 1:
            raise ValueError("width must be at least 1")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    @property
    def max_sequence(self):
        return max_sequence_for(self.width)

    def allocate_next(self, raw_namespace, period):
        """
        Return the next identifier for ``(raw_namespace, period)``.

        Raises InvalidNamespaceError / InvalidPeriodError before touching
        the store, SequenceOverflowError when the sequence is exhausted and
        AllocationError when the store could not commit.
        """
        namespace_key = normalize_namespace(raw_namespace)
        period = validate_period(period)

        last_exc = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                identifier = self.store.with_transaction(
                    lambda: self._advance(namespace_key, period)
                )
            except TransactionFailed as exc:
                last_exc = exc
                logger.warning(
                    "Allocation attempt %d/%d failed: namespace=%s period=%s error=%s",
                    attempt, self.max_attempts, namespace_key, period, exc,
                )
                if attempt < self.max_attempts:
                    self._sleep(self._backoff(attempt))
                continue
            except DuplicateIdentifier as exc:
                logger.error(
                    "Duplicate identifier detected, allocation aborted: %s", exc.identifier,
                )
                raise AllocationError(namespace_key, period, attempt) from exc

            logger.info(
                "Allocated identifier=%s namespace=%s period=%s attempt=%d",
                identifier, namespace_key, period, attempt,
            )
            return identifier

        logger.error(
            "Allocation failed after %d attempt(s): namespace=%s period=%s",
            self.max_attempts, namespace_key, period,
        )
        raise AllocationError(namespace_key, period, self.max_attempts) from last_exc

    def current_sequence(self, raw_namespace, period):
        """Highest committed sequence for the namespace and period, 0 if none."""
        namespace_key = normalize_namespace(raw_namespace)
        period = validate_period(period)
        return self.store.current_sequence(namespace_key, period)

    def _advance(self, namespace_key, period):
        # Runs inside the store transaction; the record stays locked until commit.
        record = self.store.get_allocation_record(namespace_key, period)
        last_sequence = record.last_sequence if record is not None else 0

        next_sequence = last_sequence + 1
        if next_sequence > self.max_sequence:
            logger.warning(
                "Sequence exhausted: namespace=%s period=%s last=%d",
                namespace_key, period, last_sequence,
            )
            raise SequenceOverflowError(namespace_key, period, last_sequence, self.max_sequence)

        self.store.upsert_allocation_record(namespace_key, period, next_sequence)

        identifier = format_identifier(namespace_key, period, next_sequence, width=self.width)
        self.store.record_issued(identifier, namespace_key, period, next_sequence)
        return identifier

    def _backoff(self, attempt):
        if not self.backoff_seconds:
            return 0
        index = min(attempt, len(self.backoff_seconds)) - 1
        return self.backoff_seconds[index]


def current_period():
    """Calendar year in the configured time zone."""
    return timezone.localdate().year


def default_allocator():
    return SequenceAllocator(DjangoAllocationStore())


def allocate_identifier(raw_namespace, period=None):
    """
    Allocate the next identifier for ``raw_namespace`` using the database store.

    The period defaults to the current calendar year, resolved once before
    the allocation starts.
    """
    if period is None:
        period = current_period()
    return default_allocator().allocate_next(raw_namespace, period)
