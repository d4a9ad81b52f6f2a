"""
In-process adapter for the allocation store port.

Behaves like a database with row-level locks: the first read or write of
a key inside a transaction acquires that key's lock, which is held until
commit or rollback. Writes are buffered per transaction and applied only
on commit, so a rolled back transaction leaves no trace. Unrelated keys
never share a lock.

Transactions are per thread, mirroring Django's per-thread connections.
"""

import logging
import threading
from contextlib import contextmanager

from identifiers.domain.exceptions import DuplicateIdentifier, TransactionFailed
from identifiers.domain.ports import AllocationRecord, AllocationStore

logger = logging.getLogger(__name__)


class _Transaction:

    def __init__(self):
        self.held = {}
        self.writes = {}
        self.issued = {}


class InMemoryAllocationStore(AllocationStore):

    def __init__(self, lock_timeout=5.0):
        self.lock_timeout = lock_timeout
        self._records = {}
        self._issued = {}
        # Guards the lock table and committed state, never held while waiting on a key.
        self._mutex = threading.Lock()
        self._key_locks = {}
        self._local = threading.local()

    @contextmanager
    def atomic(self):
        if self._active() is not None:
            # Nested blocks join the outer transaction.
            yield
            return

        txn = _Transaction()
        self._local.txn = txn
        try:
            yield
        except BaseException:
            logger.debug("Rolling back in-memory transaction (%d key(s) held)", len(txn.held))
            raise
        else:
            self._commit(txn)
        finally:
            self._local.txn = None
            for lock in txn.held.values():
                lock.release()

    def get_allocation_record(self, namespace_key, period):
        txn = self._require_transaction()
        key = (namespace_key, period)
        self._lock(txn, key)

        if key in txn.writes:
            last = txn.writes[key]
        else:
            with self._mutex:
                last = self._records.get(key)

        if last is None:
            return None
        return AllocationRecord(namespace_key, period, last)

    def upsert_allocation_record(self, namespace_key, period, last_sequence):
        txn = self._require_transaction()
        key = (namespace_key, period)
        self._lock(txn, key)
        txn.writes[key] = last_sequence

    def record_issued(self, identifier, namespace_key, period, sequence):
        txn = self._require_transaction()
        with self._mutex:
            committed = identifier in self._issued
        if committed or identifier in txn.issued:
            raise DuplicateIdentifier(identifier)
        txn.issued[identifier] = (namespace_key, period, sequence)

    def current_sequence(self, namespace_key, period):
        with self._mutex:
            return self._records.get((namespace_key, period), 0)

    def issued_identifiers(self):
        with self._mutex:
            return set(self._issued)

    def _active(self):
        return getattr(self._local, "txn", None)

    def _require_transaction(self):
        txn = self._active()
        if txn is None:
            raise RuntimeError("Allocation records can only be accessed inside atomic()")
        return txn

    def _lock(self, txn, key):
        if key in txn.held:
            return

        with self._mutex:
            lock = self._key_locks.setdefault(key, threading.Lock())

        if not lock.acquire(timeout=self.lock_timeout):
            raise TransactionFailed(
                f"Timed out after {self.lock_timeout}s waiting for lock on {key[0]}/{key[1]}"
            )
        txn.held[key] = lock

    def _commit(self, txn):
        with self._mutex:
            duplicates = set(txn.issued) & set(self._issued)
            if duplicates:
                raise DuplicateIdentifier(sorted(duplicates)[0])
            self._records.update(txn.writes)
            self._issued.update(txn.issued)
