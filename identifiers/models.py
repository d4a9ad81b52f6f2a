"""
Persistence Models — Identifier Allocation (Django ORM)

These tables back the ORM store adapter.

- SequenceAllocation is the Allocation Record: one row per
  (namespace_key, period) holding the highest sequence issued so far.
  The row is created lazily on the first allocation and never deleted;
  deleting it would let the sequence restart and reissue identifiers.
- IssuedIdentifier is an append-only ledger of every identifier handed
  out. Its UNIQUE constraint on value is enforced by the database, so a
  duplicate can never be committed even if the counter row were tampered
  with.

Both tables are only written inside the allocator's transaction.
"""

from django.db import models


class SequenceAllocation(models.Model):
    """
    Highest sequence issued for a namespace within a period.

    last_sequence only ever increases, by exactly one per successful
    allocation.
    """

    namespace_key = models.CharField(max_length=64)
    period = models.PositiveIntegerField()
    last_sequence = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["namespace_key", "period"],
                name="unique_allocation_per_namespace_period",
            ),
        ]

    def __str__(self):
        return f"{self.namespace_key} [{self.period}] -> {self.last_sequence}"


class IssuedIdentifier(models.Model):
    """Ledger entry for one issued identifier."""

    # Referenced by other records (e.g. a resident) by value.
    value = models.CharField(max_length=96, unique=True)

    namespace_key = models.CharField(max_length=64)
    period = models.PositiveIntegerField()
    sequence = models.PositiveIntegerField()

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["namespace_key", "period"], name="issued_namespace_period_idx"),
        ]

    def __str__(self):
        return self.value
