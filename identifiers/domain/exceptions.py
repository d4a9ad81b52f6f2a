class InvalidNamespaceError(ValueError):
    """Raised when a namespace is empty or cannot be normalized into a key."""

    def __init__(self, raw_namespace, reason):
        self.raw_namespace = raw_namespace
        self.reason = reason
        super().__init__(f"Invalid namespace {raw_namespace!r}: {reason}")


class InvalidPeriodError(ValueError):
    """Raised when a period is not a non-negative integer."""

    def __init__(self, period):
        self.period = period
        super().__init__(f"Invalid period: {period!r}")


class MalformedIdentifierError(ValueError):
    """Raised when a string is not a well-formed identifier."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Malformed identifier: {value!r}")


class SequenceOverflowError(OverflowError):
    """Raised when the next sequence would not fit the display width."""

    def __init__(self, namespace_key, period, last_sequence, max_sequence):
        self.namespace_key = namespace_key
        self.period = period
        self.last_sequence = last_sequence
        self.max_sequence = max_sequence
        super().__init__(
            f"Sequence exhausted for {namespace_key}/{period}: "
            f"last issued {last_sequence}, maximum {max_sequence}"
        )


class TransactionFailed(Exception):
    """Raised by a store when a transaction could not commit (lock timeout, deadlock, outage)."""


class DuplicateIdentifier(Exception):
    """Raised when the issued-identifier ledger already holds a rendered identifier."""

    def __init__(self, identifier):
        self.identifier = identifier
        super().__init__(f"Identifier already issued: {identifier}")


class AllocationError(Exception):
    """Raised when an identifier could not be allocated. No sequence was consumed."""

    def __init__(self, namespace_key, period, attempts):
        self.namespace_key = namespace_key
        self.period = period
        self.attempts = attempts
        super().__init__(
            f"Could not allocate an identifier for {namespace_key}/{period} "
            f"after {attempts} attempt(s)"
        )
