"""
Namespace normalization and the identifier wire format.

An identifier renders as ``{NAMESPACE}-{PERIOD}-{SEQUENCE}`` with the
sequence zero-padded to a fixed width, e.g. ``BHSPK-2025-001``.

Namespaces may themselves contain hyphens, so parsing always takes the
last two hyphen-separated fields as period and sequence.
"""

from __future__ import annotations

import re
import unicodedata
from typing import NamedTuple

from identifiers.domain.exceptions import (
    InvalidNamespaceError,
    InvalidPeriodError,
    MalformedIdentifierError,
)

DEFAULT_WIDTH = 3
MAX_NAMESPACE_LENGTH = 64

_WHITESPACE = re.compile(r"\s+")
_NAMESPACE_KEY = re.compile(r"[\w.-]+")
_DIGITS = re.compile(r"[0-9]+")


class IdentifierParts(NamedTuple):
    namespace_key: str
    period: int
    sequence: int


def normalize_namespace(raw_namespace) -> str:
    """Uppercase and strip all whitespace: ``"purok 1"`` -> ``"PUROK1"``. Result is NFC."""
    if not isinstance(raw_namespace, str):
        raise InvalidNamespaceError(raw_namespace, "namespace must be a string")

    # Composed and decomposed spellings ("Ni\u00f1o" vs "Nin\u0303o") must share a key.
    key = _WHITESPACE.sub("", unicodedata.normalize("NFC", raw_namespace)).upper()
    key = unicodedata.normalize("NFC", key)

    if not key:
        raise InvalidNamespaceError(raw_namespace, "namespace is empty")
    if len(key) > MAX_NAMESPACE_LENGTH:
        raise InvalidNamespaceError(
            raw_namespace, f"longer than {MAX_NAMESPACE_LENGTH} characters"
        )
    if not _NAMESPACE_KEY.fullmatch(key):
        raise InvalidNamespaceError(raw_namespace, "unsupported characters")
    if not any(ch.isalnum() for ch in key):
        raise InvalidNamespaceError(raw_namespace, "needs a letter or digit")
    if key.startswith("-") or key.endswith("-"):
        raise InvalidNamespaceError(raw_namespace, "cannot start or end with '-'")

    return key


def validate_period(period) -> int:
    # bool is an int subclass; True is not a year.
    if isinstance(period, bool) or not isinstance(period, int) or period < 0:
        raise InvalidPeriodError(period)
    return period


def max_sequence_for(width: int) -> int:
    return 10 ** width - 1


def format_identifier(namespace_key: str, period: int, sequence: int, width: int = DEFAULT_WIDTH) -> str:
    """
    Render an allocated sequence as its external string.

    Pure rendering: ``sequence`` must already be within ``[1, 10**width - 1]``.
    Overflow policy belongs to the allocator, which never calls this with
    an out-of-range value.
    """
    if not 1 <= sequence <= max_sequence_for(width):
        raise ValueError(
            f"sequence {sequence} does not fit in {width} digit(s)"
        )
    return f"{namespace_key}-{period}-{sequence:0{width}d}"


def parse_identifier(value: str, width: int = DEFAULT_WIDTH) -> IdentifierParts:
    """Recover ``(namespace_key, period, sequence)`` from a formatted identifier."""
    if not isinstance(value, str):
        raise MalformedIdentifierError(value)

    fields = value.rsplit("-", 2)
    if len(fields) != 3:
        raise MalformedIdentifierError(value)

    namespace_key, period, sequence = fields

    if not _DIGITS.fullmatch(period) or not _DIGITS.fullmatch(sequence):
        raise MalformedIdentifierError(value)
    if len(sequence) != width or int(sequence) == 0:
        raise MalformedIdentifierError(value)

    try:
        normalized = normalize_namespace(namespace_key)
    except InvalidNamespaceError:
        raise MalformedIdentifierError(value)
    if normalized != namespace_key:
        raise MalformedIdentifierError(value)

    parts = IdentifierParts(namespace_key, int(period), int(sequence))

    # Rejects non-canonical periods such as "02025".
    if format_identifier(*parts, width=width) != value:
        raise MalformedIdentifierError(value)

    return parts
