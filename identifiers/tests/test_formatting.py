from django.test import SimpleTestCase

from identifiers.domain.exceptions import (
    InvalidNamespaceError,
    InvalidPeriodError,
    MalformedIdentifierError,
)
from identifiers.domain.formatting import (
    IdentifierParts,
    format_identifier,
    normalize_namespace,
    parse_identifier,
    validate_period,
)


class NormalizeNamespaceTest(SimpleTestCase):

    def test_uppercases_and_strips_whitespace(self):
        self.assertEqual(normalize_namespace("purok 1"), "PUROK1")
        self.assertEqual(normalize_namespace("  Purok\t1\n"), "PUROK1")
        self.assertEqual(normalize_namespace("PUROK1"), "PUROK1")

    def test_keeps_hyphens_dots_and_accented_letters(self):
        self.assertEqual(normalize_namespace("bhspk-east"), "BHSPK-EAST")
        self.assertEqual(normalize_namespace("Sto. Niño"), "STO.NIÑO")

    def test_composed_and_decomposed_spellings_share_a_key(self):
        composed = "Sto. Ni\u00f1o"
        decomposed = "Sto. Nin\u0303o"

        self.assertNotEqual(composed, decomposed)
        self.assertEqual(normalize_namespace(decomposed), "STO.NI\u00d1O")
        self.assertEqual(normalize_namespace(decomposed), normalize_namespace(composed))

    def test_rejects_empty_and_blank(self):
        for raw in ("", "   ", "\t\n"):
            with self.subTest(raw=raw):
                with self.assertRaises(InvalidNamespaceError):
                    normalize_namespace(raw)

    def test_rejects_unnormalizable_input(self):
        for raw in ("!!!", "purok/1", "---", "-PUROK", "PUROK-", "x" * 65, None, 12):
            with self.subTest(raw=raw):
                with self.assertRaises(InvalidNamespaceError):
                    normalize_namespace(raw)

    def test_invalid_namespace_is_a_value_error(self):
        with self.assertRaises(ValueError):
            normalize_namespace("")


class ValidatePeriodTest(SimpleTestCase):

    def test_accepts_years(self):
        self.assertEqual(validate_period(2025), 2025)
        self.assertEqual(validate_period(0), 0)

    def test_rejects_non_integers(self):
        for period in (True, -1, "2025", 2025.0, None):
            with self.subTest(period=period):
                with self.assertRaises(InvalidPeriodError):
                    validate_period(period)


class FormatIdentifierTest(SimpleTestCase):

    def test_zero_pads_to_three_digits(self):
        self.assertEqual(format_identifier("BHSPK", 2025, 1), "BHSPK-2025-001")
        self.assertEqual(format_identifier("BHSPK", 2025, 42), "BHSPK-2025-042")
        self.assertEqual(format_identifier("BHSPK", 2025, 999), "BHSPK-2025-999")

    def test_custom_width(self):
        self.assertEqual(format_identifier("PUROK1", 2025, 1000, width=4), "PUROK1-2025-1000")

    def test_out_of_range_sequence_is_rejected(self):
        """Rendering never truncates: 1000 does not fit three digits."""
        for sequence in (0, -1, 1000):
            with self.subTest(sequence=sequence):
                with self.assertRaises(ValueError):
                    format_identifier("BHSPK", 2025, sequence)


class ParseIdentifierTest(SimpleTestCase):

    def test_round_trip_over_full_range(self):
        for namespace_key in ("BHSPK", "PUROK1", "PUROK1-2024", "STO.NIÑO"):
            for sequence in range(1, 1000):
                value = format_identifier(namespace_key, 2025, sequence)
                self.assertEqual(
                    parse_identifier(value),
                    IdentifierParts(namespace_key, 2025, sequence),
                )

    def test_hyphenated_namespace_splits_from_the_right(self):
        parts = parse_identifier("PUROK1-2024-2025-007")
        self.assertEqual(parts.namespace_key, "PUROK1-2024")
        self.assertEqual(parts.period, 2025)
        self.assertEqual(parts.sequence, 7)

    def test_rejects_malformed_values(self):
        malformed = [
            "BHSPK-2025",
            "BHSPK-2025-01",
            "BHSPK-2025-0001",
            "BHSPK-2025-000",
            "BHSPK-2025-1000",
            "BHSPK-02025-001",
            "BHSPK-20X5-001",
            "bhspk-2025-001",
            "-2025-001",
            "",
            None,
        ]
        for value in malformed:
            with self.subTest(value=value):
                with self.assertRaises(MalformedIdentifierError):
                    parse_identifier(value)

    def test_width_must_match(self):
        self.assertEqual(
            parse_identifier("BHSPK-2025-0001", width=4),
            IdentifierParts("BHSPK", 2025, 1),
        )
        with self.assertRaises(MalformedIdentifierError):
            parse_identifier("BHSPK-2025-001", width=4)
