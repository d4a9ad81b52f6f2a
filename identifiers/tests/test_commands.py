from io import StringIO

from django.core.management import CommandError, call_command
from django.test import TestCase

from identifiers.models import SequenceAllocation


class AllocateIdentifierCommandTest(TestCase):

    def call(self, *args):
        out = StringIO()
        call_command("allocate_identifier", *args, stdout=out)
        return out.getvalue().splitlines()

    def test_allocates_requested_count(self):
        lines = self.call("purok 1", "--period", "2025", "--count", "3")
        self.assertEqual(lines, ["PUROK1-2025-001", "PUROK1-2025-002", "PUROK1-2025-003"])

    def test_status(self):
        self.call("PUROK1", "--period", "2025", "--count", "2")
        lines = self.call("purok 1", "--period", "2025", "--status")
        self.assertEqual(lines, ["PUROK1 2025: last sequence 2"])

    def test_overflow_is_a_command_error(self):
        SequenceAllocation.objects.create(namespace_key="BHSPK", period=2025, last_sequence=999)
        with self.assertRaises(CommandError):
            self.call("BHSPK", "--period", "2025")

    def test_invalid_namespace_is_a_command_error(self):
        with self.assertRaises(CommandError):
            self.call("!!!", "--period", "2025")

    def test_count_must_be_positive(self):
        with self.assertRaises(CommandError):
            self.call("BHSPK", "--count", "0")
