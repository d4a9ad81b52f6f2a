from django.core.management.base import BaseCommand, CommandError

from identifiers.application.use_cases import current_period, default_allocator
from identifiers.domain.exceptions import (
    AllocationError,
    InvalidNamespaceError,
    InvalidPeriodError,
    SequenceOverflowError,
)
from identifiers.domain.formatting import normalize_namespace


class Command(BaseCommand):
    help = "Allocate sequential identifiers for a namespace, or show its current sequence."

    def add_arguments(self, parser):
        parser.add_argument("namespace", help="Namespace, e.g. a purok name. Whitespace and case are ignored.")
        parser.add_argument("--period", type=int, help="Period (calendar year). Defaults to the current year.")
        parser.add_argument("--count", type=int, default=1, help="Number of identifiers to allocate.")
        parser.add_argument(
            "--status",
            action="store_true",
            help="Print the last issued sequence instead of allocating.",
        )

    def handle(self, *args, **options):
        namespace = options["namespace"]
        period = options["period"] if options["period"] is not None else current_period()
        count = options["count"]

        if count < 1:
            raise CommandError("--count must be at least 1.")

        allocator = default_allocator()

        try:
            if options["status"]:
                namespace_key = normalize_namespace(namespace)
                last = allocator.current_sequence(namespace_key, period)
                self.stdout.write(f"{namespace_key} {period}: last sequence {last}")
                return

            for _ in range(count):
                self.stdout.write(allocator.allocate_next(namespace, period))
        except (InvalidNamespaceError, InvalidPeriodError) as exc:
            raise CommandError(str(exc))
        except SequenceOverflowError as exc:
            raise CommandError(f"{exc}. Widen the sequence or rotate the namespace.")
        except AllocationError as exc:
            raise CommandError(f"{exc}. Nothing was consumed; try again.")
