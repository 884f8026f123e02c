from django.core.management.base import BaseCommand

from records_core.tasks import recompute_all_balances


class Command(BaseCommand):
    help = "Recompute customer ledger balances and accounting running balances."

    # Define command-line argument
    def add_arguments(self, parser):
        parser.add_argument(
            "--async",  # Define flag
            action="store_true",
            dest="run_async",
            help="Queue the job on the Celery broker instead of running it here.",
        )

    def handle(self, *args, **options):
        if options["run_async"]:
            result = recompute_all_balances.delay()
            self.stdout.write(self.style.NOTICE(f"Queued balance recompute (task {result.id})"))
            return

        counts = recompute_all_balances()
        self.stdout.write(
            self.style.SUCCESS(
                f"Recomputed {counts['customers']} customers, "
                f"{counts['accountingEntries']} accounting entries"
            )
        )
