from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from ..models import AccountingEntry, Customer, InventoryItem, Invoice, Quotation


class ManagementCommandTests(TestCase):
    def test_seed_demo_and_flush(self):
        call_command("seed_demo", stdout=StringIO())
        self.assertEqual(Customer.objects.count(), 3)
        self.assertEqual(InventoryItem.objects.count(), 4)
        self.assertEqual(Quotation.objects.count(), 1)
        self.assertEqual(Invoice.objects.count(), 1)
        self.assertEqual(AccountingEntry.objects.count(), 2)

        # seeding again on top of --flush starts from scratch
        call_command("seed_demo", "--flush", stdout=StringIO())
        self.assertEqual(Customer.objects.count(), 3)
        self.assertEqual(
            sorted(Customer.objects.values_list("serial_number", flat=True)),
            ["CUST001", "CUST002", "CUST003"],
        )

    def test_recompute_balances(self):
        call_command("seed_demo", stdout=StringIO())
        out = StringIO()
        call_command("recompute_balances", stdout=out)
        self.assertIn("Recomputed 3 customers, 2 accounting entries", out.getvalue())


class MigrationStateTests(TestCase):
    def test_models_have_no_pending_migrations(self):
        out = StringIO()
        # exits non-zero when a model change has no migration
        call_command(
            "makemigrations", "records_core", "--check", "--dry-run", stdout=out
        )
        self.assertIn("No changes detected", out.getvalue())
