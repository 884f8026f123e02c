import datetime
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from records_core.models import (AccountingEntry, Customer, DeliveryChallan, InventoryItem,
                                 Invoice, Quotation)
from records_core.services import accounting, documents, inventory, ledger

DEMO_CUSTOMERS = [
    # name, phone, city, opening balance, side
    ("Ali Medical Center", "021-1234567", "Karachi", Decimal("10000"), "Debit"),
    ("City Hospital", "042-7654321", "Lahore", Decimal("75000"), "Credit"),
    ("National Medical Supplies", "051-1234567", "Islamabad", Decimal("0"), "Debit"),
]

DEMO_STOCK = [
    {"category": "machines", "product_name": "Ultrasound Scanner", "serial_no": "US-1001",
     "machine_category": "instock", "quantity": 1, "price": Decimal("850000")},
    {"category": "probs", "probes": "Convex Probe", "pro_type": "C5-2",
     "quantity": 4, "price": Decimal("120000")},
    {"category": "parts", "part_name": "Power Board", "quantity": 10, "price": Decimal("15000")},
    {"category": "importStock", "product_name": "Patient Monitor",
     "category_name": "Monitors", "status": "InStock", "quantity": 3, "price": Decimal("95000")},
]


class Command(BaseCommand):
    help = "Seeds the database with demo customers, stock, documents and cash book entries."

    # Define command-line argument
    def add_arguments(self, parser):
        parser.add_argument(
            "--flush",  # Define flag
            action="store_true",
            help="Delete existing business records before seeding.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options["flush"]:
            for model in (Quotation, Invoice, DeliveryChallan, Customer, InventoryItem,
                          AccountingEntry):
                model.objects.all().delete()
            self.stdout.write(self.style.WARNING("Existing records deleted."))

        self.stdout.write(self.style.NOTICE("Seeding demo data..."))
        today = datetime.date.today()

        customers = []
        for name, phone, city, amount, side in DEMO_CUSTOMERS:
            customers.append(
                ledger.create_customer(
                    {"name": name, "phone": phone, "city": city,
                     "amount": amount, "debit_credit": side}
                )
            )
        ledger.add_entry(
            customers[0],
            {"date": today, "particulars": "Payment received", "credit_amount": Decimal("4000")},
        )

        for row in DEMO_STOCK:
            inventory.create_item(dict(row))

        documents.create_quotation(
            {
                "customer": customers[0].name,
                "customer_link_id": customers[0].pk,
                "subject": "Ultrasound Scanner supply",
                "date": today,
                "sales_tax_enabled": True,
                "sales_tax_rate": Decimal("10"),
                "products": [
                    {"product": "Ultrasound Scanner", "quantity": Decimal("1"),
                     "unit_price": Decimal("900000"), "buy_price": Decimal("50000")},
                ],
            }
        )
        documents.create_invoice(
            {
                "customer": customers[1].name,
                "customer_link_id": customers[1].pk,
                "date": today,
                "products": [
                    {"product": "Power Board", "quantity": Decimal("2"),
                     "unit_price": Decimal("15000")},
                ],
            }
        )

        accounting.create_entry(
            {"date": today, "account": "Sales", "credit": Decimal("30000"),
             "category": "Income", "description": "Invoice payment"}
        )
        accounting.create_entry(
            {"date": today, "account": "Rent", "debit": Decimal("12000"),
             "category": "Expense", "expense_type": "Office Expense"}
        )

        self.stdout.write(self.style.SUCCESS("Demo data seeded successfully!"))
