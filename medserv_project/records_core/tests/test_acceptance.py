from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase

from ..models import AuditLog, DeliveryChallan, Invoice, Quotation
from ..services import documents
from ..services.acceptance import AcceptanceWorkflow, update_quotation


class QuotationAcceptanceTests(TestCase):
    def setUp(self):
        self.quotation = documents.create_quotation(
            {
                "customer": "Ali Medical Center",
                "subject": "Ultrasound supply",
                "address": "Karachi",
                "sales_tax_enabled": True,
                "sales_tax_rate": Decimal("10"),
                "fbr_tax_enabled": True,
                "fbr_tax_rate": Decimal("5"),
                "products": [
                    {"product": "Ultrasound Scanner", "quantity": 1,
                     "unit_price": Decimal("1000"), "buy_price": Decimal("200")},
                    # rows without a product are not copied
                    {"product": "", "description": "spare line", "total": Decimal("0")},
                ],
            }
        )

    def accept(self, **extra):
        return update_quotation(self.quotation, {"status": "Accepted", **extra})

    def test_quotation_totals_on_create(self):
        self.assertEqual(self.quotation.quotation_no, "QUO001")
        self.assertEqual(self.quotation.reference_no, "QUO001")
        self.assertEqual(self.quotation.total_amount, Decimal("680.00"))
        self.assertEqual(self.quotation.status, "Pending")

    def test_acceptance_creates_invoice_and_challan(self):
        result = self.accept()

        self.assertTrue(result.invoice_created)
        self.assertTrue(result.challan_created)
        self.assertEqual(result.warnings, [])

        invoice = Invoice.objects.get()
        self.assertEqual(invoice.invoice_no, "QUO001")
        self.assertEqual(invoice.reference_no, "QUO001")
        self.assertEqual(invoice.source_quotation_id, self.quotation.pk)
        self.assertEqual(invoice.customer, "Ali Medical Center")
        self.assertEqual(invoice.status, "Pending")
        self.assertEqual(invoice.products.count(), 1)
        # invoices add the taxes on top
        self.assertEqual(invoice.total_amount, Decimal("1150.00"))

        challan = DeliveryChallan.objects.get()
        self.assertEqual(challan.challan_no, "QUO001")
        self.assertEqual(challan.status, "Pending")
        self.assertEqual(challan.items.get().product_name, "Ultrasound Scanner")

        quotation = Quotation.objects.get(pk=self.quotation.pk)
        self.assertEqual(quotation.status, "Accepted")
        self.assertEqual(quotation.linked_invoice_id, invoice.pk)
        self.assertEqual(quotation.linked_delivery_challan_id, challan.pk)
        self.assertTrue(AuditLog.objects.filter(action="link").exists())

    def test_repeated_acceptance_never_duplicates(self):
        self.accept()
        result = self.accept(subject="Ultrasound supply (revised)")

        self.assertFalse(result.invoice_created)
        self.assertFalse(result.challan_created)
        self.assertEqual(Invoice.objects.count(), 1)
        self.assertEqual(DeliveryChallan.objects.count(), 1)
        # accepted re-save refreshes the generated invoice
        self.assertEqual(Invoice.objects.get().subject, "Ultrasound supply (revised)")

    def test_reaccepting_after_pending_reuses_documents(self):
        self.accept()
        update_quotation(self.quotation, {"status": "Pending"})
        result = self.accept()

        self.assertFalse(result.invoice_created)
        self.assertEqual(result.invoice.pk, Invoice.objects.get().pk)
        self.assertEqual(DeliveryChallan.objects.count(), 1)

    def test_accepted_resave_updates_lines(self):
        self.accept()
        self.accept(products=[
            {"product": "Convex Probe", "quantity": 2, "unit_price": Decimal("300")},
        ])

        invoice = Invoice.objects.get()
        self.assertEqual(
            list(invoice.products.values_list("product", flat=True)), ["Convex Probe"]
        )
        self.assertEqual(invoice.sub_total, Decimal("600.00"))
        challan = DeliveryChallan.objects.get()
        self.assertEqual(challan.items.get().quantity, Decimal("2.00"))

    def test_legacy_invoice_is_adopted(self):
        legacy = documents.create_invoice(
            {"subject": "Invoice for QUO001", "products": []}
        )
        self.assertEqual(legacy.invoice_no, "INV001")

        result = self.accept()
        self.assertFalse(result.invoice_created)
        self.assertEqual(Invoice.objects.count(), 1)

        legacy.refresh_from_db()
        self.assertEqual(legacy.source_quotation_id, self.quotation.pk)
        self.assertEqual(legacy.reference_no, "QUO001")

    def test_rejected_quotation_has_no_side_effects(self):
        result = update_quotation(self.quotation, {"status": "Rejected"})
        self.assertIsNone(result.invoice)
        self.assertFalse(Invoice.objects.exists())
        self.assertFalse(DeliveryChallan.objects.exists())

    @mock.patch.object(
        AcceptanceWorkflow, "_create_challan", side_effect=DatabaseError("disk full")
    )
    def test_downstream_failure_is_reported_not_raised(self, _create_challan):
        result = self.accept()

        self.assertEqual(len(result.warnings), 1)
        self.assertIn("delivery challan", result.warnings[0])
        self.assertFalse(DeliveryChallan.objects.exists())

        # the quotation and the invoice still went through
        quotation = Quotation.objects.get(pk=self.quotation.pk)
        self.assertEqual(quotation.status, "Accepted")
        self.assertEqual(quotation.linked_invoice_id, Invoice.objects.get().pk)
        self.assertIsNone(quotation.linked_delivery_challan_id)
