from django.conf import settings
from django.db import models

from ..managers import DocumentManager
from .base import PricedLine, TaxedDocument

INV_STATUS_CHOICES = [
    ("Pending", "Pending"),
    ("Paid", "Paid"),
    ("Partial", "Partial"),
]


class Invoice(TaxedDocument):  # Represents a customer invoice
    # INV001 ... or the quotation number when generated on acceptance
    invoice_no = models.CharField(max_length=32, unique=True)
    reference_no = models.CharField(max_length=32, blank=True, default="")

    # Unique link back to the quotation that generated this invoice;
    # the database refuses a second invoice for the same quotation
    source_quotation = models.OneToOneField(
        "records_core.Quotation",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="generated_invoice",
    )

    status = models.CharField(
        max_length=10, choices=INV_STATUS_CHOICES, default="Pending"
    )
    due_date = models.DateField(null=True, blank=True)

    objects = DocumentManager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["date"], name="invoice_date_idx"),
            models.Index(fields=["status"], name="invoice_status_idx"),
            models.Index(fields=["reference_no"], name="invoice_reference_idx"),
        ]

    def __str__(self):
        return f"Inv {self.invoice_no or self.pk}"

    def save(self, *args, **kwargs):
        self.invoice_no = (self.invoice_no or "").strip().upper()
        self.reference_no = (self.reference_no or "").strip().upper()
        if not self.email:
            self.email = settings.DEFAULT_DOCUMENT_EMAIL
        return super().save(*args, **kwargs)


class InvoiceProduct(PricedLine):  # Each line describes a product sold
    invoice = models.ForeignKey(
        Invoice, on_delete=models.CASCADE, related_name="products"
    )
    product = models.CharField(max_length=255, blank=True, default="")

    parent_field = "invoice"

    def __str__(self):
        return f"Invoice: {self.invoice_id} - {self.product} - Total: {self.total}"
