from datetime import timedelta

from django.conf import settings
from django.db import models

from ..managers import DocumentManager
from .base import PricedLine, TaxedDocument, money_field

QUOTATION_STATUS_CHOICES = [
    ("Pending", "Pending"),
    ("Accepted", "Accepted"),
    ("Rejected", "Rejected"),
]


def default_terms():
    return list(settings.QUOTATION_DEFAULT_TERMS)


class Quotation(TaxedDocument):  # Offer sent to a customer before sale
    # QUO001, QUO002 ... also reused as Invoice/Challan number on acceptance
    quotation_no = models.CharField(max_length=32, unique=True)
    # Shared across Quotation / Invoice / Delivery Challan
    reference_no = models.CharField(max_length=32, blank=True, default="")

    status = models.CharField(
        max_length=10, choices=QUOTATION_STATUS_CHOICES, default="Pending"
    )
    """ Workflow:
        Pending  = sent, waiting on the customer.
        Accepted = generates Invoice + Delivery Challan (once).
        Rejected = closed.
        Accepted → Accepted re-saves refresh the generated documents. """

    valid_until = models.DateField(null=True, blank=True)
    terms_and_conditions = models.JSONField(default=default_terms, blank=True)
    buyback_description = models.TextField(blank=True, default="")

    # Set when the acceptance workflow produced the linked documents
    linked_invoice = models.ForeignKey(
        "records_core.Invoice",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    linked_delivery_challan = models.ForeignKey(
        "records_core.DeliveryChallan",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )

    objects = DocumentManager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["date"], name="quotation_date_idx"),
            models.Index(fields=["status"], name="quotation_status_idx"),
            models.Index(fields=["customer"], name="quotation_customer_idx"),
        ]

    def __str__(self):
        return f"Quotation {self.quotation_no} [{self.status}]"

    @property
    def is_accepted(self):
        return self.status == "Accepted"

    def apply_defaults(self):
        self.quotation_no = (self.quotation_no or "").strip().upper()
        self.reference_no = (self.reference_no or "").strip().upper() or self.quotation_no
        if not self.email:
            self.email = settings.DEFAULT_DOCUMENT_EMAIL
        if not self.valid_until and self.date:
            self.valid_until = self.date + timedelta(days=settings.QUOTATION_VALIDITY_DAYS)

    def save(self, *args, **kwargs):
        self.apply_defaults()
        return super().save(*args, **kwargs)


class QuotationProduct(PricedLine):
    quotation = models.ForeignKey(
        Quotation, on_delete=models.CASCADE, related_name="products"
    )
    product = models.CharField(max_length=255, blank=True, default="")
    buy_description = models.TextField(blank=True, default="")
    # Trade-in value deducted before tax
    buy_price = money_field()
    sell_price = money_field()

    parent_field = "quotation"

    def __str__(self):
        return f"{self.product} x {self.quantity}"
