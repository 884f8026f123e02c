from django.db import models
from django.utils import timezone

from ..managers import DocumentManager
from .base import PricedLine, ValidatedModel, money_field

CHALLAN_STATUS_CHOICES = [
    ("Pending", "Pending"),
    ("In Transit", "In Transit"),
    ("Delivered", "Delivered"),
]


# ---------- Delivery Challan ----------
# Dispatch note that travels with the goods
class DeliveryChallan(ValidatedModel):
    challan_no = models.CharField(max_length=32, unique=True)
    # Defaults to challan_no when not shared with a quotation
    reference_no = models.CharField(max_length=32, blank=True, default="")
    source_quotation = models.OneToOneField(
        "records_core.Quotation",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="generated_challan",
    )
    date = models.DateField(default=timezone.localdate)
    customer = models.CharField(max_length=200, blank=True, default="")
    customer_link = models.ForeignKey(
        "records_core.Customer",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    address = models.TextField(blank=True, default="")
    status = models.CharField(
        max_length=12, choices=CHALLAN_STATUS_CHOICES, default="Pending"
    )
    vehicle_no = models.CharField(max_length=50, blank=True, default="")

    objects = DocumentManager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="challan_status_idx"),
            models.Index(fields=["reference_no"], name="challan_reference_idx"),
        ]

    def __str__(self):
        return f"DC {self.challan_no} [{self.status}]"

    def save(self, *args, **kwargs):
        self.challan_no = (self.challan_no or "").strip().upper()
        self.reference_no = (self.reference_no or "").strip().upper() or self.challan_no
        return super().save(*args, **kwargs)


class ChallanItem(PricedLine):
    challan = models.ForeignKey(
        DeliveryChallan, on_delete=models.CASCADE, related_name="items"
    )
    product_name = models.CharField(max_length=255, blank=True, default="")
    buy_description = models.TextField(blank=True, default="")
    buy_price = money_field()
    sell_price = money_field()

    parent_field = "challan"

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"
