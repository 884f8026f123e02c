from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from ..managers import LedgerEntryManager
from .base import TimeStampedModel, ValidatedModel, money_field

DEBIT_CREDIT_CHOICES = [
    ("Debit", "Debit"),
    ("Credit", "Credit"),
]

# Reserved particulars for the opening entry; always kept first
INITIAL_BALANCE = "Initial Balance"


# ---------- Customer ----------
# Represents a buyer with a running ledger (hospitals, clinics, dealers)
class Customer(ValidatedModel):
    # CUST001, CUST002 ... assigned once, never changed
    serial_number = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=50, blank=True, default="")
    city = models.CharField(max_length=100, blank=True, default="")

    # Derived from the ledger (see services.ledger.recalculate)
    total_balance = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    debit_credit = models.CharField(
        max_length=6, choices=DEBIT_CREDIT_CHOICES, default="Debit"
    )
    """ Sign rule:
        balance >= 0 → Debit (customer owes us)
        balance <  0 → Credit
    """

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.serial_number} {self.name}"

    def save(self, *args, **kwargs):
        self.serial_number = (self.serial_number or "").strip().upper()
        self.name = (self.name or "").strip()
        return super().save(*args, **kwargs)


# ---------- LedgerEntry ----------
# One dated debit/credit row; only ever touched through ledger services
class LedgerEntry(TimeStampedModel):
    customer = models.ForeignKey(
        Customer, on_delete=models.CASCADE, related_name="ledger"
    )
    # Stored order is meaningful (Initial Balance sits at position 0)
    position = models.PositiveIntegerField(default=0)
    date = models.DateField(default=timezone.localdate)
    particulars = models.CharField(max_length=255)
    debit_amount = money_field()
    credit_amount = money_field()
    # Running total at the moment the row was added; a snapshot only
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    reference = models.CharField(max_length=100, blank=True, default="")
    # Optional sale metadata (inventory sales post these)
    quantity = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    unit_price = money_field()

    objects = LedgerEntryManager()

    class Meta:
        ordering = ["position", "id"]
        indexes = [models.Index(fields=["customer", "position"], name="ledger_customer_pos_idx")]

    def __str__(self):
        return f"{self.date} {self.particulars} Dr {self.debit_amount} Cr {self.credit_amount}"

    @property
    def is_initial_balance(self):
        return (self.particulars or "").strip().lower() == INITIAL_BALANCE.lower()

    def clean(self):
        if self.quantity is not None and self.quantity < 0:
            raise ValidationError({"quantity": "Quantity must be >= 0"})

    def save(self, *args, **kwargs):
        self.full_clean(validate_unique=False)  # run validations before saving
        return super().save(*args, **kwargs)
