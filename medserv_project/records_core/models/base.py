from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from ..services.totals import line_total


def money_field(**kwargs):
    """Non-negative amount stored at cent precision."""
    kwargs.setdefault("max_digits", 14)
    kwargs.setdefault("decimal_places", 2)
    kwargs.setdefault("default", Decimal("0.00"))
    kwargs.setdefault("validators", [MinValueValidator(Decimal("0"))])
    return models.DecimalField(**kwargs)


class TimeStampedModel(models.Model):
    """
    Abstract base: adds created_at / updated_at timestamps.
    """
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class ValidatedModel(TimeStampedModel):
    """ No row is persisted without passing field/enum validation.

        Unique columns are left to the database so a taken code
        surfaces as IntegrityError (→ DuplicateKey), also under races.
    """

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        # run validations before saving (calls clean())
        self.full_clean(validate_unique=False, validate_constraints=False)
        return super().save(*args, **kwargs)


class PricedLine(models.Model):
    """Line item shared by quotation / invoice / challan rows."""
    description = models.TextField(blank=True, default="")
    quantity = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(Decimal("0"))],
    )
    unit_price = money_field()
    total = money_field()
    # keep rows in the order the caller sent them
    position = models.PositiveIntegerField(default=0)

    class Meta:
        abstract = True
        ordering = ["position", "id"]

    # Line owner computes its own total: quantity × unit_price
    def refresh_total(self):
        self.total = line_total(self.quantity, self.unit_price, self.total)
        return self.total

    # name of the FK to the owning document, set by subclasses
    parent_field = None

    def validate_detached(self):
        """Validate before the parent document has a primary key."""
        self.refresh_total()
        self.full_clean(exclude=[self.parent_field], validate_unique=False)

    def save(self, *args, **kwargs):
        self.refresh_total()
        self.full_clean(validate_unique=False)
        return super().save(*args, **kwargs)


class TaxedDocument(ValidatedModel):
    """Header fields shared by quotations and invoices."""
    # Customer is optional: documents may be drafted for walk-in buyers
    customer = models.CharField(max_length=200, blank=True, default="")
    customer_link = models.ForeignKey(
        "records_core.Customer",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    subject = models.CharField(max_length=255, blank=True, default="")
    address = models.TextField(blank=True, default="")
    email = models.CharField(max_length=254, blank=True, default="")
    date = models.DateField(default=timezone.localdate)

    # Two independently toggleable percentage taxes
    sales_tax_enabled = models.BooleanField(default=False)
    sales_tax_rate = models.DecimalField(
        max_digits=6, decimal_places=2, default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    fbr_tax_enabled = models.BooleanField(default=False)
    fbr_tax_rate = models.DecimalField(
        max_digits=6, decimal_places=2, default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0"))],
    )

    # Derived (services.totals)
    sub_total = money_field()
    sales_tax_amount = money_field()
    fbr_tax_amount = money_field()
    total_amount = money_field()

    class Meta:
        abstract = True

    def apply_totals(self, totals):
        self.sub_total = totals.sub_total
        self.sales_tax_amount = totals.sales_tax_amount
        self.fbr_tax_amount = totals.fbr_tax_amount
        self.total_amount = totals.total_amount
