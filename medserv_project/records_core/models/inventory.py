from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from ..managers import InventoryManager
from .base import ValidatedModel, money_field

CATEGORY_CHOICES = [
    ("machines", "Machines"),
    ("probs", "Probes"),
    ("parts", "Parts"),
    ("productsCategory", "Products"),
    ("importStock", "Import Stock"),
]

MACHINE_CATEGORY_CHOICES = [
    ("instock", "In stock"),
    ("repair", "Repair"),
    ("sold", "Sold"),
]

IMPORT_STATUS_CHOICES = [
    ("InStock", "In stock"),
    ("Repair", "Repair"),
    ("Sold", "Sold"),
]

# Older clients send the long label
IMPORT_STATUS_ALIASES = {"Repair Items": "Repair", "In Stock": "InStock"}

""" One table, five record shapes.
    Each category only carries the variant fields listed here on top of
    the common ones (quantity, price, description, buyer / sale data). """
VARIANT_FIELDS = {
    "machines": ("product_name", "serial_no", "model_no", "machine_category"),
    "probs": ("probes", "pro_type", "box_no", "model_no"),
    "parts": ("part_name", "model_no"),
    "productsCategory": ("product_name", "p_n", "serial_no", "model_no"),
    "importStock": ("product_name", "serial_no", "category_name", "status"),
}


def normalize_import_status(value):
    if not value:
        return None
    return IMPORT_STATUS_ALIASES.get(value, value)


class InventoryItem(ValidatedModel):
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    # Per-category running number (S/N column)
    s_n = models.PositiveIntegerField(null=True, blank=True)

    # Variant identifiers
    p_n = models.CharField(max_length=50, blank=True, default="")
    serial_no = models.CharField(max_length=100, blank=True, default="")
    box_no = models.CharField(max_length=50, blank=True, default="")
    model_no = models.CharField(max_length=100, blank=True, default="")
    product_name = models.CharField(max_length=255, blank=True, default="")
    part_name = models.CharField(max_length=255, blank=True, default="")
    probes = models.CharField(max_length=255, blank=True, default="")
    pro_type = models.CharField(max_length=100, blank=True, default="")
    category_name = models.CharField(max_length=100, blank=True, default="Default")
    machine_category = models.CharField(
        max_length=10, choices=MACHINE_CATEGORY_CHOICES, null=True, blank=True
    )
    status = models.CharField(
        max_length=10, choices=IMPORT_STATUS_CHOICES, null=True, blank=True
    )

    # Common stock fields
    description = models.TextField(blank=True, default="")
    quantity = models.PositiveIntegerField(default=0)
    price = models.DecimalField(
        max_digits=14, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(Decimal("0"))],
    )

    # Buyer of a sold item
    buyer_name = models.CharField(max_length=200, blank=True, default="")
    buyer_serial = models.CharField(max_length=100, blank=True, default="")
    buyer_city = models.CharField(max_length=100, blank=True, default="")

    # Last sale metadata
    last_sold_quantity = models.PositiveIntegerField(null=True, blank=True)
    last_sold_unit_price = money_field(null=True, blank=True, default=None)
    last_sold_total = money_field(null=True, blank=True, default=None)
    last_sold_date = models.DateField(null=True, blank=True)
    last_sold_customer = models.CharField(max_length=200, blank=True, default="")

    # Separate record for a sale, distinct from the stock row it came from
    is_sold_entry = models.BooleanField(default=False)

    date = models.DateField(default=timezone.localdate)

    objects = InventoryManager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["category"], name="inventory_category_idx"),
            models.Index(fields=["category_name"], name="inventory_catname_idx"),
            models.Index(fields=["machine_category"], name="inventory_machine_cat_idx"),
            models.Index(fields=["status"], name="inventory_status_idx"),
            models.Index(fields=["category", "s_n"], name="inventory_cat_sn_idx"),
        ]

    def __str__(self):
        label = self.product_name or self.part_name or self.probes or self.model_no
        return f"{self.category} #{self.s_n} {label}"

    @property
    def variant_fields(self):
        return VARIANT_FIELDS.get(self.category, ())

    def clean(self):
        errors = {}
        # machine/import sub-status only make sense on their own variant
        if self.machine_category and self.category != "machines":
            errors["machine_category"] = "Only machines carry a machine category."
        if self.status and self.category != "importStock":
            errors["status"] = "Only import stock carries a status."
        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        self.status = normalize_import_status(self.status)
        return super().save(*args, **kwargs)
