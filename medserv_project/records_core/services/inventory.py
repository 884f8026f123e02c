import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Max
from django.utils import timezone

from ..models import VARIANT_FIELDS, InventoryItem
from ..models.inventory import CATEGORY_CHOICES, MACHINE_CATEGORY_CHOICES
from ..money import ZERO, money, to_decimal
from . import ledger
from .sequence import next_sequential_code

logger = logging.getLogger(__name__)

CATEGORIES = {value for value, _ in CATEGORY_CHOICES}
MACHINE_CATEGORIES = {value for value, _ in MACHINE_CATEGORY_CHOICES}

COMMON_FIELDS = (
    "s_n",
    "description",
    "quantity",
    "price",
    "buyer_name",
    "buyer_serial",
    "buyer_city",
    "last_sold_quantity",
    "last_sold_unit_price",
    "last_sold_total",
    "last_sold_date",
    "last_sold_customer",
    "is_sold_entry",
    "date",
)
ITEM_FIELDS = COMMON_FIELDS + tuple(
    sorted({f for fields in VARIANT_FIELDS.values() for f in fields})
)

""" Codes generated on create when the caller leaves them blank:
    (field, prefix) per category """
AUTO_CODES = {
    "machines": (("model_no", "MOD"),),
    "productsCategory": (("p_n", "PN"), ("serial_no", "MCH"), ("model_no", "MOD")),
    "probs": (("box_no", "BX"), ("model_no", "MOD")),
    "parts": (("model_no", "MOD"),),
    "importStock": (("serial_no", "IMP"),),
}


# ----------------------------
# Read-side projection
# ----------------------------
def display_category(item) -> str:
    """Category label shown in lists; the stored one goes out as itemType."""
    if item.category == "machines":
        return item.machine_category or "instock"
    if item.category == "importStock" and item.category_name:
        return item.category_name
    return item.category


def is_sold(item) -> bool:
    """Single sold predicate shared by list filters, stats and dashboard."""
    if item.is_sold_entry:
        return True
    if item.machine_category == "sold" or item.status == "Sold":
        return True
    return (
        item.category == "productsCategory"
        and not item.quantity
        and bool((item.buyer_name or "").strip())
    )


def stock_value(item):
    # single-unit rows (quantity 0) still count once
    return to_decimal(item.price) * max(item.quantity or 0, 1)


def compute_stats(items) -> dict:
    stats = {
        "totalStockValue": ZERO,
        "itemsInStockMachines": 0,
        "stockInProbes": 0,
        "stockInParts": 0,
        "itemsSold": 0,
        "totalItems": 0,
    }
    for item in items:
        stats["totalItems"] += 1
        if is_sold(item):
            stats["itemsSold"] += 1
            continue
        stats["totalStockValue"] += stock_value(item)
        if item.category == "machines" and item.machine_category in (None, "", "instock"):
            stats["itemsInStockMachines"] += 1
        elif item.category == "probs":
            stats["stockInProbes"] += 1
        elif item.category == "parts" and (item.quantity or 0) > 0:
            stats["stockInParts"] += 1
    stats["totalStockValue"] = money(stats["totalStockValue"])
    return stats


def list_items(category=None, status=None):
    items = InventoryItem.objects.all()
    if category:
        items = items.for_category(category)
    items = list(items)
    if status == "sold":
        items = [i for i in items if is_sold(i)]
    elif status == "instock":
        items = [i for i in items if not is_sold(i)]
    return items


def inventory_stats() -> dict:
    return compute_stats(InventoryItem.objects.all())


# ----------------------------
# Write side
# ----------------------------
def _next_serial(category):
    top = InventoryItem.objects.for_category(category).aggregate(top=Max("s_n"))["top"]
    return (top or 0) + 1


def create_item(data: dict) -> InventoryItem:
    category = data.get("category")
    if category not in CATEGORIES:
        raise ValidationError({"category": f"Unknown inventory category '{category}'."})

    values = {k: data[k] for k in ITEM_FIELDS if data.get(k) not in (None, "")}
    with transaction.atomic():
        if not values.get("s_n"):
            values["s_n"] = _next_serial(category)
        for field, prefix in AUTO_CODES.get(category, ()):
            if not values.get(field):
                values[field] = next_sequential_code(prefix, InventoryItem, field)

        item = InventoryItem(category=category, **values)
        item.save()
    logger.info("Created %s item #%s", category, item.s_n)
    return item


def update_item(item: InventoryItem, patch: dict) -> InventoryItem:
    patch = dict(patch)
    category = patch.pop("category", None)
    if category:
        _apply_category(item, category)
    for field in ITEM_FIELDS:
        if field in patch:
            setattr(item, field, patch[field])
    item.save()
    return item


def _apply_category(item, value):
    """Accept either a stored category or the label display_category() gave."""
    if value in CATEGORIES:
        item.category = value
    elif item.category == "machines" and value in MACHINE_CATEGORIES:
        item.machine_category = value
    elif item.category == "importStock":
        item.category_name = value
    else:
        raise ValidationError({"category": f"Unknown inventory category '{value}'."})


def delete_item(item: InventoryItem):
    item.delete()


def _label(item):
    return item.product_name or item.part_name or item.probes or item.model_no or item.category


def _mark_sold(row, quantity, unit_price, total, date, customer_name, customer):
    row.is_sold_entry = True
    row.quantity = quantity
    row.price = unit_price
    row.buyer_name = customer_name
    row.buyer_city = getattr(customer, "city", "") or ""
    row.buyer_serial = getattr(customer, "serial_number", "") or ""
    row.last_sold_quantity = quantity
    row.last_sold_unit_price = unit_price
    row.last_sold_total = total
    row.last_sold_date = date
    row.last_sold_customer = customer_name
    if row.category == "machines":
        row.machine_category = "sold"
    elif row.category == "importStock":
        row.status = "Sold"


def record_sale(item, quantity, unit_price, customer_name="", customer=None, date=None):
    """
    Sell `quantity` units of a stock row.

    Every sale yields exactly one sold row. A partial sale takes the units
    off the stock row, stamps it with the last sale and writes a separate
    sold entry; selling the remaining stock turns the stock row itself
    into the sold entry. With a customer, the sale is also debited to
    their ledger.

    Returns (stock row, sold row); both are the same object when the
    stock ran out.
    """
    quantity = int(to_decimal(quantity, "quantity"))
    unit_price = money(unit_price)
    date = date or timezone.localdate()
    if quantity < 1:
        raise ValidationError({"quantity": "Sold quantity must be at least 1."})
    if customer is not None and not customer_name:
        customer_name = customer.name

    with transaction.atomic():
        item = InventoryItem.objects.select_for_update().get(pk=item.pk)
        if is_sold(item):
            raise ValidationError("A sold entry cannot be sold again.")
        available = max(item.quantity, 1)
        if quantity > available:
            raise ValidationError({"quantity": f"Only {available} in stock."})

        total = money(unit_price * quantity)
        if quantity == available:
            _mark_sold(item, quantity, unit_price, total, date, customer_name, customer)
            item.save()
            sold = item
        else:
            item.quantity -= quantity
            item.last_sold_quantity = quantity
            item.last_sold_unit_price = unit_price
            item.last_sold_total = total
            item.last_sold_date = date
            item.last_sold_customer = customer_name
            item.save()

            sold = InventoryItem(
                category=item.category,
                description=item.description,
                date=date,
            )
            for field in item.variant_fields:
                setattr(sold, field, getattr(item, field))
            _mark_sold(sold, quantity, unit_price, total, date, customer_name, customer)
            sold.save()

        if customer is not None:
            ledger.add_entry(
                customer,
                {
                    "date": date,
                    "particulars": f"Sale: {_label(item)}",
                    "debit_amount": total,
                    "reference": item.serial_no or item.model_no,
                    "quantity": quantity,
                    "unit_price": unit_price,
                },
            )
    logger.info("Sold %s x %s for %s", quantity, _label(item), total)
    return item, sold
