"""
JSON projection of records.

Outgoing objects carry camelCase keys and a string `id`; incoming
payloads are read through the same key tables and coerced with each
model field's own `to_python`, so the services only ever see snake_case
attribute names with Python values.
"""
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import FieldDoesNotExist, ValidationError
from django.db import models

from .models import (AccountingEntry, Agent, ChallanItem, Customer, DeliveryChallan,
                     InventoryItem, Invoice, InvoiceProduct, LedgerEntry, Quotation,
                     QuotationProduct)
from .services.inventory import display_category


def wire(value):
    """Python value → JSON-friendly value (recursively)."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: wire(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [wire(v) for v in value]
    return value


def _coerce(field, value):
    if value == "" and not isinstance(field, (models.CharField, models.TextField)):
        value = None
    if value is None:
        if field.null:
            return None
        if isinstance(field, (models.CharField, models.TextField)):
            return ""
        return field.get_default()

    if isinstance(field, models.DecimalField):
        if isinstance(value, bool):
            raise ValidationError("Expected a number.")
        if isinstance(value, float):
            # via str so 0.1 stays 0.1
            value = str(value)
        value = field.to_python(value)
        return value.quantize(Decimal(1).scaleb(-field.decimal_places), rounding=ROUND_HALF_UP)

    if isinstance(field, models.DateField) and not isinstance(field, models.DateTimeField):
        # clients send full ISO timestamps for plain dates
        if isinstance(value, str) and "T" in value:
            value = value[:10]

    return field.to_python(value)


class Projection:
    """Two-way key table between a model and its JSON shape."""

    def __init__(self, model, fields, read_only=(), children=None):
        self.model = model
        self.fields = fields  # (wire key, attribute) pairs
        self.read_only = set(read_only)
        self.children = children or {}  # wire key → (related name, Projection)

    def dump(self, instance) -> dict:
        data = {"id": str(instance.pk) if instance.pk is not None else None}
        for key, attr in self.fields:
            value = getattr(instance, attr)
            if attr.endswith("_id") and value is not None:
                value = str(value)
            data[key] = wire(value)
        for key, (related, child) in self.children.items():
            data[key] = [child.dump(row) for row in getattr(instance, related).all()]
        return data

    def load(self, payload) -> dict:
        if not isinstance(payload, dict):
            raise ValidationError("Expected a JSON object.")
        values, errors = {}, {}
        for key, attr in self.fields:
            if key not in payload or key in self.read_only:
                continue
            try:
                field = self.model._meta.get_field(attr)
            except FieldDoesNotExist:
                values[attr] = payload[key]
                continue
            try:
                values[attr] = _coerce(field, payload[key])
            except ValidationError as exc:
                errors[key] = exc.messages
        for key, (related, child) in self.children.items():
            if key not in payload:
                continue
            rows = payload[key]
            if rows is None:
                rows = []
            if not isinstance(rows, list):
                errors[key] = ["Expected a list."]
                continue
            try:
                values[key] = [child.load(row) for row in rows]
            except ValidationError as exc:
                errors[key] = exc.messages
        if errors:
            raise ValidationError(errors)
        return values


class InventoryProjection(Projection):
    def dump(self, instance) -> dict:
        data = super().dump(instance)
        # stored category goes out as itemType, the label as category
        data["itemType"] = instance.category
        data["category"] = display_category(instance)
        return data

    def load(self, payload) -> dict:
        values = super().load(payload)
        if "category" in payload:
            # may be a display label; services.inventory resolves it
            values["category"] = payload["category"]
        return values


LEDGER_ENTRY = Projection(
    LedgerEntry,
    (
        ("date", "date"),
        ("particulars", "particulars"),
        ("debitAmount", "debit_amount"),
        ("creditAmount", "credit_amount"),
        ("totalAmount", "total_amount"),
        ("reference", "reference"),
        ("quantity", "quantity"),
        ("unitPrice", "unit_price"),
        ("createdAt", "created_at"),
    ),
    read_only=("totalAmount", "createdAt"),
)

CUSTOMER = Projection(
    Customer,
    (
        ("serialNumber", "serial_number"),
        ("customerName", "name"),
        ("phoneNumber", "phone"),
        ("city", "city"),
        ("totalBalance", "total_balance"),
        ("debitCredit", "debit_credit"),
        ("createdAt", "created_at"),
        ("updatedAt", "updated_at"),
    ),
    read_only=("serialNumber", "totalBalance", "createdAt", "updatedAt"),
    children={"ledger": ("ledger", LEDGER_ENTRY)},
)

_DOCUMENT_HEADER = (
    ("referenceNo", "reference_no"),
    ("date", "date"),
    ("customer", "customer"),
    ("customerId", "customer_link_id"),
    ("subject", "subject"),
    ("address", "address"),
    ("email", "email"),
    ("subTotal", "sub_total"),
    ("salesTaxEnabled", "sales_tax_enabled"),
    ("salesTaxRate", "sales_tax_rate"),
    ("salesTaxAmount", "sales_tax_amount"),
    ("fbrTaxEnabled", "fbr_tax_enabled"),
    ("fbrTaxRate", "fbr_tax_rate"),
    ("fbrTaxAmount", "fbr_tax_amount"),
    ("totalAmount", "total_amount"),
    ("status", "status"),
)
_DERIVED = ("subTotal", "salesTaxAmount", "fbrTaxAmount", "createdAt", "updatedAt")
_STAMPS = (("createdAt", "created_at"), ("updatedAt", "updated_at"))

QUOTATION_PRODUCT = Projection(
    QuotationProduct,
    (
        ("product", "product"),
        ("description", "description"),
        ("buyDescription", "buy_description"),
        ("quantity", "quantity"),
        ("unitPrice", "unit_price"),
        ("total", "total"),
        ("buyPrice", "buy_price"),
        ("sellPrice", "sell_price"),
    ),
)

QUOTATION = Projection(
    Quotation,
    (("quotationNo", "quotation_no"),)
    + _DOCUMENT_HEADER
    + (
        ("validUntil", "valid_until"),
        ("termsAndConditions", "terms_and_conditions"),
        ("buybackDescription", "buyback_description"),
        ("linkedInvoiceId", "linked_invoice_id"),
        ("linkedDeliveryChallanId", "linked_delivery_challan_id"),
    )
    + _STAMPS,
    read_only=_DERIVED + ("linkedInvoiceId", "linkedDeliveryChallanId"),
    children={"products": ("products", QUOTATION_PRODUCT)},
)

INVOICE_PRODUCT = Projection(
    InvoiceProduct,
    (
        ("product", "product"),
        ("description", "description"),
        ("quantity", "quantity"),
        ("unitPrice", "unit_price"),
        ("total", "total"),
    ),
)

INVOICE = Projection(
    Invoice,
    (("invoiceNo", "invoice_no"),)
    + _DOCUMENT_HEADER
    + (
        ("sourceQuotationId", "source_quotation_id"),
        ("dueDate", "due_date"),
    )
    + _STAMPS,
    # invoice totals are always derived
    read_only=_DERIVED + ("totalAmount", "sourceQuotationId"),
    children={"products": ("products", INVOICE_PRODUCT)},
)

CHALLAN_ITEM = Projection(
    ChallanItem,
    (
        ("productName", "product_name"),
        ("description", "description"),
        ("buyDescription", "buy_description"),
        ("quantity", "quantity"),
        ("unitPrice", "unit_price"),
        ("total", "total"),
        ("buyPrice", "buy_price"),
        ("sellPrice", "sell_price"),
    ),
)

DELIVERY_CHALLAN = Projection(
    DeliveryChallan,
    (
        ("challanNo", "challan_no"),
        ("referenceNo", "reference_no"),
        ("sourceQuotationId", "source_quotation_id"),
        ("date", "date"),
        ("customer", "customer"),
        ("customerId", "customer_link_id"),
        ("address", "address"),
        ("status", "status"),
        ("vehicleNo", "vehicle_no"),
    )
    + _STAMPS,
    read_only=("sourceQuotationId", "createdAt", "updatedAt"),
    children={"items": ("items", CHALLAN_ITEM)},
)

INVENTORY_ITEM = InventoryProjection(
    InventoryItem,
    (
        ("sN", "s_n"),
        ("pN", "p_n"),
        ("serialNo", "serial_no"),
        ("boxNo", "box_no"),
        ("modelNo", "model_no"),
        ("productName", "product_name"),
        ("partName", "part_name"),
        ("probes", "probes"),
        ("proType", "pro_type"),
        ("description", "description"),
        ("quantity", "quantity"),
        ("price", "price"),
        ("categoryName", "category_name"),
        ("machineCategory", "machine_category"),
        ("status", "status"),
        ("buyerName", "buyer_name"),
        ("buyerSerial", "buyer_serial"),
        ("buyerCity", "buyer_city"),
        ("lastSoldQuantity", "last_sold_quantity"),
        ("lastSoldUnitPrice", "last_sold_unit_price"),
        ("lastSoldTotal", "last_sold_total"),
        ("lastSoldDate", "last_sold_date"),
        ("lastSoldCustomer", "last_sold_customer"),
        ("isSoldEntry", "is_sold_entry"),
        ("date", "date"),
    )
    + _STAMPS,
    read_only=("createdAt", "updatedAt"),
)

ACCOUNTING_ENTRY = Projection(
    AccountingEntry,
    (
        ("date", "date"),
        ("account", "account"),
        ("debit", "debit"),
        ("credit", "credit"),
        ("balance", "balance"),
        ("category", "category"),
        ("expenseType", "expense_type"),
        ("description", "description"),
        ("reference", "reference"),
        ("customer", "customer"),
    )
    + _STAMPS,
    read_only=("balance", "createdAt", "updatedAt"),
)

# password is write-only: never part of the dump
AGENT = Projection(
    Agent,
    (
        ("name", "name"),
        ("email", "email"),
        ("phone", "phone"),
        ("city", "city"),
        ("sales", "sales"),
        ("status", "status"),
        ("joinDate", "join_date"),
        ("permissions", "permissions"),
    )
    + _STAMPS,
    read_only=("createdAt", "updatedAt"),
)


def read_agent(payload) -> dict:
    values = AGENT.load(payload)
    if payload.get("password"):
        values["password"] = str(payload["password"])
    return values


def read_customer(payload) -> dict:
    values = CUSTOMER.load(payload)
    values.pop("ledger", None)
    # opening balance inputs; not stored on the customer row
    for key, attr in (("amount", "amount"), ("debitCredit", "debit_credit")):
        if payload.get(key) not in (None, ""):
            values[attr] = payload[key]
    return values


def read_date(value, key="date"):
    """Query-string date (YYYY-MM-DD or a full ISO timestamp) or None."""
    if not value:
        return None
    try:
        return _coerce(models.DateField(null=True), value)
    except ValidationError as exc:
        raise ValidationError({key: exc.messages})
