import logging

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Q, Sum

from ..models import (ChallanItem, DeliveryChallan, Invoice, InvoiceProduct,
                      Quotation, QuotationProduct)
from ..money import ZERO, money
from .sequence import create_with_code
from .totals import TaxConfig, compute_invoice_totals, compute_quotation_totals

logger = logging.getLogger(__name__)

# Header fields a caller may set (snake_case, FK by attname)
TAXED_HEADER_FIELDS = (
    "customer",
    "customer_link_id",
    "subject",
    "address",
    "email",
    "date",
    "reference_no",
    "sales_tax_enabled",
    "sales_tax_rate",
    "fbr_tax_enabled",
    "fbr_tax_rate",
)

QUOTATION_FIELDS = TAXED_HEADER_FIELDS + (
    "status",
    "valid_until",
    "terms_and_conditions",
    "buyback_description",
)

INVOICE_FIELDS = TAXED_HEADER_FIELDS + ("status", "due_date")

CHALLAN_FIELDS = (
    "customer",
    "customer_link_id",
    "address",
    "date",
    "reference_no",
    "status",
    "vehicle_no",
)

LINE_FIELDS = {
    QuotationProduct: (
        "product", "description", "buy_description", "quantity",
        "unit_price", "total", "buy_price", "sell_price",
    ),
    InvoiceProduct: ("product", "description", "quantity", "unit_price", "total"),
    ChallanItem: (
        "product_name", "description", "buy_description", "quantity",
        "unit_price", "total", "buy_price", "sell_price",
    ),
}


def apply_fields(instance, data: dict, fields):
    for field in fields:
        if field in data:
            setattr(instance, field, data[field])
    return instance


def filter_documents(queryset, status=None, reference_no=None):
    """List filters shared by the quotation, invoice and challan endpoints."""
    if status:
        queryset = queryset.with_status(status)
    if reference_no:
        queryset = queryset.for_reference(reference_no)
    return queryset


# ----------------------------
# Line items
# ----------------------------
def build_lines(line_model, rows):
    """Unsaved, validated lines in caller order (parent not yet attached)."""
    fields = LINE_FIELDS[line_model]
    lines = []
    for position, row in enumerate(rows or []):
        values = {k: row[k] for k in fields if row.get(k) is not None}
        line = line_model(position=position, **values)
        line.validate_detached()
        lines.append(line)
    return lines


def save_lines(document, line_model, lines, replace=False):
    """Attach `lines` to a saved document; optionally drop the old ones."""
    parent = line_model.parent_field
    if replace:
        line_model.objects.filter(**{parent: document}).delete()
    for line in lines:
        setattr(line, parent, document)
    line_model.objects.bulk_create(lines)
    return lines


def _supplied_total(data):
    if not settings.QUOTATION_TRUST_CLIENT_TOTAL:
        return None
    # only a value sent with this request counts, never the stored one
    return data.get("total_amount")


def refresh_quotation_totals(quotation, lines, supplied_total=None):
    totals = compute_quotation_totals(
        lines, TaxConfig.from_document(quotation), supplied_total=supplied_total
    )
    quotation.apply_totals(totals)
    return totals


def refresh_invoice_totals(invoice, lines):
    totals = compute_invoice_totals(lines, TaxConfig.from_document(invoice))
    invoice.apply_totals(totals)
    return totals


# ----------------------------
# Quotations
# ----------------------------
def create_quotation(data: dict) -> Quotation:
    lines = build_lines(QuotationProduct, data.get("products"))

    def build(code):
        quotation = apply_fields(Quotation(quotation_no=code), data, QUOTATION_FIELDS)
        refresh_quotation_totals(quotation, lines, _supplied_total(data))
        quotation.save()
        save_lines(quotation, QuotationProduct, lines)
        return quotation

    quotation = create_with_code(
        "QUO", Quotation, "quotation_no", build, supplied=data.get("quotation_no")
    )
    logger.info("Created quotation %s", quotation.quotation_no)
    return quotation


def patch_quotation(quotation: Quotation, data: dict) -> Quotation:
    """Apply header/line changes and re-derive totals; no side effects."""
    apply_fields(quotation, data, QUOTATION_FIELDS)
    if "products" in data:
        lines = build_lines(QuotationProduct, data["products"])
        refresh_quotation_totals(quotation, lines, _supplied_total(data))
        quotation.save()
        save_lines(quotation, QuotationProduct, lines, replace=True)
    else:
        refresh_quotation_totals(
            quotation, list(quotation.products.all()), _supplied_total(data)
        )
        quotation.save()
    return quotation


def delete_quotation(quotation: Quotation):
    quotation.delete()


def quotation_stats() -> dict:
    agg = Quotation.objects.aggregate(
        count=Count("id"),
        total=Sum("total_amount"),
        accepted=Count("id", filter=Q(status="Accepted")),
        pending=Count("id", filter=Q(status="Pending")),
    )
    return {
        "totalQuotations": agg["count"],
        "totalAmount": money(agg["total"] or ZERO),
        "accepted": agg["accepted"],
        "pending": agg["pending"],
    }


# ----------------------------
# Invoices
# ----------------------------
def create_invoice(data: dict) -> Invoice:
    lines = build_lines(InvoiceProduct, data.get("products"))

    def build(code):
        invoice = apply_fields(Invoice(invoice_no=code), data, INVOICE_FIELDS)
        # totals are always derived; a caller-sent total is ignored
        refresh_invoice_totals(invoice, lines)
        invoice.save()
        save_lines(invoice, InvoiceProduct, lines)
        return invoice

    with transaction.atomic():
        invoice = create_with_code(
            "INV", Invoice, "invoice_no", build, supplied=data.get("invoice_no")
        )
    logger.info("Created invoice %s", invoice.invoice_no)
    return invoice


def update_invoice(invoice: Invoice, data: dict) -> Invoice:
    with transaction.atomic():
        apply_fields(invoice, data, INVOICE_FIELDS)
        if "products" in data:
            lines = build_lines(InvoiceProduct, data["products"])
            refresh_invoice_totals(invoice, lines)
            invoice.save()
            save_lines(invoice, InvoiceProduct, lines, replace=True)
        else:
            refresh_invoice_totals(invoice, list(invoice.products.all()))
            invoice.save()
    return invoice


def delete_invoice(invoice: Invoice):
    invoice.delete()


def invoice_stats() -> dict:
    agg = Invoice.objects.aggregate(
        count=Count("id"),
        total=Sum("total_amount"),
        paid=Sum("total_amount", filter=Q(status="Paid")),
        pending=Sum("total_amount", filter=Q(status="Pending")),
    )
    return {
        "totalInvoices": agg["count"],
        "totalAmount": money(agg["total"] or ZERO),
        "paidAmount": money(agg["paid"] or ZERO),
        "pendingAmount": money(agg["pending"] or ZERO),
    }


# ----------------------------
# Delivery challans
# ----------------------------
def create_challan(data: dict) -> DeliveryChallan:
    lines = build_lines(ChallanItem, data.get("items"))

    def build(code):
        challan = apply_fields(DeliveryChallan(challan_no=code), data, CHALLAN_FIELDS)
        challan.save()
        save_lines(challan, ChallanItem, lines)
        return challan

    with transaction.atomic():
        challan = create_with_code(
            "DC", DeliveryChallan, "challan_no", build, supplied=data.get("challan_no")
        )
    logger.info("Created delivery challan %s", challan.challan_no)
    return challan


def update_challan(challan: DeliveryChallan, data: dict) -> DeliveryChallan:
    with transaction.atomic():
        apply_fields(challan, data, CHALLAN_FIELDS)
        challan.save()
        if "items" in data:
            lines = build_lines(ChallanItem, data["items"])
            save_lines(challan, ChallanItem, lines, replace=True)
    return challan


def delete_challan(challan: DeliveryChallan):
    challan.delete()


def challan_stats() -> dict:
    return DeliveryChallan.objects.aggregate(
        totalChallans=Count("id"),
        delivered=Count("id", filter=Q(status="Delivered")),
        inTransit=Count("id", filter=Q(status="In Transit")),
        pending=Count("id", filter=Q(status="Pending")),
    )
