"""
Document totals for quotations and invoices.

Plain functions over line objects (anything with `.total`, and for
quotations `.buy_price`), so the arithmetic can be checked without the
database. Services call these before writing; nothing recomputes on save.

Quotation:  sub_total - buyback = after_buyback
            taxes on after_buyback, rounded to whole units
            total = max(0, after_buyback - sales_tax - fbr_tax)
            (taxes are withheld, i.e. subtracted)
Invoice:    taxes on sub_total, cent precision
            total = sub_total + sales_tax + fbr_tax
"""
from dataclasses import dataclass
from decimal import Decimal

from ..money import ZERO, money, to_decimal, whole_units

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class TaxConfig:
    sales_tax_enabled: bool = False
    sales_tax_rate: Decimal = ZERO
    fbr_tax_enabled: bool = False
    fbr_tax_rate: Decimal = ZERO

    @classmethod
    def from_document(cls, doc):
        return cls(
            sales_tax_enabled=bool(doc.sales_tax_enabled),
            sales_tax_rate=to_decimal(doc.sales_tax_rate),
            fbr_tax_enabled=bool(doc.fbr_tax_enabled),
            fbr_tax_rate=to_decimal(doc.fbr_tax_rate),
        )

    @property
    def sales_rate(self):
        return self.sales_tax_rate if self.sales_tax_enabled else ZERO

    @property
    def fbr_rate(self):
        return self.fbr_tax_rate if self.fbr_tax_enabled else ZERO


@dataclass(frozen=True)
class DocumentTotals:
    sub_total: Decimal
    buyback: Decimal
    sales_tax_amount: Decimal
    fbr_tax_amount: Decimal
    total_amount: Decimal


@dataclass
class LineAmount:
    """Minimal line shape, handy for callers without model rows."""
    total: Decimal = ZERO
    buy_price: Decimal = ZERO


def line_total(quantity, unit_price, supplied=None) -> Decimal:
    # quantity × unit price when both are known, else whatever was sent
    if quantity not in (None, "") and to_decimal(unit_price) != 0:
        return money(to_decimal(quantity) * to_decimal(unit_price))
    return money(supplied or 0)


def _sum(lines, attr) -> Decimal:
    return sum((to_decimal(getattr(line, attr, None)) for line in lines), ZERO)


def _tax(base, rate) -> Decimal:
    if rate <= 0:
        return ZERO
    return base * rate / HUNDRED


def compute_quotation_totals(lines, taxes: TaxConfig, supplied_total=None) -> DocumentTotals:
    lines = list(lines)
    sub_total = money(_sum(lines, "total"))
    buyback = money(_sum(lines, "buy_price"))
    after_buyback = sub_total - buyback

    # stored tax amounts are non-negative: no tax on a negative base
    base = max(after_buyback, ZERO)
    sales_tax = whole_units(_tax(base, taxes.sales_rate))
    fbr_tax = whole_units(_tax(base, taxes.fbr_rate))

    supplied = to_decimal(supplied_total) if supplied_total not in (None, "") else ZERO
    if supplied != 0:
        # a nonzero total sent by the client is kept as-is
        total = money(supplied)
    else:
        total = money(max(ZERO, after_buyback - sales_tax - fbr_tax))

    return DocumentTotals(
        sub_total=sub_total,
        buyback=buyback,
        sales_tax_amount=money(sales_tax),
        fbr_tax_amount=money(fbr_tax),
        total_amount=total,
    )


def compute_invoice_totals(lines, taxes: TaxConfig) -> DocumentTotals:
    sub_total = money(_sum(list(lines), "total"))
    sales_tax = money(_tax(sub_total, taxes.sales_rate))
    fbr_tax = money(_tax(sub_total, taxes.fbr_rate))
    return DocumentTotals(
        sub_total=sub_total,
        buyback=ZERO,
        sales_tax_amount=sales_tax,
        fbr_tax_amount=fbr_tax,
        # always recomputed; whatever the caller sent is ignored
        total_amount=sub_total + sales_tax + fbr_tax,
    )
