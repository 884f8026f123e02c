import calendar

from django.db.models import Q, Sum
from django.db.models.functions import ExtractMonth
from django.utils import timezone

from ..models import AccountingEntry, InventoryItem, Invoice
from ..money import ZERO, money
from .inventory import is_sold
from .totals import HUNDRED


def _percent(part, whole):
    if whole <= 0:
        return ZERO
    return money(part / whole * HUNDRED)


def dashboard_stats(year=None) -> dict:
    year = year or timezone.localdate().year

    cash = AccountingEntry.objects.aggregate(
        income=Sum("credit", filter=Q(category="Income")),
        expenses=Sum("debit", filter=Q(category="Expense")),
    )
    total_income = cash["income"] or ZERO
    total_expenses = cash["expenses"] or ZERO

    items = list(InventoryItem.objects.all())
    sale_revenue = Invoice.objects.aggregate(total=Sum("total_amount"))["total"] or ZERO

    dashboard = {
        "totalExpenses": money(total_expenses),
        "totalStockCount": len(items),
        "probs": sum(1 for i in items if i.category == "probs"),
        "machine": sum(1 for i in items if i.category == "machines"),
        "parts": sum(1 for i in items if i.category == "parts"),
        "saleRevenue": money(sale_revenue),
        "soldItems": sum(1 for i in items if is_sold(i)),
    }

    # Invoice totals per calendar month of `year`
    monthly = dict(
        Invoice.objects.filter(date__year=year)
        .annotate(month=ExtractMonth("date"))
        .order_by()
        .values("month")
        .annotate(revenue=Sum("total_amount"))
        .values_list("month", "revenue")
    )
    sale_revenue_data = [
        {"month": calendar.month_abbr[m], "revenue": money(monthly.get(m) or ZERO)}
        for m in range(1, 13)
    ]

    profit = total_income - total_expenses
    profit_loss = [
        {"name": "Profit", "value": _percent(max(profit, ZERO), total_income)},
        {"name": "Loss", "value": _percent(max(-profit, ZERO), total_income)},
        {"name": "Expenses", "value": _percent(total_expenses, total_income)},
    ]

    return {
        "dashboardStats": dashboard,
        "saleRevenueData": sale_revenue_data,
        "profitLossChartData": profit_loss,
    }
