from django.db import transaction
from django.db.models import Q, Sum

from ..models import AccountingEntry
from ..money import ZERO, money, to_decimal

ENTRY_FIELDS = (
    "date",
    "account",
    "debit",
    "credit",
    "category",
    "expense_type",
    "description",
    "reference",
    "customer",
)


def recalculate_running_balances():
    """
    Walk every entry oldest first (date, then insertion) and store the
    running balance: balance += credit - debit.
    """
    with transaction.atomic():
        entries = list(AccountingEntry.objects.select_for_update().order_by("date", "id"))
        balance = ZERO
        for entry in entries:
            balance += to_decimal(entry.credit) - to_decimal(entry.debit)
            entry.balance = money(balance)
        # bulk_update skips save(); balances are the only column touched
        AccountingEntry.objects.bulk_update(entries, ["balance"])
    return len(entries)


def _apply(entry, data):
    for field in ENTRY_FIELDS:
        if field in data and data[field] is not None:
            setattr(entry, field, data[field])
    if entry.category == "Income":
        # expense type only describes expenses
        entry.expense_type = ""
    return entry


def create_entry(data: dict) -> AccountingEntry:
    with transaction.atomic():
        entry = _apply(AccountingEntry(), data)
        entry.save()
        recalculate_running_balances()
        entry.refresh_from_db()
    return entry


def update_entry(entry: AccountingEntry, data: dict) -> AccountingEntry:
    with transaction.atomic():
        _apply(entry, data)
        entry.save()
        recalculate_running_balances()
        entry.refresh_from_db()
    return entry


def delete_entry(entry: AccountingEntry):
    with transaction.atomic():
        entry.delete()
        recalculate_running_balances()


def list_entries(category=None, expense_type=None):
    entries = AccountingEntry.objects.all()
    if category:
        entries = entries.filter(category=category)
    if expense_type:
        entries = entries.filter(expense_type=expense_type)
    return entries


def accounting_stats() -> dict:
    agg = AccountingEntry.objects.aggregate(
        income=Sum("credit", filter=Q(category="Income")),
        expenses=Sum("debit", filter=Q(category="Expense")),
    )
    last = AccountingEntry.objects.order_by("-date", "-id").first()
    return {
        "totalIncome": money(agg["income"] or ZERO),
        "totalExpenses": money(agg["expenses"] or ZERO),
        "netBalance": money(last.balance) if last else ZERO,
    }


def statement(start=None, end=None):
    """Entries between two dates (both inclusive), oldest first."""
    entries = AccountingEntry.objects.order_by("date", "id")
    if start:
        entries = entries.filter(date__gte=start)
    if end:
        entries = entries.filter(date__lte=end)
    return entries
