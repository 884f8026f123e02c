import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from ..models import INITIAL_BALANCE, Customer, LedgerEntry
from ..money import ZERO, money, to_decimal
from .audit_helper import log_action
from .lookup import get_object
from .sequence import create_with_code

logger = logging.getLogger(__name__)

# fields a caller may set on a ledger entry
ENTRY_FIELDS = (
    "date",
    "particulars",
    "debit_amount",
    "credit_amount",
    "reference",
    "quantity",
    "unit_price",
)


# ----------------------------
# Balance derivation
# ----------------------------
def recalculate_balance(entries):
    """
    Σ debit - Σ credit over `entries`, with the Debit/Credit side.
    An empty ledger is 0 / Debit.
    """
    total = ZERO
    for entry in entries:
        total += to_decimal(entry.debit_amount) - to_decimal(entry.credit_amount)
    total = money(total)
    return total, ("Debit" if total >= 0 else "Credit")


def recalculate(customer: Customer):
    """Re-derive and persist the customer's balance from the stored ledger."""
    total, side = recalculate_balance(customer.ledger.all())
    customer.total_balance = total
    customer.debit_credit = side
    customer.save(update_fields=["total_balance", "debit_credit", "updated_at"])
    return customer


def _lock(customer):
    # serialize ledger edits for one customer inside the current transaction
    return Customer.objects.select_for_update().get(pk=customer.pk)


def _find_initial(customer, exclude_pk=None):
    for entry in customer.ledger.all():
        if entry.is_initial_balance and entry.pk != exclude_pk:
            return entry
    return None


def _check_reserved(customer, particulars, exclude_pk=None):
    if (particulars or "").strip().lower() != INITIAL_BALANCE.lower():
        return
    if _find_initial(customer, exclude_pk=exclude_pk) is not None:
        raise ValidationError(
            {"particulars": f"Customer already has an '{INITIAL_BALANCE}' entry."}
        )


def _entry_values(data):
    values = {k: data[k] for k in ENTRY_FIELDS if k in data and data[k] is not None}
    for key in ("debit_amount", "credit_amount", "unit_price"):
        if key in values:
            values[key] = money(values[key])
    if "quantity" in values:
        values["quantity"] = to_decimal(values["quantity"], "quantity")
    return values


# ----------------------------
# Ledger entry workflows
# ----------------------------
def add_entry(customer: Customer, data: dict) -> LedgerEntry:
    """Append an entry at the end of the ledger and re-derive the balance."""
    values = _entry_values(data)
    with transaction.atomic():
        customer = _lock(customer)
        _check_reserved(customer, values.get("particulars"))

        previous, _ = recalculate_balance(customer.ledger.all())
        # running-total snapshot at insert time
        values["total_amount"] = (
            previous
            + values.get("debit_amount", ZERO)
            - values.get("credit_amount", ZERO)
        )
        entry = LedgerEntry.objects.create_for_customer(customer, **values)
        recalculate(customer)
    return entry


def update_entry(customer: Customer, entry_id, patch: dict) -> LedgerEntry:
    values = _entry_values(patch)
    with transaction.atomic():
        customer = _lock(customer)
        entry = get_object(LedgerEntry, entry_id, "Ledger entry", queryset=customer.ledger.all())
        if "particulars" in values:
            _check_reserved(customer, values["particulars"], exclude_pk=entry.pk)

        for field, value in values.items():
            setattr(entry, field, value)
        entry.save()
        recalculate(customer)
    return entry


def delete_entry(customer: Customer, entry_id) -> Customer:
    with transaction.atomic():
        customer = _lock(customer)
        entry = get_object(LedgerEntry, entry_id, "Ledger entry", queryset=customer.ledger.all())
        entry.delete()
        return recalculate(customer)


def place_initial_balance(customer: Customer, amount, direction) -> LedgerEntry:
    """
    Make sure the opening balance entry exists, carries |amount| on the
    given side, and sits first in the ledger. Other entries keep their
    relative order and amounts.
    """
    amount = abs(money(amount))
    side = "Credit" if direction == "Credit" else "Debit"
    debit = amount if side == "Debit" else ZERO
    credit = amount if side == "Credit" else ZERO

    entries = list(customer.ledger.all())
    initial = next((e for e in entries if e.is_initial_balance), None)
    if initial is None:
        initial = LedgerEntry(
            customer=customer,
            date=timezone.localdate(),
            particulars=INITIAL_BALANCE,
        )
    else:
        entries.remove(initial)

    initial.debit_amount = debit
    initial.credit_amount = credit
    initial.total_amount = debit - credit
    initial.position = 0
    initial.save()

    # renumber the rest behind it
    for position, entry in enumerate(entries, start=1):
        entry.position = position
    if entries:
        LedgerEntry.objects.bulk_update(entries, ["position"])
    return initial


# ----------------------------
# Customer workflows
# ----------------------------
def create_customer(data: dict) -> Customer:
    amount = to_decimal(data.get("amount"), "amount")

    def build(code):
        customer = Customer(
            serial_number=code,
            name=data.get("name") or "",
            phone=data.get("phone") or "",
            city=data.get("city") or "",
        )
        customer.save()
        if amount > 0:
            place_initial_balance(customer, amount, data.get("debit_credit"))
        return recalculate(customer)

    with transaction.atomic():
        customer = create_with_code("CUST", Customer, "serial_number", build)
        log_action(
            action="create",
            instance=customer,
            changes={"serial_number": customer.serial_number},
        )
    logger.info("Created customer %s", customer.serial_number)
    return customer


def update_customer(customer: Customer, data: dict) -> Customer:
    """Serial number is immutable; amount + side move the opening balance."""
    with transaction.atomic():
        customer = _lock(customer)
        if data.get("name"):
            customer.name = data["name"]
        for field in ("phone", "city"):
            if field in data and data[field] is not None:
                setattr(customer, field, data[field])
        customer.save()

        if data.get("amount") is not None and data.get("debit_credit") is not None:
            place_initial_balance(customer, data["amount"], data["debit_credit"])
        return recalculate(customer)


def delete_customer(customer: Customer):
    customer.delete()


def get_customer(customer_id) -> Customer:
    return get_object(Customer, customer_id, "Customer")


def customer_stats() -> dict:
    agg = Customer.objects.aggregate(
        count=Count("id"),
        credit=Sum("total_balance", filter=Q(debit_credit="Credit")),
        debit=Sum("total_balance", filter=Q(debit_credit="Debit")),
    )
    credit = abs(agg["credit"] or Decimal("0"))
    debit = abs(agg["debit"] or Decimal("0"))
    return {
        "totalBalance": money(credit + debit),
        "totalCustomers": agg["count"],
        "totalCredit": money(credit),
        "totalDebit": money(debit),
    }
