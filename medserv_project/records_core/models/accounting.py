from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from .base import ValidatedModel, money_field

ACCOUNTING_CATEGORY_CHOICES = [
    ("Income", "Income"),
    ("Expense", "Expense"),
]

EXPENSE_TYPE_CHOICES = [
    ("Office Expense", "Office Expense"),
    ("Home Expense", "Home Expense"),
]


# ---------- Cash book entry ----------
class AccountingEntry(ValidatedModel):
    date = models.DateField(default=timezone.localdate)
    account = models.CharField(max_length=200, blank=True, default="")
    debit = money_field()
    credit = money_field()
    # Running balance (credit - debit) over all entries ordered by date, id
    balance = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    category = models.CharField(max_length=10, choices=ACCOUNTING_CATEGORY_CHOICES)
    expense_type = models.CharField(
        max_length=20, choices=EXPENSE_TYPE_CHOICES, blank=True, default=""
    )
    description = models.TextField(blank=True, default="")
    reference = models.CharField(max_length=100, blank=True, default="")
    customer = models.CharField(max_length=200, blank=True, default="")

    class Meta:
        ordering = ["-date", "-id"]
        indexes = [
            models.Index(fields=["date"], name="accounting_date_idx"),
            models.Index(fields=["category"], name="accounting_category_idx"),
            models.Index(fields=["expense_type"], name="accounting_expense_idx"),
        ]

    def __str__(self):
        return f"{self.date} {self.category} Dr {self.debit} Cr {self.credit}"

    def clean(self):
        # Expenses must say whose expense it is
        if self.category == "Expense" and not self.expense_type:
            raise ValidationError({"expense_type": "Expense entries require an expense type."})
