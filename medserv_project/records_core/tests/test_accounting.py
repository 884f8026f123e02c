import datetime
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from ..models import AccountingEntry, Customer
from ..services import accounting, documents, ledger
from ..services.dashboard import dashboard_stats
from ..tasks import recompute_all_balances


class AccountingTests(TestCase):
    def setUp(self):
        # inserted out of date order on purpose
        self.income = accounting.create_entry(
            {"date": datetime.date(2025, 1, 2), "account": "Sales",
             "credit": Decimal("1000"), "category": "Income"}
        )
        self.rent = accounting.create_entry(
            {"date": datetime.date(2025, 1, 1), "account": "Rent",
             "debit": Decimal("300"), "category": "Expense", "expense_type": "Office Expense"}
        )

    def balances(self):
        return list(
            AccountingEntry.objects.order_by("date", "id").values_list("balance", flat=True)
        )

    def test_running_balance_follows_date_order(self):
        self.assertEqual(self.balances(), [Decimal("-300.00"), Decimal("700.00")])

    def test_stats(self):
        stats = accounting.accounting_stats()
        self.assertEqual(stats["totalIncome"], Decimal("1000.00"))
        self.assertEqual(stats["totalExpenses"], Decimal("300.00"))
        self.assertEqual(stats["netBalance"], Decimal("700.00"))

    def test_expense_requires_type(self):
        with self.assertRaises(ValidationError):
            accounting.create_entry(
                {"account": "Fuel", "debit": Decimal("50"), "category": "Expense"}
            )

    def test_income_drops_expense_type(self):
        entry = accounting.update_entry(self.rent, {"category": "Income", "credit": Decimal("20")})
        self.assertEqual(entry.expense_type, "")

    def test_delete_rebalances(self):
        accounting.delete_entry(self.rent)
        self.assertEqual(self.balances(), [Decimal("1000.00")])

    def test_filters_and_statement(self):
        self.assertEqual(list(accounting.list_entries(category="Income")), [self.income])
        self.assertEqual(
            list(accounting.list_entries(expense_type="Office Expense")), [self.rent]
        )
        rows = accounting.statement(datetime.date(2025, 1, 2), datetime.date(2025, 1, 31))
        self.assertEqual(list(rows), [self.income])
        self.assertEqual(list(accounting.statement()), [self.rent, self.income])


class RecomputeTaskTests(TestCase):
    def test_recompute_all_balances(self):
        customer = ledger.create_customer({"name": "Ali", "amount": "500"})
        # drift the stored balances
        Customer.objects.filter(pk=customer.pk).update(total_balance=Decimal("1"))
        entry = accounting.create_entry(
            {"account": "Sales", "credit": Decimal("80"), "category": "Income"}
        )
        AccountingEntry.objects.filter(pk=entry.pk).update(balance=Decimal("0"))

        counts = recompute_all_balances()

        self.assertEqual(counts, {"customers": 1, "accountingEntries": 1})
        customer.refresh_from_db()
        entry.refresh_from_db()
        self.assertEqual(customer.total_balance, Decimal("500.00"))
        self.assertEqual(entry.balance, Decimal("80.00"))


class DashboardTests(TestCase):
    def test_profit_loss_shares_of_income(self):
        accounting.create_entry(
            {"date": datetime.date(2025, 3, 1), "account": "Sales",
             "credit": Decimal("1000"), "category": "Income"}
        )
        accounting.create_entry(
            {"date": datetime.date(2025, 3, 2), "account": "Rent", "debit": Decimal("300"),
             "category": "Expense", "expense_type": "Home Expense"}
        )
        documents.create_invoice(
            {"date": datetime.date(2025, 2, 10),
             "products": [{"product": "Fan", "quantity": 2, "unit_price": Decimal("250")}]}
        )

        data = dashboard_stats(2025)

        self.assertEqual(data["dashboardStats"]["totalExpenses"], Decimal("300.00"))
        self.assertEqual(data["dashboardStats"]["saleRevenue"], Decimal("500.00"))
        self.assertEqual(
            [(row["name"], row["value"]) for row in data["profitLossChartData"]],
            [("Profit", Decimal("70.00")), ("Loss", Decimal("0.00")),
             ("Expenses", Decimal("30.00"))],
        )
        feb = data["saleRevenueData"][1]
        self.assertEqual((feb["month"], feb["revenue"]), ("Feb", Decimal("500.00")))
        self.assertEqual(data["saleRevenueData"][0]["revenue"], Decimal("0.00"))

    def test_no_income_means_zero_shares(self):
        data = dashboard_stats(2025)
        self.assertTrue(all(row["value"] == 0 for row in data["profitLossChartData"]))
