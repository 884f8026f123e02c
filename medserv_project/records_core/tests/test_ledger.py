from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from ..exceptions import NotFound
from ..models import INITIAL_BALANCE, AuditLog, Customer
from ..services import ledger


class CustomerLedgerTests(TestCase):
    def setUp(self):
        self.customer = ledger.create_customer(
            {"name": "Ali Medical Center", "city": "Karachi",
             "amount": Decimal("10000"), "debit_credit": "Debit"}
        )

    def particulars(self, customer):
        return list(customer.ledger.values_list("particulars", flat=True))

    def test_create_assigns_serial_and_opening_balance(self):
        self.assertEqual(self.customer.serial_number, "CUST001")
        self.assertEqual(self.customer.total_balance, Decimal("10000.00"))
        self.assertEqual(self.customer.debit_credit, "Debit")

        initial = self.customer.ledger.get()
        self.assertEqual(initial.particulars, INITIAL_BALANCE)
        self.assertEqual(initial.debit_amount, Decimal("10000.00"))
        self.assertEqual(initial.position, 0)

        # creation is recorded in the audit log
        self.assertTrue(
            AuditLog.objects.filter(object_type="Customer", action="create").exists()
        )

    def test_serial_numbers_follow_each_other(self):
        other = ledger.create_customer({"name": "City Hospital"})
        self.assertEqual(other.serial_number, "CUST002")
        # no amount, no opening entry
        self.assertEqual(other.ledger.count(), 0)
        self.assertEqual(other.total_balance, Decimal("0.00"))
        self.assertEqual(other.debit_credit, "Debit")

    def test_credit_opening_balance_is_negative(self):
        customer = ledger.create_customer(
            {"name": "City Hospital", "amount": "75000", "debit_credit": "Credit"}
        )
        self.assertEqual(customer.total_balance, Decimal("-75000.00"))
        self.assertEqual(customer.debit_credit, "Credit")

    def test_add_entry_updates_balance_and_snapshot(self):
        entry = ledger.add_entry(
            self.customer, {"particulars": "Payment received", "credit_amount": "4000"}
        )
        self.assertEqual(entry.total_amount, Decimal("6000.00"))
        self.assertEqual(entry.position, 1)

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_balance, Decimal("6000.00"))
        self.assertEqual(self.customer.debit_credit, "Debit")

    def test_balance_flips_to_credit(self):
        ledger.add_entry(self.customer, {"particulars": "Advance", "credit_amount": "12500.50"})
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_balance, Decimal("-2500.50"))
        self.assertEqual(self.customer.debit_credit, "Credit")

    def test_second_initial_balance_entry_is_rejected(self):
        with self.assertRaises(ValidationError):
            ledger.add_entry(
                self.customer, {"particulars": "initial balance", "debit_amount": "1"}
            )
        self.assertEqual(self.customer.ledger.count(), 1)

    def test_negative_amounts_are_rejected(self):
        with self.assertRaises(ValidationError):
            ledger.add_entry(self.customer, {"particulars": "Bad", "debit_amount": "-5"})

    def test_update_moves_opening_balance_and_keeps_it_first(self):
        ledger.add_entry(self.customer, {"particulars": "Payment received", "credit_amount": "4000"})

        customer = ledger.update_customer(
            self.customer, {"amount": "5000", "debit_credit": "Credit"}
        )
        self.assertEqual(customer.total_balance, Decimal("-9000.00"))
        self.assertEqual(customer.debit_credit, "Credit")
        self.assertEqual(self.particulars(customer), [INITIAL_BALANCE, "Payment received"])

    def test_opening_balance_added_later_goes_in_front(self):
        customer = ledger.create_customer({"name": "National Medical Supplies"})
        ledger.add_entry(customer, {"particulars": "Probe", "debit_amount": "300"})
        ledger.add_entry(customer, {"particulars": "Cash", "credit_amount": "100"})

        customer = ledger.update_customer(customer, {"amount": "-50", "debit_credit": "Debit"})
        self.assertEqual(self.particulars(customer), [INITIAL_BALANCE, "Probe", "Cash"])
        self.assertEqual(
            list(customer.ledger.values_list("position", flat=True)), [0, 1, 2]
        )
        # |amount| on the requested side
        self.assertEqual(customer.total_balance, Decimal("250.00"))

    def test_update_keeps_serial_number_and_name_when_blank(self):
        customer = ledger.update_customer(self.customer, {"name": "", "phone": "021-1234567"})
        self.assertEqual(customer.serial_number, "CUST001")
        self.assertEqual(customer.name, "Ali Medical Center")
        self.assertEqual(customer.phone, "021-1234567")

    def test_update_and_delete_entry_recalculate(self):
        entry = ledger.add_entry(self.customer, {"particulars": "Sale", "debit_amount": "500"})

        ledger.update_entry(self.customer, entry.pk, {"debit_amount": "700"})
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_balance, Decimal("10700.00"))

        customer = ledger.delete_entry(self.customer, entry.pk)
        self.assertEqual(customer.total_balance, Decimal("10000.00"))

    def test_deleted_entry_id_is_not_reused(self):
        entry = ledger.add_entry(self.customer, {"particulars": "Sale", "debit_amount": "500"})
        old_id = entry.pk
        ledger.delete_entry(self.customer, old_id)

        new = ledger.add_entry(
            self.customer, {"particulars": "Ultrasound probe", "debit_amount": "200"}
        )
        self.assertNotEqual(new.pk, old_id)
        self.assertEqual(new.total_amount, Decimal("10200.00"))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_balance, Decimal("10200.00"))

        # the deleted id stays gone
        with self.assertRaises(NotFound):
            ledger.update_entry(self.customer, old_id, {"debit_amount": "1"})

    def test_entry_of_another_customer_is_not_found(self):
        other = ledger.create_customer({"name": "City Hospital"})
        entry = ledger.add_entry(other, {"particulars": "Sale", "debit_amount": "1"})
        with self.assertRaises(NotFound):
            ledger.delete_entry(self.customer, entry.pk)
        with self.assertRaises(NotFound):
            ledger.update_entry(self.customer, "not-an-id", {"debit_amount": "1"})

    def test_get_customer_with_unknown_id(self):
        with self.assertRaises(NotFound):
            ledger.get_customer(999999)

    def test_stats_sum_both_sides(self):
        ledger.add_entry(self.customer, {"particulars": "Payment received", "credit_amount": "4000"})
        ledger.create_customer({"name": "City Hospital", "amount": "75000", "debit_credit": "Credit"})

        stats = ledger.customer_stats()
        self.assertEqual(stats["totalCustomers"], 2)
        self.assertEqual(stats["totalDebit"], Decimal("6000.00"))
        self.assertEqual(stats["totalCredit"], Decimal("75000.00"))
        self.assertEqual(stats["totalBalance"], Decimal("81000.00"))

    def test_recalculate_balance_of_empty_ledger(self):
        self.assertEqual(ledger.recalculate_balance([]), (Decimal("0.00"), "Debit"))

    def test_delete_customer_removes_ledger(self):
        ledger.delete_customer(self.customer)
        self.assertFalse(Customer.objects.exists())
