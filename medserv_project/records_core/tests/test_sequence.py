from unittest import mock

from django.db import IntegrityError
from django.test import TestCase, override_settings

from ..exceptions import DuplicateKey
from ..models import Customer
from ..services.sequence import create_with_code, next_sequential_code


class SequentialCodeTests(TestCase):
    def make_customer(self, code):
        customer = Customer(serial_number=code, name=f"Customer {code}")
        customer.save()
        return customer

    def build(self, code):
        return self.make_customer(code)

    def test_first_code_is_padded(self):
        self.assertEqual(next_sequential_code("CUST", Customer, "serial_number"), "CUST001")

    def test_numeric_maximum_wins(self):
        for code in ("CUST002", "CUST010", "CUST009"):
            self.make_customer(code)
        self.assertEqual(next_sequential_code("CUST", Customer, "serial_number"), "CUST011")

    def test_codes_grow_past_the_padding(self):
        self.make_customer("CUST999")
        self.assertEqual(next_sequential_code("CUST", Customer, "serial_number"), "CUST1000")

    def test_values_with_other_shapes_are_ignored(self):
        for code in ("CUST-77", "CUST12A", "QUO500", "XCUST900"):
            self.make_customer(code)
        self.make_customer("CUST004")
        self.assertEqual(next_sequential_code("CUST", Customer, "serial_number"), "CUST005")

    def test_supplied_code_is_used_as_is(self):
        customer = create_with_code("CUST", Customer, "serial_number", self.build, supplied="cust050")
        self.assertEqual(customer.serial_number, "CUST050")

    def test_taken_supplied_code_raises_duplicate_key(self):
        self.make_customer("CUST050")
        with self.assertRaises(DuplicateKey):
            create_with_code("CUST", Customer, "serial_number", self.build, supplied="CUST050")

    def test_retries_with_a_fresh_code_after_a_collision(self):
        calls = []

        def build(code):
            calls.append(code)
            if len(calls) == 1:
                # another writer took the code between read and insert
                raise IntegrityError("UNIQUE constraint failed")
            return self.make_customer(code)

        customer = create_with_code("CUST", Customer, "serial_number", build)
        self.assertEqual(len(calls), 2)
        self.assertEqual(customer.serial_number, "CUST001")

    @override_settings(SEQUENCE_RETRY_ATTEMPTS=2)
    def test_gives_up_after_the_configured_attempts(self):
        build = mock.Mock(side_effect=IntegrityError("UNIQUE constraint failed"))
        with self.assertRaises(DuplicateKey):
            create_with_code("CUST", Customer, "serial_number", build)
        self.assertEqual(build.call_count, 2)
