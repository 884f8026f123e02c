from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase

from ..models import InventoryItem
from ..services import inventory, ledger


class CategoryProjectionTests(SimpleTestCase):
    def test_display_category(self):
        self.assertEqual(
            inventory.display_category(InventoryItem(category="machines")), "instock"
        )
        self.assertEqual(
            inventory.display_category(
                InventoryItem(category="machines", machine_category="repair")
            ),
            "repair",
        )
        self.assertEqual(
            inventory.display_category(
                InventoryItem(category="importStock", category_name="Monitors")
            ),
            "Monitors",
        )
        self.assertEqual(inventory.display_category(InventoryItem(category="parts")), "parts")

    def test_sold_predicate(self):
        self.assertTrue(inventory.is_sold(InventoryItem(category="parts", is_sold_entry=True)))
        self.assertTrue(
            inventory.is_sold(InventoryItem(category="machines", machine_category="sold"))
        )
        self.assertTrue(inventory.is_sold(InventoryItem(category="importStock", status="Sold")))
        self.assertTrue(
            inventory.is_sold(
                InventoryItem(category="productsCategory", quantity=0, buyer_name="City Hospital")
            )
        )
        self.assertFalse(
            inventory.is_sold(InventoryItem(category="productsCategory", quantity=0))
        )
        self.assertFalse(inventory.is_sold(InventoryItem(category="parts", quantity=0)))

    def test_stats(self):
        items = [
            InventoryItem(category="machines", price=Decimal("850000"), quantity=0),
            InventoryItem(category="machines", machine_category="repair", price=Decimal("1000")),
            InventoryItem(category="machines", machine_category="sold", price=Decimal("5")),
            InventoryItem(category="probs", price=Decimal("120000"), quantity=4),
            InventoryItem(category="parts", price=Decimal("15000"), quantity=10),
            InventoryItem(category="parts", price=None, quantity=0),
        ]
        stats = inventory.compute_stats(items)

        self.assertEqual(stats["totalItems"], 6)
        self.assertEqual(stats["itemsSold"], 1)
        self.assertEqual(stats["itemsInStockMachines"], 1)
        self.assertEqual(stats["stockInProbes"], 1)
        self.assertEqual(stats["stockInParts"], 1)
        # 850000 + 1000 + 480000 + 150000
        self.assertEqual(stats["totalStockValue"], Decimal("1481000.00"))


class InventoryServiceTests(TestCase):
    def test_create_assigns_serial_and_codes(self):
        first = inventory.create_item({"category": "machines", "product_name": "Scanner"})
        second = inventory.create_item({"category": "machines", "product_name": "Monitor"})
        probe = inventory.create_item({"category": "probs", "probes": "Convex"})

        self.assertEqual((first.s_n, first.model_no), (1, "MOD001"))
        self.assertEqual((second.s_n, second.model_no), (2, "MOD002"))
        # serial numbers run per category; model codes are shared
        self.assertEqual(probe.s_n, 1)
        self.assertEqual(probe.box_no, "BX001")
        self.assertEqual(probe.model_no, "MOD003")

    def test_caller_codes_are_kept(self):
        item = inventory.create_item(
            {"category": "importStock", "serial_no": "IMP-77", "s_n": 40, "status": "In Stock"}
        )
        self.assertEqual(item.serial_no, "IMP-77")
        self.assertEqual(item.s_n, 40)
        self.assertEqual(item.status, "InStock")

    def test_unknown_category(self):
        with self.assertRaises(ValidationError):
            inventory.create_item({"category": "gadgets"})

    def test_variant_fields_are_checked(self):
        with self.assertRaises(ValidationError):
            inventory.create_item({"category": "parts", "machine_category": "sold"})

    def test_update_accepts_display_label(self):
        item = inventory.create_item({"category": "machines", "product_name": "Scanner"})
        item = inventory.update_item(item, {"category": "repair", "price": Decimal("10")})
        self.assertEqual(item.category, "machines")
        self.assertEqual(item.machine_category, "repair")

        imported = inventory.create_item({"category": "importStock", "product_name": "ECG"})
        imported = inventory.update_item(imported, {"category": "Cardiology"})
        self.assertEqual(imported.category_name, "Cardiology")

    def test_list_filters_by_sold_state(self):
        inventory.create_item({"category": "parts", "part_name": "Board", "quantity": 3})
        inventory.create_item(
            {"category": "machines", "product_name": "Old", "machine_category": "sold"}
        )
        self.assertEqual(len(inventory.list_items(status="sold")), 1)
        self.assertEqual(len(inventory.list_items(status="instock")), 1)
        self.assertEqual(len(inventory.list_items(category="parts")), 1)

    def test_sale_to_a_customer(self):
        customer = ledger.create_customer({"name": "City Hospital", "city": "Lahore"})
        item = inventory.create_item(
            {"category": "parts", "part_name": "Power Board", "quantity": 10,
             "price": Decimal("15000")}
        )

        item, sold = inventory.record_sale(item, 2, "16000", customer=customer)

        self.assertEqual(item.quantity, 8)
        self.assertEqual(item.last_sold_total, Decimal("32000.00"))
        self.assertEqual(item.last_sold_customer, "City Hospital")
        self.assertTrue(sold.is_sold_entry)
        self.assertEqual(sold.part_name, "Power Board")
        self.assertEqual(sold.buyer_city, "Lahore")
        self.assertFalse(item.is_sold_entry)
        self.assertEqual(inventory.inventory_stats()["itemsSold"], 1)

        customer.refresh_from_db()
        self.assertEqual(customer.total_balance, Decimal("32000.00"))
        self.assertEqual(customer.ledger.get().particulars, "Sale: Power Board")

    def test_selling_last_machine_marks_it_sold(self):
        item = inventory.create_item(
            {"category": "machines", "product_name": "Scanner", "quantity": 1}
        )
        item, sold = inventory.record_sale(item, 1, "900000", customer_name="Walk-in")
        self.assertEqual(item.pk, sold.pk)
        self.assertTrue(sold.is_sold_entry)
        self.assertEqual(sold.machine_category, "sold")
        self.assertEqual(sold.buyer_name, "Walk-in")
        self.assertEqual(sold.last_sold_total, Decimal("900000.00"))

        # one sale, one sold row
        self.assertEqual(InventoryItem.objects.count(), 1)
        stats = inventory.inventory_stats()
        self.assertEqual(stats["itemsSold"], 1)
        self.assertEqual(stats["itemsInStockMachines"], 0)

        with self.assertRaises(ValidationError):
            inventory.record_sale(item, 1, "900000")

    def test_partial_sale_counts_once(self):
        item = inventory.create_item(
            {"category": "importStock", "product_name": "Gel", "quantity": 5,
             "status": "InStock"}
        )
        item, sold = inventory.record_sale(item, 2, "100")
        self.assertNotEqual(item.pk, sold.pk)
        self.assertEqual(item.status, "InStock")
        self.assertFalse(item.is_sold_entry)
        self.assertEqual(sold.status, "Sold")
        self.assertEqual(inventory.inventory_stats()["itemsSold"], 1)

    def test_cannot_oversell(self):
        item = inventory.create_item({"category": "parts", "part_name": "Fan", "quantity": 2})
        with self.assertRaises(ValidationError):
            inventory.record_sale(item, 3, "100")
        with self.assertRaises(ValidationError):
            inventory.record_sale(item, 0, "100")
        item.refresh_from_db()
        self.assertEqual(item.quantity, 2)
