# products/tests/test_lots.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from products.models import Lot, StockMovement
from products.services import (
    InvalidStockArgumentError,
    InvalidStockOperationError,
    StockNotFoundError,
    consume_fefo,
    deactivate_lot,
    list_expiring_lots,
    receive_lot,
)
from products.tests.helpers import make_product, make_user, make_venue, receive


class ReceiveLotTests(TestCase):
    def setUp(self):
        self.venue = make_venue()
        self.user = make_user(self.venue, email="receiver@example.com")
        self.product = make_product(self.venue, sku="MILK-1L", cost_price=Decimal("0.95"))

    def test_receipt_books_a_purchase_movement(self):
        lot = receive_lot(
            product_id=self.product.id,
            venue_id=self.venue.id,
            user_id=self.user.id,
            lot_number="MILK-2024-01",
            qty_initial=Decimal("24"),
            metadata={"supplier": "Dairy Co"},
        )

        self.assertEqual(lot.qty_initial, Decimal("24"))
        self.assertEqual(lot.qty_current, Decimal("24"))
        self.assertEqual(lot.cost_price, Decimal("0.95"))
        self.assertEqual(lot.metadata, {"supplier": "Dairy Co"})
        self.assertIsNotNone(lot.received_date)

        movement = StockMovement.objects.get(lot=lot)
        self.assertEqual(movement.movement_type, StockMovement.MovementType.PURCHASE)
        self.assertEqual(movement.quantity, Decimal("24"))
        self.assertEqual(movement.reference, "MILK-2024-01")
        self.assertEqual(movement.user_id, self.user.id)

        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, Decimal("24"))

    def test_untracked_product_cannot_receive_lots(self):
        untracked = make_product(self.venue, sku="NAPKINS", track_lots=False)
        with self.assertRaises(InvalidStockOperationError):
            receive(untracked, "N-1", 10)
        self.assertFalse(Lot.objects.exists())

    def test_lot_number_is_unique(self):
        receive(self.product, "DUP-1", 10, days=3)
        with self.assertRaisesMessage(InvalidStockOperationError, "already exists"):
            receive(self.product, "DUP-1", 5, days=4)

    def test_qty_initial_must_be_positive(self):
        with self.assertRaises(InvalidStockArgumentError):
            receive(self.product, "ZERO", 0)

    def test_qty_initial_is_not_rounded(self):
        with self.assertRaisesMessage(InvalidStockArgumentError, "at most 3 decimal places"):
            receive(self.product, "FINE-1", "1.23456", days=3)
        self.assertFalse(Lot.objects.filter(lot_number="FINE-1").exists())

    def test_qty_initial_is_immutable(self):
        lot = receive(self.product, "IMM-1", 10, days=3)
        lot.qty_initial = Decimal("99")
        with self.assertRaises(ValidationError):
            lot.save()

    def test_lots_are_never_hard_deleted(self):
        lot = receive(self.product, "HARD-1", 10, days=3)
        with self.assertRaises(ValidationError):
            lot.delete()


class DeactivateLotTests(TestCase):
    def setUp(self):
        self.venue = make_venue()
        self.product = make_product(self.venue, sku="LIME")
        self.lot = receive(self.product, "LIME-1", 10, days=3)

    def test_lot_with_stock_cannot_be_deactivated(self):
        with self.assertRaisesMessage(InvalidStockOperationError, "remaining stock"):
            deactivate_lot(lot_id=self.lot.id, venue_id=self.venue.id)

        self.lot.refresh_from_db()
        self.assertTrue(self.lot.active)

    def test_empty_lot_is_soft_deleted(self):
        consume_fefo(product_id=self.product.id, quantity=10, venue_id=self.venue.id)

        lot = deactivate_lot(lot_id=self.lot.id, venue_id=self.venue.id)

        self.assertFalse(lot.active)
        self.assertTrue(Lot.objects.filter(pk=self.lot.pk).exists())

    def test_other_venue_is_not_found(self):
        with self.assertRaises(StockNotFoundError):
            deactivate_lot(lot_id=self.lot.id, venue_id=make_venue("Other").id)


class ExpiringLotsTests(TestCase):
    def setUp(self):
        self.venue = make_venue()
        self.product = make_product(self.venue, sku="CREAM")
        receive(self.product, "EXPIRED", 3, days=-2)
        receive(self.product, "SOON", 3, days=5)
        receive(self.product, "LATER", 3, days=40)
        receive(self.product, "NEVER", 3, days=None)

    def test_default_window(self):
        lots = list_expiring_lots(venue_id=self.venue.id)
        self.assertEqual([lot.lot_number for lot in lots], ["EXPIRED", "SOON"])

    def test_custom_window(self):
        lots = list_expiring_lots(venue_id=self.venue.id, days=60)
        self.assertEqual([lot.lot_number for lot in lots], ["EXPIRED", "SOON", "LATER"])

    def test_other_venue_sees_nothing(self):
        self.assertFalse(list_expiring_lots(venue_id=make_venue("Other").id).exists())

    def test_bad_window(self):
        with self.assertRaises(InvalidStockArgumentError):
            list_expiring_lots(venue_id=self.venue.id, days=-1)
        with self.assertRaises(InvalidStockArgumentError):
            list_expiring_lots(venue_id=self.venue.id, days="soon")
