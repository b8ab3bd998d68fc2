# products/tests/test_stock_engine.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db.models import Sum
from django.test import TestCase

from products.models import Lot, StockMovement
from products.services import (
    InvalidStockArgumentError,
    InvalidStockOperationError,
    MovementInstruction,
    StockNotFoundError,
    apply_movement,
)
from products.tests.helpers import make_product, make_user, make_venue, receive, stock_up

MT = StockMovement.MovementType


class StockEngineTests(TestCase):
    """
    GUARANTEES:
    - qty_after == qty_before + quantity on every ledger row
    - product and lot balances never go negative
    - a rejected movement leaves balances and ledger untouched
    """

    def setUp(self):
        self.venue = make_venue()
        self.user = make_user(self.venue, email="engine@example.com")
        self.untracked = make_product(self.venue, sku="GIN-070", track_lots=False)
        self.tracked = make_product(self.venue, sku="MILK")

    def _apply(self, product, movement_type, quantity, **kwargs):
        return apply_movement(
            MovementInstruction(
                venue_id=self.venue.id,
                product_id=product.id,
                movement_type=movement_type,
                quantity=quantity,
                **kwargs,
            ),
            user_id=self.user.id,
        )

    def test_purchase_increases_stock_and_records_snapshot(self):
        movement = self._apply(self.untracked, MT.PURCHASE, Decimal("12"), unit_cost=Decimal("1.50"))

        self.untracked.refresh_from_db()
        self.assertEqual(self.untracked.current_stock, Decimal("12"))
        self.assertEqual(movement.qty_before, Decimal("0"))
        self.assertEqual(movement.qty_after, Decimal("12"))
        self.assertEqual(movement.total_cost, Decimal("18.00"))
        self.assertEqual(movement.user_id, self.user.id)
        self.assertEqual(movement.venue_id, self.venue.id)
        self.assertEqual(movement.metadata, {})

    def test_total_cost_uses_absolute_quantity(self):
        stock_up(self.untracked, 10)
        movement = self._apply(self.untracked, MT.SALE, Decimal("-4"), unit_cost="1.50")
        self.assertEqual(movement.total_cost, Decimal("6.00"))

    def test_negative_product_stock_is_rejected(self):
        stock_up(self.untracked, 10)

        with self.assertRaisesMessage(InvalidStockOperationError, "negative stock"):
            self._apply(self.untracked, MT.SALE, Decimal("-20"))

        self.untracked.refresh_from_db()
        self.assertEqual(self.untracked.current_stock, Decimal("10"))
        self.assertEqual(StockMovement.objects.filter(product=self.untracked).count(), 1)

    def test_lot_level_check_rolls_back_everything(self):
        small = receive(self.tracked, "L-SMALL", 10, days=5)
        receive(self.tracked, "L-BIG", 50, days=20)

        # product holds 60, but the named lot only 10
        with self.assertRaisesMessage(InvalidStockOperationError, "negative lot stock"):
            self._apply(self.tracked, MT.SALE, Decimal("-20"), lot_id=small.id)

        self.tracked.refresh_from_db()
        small.refresh_from_db()
        self.assertEqual(self.tracked.current_stock, Decimal("60"))
        self.assertEqual(small.qty_current, Decimal("10"))
        self.assertEqual(StockMovement.objects.filter(product=self.tracked).count(), 2)

    def test_lot_tracked_product_requires_lot(self):
        receive(self.tracked, "L-1", 10, days=5)
        with self.assertRaises(InvalidStockOperationError):
            self._apply(self.tracked, MT.WASTE, Decimal("-1"))

    def test_direction_must_match_movement_type(self):
        stock_up(self.untracked, 10)

        with self.assertRaisesMessage(InvalidStockArgumentError, "must increase stock"):
            self._apply(self.untracked, MT.PURCHASE, Decimal("-1"))
        with self.assertRaisesMessage(InvalidStockArgumentError, "must decrease stock"):
            self._apply(self.untracked, MT.SALE, Decimal("1"))

        # adjustment and return go either way
        self._apply(self.untracked, MT.ADJUSTMENT, Decimal("-2"))
        self._apply(self.untracked, MT.ADJUSTMENT, Decimal("1"))
        self._apply(self.untracked, MT.RETURN, Decimal("3"))

        self.untracked.refresh_from_db()
        self.assertEqual(self.untracked.current_stock, Decimal("12"))

    def test_bad_arguments(self):
        with self.assertRaises(InvalidStockArgumentError):
            self._apply(self.untracked, MT.PURCHASE, 0)
        with self.assertRaises(InvalidStockArgumentError):
            self._apply(self.untracked, "teleport", Decimal("1"))
        with self.assertRaises(InvalidStockArgumentError):
            self._apply(self.untracked, MT.PURCHASE, "ten")
        with self.assertRaises(InvalidStockArgumentError):
            self._apply(self.untracked, MT.PURCHASE, Decimal("1"), metadata={1: "x"})
        with self.assertRaises(InvalidStockArgumentError):
            self._apply(self.untracked, MT.PURCHASE, Decimal("1"), metadata={"when": object()})

    def test_metadata_is_stored_as_json(self):
        movement = self._apply(
            self.untracked,
            MT.PURCHASE,
            Decimal("1"),
            metadata={"supplier": "ACME", "temp": Decimal("4.5"), "tags": ["cold", 1, None]},
        )
        movement.refresh_from_db()
        self.assertEqual(movement.metadata, {"supplier": "ACME", "temp": "4.5", "tags": ["cold", 1, None]})

    def test_unknown_or_foreign_lot_is_not_found(self):
        other = make_product(self.venue, sku="LEMON")
        foreign_lot = receive(other, "LEMON-1", 5, days=3)
        receive(self.tracked, "MILK-1", 5, days=3)

        with self.assertRaises(StockNotFoundError):
            self._apply(self.tracked, MT.SALE, Decimal("-1"), lot_id=foreign_lot.id)

    def test_product_in_other_venue_is_not_found(self):
        other_venue = make_venue("Other")
        with self.assertRaises(StockNotFoundError):
            apply_movement(
                MovementInstruction(
                    venue_id=other_venue.id,
                    product_id=self.untracked.id,
                    movement_type=MT.PURCHASE,
                    quantity=Decimal("1"),
                ),
            )

    def test_fractional_quantities_do_not_drift(self):
        for _ in range(3):
            self._apply(self.untracked, MT.PURCHASE, 0.1)

        self.untracked.refresh_from_db()
        self.assertEqual(self.untracked.current_stock, Decimal("0.300"))

    def test_quantity_beyond_three_decimals_is_rejected_not_rounded(self):
        stock_up(self.untracked, 10)

        for bad in (Decimal("1.23456"), "0.0006", 0.1 + 0.2):
            with self.assertRaisesMessage(InvalidStockArgumentError, "at most 3 decimal places"):
                self._apply(self.untracked, MT.PURCHASE, bad)

        self.untracked.refresh_from_db()
        self.assertEqual(self.untracked.current_stock, Decimal("10"))
        self.assertEqual(StockMovement.objects.filter(product=self.untracked).count(), 1)

    def test_trailing_zeros_are_exact(self):
        movement = self._apply(self.untracked, MT.PURCHASE, Decimal("2.50000"))
        self.assertEqual(movement.quantity, Decimal("2.5"))

    def test_movements_are_numbered_per_product(self):
        stock_up(self.untracked, 5)
        stock_up(self.untracked, 5)
        first = receive(self.tracked, "SEQ-1", 4, days=3)
        self._apply(self.tracked, MT.SALE, Decimal("-1"), lot_id=first.id)

        untracked_seq = StockMovement.objects.filter(product=self.untracked).order_by("sequence")
        tracked_seq = StockMovement.objects.filter(product=self.tracked).order_by("sequence")
        self.assertEqual(list(untracked_seq.values_list("sequence", flat=True)), [1, 2])
        self.assertEqual(list(tracked_seq.values_list("sequence", flat=True)), [1, 2])

    def test_rejected_movement_does_not_consume_a_sequence_number(self):
        stock_up(self.untracked, 5)
        with self.assertRaises(InvalidStockOperationError):
            self._apply(self.untracked, MT.SALE, Decimal("-6"))
        movement = self._apply(self.untracked, MT.SALE, Decimal("-2"))

        self.assertEqual(movement.sequence, 2)

    def test_ledger_replay_reproduces_current_stock(self):
        stock_up(self.untracked, 40)
        self._apply(self.untracked, MT.SALE, Decimal("-7.5"))
        self._apply(self.untracked, MT.WASTE, Decimal("-0.25"))
        self._apply(self.untracked, MT.TRANSFER_IN, Decimal("3"))
        self._apply(self.untracked, MT.ADJUSTMENT, Decimal("-1.125"))

        self.untracked.refresh_from_db()
        movements = list(StockMovement.objects.filter(product=self.untracked).order_by("sequence"))

        previous_after = Decimal("0")
        for movement in movements:
            self.assertEqual(movement.qty_after, movement.qty_before + movement.quantity)
            self.assertEqual(movement.qty_before, previous_after)
            previous_after = movement.qty_after

        self.assertEqual(sum(m.quantity for m in movements), self.untracked.current_stock)
        self.assertEqual(self.untracked.current_stock, Decimal("34.125"))

    def test_current_stock_equals_sum_of_lots(self):
        first = receive(self.tracked, "S-1", 10, days=2)
        second = receive(self.tracked, "S-2", 25, days=8)
        self._apply(self.tracked, MT.SALE, Decimal("-4"), lot_id=first.id)
        self._apply(self.tracked, MT.ADJUSTMENT, Decimal("2.5"), lot_id=second.id)
        self._apply(self.tracked, MT.WASTE, Decimal("-6"), lot_id=first.id)

        self.tracked.refresh_from_db()
        lots_total = Lot.objects.filter(product=self.tracked, active=True).aggregate(t=Sum("qty_current"))["t"]
        self.assertEqual(self.tracked.current_stock, lots_total)
        self.assertEqual(self.tracked.current_stock, Decimal("27.5"))


class StockMovementImmutabilityTests(TestCase):
    def setUp(self):
        venue = make_venue()
        product = make_product(venue, sku="CAN-COLA", track_lots=False)
        self.movement = stock_up(product, 5)

    def test_update_is_rejected(self):
        self.movement.notes = "edited"
        with self.assertRaises(ValidationError):
            self.movement.save()

    def test_delete_is_rejected(self):
        with self.assertRaises(ValidationError):
            self.movement.delete()
        self.assertTrue(StockMovement.objects.filter(pk=self.movement.pk).exists())
