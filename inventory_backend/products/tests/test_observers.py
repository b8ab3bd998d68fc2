# products/tests/test_observers.py

from decimal import Decimal
from types import SimpleNamespace

from django.test import TestCase, override_settings

from products.models import StockMovement
from products.services import (
    InvalidStockOperationError,
    LoggingStockObserver,
    MovementInstruction,
    StockObserver,
    apply_movement,
)
from products.services.observers import get_stock_observer
from products.tests.helpers import RecordingObserver, make_product, make_venue

OBSERVER_LOGGER = "products.services.observers"


def _fake_movement():
    return SimpleNamespace(
        venue_id="v",
        product_id="p",
        lot_id=None,
        movement_type="sale",
        quantity=Decimal("-1"),
        qty_after=Decimal("9"),
    )


class ExplodingObserver(StockObserver):
    def movement_applied(self, *, movement, duration_ms):
        raise RuntimeError("metrics backend down")


class LoggingObserverTests(TestCase):
    def test_slow_movement_warns(self):
        observer = LoggingStockObserver(slow_movement_ms=100)
        with self.assertLogs(OBSERVER_LOGGER, level="WARNING") as logs:
            observer.movement_applied(movement=_fake_movement(), duration_ms=250.0)
        self.assertIn("slow stock movement", logs.output[0])

    def test_fast_movement_does_not_warn(self):
        observer = LoggingStockObserver(slow_movement_ms=100)
        with self.assertNoLogs(OBSERVER_LOGGER, level="WARNING"):
            observer.movement_applied(movement=_fake_movement(), duration_ms=5.0)

    def test_slow_allocation_warns(self):
        observer = LoggingStockObserver(slow_allocation_ms=200)
        result = SimpleNamespace(product_id="p", success=True, allocations=(), total_allocated=Decimal("1"))
        with self.assertLogs(OBSERVER_LOGGER, level="WARNING"):
            observer.allocation_completed(result=result, venue_id="v", duration_ms=500.0)

    @override_settings(STOCK_SLOW_MOVEMENT_MS=7)
    def test_thresholds_come_from_settings(self):
        self.assertEqual(LoggingStockObserver().slow_movement_ms, 7.0)


class ObserverSelectionTests(TestCase):
    def test_default_observer_from_settings(self):
        self.assertIsInstance(get_stock_observer(), LoggingStockObserver)

    @override_settings(STOCK_OBSERVER="")
    def test_empty_setting_means_no_op(self):
        observer = get_stock_observer()
        self.assertIs(type(observer), StockObserver)

    def test_explicit_observer_wins(self):
        observer = RecordingObserver()
        self.assertIs(get_stock_observer(observer), observer)


class EngineReportingTests(TestCase):
    def setUp(self):
        self.venue = make_venue()
        self.product = make_product(self.venue, sku="ICE", track_lots=False)

    def _instruction(self, quantity, movement_type=StockMovement.MovementType.PURCHASE):
        return MovementInstruction(
            venue_id=self.venue.id,
            product_id=self.product.id,
            movement_type=movement_type,
            quantity=quantity,
        )

    def test_applied_is_reported_after_commit(self):
        observer = RecordingObserver()

        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            movement = apply_movement(self._instruction(Decimal("5")), observer=observer)
            self.assertEqual(observer.applied, [])

        for callback in callbacks:
            callback()
        self.assertEqual(observer.applied, [movement])

    def test_rejection_is_reported_and_reraised(self):
        observer = RecordingObserver()

        with self.assertRaises(InvalidStockOperationError):
            apply_movement(self._instruction(Decimal("-5"), StockMovement.MovementType.SALE), observer=observer)

        self.assertEqual(len(observer.failed), 1)
        self.assertIsInstance(observer.failed[0], InvalidStockOperationError)

    def test_observer_failure_does_not_undo_movement(self):
        with self.assertLogs(OBSERVER_LOGGER, level="ERROR"):
            with self.captureOnCommitCallbacks(execute=True):
                apply_movement(self._instruction(Decimal("5")), observer=ExplodingObserver())

        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, Decimal("5"))
