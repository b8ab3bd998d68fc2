# products/tests/test_metrics.py

from decimal import Decimal

from django.test import TestCase, override_settings
from prometheus_client import CollectorRegistry

from products.models import StockMovement
from products.services import (
    InvalidStockOperationError,
    MovementInstruction,
    PrometheusStockObserver,
    allocate_fefo,
    apply_movement,
    get_stock_metrics,
)
from products.services.observers import get_stock_observer
from products.tests.helpers import make_product, make_venue

MT = StockMovement.MovementType


class PrometheusObserverTests(TestCase):
    def setUp(self):
        self.registry = CollectorRegistry()
        self.observer = PrometheusStockObserver(registry=self.registry)
        self.venue = make_venue()
        self.product = make_product(self.venue, sku="LAGER", track_lots=False)

    def _sample(self, name, **labels):
        return self.registry.get_sample_value(name, labels) or 0.0

    def _apply(self, product, movement_type, quantity):
        return apply_movement(
            MovementInstruction(
                venue_id=product.venue_id,
                product_id=product.id,
                movement_type=movement_type,
                quantity=Decimal(quantity),
            ),
            observer=self.observer,
        )

    def test_applied_movements_counted_per_venue_and_type(self):
        with self.captureOnCommitCallbacks(execute=True):
            self._apply(self.product, MT.PURCHASE, "10")
            self._apply(self.product, MT.SALE, "-3")
            self._apply(self.product, MT.SALE, "-2")

        venue_id = str(self.venue.id)
        self.assertEqual(
            self._sample("stock_movements_total", venue_id=venue_id, movement_type="purchase", status="success"),
            1.0,
        )
        self.assertEqual(
            self._sample("stock_movements_total", venue_id=venue_id, movement_type="sale", status="success"),
            2.0,
        )
        self.assertEqual(
            self._sample("stock_movement_duration_ms_count", venue_id=venue_id, movement_type="sale"),
            2.0,
        )

    def test_venues_get_separate_series(self):
        other_venue = make_venue("Other")
        other_product = make_product(other_venue, sku="STOUT", track_lots=False)

        with self.captureOnCommitCallbacks(execute=True):
            self._apply(self.product, MT.PURCHASE, "4")
            self._apply(other_product, MT.PURCHASE, "4")
            self._apply(other_product, MT.PURCHASE, "1")

        for venue, expected in ((self.venue, 1.0), (other_venue, 2.0)):
            self.assertEqual(
                self._sample(
                    "stock_movements_total",
                    venue_id=str(venue.id),
                    movement_type="purchase",
                    status="success",
                ),
                expected,
            )

    def test_rejections_counted_with_error_type(self):
        with self.assertRaises(InvalidStockOperationError):
            self._apply(self.product, MT.SALE, "-5")

        venue_id = str(self.venue.id)
        self.assertEqual(
            self._sample("stock_movements_total", venue_id=venue_id, movement_type="sale", status="failure"),
            1.0,
        )
        self.assertEqual(
            self._sample(
                "stock_movement_errors_total",
                venue_id=venue_id,
                movement_type="sale",
                error_type="InvalidStockOperationError",
            ),
            1.0,
        )
        self.assertEqual(
            self._sample("stock_movements_total", venue_id=venue_id, movement_type="sale", status="success"),
            0.0,
        )

    def test_applied_movement_counted_only_after_commit(self):
        with self.captureOnCommitCallbacks(execute=False):
            self._apply(self.product, MT.PURCHASE, "3")

        self.assertEqual(
            self._sample(
                "stock_movements_total",
                venue_id=str(self.venue.id),
                movement_type="purchase",
                status="success",
            ),
            0.0,
        )

    def test_fefo_allocations_counted_by_outcome(self):
        with self.captureOnCommitCallbacks(execute=True):
            self._apply(self.product, MT.PURCHASE, "10")

        allocate_fefo(product_id=self.product.id, quantity=4, venue_id=self.venue.id, observer=self.observer)
        allocate_fefo(product_id=self.product.id, quantity=6, venue_id=self.venue.id, observer=self.observer)
        allocate_fefo(product_id=self.product.id, quantity=50, venue_id=self.venue.id, observer=self.observer)

        venue_id = str(self.venue.id)
        self.assertEqual(self._sample("fefo_allocations_total", venue_id=venue_id, status="success"), 2.0)
        self.assertEqual(self._sample("fefo_allocations_total", venue_id=venue_id, status="failure"), 1.0)
        self.assertEqual(self._sample("fefo_allocation_duration_ms_count", venue_id=venue_id), 3.0)

    def test_metrics_are_registered_once_per_registry(self):
        second = PrometheusStockObserver(registry=self.registry)

        self.assertIs(second.metrics, self.observer.metrics)
        self.assertIs(get_stock_metrics(self.registry), self.observer.metrics)
        self.assertIsNot(get_stock_metrics(CollectorRegistry()), self.observer.metrics)

    @override_settings(STOCK_OBSERVER="products.services.metrics.PrometheusStockObserver")
    def test_selectable_from_settings(self):
        self.assertIsInstance(get_stock_observer(), PrometheusStockObserver)
