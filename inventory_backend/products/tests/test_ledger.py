# products/tests/test_ledger.py

from decimal import Decimal
from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from django.utils import timezone

from products.models import Product, StockMovement
from products.services import (
    StockNotFoundError,
    consume_fefo,
    list_low_stock_products,
    list_movements,
    reconcile_product_stock,
)
from products.tests.helpers import make_product, make_venue, receive, stock_up


class LedgerReadTests(TestCase):
    def setUp(self):
        self.venue = make_venue()
        self.product = make_product(self.venue, sku="TONIC", track_lots=False, minimum_stock="20")
        stock_up(self.product, 12)
        consume_fefo(product_id=self.product.id, quantity=2, venue_id=self.venue.id)

    def test_movements_newest_first(self):
        movements = list(list_movements(venue_id=self.venue.id))

        self.assertEqual(len(movements), 2)
        self.assertGreaterEqual(movements[0].created_at, movements[1].created_at)

    def test_movements_scoped_to_venue(self):
        other = make_venue("Other")
        self.assertFalse(list_movements(venue_id=other.id).exists())
        with self.assertRaises(StockNotFoundError):
            list_movements(venue_id=other.id, product_id=self.product.id)

    def test_low_stock_products(self):
        healthy = make_product(self.venue, sku="SODA", track_lots=False, minimum_stock="5")
        stock_up(healthy, 50)

        skus = [p.sku for p in list_low_stock_products(venue_id=self.venue.id)]

        self.assertEqual(skus, ["TONIC"])


class ReconciliationTests(TestCase):
    def setUp(self):
        self.venue = make_venue()
        self.product = make_product(self.venue, sku="RUM")
        receive(self.product, "RUM-1", 12, days=90)
        receive(self.product, "RUM-2", 6, days=None)
        consume_fefo(product_id=self.product.id, quantity=14, venue_id=self.venue.id)

    def test_consistent_ledger(self):
        report = reconcile_product_stock(product_id=self.product.id, venue_id=self.venue.id)

        self.assertTrue(report.ok)
        self.assertEqual(report.movement_count, 4)
        self.assertEqual(report.ledger_stock, Decimal("4"))
        self.assertEqual(report.lots_stock, Decimal("4"))

    def test_counter_drift_is_reported(self):
        # simulate an out-of-band write that bypassed the stock engine
        Product.objects.filter(pk=self.product.pk).update(current_stock=Decimal("9"))

        report = reconcile_product_stock(product_id=self.product.id, venue_id=self.venue.id)

        self.assertFalse(report.ok)
        self.assertTrue(any("ledger sum" in p for p in report.problems))
        self.assertTrue(any("sum of lots" in p for p in report.problems))

    def test_reconciliation_never_writes(self):
        before = StockMovement.objects.count()
        reconcile_product_stock(product_id=self.product.id, venue_id=self.venue.id)
        self.assertEqual(StockMovement.objects.count(), before)

    def test_verify_command_passes_on_clean_ledger(self):
        out = StringIO()
        call_command("verify_stock_ledger", stdout=out)
        self.assertIn("Ledger consistent", out.getvalue())

    def test_verify_command_fails_on_drift(self):
        Product.objects.filter(pk=self.product.pk).update(current_stock=Decimal("1"))
        out = StringIO()
        with self.assertRaises(CommandError):
            call_command("verify_stock_ledger", venue_id=str(self.venue.id), stdout=out)
        self.assertIn("RUM", out.getvalue())


class LedgerOrderTests(TestCase):
    """Replay order comes from the per-product sequence, never the clock."""

    def setUp(self):
        self.venue = make_venue()
        self.product = make_product(self.venue, sku="VODKA", track_lots=False)

    def test_identical_timestamps_still_reconcile(self):
        frozen = timezone.now()
        with mock.patch("django.utils.timezone.now", return_value=frozen):
            for quantity in (100, 10, 5, 1, 20, 3):
                stock_up(self.product, quantity)
            consume_fefo(product_id=self.product.id, quantity=7, venue_id=self.venue.id)

        movements = StockMovement.objects.filter(product=self.product)
        self.assertEqual(set(movements.values_list("created_at", flat=True)), {frozen})

        report = reconcile_product_stock(product_id=self.product.id, venue_id=self.venue.id)

        self.assertTrue(report.ok, report.problems)
        self.assertEqual(report.movement_count, 7)
        self.assertEqual(report.ledger_stock, Decimal("132"))

    def test_verify_command_passes_with_identical_timestamps(self):
        frozen = timezone.now()
        with mock.patch("django.utils.timezone.now", return_value=frozen):
            for quantity in (8, 2, 4):
                stock_up(self.product, quantity)

        out = StringIO()
        call_command("verify_stock_ledger", venue_id=str(self.venue.id), stdout=out)
        self.assertIn("Ledger consistent", out.getvalue())

    def test_newest_first_breaks_timestamp_ties_by_sequence(self):
        frozen = timezone.now()
        with mock.patch("django.utils.timezone.now", return_value=frozen):
            for quantity in (1, 2, 3):
                stock_up(self.product, quantity)

        movements = list_movements(venue_id=self.venue.id, product_id=self.product.id)

        self.assertEqual([m.sequence for m in movements], [3, 2, 1])
        self.assertEqual([m.quantity for m in movements], [Decimal("3"), Decimal("2"), Decimal("1")])
