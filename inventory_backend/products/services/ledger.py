# products/services/ledger.py

"""
LEDGER READS + RECONCILIATION

Read-only. Replays the immutable movement ledger and compares it with the
denormalized counters. Never repairs anything: drift is reported, not fixed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from django.db.models import F, Sum

from products.models import Lot, Product, StockMovement

from .fefo import get_active_product


@dataclass(frozen=True)
class ReconciliationReport:
    product_id: UUID
    sku: str
    current_stock: Decimal
    ledger_stock: Decimal
    lots_stock: Decimal | None
    movement_count: int
    problems: tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.problems


def list_movements(*, venue_id, product_id=None):
    qs = StockMovement.objects.select_related("product", "lot", "user").filter(venue_id=venue_id)

    if product_id is not None:
        product = get_active_product(product_id=product_id, venue_id=venue_id)
        qs = qs.filter(product=product)

    return qs.order_by("-created_at", "-sequence")


def list_low_stock_products(*, venue_id):
    return (
        Product.objects.filter(
            venue_id=venue_id,
            is_active=True,
            current_stock__lt=F("minimum_stock"),
        )
        .order_by("current_stock", "name")
    )


def reconcile_product(product: Product) -> ReconciliationReport:
    problems: list[str] = []
    running = Decimal("0.000")
    previous_after = None
    count = 0

    for movement in StockMovement.objects.filter(product=product).order_by("sequence").iterator():
        count += 1
        quantity = Decimal(movement.quantity)
        before = Decimal(movement.qty_before)
        after = Decimal(movement.qty_after)

        if before + quantity != after:
            problems.append(f"movement {movement.id}: qty_after != qty_before + quantity")

        expected_before = running if previous_after is None else previous_after
        if before != expected_before:
            problems.append(
                f"movement {movement.id}: qty_before {before} does not continue from {expected_before}"
            )

        running += quantity
        previous_after = after

    current = Decimal(product.current_stock)
    if running != current:
        problems.append(f"ledger sum {running} != current_stock {current}")

    lots_stock = None
    if product.track_lots:
        lots_stock = Lot.objects.filter(product=product, active=True).aggregate(
            total=Sum("qty_current")
        )["total"] or Decimal("0.000")
        lots_stock = Decimal(lots_stock)
        if lots_stock != current:
            problems.append(f"sum of lots {lots_stock} != current_stock {current}")

    return ReconciliationReport(
        product_id=product.id,
        sku=product.sku,
        current_stock=current,
        ledger_stock=running,
        lots_stock=lots_stock,
        movement_count=count,
        problems=tuple(problems),
    )


def reconcile_product_stock(*, product_id, venue_id) -> ReconciliationReport:
    product = get_active_product(product_id=product_id, venue_id=venue_id)
    return reconcile_product(product)
