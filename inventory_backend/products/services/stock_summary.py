# products/services/stock_summary.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from products.models import Lot

from .fefo import FEFO_ORDERING, get_active_product


@dataclass(frozen=True)
class LotSummary:
    lot_id: UUID
    lot_number: str
    qty_current: Decimal
    expiration_date: date | None
    cost_price: Decimal


@dataclass(frozen=True)
class StockSummary:
    product_id: UUID
    product_name: str
    sku: str
    current_stock: Decimal
    minimum_stock: Decimal
    below_minimum: bool
    track_lots: bool
    lots: tuple[LotSummary, ...]


def get_stock_summary(*, product_id, venue_id) -> StockSummary:
    """
    Read-only stock view: product counters plus active lots in FEFO order.
    No locks are taken; the snapshot may be slightly stale under concurrent writes.
    """
    product = get_active_product(product_id=product_id, venue_id=venue_id)

    lots = Lot.objects.filter(product=product, active=True).order_by(*FEFO_ORDERING)

    return StockSummary(
        product_id=product.id,
        product_name=product.name,
        sku=product.sku,
        current_stock=Decimal(product.current_stock),
        minimum_stock=Decimal(product.minimum_stock),
        below_minimum=product.below_minimum,
        track_lots=product.track_lots,
        lots=tuple(
            LotSummary(
                lot_id=lot.id,
                lot_number=lot.lot_number,
                qty_current=Decimal(lot.qty_current),
                expiration_date=lot.expiration_date,
                cost_price=Decimal(lot.cost_price),
            )
            for lot in lots
        ),
    )
