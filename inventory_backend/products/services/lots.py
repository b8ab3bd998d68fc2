# products/services/lots.py

"""
LOT LIFECYCLE SERVICE

- receive_lot      -> create a lot and book its initial quantity as a PURCHASE
                      movement through the stock engine (ledger stays complete)
- deactivate_lot   -> soft delete, only once the lot is empty
- list_expiring_lots

Lots are never hard-deleted and qty_current is never written here directly.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from products.models import Lot, StockMovement

from .errors import InvalidStockArgumentError, InvalidStockOperationError, StockNotFoundError
from .fefo import FEFO_ORDERING, get_active_product
from .observers import StockObserver
from .stock_engine import MovementInstruction, apply_movement
from .validation import normalize_metadata, to_money, to_quantity

logger = logging.getLogger(__name__)


@transaction.atomic
def receive_lot(
    *,
    product_id,
    venue_id,
    lot_number: str,
    qty_initial,
    user_id=None,
    cost_price=None,
    expiration_date=None,
    production_date=None,
    received_date=None,
    supplier_reference: str = "",
    notes: str = "",
    metadata=None,
    reference: str = "",
    observer: StockObserver | None = None,
) -> Lot:
    """Receive a new lot of a lot-tracked product."""
    lot_number = (lot_number or "").strip()
    if not lot_number:
        raise InvalidStockArgumentError("lot_number is required")

    qty = to_quantity(qty_initial, field_name="qty_initial")
    if qty <= 0:
        raise InvalidStockArgumentError("qty_initial must be positive")

    cost = to_money(cost_price, field_name="cost_price")
    lot_metadata = normalize_metadata(metadata)

    # lock the product first, same order as the stock engine
    product = get_active_product(product_id=product_id, venue_id=venue_id, for_update=True)

    if not product.track_lots:
        raise InvalidStockOperationError(
            f"Product {product.sku} does not track lots"
        )

    if Lot.objects.filter(lot_number=lot_number).exists():
        raise InvalidStockOperationError(f"Lot number {lot_number} already exists")

    lot = Lot.objects.create(
        product=product,
        lot_number=lot_number,
        qty_initial=qty,
        qty_current=0,
        cost_price=cost if cost is not None else product.cost_price,
        expiration_date=expiration_date,
        production_date=production_date,
        received_date=received_date or timezone.localdate(),
        supplier_reference=supplier_reference or "",
        notes=notes or "",
        metadata=lot_metadata,
    )

    apply_movement(
        MovementInstruction(
            venue_id=venue_id,
            product_id=product.id,
            movement_type=StockMovement.MovementType.PURCHASE,
            quantity=qty,
            lot_id=lot.id,
            unit_cost=lot.cost_price,
            reference=reference or lot_number,
            notes=notes or "",
        ),
        user_id=user_id,
        observer=observer,
    )

    lot.refresh_from_db()
    logger.info("lot received venue=%s product=%s lot=%s qty=%s", venue_id, product.id, lot_number, qty)
    return lot


def _get_venue_lot(*, lot_id, venue_id, for_update: bool = False) -> Lot:
    qs = Lot.objects.select_related("product")
    if for_update:
        qs = qs.select_for_update()
    try:
        return qs.get(id=lot_id, product__venue_id=venue_id)
    except (Lot.DoesNotExist, ValueError, ValidationError):
        raise StockNotFoundError(f"Lot {lot_id} not found")


@transaction.atomic
def deactivate_lot(*, lot_id, venue_id) -> Lot:
    lot = _get_venue_lot(lot_id=lot_id, venue_id=venue_id, for_update=True)

    if lot.qty_current > 0:
        raise InvalidStockOperationError(
            "Cannot delete lot with remaining stock. "
            "Use stock movements to consume remaining quantity first."
        )

    if lot.active:
        lot.active = False
        lot.save(update_fields=["active", "updated_at"])
        logger.info("lot deactivated venue=%s lot=%s", venue_id, lot.lot_number)

    return lot


def list_expiring_lots(*, venue_id, days=None):
    """Active lots with stock expiring within `days` (already-expired included)."""
    if days is None:
        days = getattr(settings, "STOCK_EXPIRING_SOON_DAYS", 30)

    try:
        days = int(days)
    except (TypeError, ValueError):
        raise InvalidStockArgumentError("days must be an integer")
    if days < 0:
        raise InvalidStockArgumentError("days cannot be negative")

    cutoff = timezone.localdate() + timedelta(days=days)

    return (
        Lot.objects.select_related("product")
        .filter(
            product__venue_id=venue_id,
            product__is_active=True,
            active=True,
            qty_current__gt=0,
            expiration_date__isnull=False,
            expiration_date__lte=cutoff,
        )
        .order_by(*FEFO_ORDERING)
    )
