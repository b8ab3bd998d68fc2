# products/services/stock_engine.py

"""
STOCK MUTATION ENGINE

The ONLY code path allowed to change Product.current_stock or Lot.qty_current.

One call = one atomic unit of work:
1) lock the product row (venue-scoped, active)
2) compute qty_before / qty_after, reject if qty_after < 0
3) if a lot is named: lock it, apply the same non-negative check at lot level
4) persist lot + product balances
5) append one immutable StockMovement, numbered next in the product's ledger

Any failure rolls back every write, ledger row included.

Locks are pessimistic (select_for_update) and always taken product -> lot.
Called inside an outer transaction (FEFO orchestrator), the unit becomes a
savepoint and the locks are held until the outer transaction ends.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Max

from products.models import Lot, StockMovement

from .errors import (
    InvalidStockArgumentError,
    InvalidStockOperationError,
    StockNotFoundError,
    StockServiceError,
)
from .fefo import get_active_product
from .observers import StockObserver, get_stock_observer, notify
from .validation import MONEY_PLACES, normalize_metadata, to_money, to_quantity


@dataclass(frozen=True)
class MovementInstruction:
    venue_id: object
    product_id: object
    movement_type: str
    quantity: object
    lot_id: object = None
    unit_cost: object = None
    reference: str = ""
    notes: str = ""
    metadata: dict = field(default_factory=dict)


def _validate_movement_type(value) -> str:
    if value not in StockMovement.MovementType.values:
        raise InvalidStockArgumentError(
            f"movement_type must be one of: {', '.join(StockMovement.MovementType.values)}"
        )
    return value


def _check_direction(*, movement_type: str, quantity: Decimal) -> None:
    direction = StockMovement.MOVEMENT_DIRECTION.get(movement_type)
    if direction is None:
        return
    if direction > 0 and quantity < 0:
        raise InvalidStockArgumentError(f"{movement_type} movements must increase stock")
    if direction < 0 and quantity > 0:
        raise InvalidStockArgumentError(f"{movement_type} movements must decrease stock")


def _lock_lot(*, lot_id, product) -> Lot:
    try:
        return Lot.objects.select_for_update().get(id=lot_id, product=product, active=True)
    except (Lot.DoesNotExist, ValueError, ValidationError):
        raise StockNotFoundError(f"Lot {lot_id} not found")


@transaction.atomic
def _apply_locked(instruction: MovementInstruction, *, user_id) -> StockMovement:
    movement_type = _validate_movement_type(instruction.movement_type)

    qty = to_quantity(instruction.quantity)
    if qty == 0:
        raise InvalidStockArgumentError("Quantity must be non-zero")

    _check_direction(movement_type=movement_type, quantity=qty)

    unit_cost = to_money(instruction.unit_cost)
    metadata = normalize_metadata(instruction.metadata)

    product = get_active_product(
        product_id=instruction.product_id,
        venue_id=instruction.venue_id,
        for_update=True,
    )

    if product.track_lots and not instruction.lot_id:
        raise InvalidStockOperationError(
            f"Product {product.sku} tracks lots; a lot_id is required for stock movements"
        )

    qty_before = Decimal(product.current_stock)
    qty_after = qty_before + qty
    if qty_after < 0:
        raise InvalidStockOperationError(
            f"Operation would result in negative stock. Current: {qty_before}, Change: {qty}"
        )

    lot = None
    if instruction.lot_id:
        lot = _lock_lot(lot_id=instruction.lot_id, product=product)

        lot_before = Decimal(lot.qty_current)
        lot_after = lot_before + qty
        if lot_after < 0:
            raise InvalidStockOperationError(
                "Operation would result in negative lot stock. "
                f"Lot: {lot.lot_number}, Current: {lot_before}, Change: {qty}"
            )

        lot.qty_current = lot_after
        lot.save(update_fields=["qty_current", "updated_at"])

    product.current_stock = qty_after
    product.save(update_fields=["current_stock", "updated_at"])

    # the product lock serializes numbering for this product
    last_sequence = StockMovement.objects.filter(product=product).aggregate(last=Max("sequence"))["last"]

    return StockMovement.objects.create(
        venue_id=product.venue_id,
        product=product,
        lot=lot,
        user_id=user_id,
        sequence=(last_sequence or 0) + 1,
        movement_type=movement_type,
        quantity=qty,
        qty_before=qty_before,
        qty_after=qty_after,
        unit_cost=unit_cost,
        total_cost=(unit_cost * abs(qty)).quantize(MONEY_PLACES) if unit_cost is not None else None,
        reference=instruction.reference or "",
        notes=instruction.notes or "",
        metadata=metadata,
    )


def apply_movement(
    instruction: MovementInstruction,
    *,
    user_id=None,
    observer: StockObserver | None = None,
) -> StockMovement:
    """
    Apply one signed movement atomically and return the ledger row.

    Raises StockNotFoundError / InvalidStockArgumentError / InvalidStockOperationError.
    Database errors propagate untouched.
    """
    observer = get_stock_observer(observer)
    started = time.perf_counter()

    try:
        movement = _apply_locked(instruction, user_id=user_id)
    except StockServiceError as exc:
        notify(
            observer.movement_failed,
            venue_id=instruction.venue_id,
            product_id=instruction.product_id,
            movement_type=instruction.movement_type,
            error=exc,
            duration_ms=(time.perf_counter() - started) * 1000,
        )
        raise

    duration_ms = (time.perf_counter() - started) * 1000
    # report only what actually committed
    transaction.on_commit(
        lambda: notify(observer.movement_applied, movement=movement, duration_ms=duration_ms)
    )
    return movement
