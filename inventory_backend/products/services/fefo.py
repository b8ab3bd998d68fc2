# products/services/fefo.py

"""
FEFO ALLOCATOR

Purpose:
- Decide how a requested quantity would be split across a product's lots,
  soonest-to-expire first. Lots without an expiration date come last; ties
  are broken by receipt order (created_at), then by id.
- Pure read-then-compute: no locks, no writes. Calling it twice against an
  unchanged snapshot returns the same plan.

Insufficient stock is a RESULT (success=False), not an exception, so callers
can inspect how much could have been allocated. Only bad input (InvalidArgument)
and a missing product (NotFound) raise.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db.models import F

from products.models import Lot, Product

from .errors import InvalidStockArgumentError, StockNotFoundError
from .observers import StockObserver, get_stock_observer, notify
from .validation import to_quantity

FEFO_ORDERING = (F("expiration_date").asc(nulls_last=True), "created_at", "id")

MSG_SUCCESS = "FEFO allocation successful"
MSG_NO_LOTS = "No available lots found"


@dataclass(frozen=True)
class FEFOAllocation:
    lot_id: UUID
    lot_number: str
    quantity: Decimal
    expiration_date: date | None


@dataclass(frozen=True)
class AllocationResult:
    product_id: UUID
    success: bool
    allocations: tuple[FEFOAllocation, ...]
    total_allocated: Decimal
    message: str
    track_lots: bool


def _insufficient_message(*, available: Decimal, requested: Decimal) -> str:
    return f"Insufficient stock. Available: {available}, Requested: {requested}"


def get_active_product(*, product_id, venue_id, for_update: bool = False) -> Product:
    qs = Product.objects.all()
    if for_update:
        qs = qs.select_for_update()
    try:
        return qs.get(id=product_id, venue_id=venue_id, is_active=True)
    except (Product.DoesNotExist, ValueError, ValidationError):
        raise StockNotFoundError(f"Product {product_id} not found")


def available_lots(product: Product):
    """Active lots with stock, in FEFO order."""
    return (
        Lot.objects.filter(product=product, active=True, qty_current__gt=0)
        .order_by(*FEFO_ORDERING)
    )


def plan_fefo(*, product: Product, quantity: Decimal) -> AllocationResult:
    """Build the allocation plan for an already-loaded product."""
    if not product.track_lots:
        current = Decimal(product.current_stock)
        if current < quantity:
            return AllocationResult(
                product_id=product.id,
                success=False,
                allocations=(),
                total_allocated=Decimal("0.000"),
                message=_insufficient_message(available=current, requested=quantity),
                track_lots=False,
            )
        return AllocationResult(
            product_id=product.id,
            success=True,
            allocations=(),
            total_allocated=quantity,
            message=MSG_SUCCESS,
            track_lots=False,
        )

    lots = list(available_lots(product))
    if not lots:
        return AllocationResult(
            product_id=product.id,
            success=False,
            allocations=(),
            total_allocated=Decimal("0.000"),
            message=MSG_NO_LOTS,
            track_lots=True,
        )

    remaining = quantity
    lines: list[FEFOAllocation] = []
    for lot in lots:
        if remaining <= 0:
            break
        take = min(Decimal(lot.qty_current), remaining)
        lines.append(
            FEFOAllocation(
                lot_id=lot.id,
                lot_number=lot.lot_number,
                quantity=take,
                expiration_date=lot.expiration_date,
            )
        )
        remaining -= take

    allocated = quantity - remaining
    if remaining > 0:
        return AllocationResult(
            product_id=product.id,
            success=False,
            allocations=tuple(lines),
            total_allocated=allocated,
            message=_insufficient_message(available=allocated, requested=quantity),
            track_lots=True,
        )

    return AllocationResult(
        product_id=product.id,
        success=True,
        allocations=tuple(lines),
        total_allocated=quantity,
        message=MSG_SUCCESS,
        track_lots=True,
    )


def allocate_fefo(
    *,
    product_id,
    quantity,
    venue_id,
    observer: StockObserver | None = None,
) -> AllocationResult:
    """
    Plan a FEFO allocation for `quantity` units of a product in a venue.

    Raises:
    - InvalidStockArgumentError when quantity is not strictly positive
    - StockNotFoundError when the product is missing, inactive or in another venue
    """
    qty = to_quantity(quantity)
    if qty <= 0:
        raise InvalidStockArgumentError("Quantity must be positive")

    observer = get_stock_observer(observer)
    started = time.perf_counter()

    product = get_active_product(product_id=product_id, venue_id=venue_id)
    result = plan_fefo(product=product, quantity=qty)

    notify(
        observer.allocation_completed,
        result=result,
        venue_id=venue_id,
        duration_ms=(time.perf_counter() - started) * 1000,
    )
    return result
