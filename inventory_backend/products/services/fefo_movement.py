# products/services/fefo_movement.py

"""
FEFO MOVEMENT ORCHESTRATOR

Realizes one logical consumption (sale, waste, ...) as N ledger movements,
one per lot touched, following the FEFO plan.

ATOMICITY:
- The whole multi-lot sequence runs in ONE outer transaction.
- The product row is locked first, the plan is computed under that lock,
  then every planned lot is locked in plan order before the first write.
- Each line goes through the mutation engine (a nested savepoint). If any
  line fails, every line is rolled back and no ledger row survives.
"""

from __future__ import annotations

import time

from django.db import transaction

from products.models import Lot, StockMovement

from .errors import InvalidStockArgumentError, InvalidStockOperationError
from .fefo import get_active_product, plan_fefo
from .observers import StockObserver, get_stock_observer, notify
from .stock_engine import MovementInstruction, apply_movement
from .validation import to_quantity


@transaction.atomic
def consume_fefo(
    *,
    product_id,
    quantity,
    venue_id,
    user_id=None,
    movement_type: str = StockMovement.MovementType.SALE,
    reference: str | None = None,
    notes: str | None = None,
    observer: StockObserver | None = None,
) -> list[StockMovement]:
    """
    Consume `quantity` units of a product, soonest-to-expire lots first.

    Returns the created movements in plan order (a single movement without a
    lot for products that do not track lots).

    Raises InvalidStockOperationError with the allocator's message when the
    plan is infeasible; nothing is written in that case.
    """
    qty = to_quantity(quantity)
    if qty <= 0:
        raise InvalidStockArgumentError("Quantity must be positive")

    if movement_type not in StockMovement.MovementType.values:
        raise InvalidStockArgumentError(f"Invalid movement_type: {movement_type}")

    if StockMovement.MOVEMENT_DIRECTION.get(movement_type) == 1:
        raise InvalidStockArgumentError(
            f"{movement_type} movements cannot be used for FEFO consumption"
        )

    observer = get_stock_observer(observer)
    started = time.perf_counter()

    product = get_active_product(product_id=product_id, venue_id=venue_id, for_update=True)
    plan = plan_fefo(product=product, quantity=qty)

    notify(
        observer.allocation_completed,
        result=plan,
        venue_id=venue_id,
        duration_ms=(time.perf_counter() - started) * 1000,
    )

    if not plan.success:
        raise InvalidStockOperationError(plan.message)

    # lock order: product (above), then lots in FEFO plan order
    lot_costs = {}
    for line in plan.allocations:
        locked = Lot.objects.select_for_update().filter(id=line.lot_id).first()
        if locked is not None:
            lot_costs[line.lot_id] = locked.cost_price

    def _instruction(*, line_qty, lot_id=None):
        return MovementInstruction(
            venue_id=venue_id,
            product_id=product.id,
            movement_type=movement_type,
            quantity=-line_qty,
            lot_id=lot_id,
            unit_cost=lot_costs.get(lot_id),
            reference=reference or "",
            notes=notes or "",
        )

    if not plan.allocations:
        return [
            apply_movement(
                _instruction(line_qty=qty),
                user_id=user_id,
                observer=observer,
            )
        ]

    return [
        apply_movement(
            _instruction(line_qty=line.quantity, lot_id=line.lot_id),
            user_id=user_id,
            observer=observer,
        )
        for line in plan.allocations
    ]
