# products/services/observers.py

"""
STOCK OBSERVERS (METRICS SIDE CHANNEL)

The mutation engine and the allocator report outcomes to an observer
passed in by the caller. When none is passed, the observer named by the
STOCK_OBSERVER setting is used.

Observers must never affect correctness: a movement that committed stays
committed even if the observer raises.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


class StockObserver:
    """No-op base. Subclass and override the hooks you care about."""

    def movement_applied(self, *, movement, duration_ms: float) -> None:
        pass

    def movement_failed(
        self,
        *,
        venue_id,
        product_id,
        movement_type: str,
        error: Exception,
        duration_ms: float,
    ) -> None:
        pass

    def allocation_completed(self, *, result, venue_id, duration_ms: float) -> None:
        pass


class LoggingStockObserver(StockObserver):
    def __init__(self, *, slow_movement_ms=None, slow_allocation_ms=None):
        self.slow_movement_ms = float(
            slow_movement_ms
            if slow_movement_ms is not None
            else getattr(settings, "STOCK_SLOW_MOVEMENT_MS", 100)
        )
        self.slow_allocation_ms = float(
            slow_allocation_ms
            if slow_allocation_ms is not None
            else getattr(settings, "STOCK_SLOW_ALLOCATION_MS", 200)
        )

    def movement_applied(self, *, movement, duration_ms: float) -> None:
        logger.info(
            "stock movement applied venue=%s product=%s lot=%s type=%s qty=%s after=%s duration_ms=%.1f",
            movement.venue_id,
            movement.product_id,
            movement.lot_id,
            movement.movement_type,
            movement.quantity,
            movement.qty_after,
            duration_ms,
        )
        if duration_ms > self.slow_movement_ms:
            logger.warning(
                "slow stock movement venue=%s product=%s type=%s duration_ms=%.1f",
                movement.venue_id,
                movement.product_id,
                movement.movement_type,
                duration_ms,
            )

    def movement_failed(self, *, venue_id, product_id, movement_type, error, duration_ms) -> None:
        logger.info(
            "stock movement rejected venue=%s product=%s type=%s error=%s: %s duration_ms=%.1f",
            venue_id,
            product_id,
            movement_type,
            type(error).__name__,
            error,
            duration_ms,
        )

    def allocation_completed(self, *, result, venue_id, duration_ms: float) -> None:
        logger.debug(
            "fefo allocation venue=%s product=%s success=%s lines=%d allocated=%s duration_ms=%.1f",
            venue_id,
            result.product_id,
            result.success,
            len(result.allocations),
            result.total_allocated,
            duration_ms,
        )
        if duration_ms > self.slow_allocation_ms:
            logger.warning(
                "slow fefo allocation venue=%s product=%s duration_ms=%.1f",
                venue_id,
                result.product_id,
                duration_ms,
            )


def get_stock_observer(observer: StockObserver | None = None) -> StockObserver:
    if observer is not None:
        return observer

    dotted_path = getattr(settings, "STOCK_OBSERVER", None)
    if not dotted_path:
        return StockObserver()

    return import_string(dotted_path)()


def notify(hook, **kwargs) -> None:
    """Call an observer hook; observer failures are logged, never propagated."""
    try:
        hook(**kwargs)
    except Exception:
        logger.exception("stock observer hook %s failed", getattr(hook, "__name__", hook))
