# products/services/metrics.py

"""
PROMETHEUS STOCK METRICS

Counters and histograms for stock movements and FEFO allocations, labelled by
venue and movement type. Enable with:

    STOCK_OBSERVER=products.services.metrics.PrometheusStockObserver

Metrics live on a CollectorRegistry passed to the observer (the
prometheus_client default registry when none is given). Exposing them for
scraping is left to the deployment.
"""

from __future__ import annotations

import threading
import weakref

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

from .observers import LoggingStockObserver

MOVEMENT_BUCKETS = (10, 25, 50, 100, 200, 500, 1000)
ALLOCATION_BUCKETS = (10, 50, 100, 200, 500, 1000, 2000)

_lock = threading.Lock()
_metrics_by_registry = weakref.WeakKeyDictionary()


class StockMetrics:
    def __init__(self, registry: CollectorRegistry):
        self.movements_total = Counter(
            "stock_movements_total",
            "Stock movements by outcome",
            ["venue_id", "movement_type", "status"],
            registry=registry,
        )
        self.movement_duration_ms = Histogram(
            "stock_movement_duration_ms",
            "Stock movement duration in milliseconds",
            ["venue_id", "movement_type"],
            buckets=MOVEMENT_BUCKETS,
            registry=registry,
        )
        self.movement_errors_total = Counter(
            "stock_movement_errors_total",
            "Rejected stock movements by error type",
            ["venue_id", "movement_type", "error_type"],
            registry=registry,
        )
        self.allocations_total = Counter(
            "fefo_allocations_total",
            "FEFO allocations by outcome",
            ["venue_id", "status"],
            registry=registry,
        )
        self.allocation_duration_ms = Histogram(
            "fefo_allocation_duration_ms",
            "FEFO allocation duration in milliseconds",
            ["venue_id"],
            buckets=ALLOCATION_BUCKETS,
            registry=registry,
        )


def get_stock_metrics(registry: CollectorRegistry | None = None) -> StockMetrics:
    """Return the metric set for a registry, registering it on first use."""
    if registry is None:
        registry = REGISTRY

    # a metric name can only be registered once per registry
    with _lock:
        metrics = _metrics_by_registry.get(registry)
        if metrics is None:
            metrics = StockMetrics(registry)
            _metrics_by_registry[registry] = metrics
        return metrics


class PrometheusStockObserver(LoggingStockObserver):
    """Logging observer that also records every outcome in Prometheus metrics."""

    def __init__(self, *, registry: CollectorRegistry | None = None, **kwargs):
        super().__init__(**kwargs)
        self.metrics = get_stock_metrics(registry)

    def movement_applied(self, *, movement, duration_ms: float) -> None:
        super().movement_applied(movement=movement, duration_ms=duration_ms)

        venue_id = str(movement.venue_id)
        movement_type = str(movement.movement_type)
        self.metrics.movements_total.labels(venue_id, movement_type, "success").inc()
        self.metrics.movement_duration_ms.labels(venue_id, movement_type).observe(duration_ms)

    def movement_failed(self, *, venue_id, product_id, movement_type, error, duration_ms) -> None:
        super().movement_failed(
            venue_id=venue_id,
            product_id=product_id,
            movement_type=movement_type,
            error=error,
            duration_ms=duration_ms,
        )

        venue_id = str(venue_id)
        movement_type = str(movement_type)
        self.metrics.movements_total.labels(venue_id, movement_type, "failure").inc()
        self.metrics.movement_duration_ms.labels(venue_id, movement_type).observe(duration_ms)
        self.metrics.movement_errors_total.labels(venue_id, movement_type, type(error).__name__).inc()

    def allocation_completed(self, *, result, venue_id, duration_ms: float) -> None:
        super().allocation_completed(result=result, venue_id=venue_id, duration_ms=duration_ms)

        venue_id = str(venue_id)
        status = "success" if result.success else "failure"
        self.metrics.allocations_total.labels(venue_id, status).inc()
        self.metrics.allocation_duration_ms.labels(venue_id).observe(duration_ms)
