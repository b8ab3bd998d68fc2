from .errors import (
    InvalidStockArgumentError,
    InvalidStockOperationError,
    StockNotFoundError,
    StockServiceError,
)
from .fefo import AllocationResult, FEFOAllocation, allocate_fefo
from .fefo_movement import consume_fefo
from .ledger import (
    ReconciliationReport,
    list_low_stock_products,
    list_movements,
    reconcile_product_stock,
)
from .lots import deactivate_lot, list_expiring_lots, receive_lot
from .metrics import PrometheusStockObserver, get_stock_metrics
from .observers import LoggingStockObserver, StockObserver
from .stock_engine import MovementInstruction, apply_movement
from .stock_summary import LotSummary, StockSummary, get_stock_summary

__all__ = [
    "StockServiceError",
    "StockNotFoundError",
    "InvalidStockArgumentError",
    "InvalidStockOperationError",
    "AllocationResult",
    "FEFOAllocation",
    "allocate_fefo",
    "MovementInstruction",
    "apply_movement",
    "consume_fefo",
    "StockSummary",
    "LotSummary",
    "get_stock_summary",
    "receive_lot",
    "deactivate_lot",
    "list_expiring_lots",
    "list_movements",
    "list_low_stock_products",
    "reconcile_product_stock",
    "ReconciliationReport",
    "StockObserver",
    "LoggingStockObserver",
    "PrometheusStockObserver",
    "get_stock_metrics",
]
