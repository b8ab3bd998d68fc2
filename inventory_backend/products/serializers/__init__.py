# products/serializers/__init__.py

from .lot import LotReceiveSerializer, LotSerializer
from .product import ProductSerializer
from .stock_movement import (
    AllocateSerializer,
    AllocationResultSerializer,
    FEFOConsumeSerializer,
    ReconciliationReportSerializer,
    StockMovementCreateSerializer,
    StockMovementSerializer,
    StockSummarySerializer,
)

__all__ = [
    "ProductSerializer",
    "LotSerializer",
    "LotReceiveSerializer",
    "StockMovementSerializer",
    "StockMovementCreateSerializer",
    "FEFOConsumeSerializer",
    "AllocateSerializer",
    "AllocationResultSerializer",
    "StockSummarySerializer",
    "ReconciliationReportSerializer",
]
