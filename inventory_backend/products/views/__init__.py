# products/views/__init__.py

from .lot import LotViewSet
from .product import ProductViewSet
from .stock_movement import StockMovementViewSet

__all__ = [
    "LotViewSet",
    "ProductViewSet",
    "StockMovementViewSet",
]
