"""
PATH: products/models/__init__.py

Products models export surface.
"""

from .lot import Lot
from .product import Product
from .stock_movement import StockMovement

__all__ = [
    "Product",
    "Lot",
    "StockMovement",
]
