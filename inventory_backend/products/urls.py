# products/urls.py

"""
PRODUCTS URLS

Registered under /api/products/:
    products/         catalogue, low-stock, reconcile
    lots/             receive, metadata edits, soft delete, expiring-soon
    stock-movements/  ledger, direct movements, FEFO consumption, summaries
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.views import LotViewSet, ProductViewSet, StockMovementViewSet

router = DefaultRouter()

router.register(r"products", ProductViewSet, basename="products")
router.register(r"lots", LotViewSet, basename="lots")
router.register(r"stock-movements", StockMovementViewSet, basename="stock-movements")

urlpatterns = [
    path("", include(router.urls)),
]
