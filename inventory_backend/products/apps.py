# products/apps.py

"""
PRODUCTS APP CONFIG

Stock core:
- Product / Lot / StockMovement (immutable ledger)
- FEFO allocation, atomic stock mutations, stock summaries
"""

from django.apps import AppConfig


class ProductsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "products"
    verbose_name = "Products & Stock"
