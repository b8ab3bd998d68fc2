# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Product(models.Model):
    """
    Aggregate root for venue stock.

    STOCK MODEL (IMPORTANT):
    - current_stock is a denormalized counter
    - track_lots=True  -> current_stock == sum(active lots qty_current)
    - track_lots=False -> current_stock is authoritative on its own
    - current_stock is mutated ONLY by products.services.stock_engine
      (generic update paths reject it)
    """

    class UnitOfMeasure(models.TextChoices):
        LITER = "liter", "Liter"
        MILLILITER = "milliliter", "Milliliter"
        HECTOLITER = "hectoliter", "Hectoliter"
        KILOGRAM = "kilogram", "Kilogram"
        GRAM = "gram", "Gram"
        PIECE = "piece", "Piece"
        BOTTLE = "bottle", "Bottle"
        CAN = "can", "Can"
        KEG = "keg", "Keg"
        CASE = "case", "Case"
        PORTION = "portion", "Portion"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    venue = models.ForeignKey(
        "venues.Venue",
        on_delete=models.CASCADE,
        related_name="products",
    )

    sku = models.CharField(max_length=100, unique=True, db_index=True)
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True)

    unit_of_measure = models.CharField(
        max_length=16,
        choices=UnitOfMeasure.choices,
        default=UnitOfMeasure.PIECE,
    )

    cost_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    sell_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    # Service-managed only
    current_stock = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal("0.000"),
        help_text="Denormalized stock counter (stock engine only)",
    )

    minimum_stock = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal("0.000"))
    optimal_stock = models.DecimalField(max_digits=12, decimal_places=3, null=True, blank=True)

    track_lots = models.BooleanField(
        default=False,
        help_text="If set, stock lives in lots and is consumed FEFO",
    )

    barcode = models.CharField(max_length=255, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["venue", "is_active"], name="products_pr_venue_i_5f3c1a_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(current_stock__gte=0),
                name="chk_product_current_stock_gte_zero",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        if self.current_stock is not None and self.current_stock < 0:
            raise ValidationError({"current_stock": "current_stock cannot be negative"})

        if self.minimum_stock is not None and self.minimum_stock < 0:
            raise ValidationError({"minimum_stock": "minimum_stock cannot be negative"})

    @property
    def below_minimum(self) -> bool:
        return Decimal(self.current_stock or 0) < Decimal(self.minimum_stock or 0)
