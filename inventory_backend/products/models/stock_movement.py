# products/models/stock_movement.py

"""
CANONICAL INVENTORY LEDGER

Immutable inventory ledger entry.

GUARANTEES:
- Append-only (no updates, no deletes)
- Signed quantity: positive = stock in, negative = stock out
- qty_before / qty_after snapshot the PRODUCT balance and always satisfy
  qty_after == qty_before + quantity
- sequence numbers a product's movements 1, 2, 3, ... in commit order; it is
  assigned under the product row lock, never from the clock
- Replaying a product's movements in sequence order and summing quantity
  reproduces Product.current_stock exactly
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from .lot import Lot
from .product import Product


class StockMovement(models.Model):
    class MovementType(models.TextChoices):
        PURCHASE = "purchase", "Purchase"
        SALE = "sale", "Sale"
        ADJUSTMENT = "adjustment", "Inventory Adjustment"
        WASTE = "waste", "Waste"
        TRANSFER_IN = "transfer_in", "Transfer In"
        TRANSFER_OUT = "transfer_out", "Transfer Out"
        RETURN = "return", "Return"
        PRODUCTION = "production", "Production"

    # +1 inbound only, -1 outbound only, None either direction
    MOVEMENT_DIRECTION = {
        MovementType.PURCHASE: 1,
        MovementType.TRANSFER_IN: 1,
        MovementType.PRODUCTION: 1,
        MovementType.SALE: -1,
        MovementType.WASTE: -1,
        MovementType.TRANSFER_OUT: -1,
        MovementType.ADJUSTMENT: None,
        MovementType.RETURN: None,
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    venue = models.ForeignKey(
        "venues.Venue",
        on_delete=models.CASCADE,
        related_name="stock_movements",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="stock_movements",
    )
    # Weak reference: movements outlive the lot's logical lifecycle
    lot = models.ForeignKey(
        Lot,
        on_delete=models.RESTRICT,
        null=True,
        blank=True,
        related_name="stock_movements",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    # per-product ledger position, assigned by the stock engine
    sequence = models.PositiveBigIntegerField(editable=False)

    movement_type = models.CharField(max_length=20, choices=MovementType.choices)

    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    qty_before = models.DecimalField(max_digits=12, decimal_places=3)
    qty_after = models.DecimalField(max_digits=12, decimal_places=3)

    unit_cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    total_cost = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)

    reference = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    movement_date = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "sequence"]
        indexes = [
            models.Index(fields=["venue", "movement_date"], name="products_st_venue_i_7e1d3f_idx"),
            models.Index(fields=["product", "created_at"], name="products_st_product_2c9a61_idx"),
            models.Index(fields=["lot", "created_at"], name="products_st_lot_id_9b4e12_idx"),
            models.Index(fields=["movement_type"], name="products_st_movemen_6d8f07_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "sequence"],
                name="uniq_movement_product_sequence",
            ),
            models.CheckConstraint(
                condition=Q(qty_after__gte=0),
                name="chk_movement_qty_after_gte_zero",
            ),
        ]

    def clean(self):
        if self.quantity is None or Decimal(self.quantity) == 0:
            raise ValidationError("quantity must be non-zero")

        if Decimal(self.qty_before) + Decimal(self.quantity) != Decimal(self.qty_after):
            raise ValidationError("qty_after must equal qty_before + quantity")

        if Decimal(self.qty_after) < 0:
            raise ValidationError("qty_after cannot be negative")

        direction = self.MOVEMENT_DIRECTION.get(self.movement_type)
        if direction is not None and (Decimal(self.quantity) > 0) != (direction > 0):
            raise ValidationError(
                f"{self.movement_type} movements must have a "
                f"{'positive' if direction > 0 else 'negative'} quantity"
            )

        if self.lot_id and self.product_id:
            lot_product_id = (
                Lot.objects.filter(id=self.lot_id).values_list("product_id", flat=True).first()
            )
            if lot_product_id is not None and lot_product_id != self.product_id:
                raise ValidationError("Lot does not belong to product")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")

        self.clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.movement_type} | {self.quantity}"
