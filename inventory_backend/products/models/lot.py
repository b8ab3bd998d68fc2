# products/models/lot.py

"""
LOT (TRACEABLE BATCH OF A PRODUCT)

CANONICAL MODEL:
- A Lot belongs to exactly one Product (cascade)
- lot_number is a globally unique business key
- qty_initial is immutable after creation
- qty_current is mutated ONLY by the stock engine and never goes below zero
- expiration_date NULL means "never expires" (ranked last by FEFO)
- Soft delete only (active=False), and only once qty_current == 0
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from .product import Product


class Lot(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="lots",
    )

    lot_number = models.CharField(max_length=100, unique=True)

    qty_initial = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal("0.000"),
        help_text="Quantity received (immutable)",
    )

    qty_current = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal("0.000"),
        help_text="Remaining quantity (stock engine only)",
    )

    cost_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    expiration_date = models.DateField(null=True, blank=True)
    production_date = models.DateField(null=True, blank=True)
    received_date = models.DateField(null=True, blank=True)

    supplier_reference = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = [models.F("expiration_date").asc(nulls_last=True), "created_at", "id"]
        indexes = [
            models.Index(fields=["product", "active", "expiration_date"], name="products_lo_product_8d2e4b_idx"),
            models.Index(fields=["expiration_date"], name="products_lo_expirat_1a7c9e_idx"),
            models.Index(fields=["created_at"], name="products_lo_created_4b6f20_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(qty_current__gte=0),
                name="chk_lot_qty_current_gte_zero",
            ),
            models.CheckConstraint(
                condition=Q(qty_initial__gte=0),
                name="chk_lot_qty_initial_gte_zero",
            ),
        ]

    def clean(self):
        if self.qty_current is not None and self.qty_current < 0:
            raise ValidationError({"qty_current": "qty_current cannot be negative"})

        if self.qty_initial is not None and self.qty_initial < 0:
            raise ValidationError({"qty_initial": "qty_initial cannot be negative"})

    def save(self, *args, **kwargs):
        if not self._state.adding:
            original = Lot.objects.filter(pk=self.pk).values_list("qty_initial", flat=True).first()
            if original is not None and Decimal(original) != Decimal(self.qty_initial):
                raise ValidationError({"qty_initial": "qty_initial is immutable"})

        self.clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "Lots are never hard-deleted. Deactivate the lot once it is empty."
        )

    @property
    def total_remaining_value(self) -> Decimal:
        return Decimal(self.cost_price or 0) * Decimal(self.qty_current or 0)

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | Lot {self.lot_number}"
