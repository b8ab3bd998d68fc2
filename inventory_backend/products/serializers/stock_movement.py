# products/serializers/stock_movement.py

"""
STOCK MOVEMENT SERIALIZERS

Input shapes for the stock endpoints plus read models for the ledger,
allocation plans and stock summaries. The ledger itself is read-only here:
writes always go through products.services.
"""

from __future__ import annotations

from rest_framework import serializers

from products.models import StockMovement


class StockMovementSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    lot_id = serializers.UUIDField(read_only=True, allow_null=True)
    lot_number = serializers.CharField(source="lot.lot_number", read_only=True, default=None)
    user_id = serializers.UUIDField(read_only=True, allow_null=True)
    venue_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "venue_id",
            "product_id",
            "product_name",
            "lot_id",
            "lot_number",
            "user_id",
            "sequence",
            "movement_type",
            "quantity",
            "qty_before",
            "qty_after",
            "unit_cost",
            "total_cost",
            "reference",
            "notes",
            "metadata",
            "movement_date",
            "created_at",
        ]
        read_only_fields = fields


class StockMovementCreateSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    lot_id = serializers.UUIDField(required=False, allow_null=True)
    movement_type = serializers.ChoiceField(choices=StockMovement.MovementType.choices)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3)
    unit_cost = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    reference = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    metadata = serializers.DictField(required=False, default=dict)


class FEFOConsumeSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3)
    movement_type = serializers.ChoiceField(
        choices=StockMovement.MovementType.choices,
        default=StockMovement.MovementType.SALE,
    )
    reference = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class AllocateSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3)


class FEFOAllocationSerializer(serializers.Serializer):
    lot_id = serializers.UUIDField()
    lot_number = serializers.CharField()
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3)
    expiration_date = serializers.DateField(allow_null=True)


class AllocationResultSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    success = serializers.BooleanField()
    allocations = FEFOAllocationSerializer(many=True)
    total_allocated = serializers.DecimalField(max_digits=12, decimal_places=3)
    message = serializers.CharField()
    track_lots = serializers.BooleanField()


class LotSummarySerializer(serializers.Serializer):
    lot_id = serializers.UUIDField()
    lot_number = serializers.CharField()
    qty_current = serializers.DecimalField(max_digits=12, decimal_places=3)
    expiration_date = serializers.DateField(allow_null=True)
    cost_price = serializers.DecimalField(max_digits=12, decimal_places=2)


class StockSummarySerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    product_name = serializers.CharField()
    sku = serializers.CharField()
    current_stock = serializers.DecimalField(max_digits=12, decimal_places=3)
    minimum_stock = serializers.DecimalField(max_digits=12, decimal_places=3)
    below_minimum = serializers.BooleanField()
    track_lots = serializers.BooleanField()
    lots = LotSummarySerializer(many=True)


class ReconciliationReportSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    sku = serializers.CharField()
    current_stock = serializers.DecimalField(max_digits=12, decimal_places=3)
    ledger_stock = serializers.DecimalField(max_digits=12, decimal_places=3)
    lots_stock = serializers.DecimalField(max_digits=12, decimal_places=3, allow_null=True)
    movement_count = serializers.IntegerField()
    problems = serializers.ListField(child=serializers.CharField())
    ok = serializers.BooleanField()
