# products/serializers/lot.py

"""
LOT SERIALIZERS

- LotReceiveSerializer: input for POST (receive_lot service).
- LotSerializer: read model + metadata-only PATCH. Quantities are never
  writable through the API.
"""

from __future__ import annotations

from rest_framework import serializers

from products.models import Lot

QTY_FIELDS_MESSAGE = "Lot quantities cannot be updated directly. Use stock movements instead."


class LotSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(source="product.id", read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = Lot
        fields = [
            "id",
            "product_id",
            "product_name",
            "lot_number",
            "qty_initial",
            "qty_current",
            "cost_price",
            "expiration_date",
            "production_date",
            "received_date",
            "supplier_reference",
            "notes",
            "metadata",
            "active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "product_id",
            "product_name",
            "lot_number",
            "qty_initial",
            "qty_current",
            "cost_price",
            "active",
            "created_at",
            "updated_at",
        ]

    def to_internal_value(self, data):
        if hasattr(data, "keys") and ({"qty_current", "qty_initial"} & set(data.keys())):
            raise serializers.ValidationError({"detail": QTY_FIELDS_MESSAGE})
        return super().to_internal_value(data)

    def validate_metadata(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("metadata must be an object")
        return value


class LotReceiveSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    lot_number = serializers.CharField(max_length=100)
    qty_initial = serializers.DecimalField(max_digits=12, decimal_places=3)
    cost_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    expiration_date = serializers.DateField(required=False, allow_null=True)
    production_date = serializers.DateField(required=False, allow_null=True)
    received_date = serializers.DateField(required=False, allow_null=True)
    supplier_reference = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    metadata = serializers.DictField(required=False, default=dict)
    reference = serializers.CharField(required=False, allow_blank=True, default="")
