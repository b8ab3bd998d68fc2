# products/serializers/product.py

"""
PRODUCT SERIALIZER

- current_stock is read-only and service-managed. A payload that tries to
  set it is rejected outright instead of being silently ignored.
- venue is never taken from the payload; the view injects it.
"""

from rest_framework import serializers

from products.models import Product

STOCK_FIELD_MESSAGE = "Cannot update current_stock directly. Use stock movements instead."


class ProductSerializer(serializers.ModelSerializer):
    below_minimum = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "venue",
            "sku",
            "name",
            "description",
            "unit_of_measure",
            "cost_price",
            "sell_price",
            "current_stock",
            "minimum_stock",
            "optimal_stock",
            "below_minimum",
            "track_lots",
            "barcode",
            "metadata",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "venue",
            "current_stock",
            "below_minimum",
            "created_at",
            "updated_at",
        ]

    def to_internal_value(self, data):
        if hasattr(data, "keys") and "current_stock" in data:
            raise serializers.ValidationError({"current_stock": STOCK_FIELD_MESSAGE})
        return super().to_internal_value(data)

    def validate_sku(self, value):
        value = (value or "").strip().upper()
        if not value:
            raise serializers.ValidationError("SKU is required")
        return value

    def validate_metadata(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("metadata must be an object")
        return value

    def validate(self, attrs):
        for name in ("cost_price", "sell_price", "minimum_stock", "optimal_stock"):
            value = attrs.get(name)
            if value is not None and value < 0:
                raise serializers.ValidationError({name: f"{name} must be non-negative"})

        # switching lot tracking on an existing product would orphan its counter
        if self.instance is not None and "track_lots" in attrs:
            if attrs["track_lots"] != self.instance.track_lots and self.instance.current_stock > 0:
                raise serializers.ValidationError(
                    {"track_lots": "Cannot change lot tracking while the product holds stock"}
                )
        return attrs
