# products/admin.py
"""
Admin rules (audit-safe):

- Product.current_stock and Lot quantities are read-only here; stock only
  moves through products.services.
- StockMovement is view-only: no add, change or delete.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Lot, Product, StockMovement


class LotInline(admin.TabularInline):
    model = Lot
    extra = 0
    can_delete = False
    fields = ("lot_number", "qty_initial", "qty_current", "expiration_date", "cost_price", "active")
    readonly_fields = fields
    show_change_link = True

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "sku", "venue", "current_stock", "minimum_stock", "track_lots", "is_active")
    list_filter = ("venue", "track_lots", "is_active", "unit_of_measure")
    search_fields = ("name", "sku", "barcode")
    readonly_fields = ("current_stock", "created_at", "updated_at")
    inlines = [LotInline]


@admin.register(Lot)
class LotAdmin(admin.ModelAdmin):
    list_display = ("lot_number", "product", "qty_current", "expiration_date", "active")
    list_filter = ("active",)
    search_fields = ("lot_number", "product__name", "product__sku")
    readonly_fields = ("product", "lot_number", "qty_initial", "qty_current", "created_at", "updated_at")

    def has_add_permission(self, request):
        # lots are received through the API so the purchase movement is booked
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ("created_at", "product", "sequence", "lot", "movement_type", "quantity", "qty_before", "qty_after", "user")
    list_filter = ("movement_type", "venue")
    search_fields = ("product__name", "product__sku", "reference")
    ordering = ("-created_at", "-sequence")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
