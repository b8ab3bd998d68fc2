# venues/admin.py

from django.contrib import admin

from venues.models import Venue


@admin.register(Venue)
class VenueAdmin(admin.ModelAdmin):
    list_display = ("name", "subscription_plan", "is_active", "created_at")
    list_filter = ("is_active", "subscription_plan")
    search_fields = ("name",)
    ordering = ("name",)
