# venues/apps.py

"""
VENUES APP CONFIG

Tenant boundary:
- Every product, lot and stock movement is scoped to exactly one Venue.
"""

from django.apps import AppConfig


class VenuesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "venues"
    verbose_name = "Venues"
