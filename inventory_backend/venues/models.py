# venues/models.py

import uuid

from django.db import models


def default_venue_settings():
    return {
        "currency": "EUR",
        "timezone": "Europe/Rome",
        "tax_rate": "0.22",
        "default_language": "it-IT",
    }


class Venue(models.Model):
    """
    A venue (bar, pub, restaurant) is the tenant boundary.

    Guarantees:
    - Venues are stable master-data
    - Soft-deactivated, never hard-deleted while stock data references them
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    address = models.TextField(blank=True)

    settings = models.JSONField(default=default_venue_settings, blank=True)

    subscription_plan = models.CharField(max_length=50, default="basic")
    subscription_expires_at = models.DateTimeField(null=True, blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name
