# products/tests/helpers.py

"""
Shared fixtures for stock tests.

Stock is always booked through the services so the ledger and the
counters agree from the first movement on.
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.utils import timezone

from products.models import Product, StockMovement
from products.services import MovementInstruction, apply_movement, receive_lot
from venues.models import Venue

User = get_user_model()


def make_venue(name="Test Venue"):
    return Venue.objects.create(name=name)


def make_user(venue, *, email, role=None):
    return User.objects.create_user(
        email=email,
        password="password123",
        venue=venue,
        role=role or User.Role.MANAGER,
    )


def make_product(venue, *, sku, track_lots=True, minimum_stock="0", name=None, **extra):
    return Product.objects.create(
        venue=venue,
        sku=sku,
        name=name or sku.title(),
        track_lots=track_lots,
        minimum_stock=Decimal(minimum_stock),
        **extra,
    )


def stock_up(product, quantity, *, user=None):
    """Book opening stock on a product that does not track lots."""
    return apply_movement(
        MovementInstruction(
            venue_id=product.venue_id,
            product_id=product.id,
            movement_type=StockMovement.MovementType.PURCHASE,
            quantity=Decimal(str(quantity)),
        ),
        user_id=getattr(user, "id", None),
    )


def receive(product, lot_number, quantity, *, days=None, cost="1.00", user=None):
    """Receive a lot expiring in `days` days (None = never expires)."""
    expiration = None if days is None else timezone.localdate() + timedelta(days=days)
    return receive_lot(
        product_id=product.id,
        venue_id=product.venue_id,
        lot_number=lot_number,
        qty_initial=Decimal(str(quantity)),
        cost_price=Decimal(cost),
        expiration_date=expiration,
        user_id=getattr(user, "id", None),
    )


class RecordingObserver:
    def __init__(self):
        self.applied = []
        self.failed = []
        self.allocations = []

    def movement_applied(self, *, movement, duration_ms):
        self.applied.append(movement)

    def movement_failed(self, *, venue_id, product_id, movement_type, error, duration_ms):
        self.failed.append(error)

    def allocation_completed(self, *, result, venue_id, duration_ms):
        self.allocations.append(result)
