from datetime import date, timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from products.models import Lot, Product, StockMovement
from products.services import MovementInstruction, apply_movement, receive_lot
from venues.models import Venue


class Command(BaseCommand):
    help = "Seed a demo venue with products, FEFO lots and opening stock"

    def add_arguments(self, parser):
        parser.add_argument("--venue-name", default="Demo Bar")

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding products and stock..."))

        venue, _ = Venue.objects.get_or_create(name=options["venue_name"])

        # -------------------------------
        # PRODUCTS
        # (sku, name, unit, cost, sell, minimum, track_lots)
        # -------------------------------
        products_data = [
            ("BEER-KEG-30", "Lager Keg 30L", Product.UnitOfMeasure.LITER, "2.10", "6.00", "30", True),
            ("MILK-WHOLE", "Whole Milk", Product.UnitOfMeasure.LITER, "1.05", "0.00", "10", True),
            ("LEMON", "Lemons", Product.UnitOfMeasure.PIECE, "0.25", "0.00", "20", True),
            ("GIN-070", "Dry Gin 70cl", Product.UnitOfMeasure.BOTTLE, "14.00", "0.00", "3", False),
            ("NAPKIN", "Paper Napkins", Product.UnitOfMeasure.PIECE, "0.01", "0.00", "500", False),
        ]

        for sku, name, unit, cost, sell, minimum, track_lots in products_data:
            product, created = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "venue": venue,
                    "name": name,
                    "unit_of_measure": unit,
                    "cost_price": Decimal(cost),
                    "sell_price": Decimal(sell),
                    "minimum_stock": Decimal(minimum),
                    "track_lots": track_lots,
                },
            )
            if not created:
                continue

            # -------------------------------
            # OPENING STOCK (through the stock engine)
            # -------------------------------
            if track_lots:
                for i in range(2):
                    lot_number = f"{sku}-L{i + 1}"
                    if Lot.objects.filter(lot_number=lot_number).exists():
                        continue
                    receive_lot(
                        product_id=product.id,
                        venue_id=venue.id,
                        lot_number=lot_number,
                        qty_initial=Decimal("40") + 20 * i,
                        expiration_date=date.today() + timedelta(days=7 + i * 30),
                        reference="seed",
                    )
            else:
                apply_movement(
                    MovementInstruction(
                        venue_id=venue.id,
                        product_id=product.id,
                        movement_type=StockMovement.MovementType.PURCHASE,
                        quantity=Decimal(minimum) * 4,
                        unit_cost=product.cost_price,
                        reference="seed",
                    )
                )

        self.stdout.write(self.style.SUCCESS("Products and stock seeded successfully."))
