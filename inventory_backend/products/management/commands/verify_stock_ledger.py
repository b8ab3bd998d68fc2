from django.core.management.base import BaseCommand, CommandError

from products.models import Product
from products.services.ledger import reconcile_product


class Command(BaseCommand):
    help = "Replay the stock movement ledger and report products whose counters drifted"

    def add_arguments(self, parser):
        parser.add_argument("--venue", dest="venue_id", default=None, help="Only check this venue id")

    def handle(self, *args, **options):
        qs = Product.objects.filter(is_active=True).order_by("venue_id", "sku")
        if options["venue_id"]:
            qs = qs.filter(venue_id=options["venue_id"])

        checked = 0
        drifted = 0
        for product in qs.iterator():
            checked += 1
            report = reconcile_product(product)
            if report.ok:
                continue

            drifted += 1
            self.stdout.write(self.style.ERROR(f"{product.sku} ({product.id}):"))
            for problem in report.problems:
                self.stdout.write(f"  - {problem}")

        if drifted:
            raise CommandError(f"{drifted} of {checked} products have ledger drift")

        self.stdout.write(self.style.SUCCESS(f"Ledger consistent for {checked} products."))
