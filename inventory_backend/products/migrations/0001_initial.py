import uuid
from decimal import Decimal

import django.db.models.deletion
import django.db.models.expressions
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("venues", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("sku", models.CharField(db_index=True, max_length=100, unique=True)),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("description", models.TextField(blank=True)),
                (
                    "unit_of_measure",
                    models.CharField(
                        choices=[
                            ("liter", "Liter"),
                            ("milliliter", "Milliliter"),
                            ("hectoliter", "Hectoliter"),
                            ("kilogram", "Kilogram"),
                            ("gram", "Gram"),
                            ("piece", "Piece"),
                            ("bottle", "Bottle"),
                            ("can", "Can"),
                            ("keg", "Keg"),
                            ("case", "Case"),
                            ("portion", "Portion"),
                        ],
                        default="piece",
                        max_length=16,
                    ),
                ),
                ("cost_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("sell_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                (
                    "current_stock",
                    models.DecimalField(
                        decimal_places=3,
                        default=Decimal("0.000"),
                        help_text="Denormalized stock counter (stock engine only)",
                        max_digits=12,
                    ),
                ),
                ("minimum_stock", models.DecimalField(decimal_places=3, default=Decimal("0.000"), max_digits=12)),
                ("optimal_stock", models.DecimalField(blank=True, decimal_places=3, max_digits=12, null=True)),
                (
                    "track_lots",
                    models.BooleanField(default=False, help_text="If set, stock lives in lots and is consumed FEFO"),
                ),
                ("barcode", models.CharField(blank=True, max_length=255)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "venue",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="products",
                        to="venues.venue",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
                "indexes": [models.Index(fields=["venue", "is_active"], name="products_pr_venue_i_5f3c1a_idx")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("current_stock__gte", 0)),
                        name="chk_product_current_stock_gte_zero",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Lot",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("lot_number", models.CharField(max_length=100, unique=True)),
                (
                    "qty_initial",
                    models.DecimalField(
                        decimal_places=3,
                        default=Decimal("0.000"),
                        help_text="Quantity received (immutable)",
                        max_digits=12,
                    ),
                ),
                (
                    "qty_current",
                    models.DecimalField(
                        decimal_places=3,
                        default=Decimal("0.000"),
                        help_text="Remaining quantity (stock engine only)",
                        max_digits=12,
                    ),
                ),
                ("cost_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("expiration_date", models.DateField(blank=True, null=True)),
                ("production_date", models.DateField(blank=True, null=True)),
                ("received_date", models.DateField(blank=True, null=True)),
                ("supplier_reference", models.CharField(blank=True, max_length=255)),
                ("notes", models.TextField(blank=True)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lots",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": [
                    django.db.models.expressions.OrderBy(
                        django.db.models.expressions.F("expiration_date"), nulls_last=True
                    ),
                    "created_at",
                ],
                "indexes": [
                    models.Index(fields=["product", "active", "expiration_date"], name="products_lo_product_8d2e4b_idx"),
                    models.Index(fields=["expiration_date"], name="products_lo_expirat_1a7c9e_idx"),
                    models.Index(fields=["created_at"], name="products_lo_created_4b6f20_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("qty_current__gte", 0)),
                        name="chk_lot_qty_current_gte_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("qty_initial__gte", 0)),
                        name="chk_lot_qty_initial_gte_zero",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "movement_type",
                    models.CharField(
                        choices=[
                            ("purchase", "Purchase"),
                            ("sale", "Sale"),
                            ("adjustment", "Inventory Adjustment"),
                            ("waste", "Waste"),
                            ("transfer_in", "Transfer In"),
                            ("transfer_out", "Transfer Out"),
                            ("return", "Return"),
                            ("production", "Production"),
                        ],
                        max_length=20,
                    ),
                ),
                ("quantity", models.DecimalField(decimal_places=3, max_digits=12)),
                ("qty_before", models.DecimalField(decimal_places=3, max_digits=12)),
                ("qty_after", models.DecimalField(decimal_places=3, max_digits=12)),
                ("unit_cost", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("total_cost", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ("reference", models.CharField(blank=True, max_length=255)),
                ("notes", models.TextField(blank=True)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("movement_date", models.DateTimeField(default=django.utils.timezone.now)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "lot",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.RESTRICT,
                        related_name="stock_movements",
                        to="products.lot",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_movements",
                        to="products.product",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stock_movements",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "venue",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_movements",
                        to="venues.venue",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["venue", "movement_date"], name="products_st_venue_i_7e1d3f_idx"),
                    models.Index(fields=["product", "created_at"], name="products_st_product_2c9a61_idx"),
                    models.Index(fields=["lot", "created_at"], name="products_st_lot_id_9b4e12_idx"),
                    models.Index(fields=["movement_type"], name="products_st_movemen_6d8f07_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("qty_after__gte", 0)),
                        name="chk_movement_qty_after_gte_zero",
                    )
                ],
            },
        ),
    ]
