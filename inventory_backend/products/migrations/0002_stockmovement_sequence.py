import django.db.models.expressions
from django.db import migrations, models


def backfill_sequence(apps, schema_editor):
    StockMovement = apps.get_model("products", "StockMovement")

    counters = {}
    rows = StockMovement.objects.order_by("product_id", "created_at", "id").only("id", "product_id")
    for movement in rows.iterator():
        counters[movement.product_id] = counters.get(movement.product_id, 0) + 1
        # queryset update: the model save() refuses to touch ledger rows
        StockMovement.objects.filter(pk=movement.pk).update(sequence=counters[movement.product_id])


class Migration(migrations.Migration):

    dependencies = [
        ("products", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="stockmovement",
            name="sequence",
            field=models.PositiveBigIntegerField(default=0, editable=False),
            preserve_default=False,
        ),
        migrations.RunPython(backfill_sequence, migrations.RunPython.noop),
        migrations.AlterModelOptions(
            name="lot",
            options={
                "ordering": [
                    django.db.models.expressions.OrderBy(
                        django.db.models.expressions.F("expiration_date"), nulls_last=True
                    ),
                    "created_at",
                    "id",
                ],
            },
        ),
        migrations.AlterModelOptions(
            name="stockmovement",
            options={"ordering": ["created_at", "sequence"]},
        ),
        migrations.AddConstraint(
            model_name="stockmovement",
            constraint=models.UniqueConstraint(
                fields=["product", "sequence"],
                name="uniq_movement_product_sequence",
            ),
        ),
    ]
