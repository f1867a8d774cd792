# inventory/migrations/0001_initial.py

from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="InventoryItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("item_name", models.CharField(max_length=150, unique=True)),
                ("item_code", models.CharField(blank=True, default="", max_length=50)),
                ("unit", models.CharField(default="nos", max_length=20)),
                (
                    "opening_balance",
                    models.DecimalField(
                        decimal_places=3,
                        default=Decimal("0.000"),
                        help_text="Opening quantity",
                        max_digits=14,
                    ),
                ),
                (
                    "quantity_on_hand",
                    models.DecimalField(decimal_places=3, default=Decimal("0.000"), editable=False, max_digits=14),
                ),
                (
                    "avg_cost",
                    models.DecimalField(
                        decimal_places=4,
                        default=Decimal("0.0000"),
                        help_text="Weighted-average unit cost",
                        max_digits=18,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Inventory Item",
                "verbose_name_plural": "Inventory Items",
                "db_table": "inventory_items",
                "ordering": ["item_name"],
                "indexes": [models.Index(fields=["is_active"], name="idx_inventory_item_active")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("item_name", ""), _negated=True),
                        name="chk_inventory_item_name_not_blank",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("opening_balance__gte", 0)),
                        name="chk_inventory_item_opening_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("avg_cost__gte", 0)),
                        name="chk_inventory_item_avg_cost_non_negative",
                    ),
                ],
            },
        ),
    ]
