# inventory/migrations/0002_inventorymovement.py

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("inventory", "0001_initial"),
        ("vouchers", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="InventoryMovement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("direction", models.CharField(choices=[("IN", "Stock In"), ("OUT", "Stock Out")], max_length=3)),
                (
                    "reason",
                    models.CharField(
                        choices=[
                            ("PURCHASE", "Purchase"),
                            ("SALE", "Sale"),
                            ("PURCHASE_REVERSAL", "Purchase Cancelled"),
                            ("SALE_REVERSAL", "Sale Cancelled"),
                        ],
                        max_length=20,
                    ),
                ),
                ("quantity", models.DecimalField(decimal_places=3, max_digits=14)),
                ("unit_cost", models.DecimalField(decimal_places=4, max_digits=18)),
                ("quantity_after", models.DecimalField(decimal_places=3, max_digits=14)),
                ("avg_cost_after", models.DecimalField(decimal_places=4, max_digits=18)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="movements",
                        to="inventory.inventoryitem",
                    ),
                ),
                (
                    "voucher",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="inventory_movements",
                        to="vouchers.voucher",
                    ),
                ),
            ],
            options={
                "db_table": "inventory_movements",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["item", "created_at"], name="idx_inv_move_item_created"),
                    models.Index(fields=["reason"], name="idx_inv_move_reason"),
                ],
            },
        ),
    ]
