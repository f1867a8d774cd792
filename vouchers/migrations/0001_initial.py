# vouchers/migrations/0001_initial.py

from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

VOUCHER_TYPE_CHOICES = [
    ("sales_invoice", "Sales Invoice"),
    ("purchase_invoice", "Purchase Invoice"),
    ("payment", "Payment"),
    ("receipt", "Receipt"),
    ("journal", "Journal"),
    ("contra", "Contra"),
]

ONE_SIDE = models.Q(
    models.Q(("debit_amount__gt", 0), ("credit_amount", 0)),
    models.Q(("credit_amount__gt", 0), ("debit_amount", 0)),
    _connector="OR",
)


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("accounting", "0001_initial"),
        ("inventory", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Voucher",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("voucher_number", models.CharField(max_length=30, unique=True)),
                ("voucher_type", models.CharField(choices=VOUCHER_TYPE_CHOICES, max_length=20)),
                ("voucher_date", models.DateField()),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("posted", "Posted"), ("cancelled", "Cancelled")],
                        default="draft",
                        max_length=10,
                    ),
                ),
                (
                    "total_amount",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Debit total, set at posting",
                        max_digits=15,
                    ),
                ),
                ("narration", models.TextField(blank=True, default="")),
                ("reference_number", models.CharField(blank=True, default="", max_length=100)),
                (
                    "version",
                    models.PositiveIntegerField(
                        default=1,
                        help_text="Bumped on every draft edit and status change (optimistic concurrency)",
                    ),
                ),
                ("posted_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("cancellation_reason", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="vouchers_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "party_ledger",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="party_vouchers",
                        to="accounting.ledger",
                    ),
                ),
            ],
            options={
                "db_table": "vouchers",
                "ordering": ["-voucher_date", "-voucher_number"],
                "indexes": [
                    models.Index(fields=["voucher_type", "status"], name="idx_voucher_type_status"),
                    models.Index(fields=["voucher_date"], name="idx_voucher_date"),
                    models.Index(fields=["status"], name="idx_voucher_status"),
                    models.Index(fields=["reference_number"], name="idx_voucher_reference"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("voucher_number", ""), _negated=True),
                        name="chk_voucher_number_not_blank",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("total_amount__gte", 0)),
                        name="chk_voucher_total_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="VoucherDraftLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("line_no", models.PositiveIntegerField()),
                ("debit_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("credit_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("narration", models.CharField(blank=True, default="", max_length=255)),
                (
                    "ledger",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="draft_lines",
                        to="accounting.ledger",
                    ),
                ),
                (
                    "voucher",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="draft_lines",
                        to="vouchers.voucher",
                    ),
                ),
            ],
            options={
                "db_table": "voucher_draft_lines",
                "ordering": ["voucher", "line_no"],
                "constraints": [
                    models.UniqueConstraint(fields=("voucher", "line_no"), name="uniq_voucher_draft_line_no"),
                    models.CheckConstraint(
                        condition=models.Q(("debit_amount__gte", 0), ("credit_amount__gte", 0)),
                        name="chk_draft_line_non_negative",
                    ),
                    models.CheckConstraint(condition=ONE_SIDE, name="chk_draft_line_one_side"),
                ],
            },
        ),
        migrations.CreateModel(
            name="VoucherDraftItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("line_no", models.PositiveIntegerField()),
                ("quantity", models.DecimalField(decimal_places=3, max_digits=14)),
                ("rate", models.DecimalField(decimal_places=2, max_digits=15)),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="draft_items",
                        to="inventory.inventoryitem",
                    ),
                ),
                (
                    "voucher",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="draft_items",
                        to="vouchers.voucher",
                    ),
                ),
            ],
            options={
                "db_table": "voucher_draft_items",
                "ordering": ["voucher", "line_no"],
                "constraints": [
                    models.UniqueConstraint(fields=("voucher", "line_no"), name="uniq_voucher_draft_item_line_no"),
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0), ("rate__gte", 0)),
                        name="chk_draft_item_qty_rate",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="VoucherLedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("debit_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("credit_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("entry_date", models.DateField()),
                ("is_reversal", models.BooleanField(default=False)),
                ("narration", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "ledger",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="voucher_entries",
                        to="accounting.ledger",
                    ),
                ),
                (
                    "reverses",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reversal",
                        to="vouchers.voucherledgerentry",
                    ),
                ),
                (
                    "voucher",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="vouchers.voucher",
                    ),
                ),
            ],
            options={
                "verbose_name": "Voucher Ledger Entry",
                "verbose_name_plural": "Voucher Ledger Entries",
                "db_table": "voucher_ledger_entries",
                "ordering": ["voucher", "id"],
                "indexes": [
                    models.Index(fields=["ledger", "entry_date"], name="idx_vle_ledger_date"),
                    models.Index(fields=["voucher"], name="idx_vle_voucher"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("debit_amount__gte", 0), ("credit_amount__gte", 0)),
                        name="chk_vle_non_negative",
                    ),
                    models.CheckConstraint(condition=ONE_SIDE, name="chk_vle_one_side"),
                ],
            },
        ),
        migrations.CreateModel(
            name="VoucherItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.DecimalField(decimal_places=3, max_digits=14)),
                ("rate", models.DecimalField(decimal_places=2, max_digits=15)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=15)),
                (
                    "unit_cost",
                    models.DecimalField(
                        decimal_places=4,
                        help_text="Cost basis per unit (avg_cost for sales, rate for purchases)",
                        max_digits=18,
                    ),
                ),
                ("avg_cost_before", models.DecimalField(decimal_places=4, max_digits=18)),
                ("avg_cost_after", models.DecimalField(decimal_places=4, max_digits=18)),
                (
                    "stock_shortfall",
                    models.DecimalField(
                        decimal_places=3,
                        default=Decimal("0.000"),
                        help_text="Quantity sold beyond stock on hand (only when negative stock is allowed)",
                        max_digits=14,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="voucher_items",
                        to="inventory.inventoryitem",
                    ),
                ),
                (
                    "voucher",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="items",
                        to="vouchers.voucher",
                    ),
                ),
            ],
            options={
                "db_table": "voucher_items",
                "ordering": ["voucher", "id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0), ("rate__gte", 0), ("amount__gte", 0)),
                        name="chk_voucher_item_amounts",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="VoucherSequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("voucher_type", models.CharField(choices=VOUCHER_TYPE_CHOICES, max_length=20, unique=True)),
                ("prefix", models.CharField(max_length=10)),
                ("next_number", models.PositiveIntegerField(default=1)),
                ("padding", models.PositiveSmallIntegerField(default=5)),
            ],
            options={
                "db_table": "voucher_sequences",
                "ordering": ["voucher_type"],
            },
        ),
    ]
