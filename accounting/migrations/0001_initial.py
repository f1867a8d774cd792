# accounting/migrations/0001_initial.py

from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AccountGroup",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("group_code", models.CharField(max_length=20, unique=True)),
                ("name", models.CharField(max_length=150)),
                (
                    "nature",
                    models.CharField(
                        choices=[
                            ("asset", "Asset"),
                            ("liability", "Liability"),
                            ("income", "Income"),
                            ("expense", "Expense"),
                            ("equity", "Equity"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "affects_gross_profit",
                    models.BooleanField(
                        default=False,
                        help_text="True for trading groups (sales, purchases, direct expenses/incomes)",
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="children",
                        to="accounting.accountgroup",
                    ),
                ),
            ],
            options={
                "verbose_name": "Account Group",
                "verbose_name_plural": "Account Groups",
                "db_table": "account_groups",
                "ordering": ["group_code"],
                "indexes": [models.Index(fields=["nature"], name="idx_account_group_nature")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("group_code", ""), _negated=True),
                        name="chk_account_group_code_not_blank",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("nature__in", ["asset", "liability", "income", "expense", "equity"])),
                        name="chk_account_group_nature_valid",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Ledger",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("ledger_name", models.CharField(max_length=150)),
                ("ledger_code", models.CharField(blank=True, default="", max_length=30)),
                (
                    "opening_balance",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Signed opening balance in the ledger's natural direction",
                        max_digits=15,
                    ),
                ),
                (
                    "current_balance",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        editable=False,
                        help_text="Running balance maintained by posting and cancellation",
                        max_digits=15,
                    ),
                ),
                (
                    "balance_type",
                    models.CharField(
                        blank=True,
                        choices=[("debit", "Debit"), ("credit", "Credit")],
                        help_text="Normal balance side; defaults from the account group nature",
                        max_length=6,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "account_group",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledgers",
                        to="accounting.accountgroup",
                    ),
                ),
            ],
            options={
                "verbose_name": "Ledger",
                "verbose_name_plural": "Ledgers",
                "db_table": "ledgers",
                "ordering": ["ledger_name", "id"],
                "indexes": [
                    models.Index(fields=["ledger_name"], name="idx_ledger_name"),
                    models.Index(fields=["account_group"], name="idx_ledger_group"),
                    models.Index(fields=["is_active"], name="idx_ledger_active"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("ledger_code", ""), _negated=True),
                        fields=("ledger_code",),
                        name="uniq_ledger_code_not_blank",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("ledger_name", ""), _negated=True),
                        name="chk_ledger_name_not_blank",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("balance_type__in", ["debit", "credit"])),
                        name="chk_ledger_balance_type_valid",
                    ),
                ],
            },
        ),
    ]
