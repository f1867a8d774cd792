# accounting/models/account_group.py

"""
======================================================
PATH: accounting/models/account_group.py
======================================================
ACCOUNT GROUP MODEL

Top of the chart of accounts. Every ledger belongs to exactly one group,
and the group's nature decides the ledger's normal balance side.

Guarantees:
- group_code is unique and normalized (trimmed)
- Child groups share their parent's nature
- group_code / nature / parent are frozen once any ledger in the group
  carries a voucher entry
- Groups with ledgers cannot be deleted
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class AccountGroup(models.Model):
    ASSET = "asset"
    LIABILITY = "liability"
    INCOME = "income"
    EXPENSE = "expense"
    EQUITY = "equity"

    NATURE_CHOICES = [
        (ASSET, "Asset"),
        (LIABILITY, "Liability"),
        (INCOME, "Income"),
        (EXPENSE, "Expense"),
        (EQUITY, "Equity"),
    ]

    # Natures whose ledgers grow on the debit side.
    DEBIT_NATURES = frozenset({ASSET, EXPENSE})

    FROZEN_FIELDS = ("group_code", "nature", "parent_id")

    group_code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=150)

    nature = models.CharField(max_length=20, choices=NATURE_CHOICES)

    affects_gross_profit = models.BooleanField(
        default=False,
        help_text="True for trading groups (sales, purchases, direct expenses/incomes)",
    )

    parent = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="children",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "account_groups"
        ordering = ["group_code"]
        verbose_name = "Account Group"
        verbose_name_plural = "Account Groups"
        indexes = [
            models.Index(fields=["nature"], name="idx_account_group_nature"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(group_code=""),
                name="chk_account_group_code_not_blank",
            ),
            models.CheckConstraint(
                condition=Q(nature__in=["asset", "liability", "income", "expense", "equity"]),
                name="chk_account_group_nature_valid",
            ),
        ]

    def __str__(self):
        return f"{self.group_code} – {self.name}"

    @property
    def default_balance_type(self) -> str:
        return "debit" if self.nature in self.DEBIT_NATURES else "credit"

    def has_activity(self) -> bool:
        if not self.pk:
            return False
        return self.ledgers.filter(voucher_entries__isnull=False).exists()

    def clean(self):
        self.group_code = (self.group_code or "").strip()
        self.name = (self.name or "").strip()

        if not self.group_code:
            raise ValidationError("group_code is required")
        if not self.name:
            raise ValidationError("Account group name is required")

        if self.parent_id:
            if self.pk and self.parent_id == self.pk:
                raise ValidationError("An account group cannot be its own parent")
            if self.parent.nature != self.nature:
                raise ValidationError(
                    f"Group nature '{self.nature}' must match parent nature '{self.parent.nature}'"
                )

        if self.pk:
            previous = type(self).objects.filter(pk=self.pk).values(*self.FROZEN_FIELDS).first()
            if previous and self.has_activity():
                changed = [f for f in self.FROZEN_FIELDS if previous[f] != getattr(self, f)]
                if changed:
                    raise ValidationError(
                        f"Account group {self.group_code} has posted activity; "
                        f"cannot change {', '.join(changed)}"
                    )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.ledgers.exists():
            raise ValidationError("Account groups with ledgers cannot be deleted")
        return super().delete(*args, **kwargs)
