# accounting/models/ledger.py

"""
======================================================
PATH: accounting/models/ledger.py
======================================================
LEDGER MODEL

A named account ("Cash", "Sales", a customer) whose balance accumulates
from posted vouchers.

Guarantees:
- current_balance starts at opening_balance
- current_balance is NEVER written by save() on an existing row; it only
  moves through accounting.services.ledger_balance (posting / cancellation)
- opening_balance and balance_type are frozen once the ledger has entries
- Ledgers with entries cannot be deleted

Sign convention:
- Balances are signed in the ledger's natural direction.
  A debit-normal ledger with a positive balance has a debit balance.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.db.models import Q

from accounting.models.account_group import AccountGroup


class Ledger(models.Model):
    DEBIT = "debit"
    CREDIT = "credit"

    BALANCE_TYPE_CHOICES = [
        (DEBIT, "Debit"),
        (CREDIT, "Credit"),
    ]

    ledger_name = models.CharField(max_length=150)
    ledger_code = models.CharField(max_length=30, blank=True, default="")

    account_group = models.ForeignKey(
        AccountGroup,
        on_delete=models.PROTECT,
        related_name="ledgers",
    )

    opening_balance = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Signed opening balance in the ledger's natural direction",
    )
    current_balance = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal("0.00"),
        editable=False,
        help_text="Running balance maintained by posting and cancellation",
    )

    balance_type = models.CharField(
        max_length=6,
        choices=BALANCE_TYPE_CHOICES,
        blank=True,
        help_text="Normal balance side; defaults from the account group nature",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "ledgers"
        ordering = ["ledger_name", "id"]
        verbose_name = "Ledger"
        verbose_name_plural = "Ledgers"
        indexes = [
            models.Index(fields=["ledger_name"], name="idx_ledger_name"),
            models.Index(fields=["account_group"], name="idx_ledger_group"),
            models.Index(fields=["is_active"], name="idx_ledger_active"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["ledger_code"],
                condition=~Q(ledger_code=""),
                name="uniq_ledger_code_not_blank",
            ),
            models.CheckConstraint(
                condition=~Q(ledger_name=""),
                name="chk_ledger_name_not_blank",
            ),
            models.CheckConstraint(
                condition=Q(balance_type__in=["debit", "credit"]),
                name="chk_ledger_balance_type_valid",
            ),
        ]

    def __str__(self):
        if self.ledger_code:
            return f"{self.ledger_code} – {self.ledger_name}"
        return self.ledger_name

    @property
    def is_debit_normal(self) -> bool:
        return self.balance_type == self.DEBIT

    def has_entries(self) -> bool:
        if not self.pk:
            return False
        return self.voucher_entries.exists()

    def clean(self):
        self.ledger_name = (self.ledger_name or "").strip()
        self.ledger_code = (self.ledger_code or "").strip()

        if not self.ledger_name:
            raise ValidationError("ledger_name is required")

        if not self.balance_type and self.account_group_id:
            self.balance_type = self.account_group.default_balance_type

        if self.opening_balance is None:
            self.opening_balance = Decimal("0.00")

        if self.pk and self.has_entries():
            previous = (
                type(self)
                .objects.filter(pk=self.pk)
                .values("opening_balance", "balance_type")
                .first()
            )
            if previous and (
                previous["opening_balance"] != self.opening_balance
                or previous["balance_type"] != self.balance_type
            ):
                raise ValidationError(
                    f"Ledger '{self.ledger_name}' has posted entries; "
                    "opening_balance and balance_type are frozen"
                )

    def save(self, *args, **kwargs):
        if not self.pk:
            self.full_clean()
            self.current_balance = self.opening_balance
            return super().save(*args, **kwargs)

        # Row lock: posting moves current_balance under the same lock.
        with transaction.atomic():
            previous = (
                type(self)
                .objects.select_for_update()
                .filter(pk=self.pk)
                .values_list("current_balance", flat=True)
                .first()
            )
            self.full_clean()

            if previous is None:
                self.current_balance = self.opening_balance
                return super().save(*args, **kwargs)

            update_fields = kwargs.get("update_fields")
            if update_fields is None:
                update_fields = [f.name for f in self._meta.concrete_fields if not f.primary_key]

            if self.has_entries():
                self.current_balance = previous
                update_fields = [f for f in update_fields if f != "current_balance"]
            else:
                # No activity yet: the running balance is the opening balance.
                self.current_balance = self.opening_balance
                if "opening_balance" in update_fields:
                    update_fields = set(update_fields) | {"current_balance"}

            kwargs["update_fields"] = update_fields
            return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.has_entries():
            raise ValidationError("Ledgers with voucher entries cannot be deleted")
        return super().delete(*args, **kwargs)
