# vouchers/models/ledger_entry.py

"""
======================================================
PATH: vouchers/models/ledger_entry.py
======================================================
VOUCHER LEDGER ENTRY (POSTED LINE)

One debit or credit against one ledger, written by posting or cancellation.

Guarantees:
- Append-only (no updates, no deletes)
- Exactly one of debit_amount / credit_amount is non-zero, both >= 0
- A reversal entry mirrors exactly one original entry (reverses)
- entry_date is the accounting effective date used by as-of reports
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from .voucher import Voucher


class VoucherLedgerEntry(models.Model):
    voucher = models.ForeignKey(
        Voucher,
        on_delete=models.PROTECT,
        related_name="ledger_entries",
    )
    ledger = models.ForeignKey(
        "accounting.Ledger",
        on_delete=models.PROTECT,
        related_name="voucher_entries",
    )

    debit_amount = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))
    credit_amount = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))

    entry_date = models.DateField()

    is_reversal = models.BooleanField(default=False)
    reverses = models.OneToOneField(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="reversal",
    )

    narration = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "voucher_ledger_entries"
        ordering = ["voucher", "id"]
        verbose_name = "Voucher Ledger Entry"
        verbose_name_plural = "Voucher Ledger Entries"
        indexes = [
            models.Index(fields=["ledger", "entry_date"], name="idx_vle_ledger_date"),
            models.Index(fields=["voucher"], name="idx_vle_voucher"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(debit_amount__gte=0) & Q(credit_amount__gte=0),
                name="chk_vle_non_negative",
            ),
            models.CheckConstraint(
                condition=(
                    (Q(debit_amount__gt=0) & Q(credit_amount=0))
                    | (Q(credit_amount__gt=0) & Q(debit_amount=0))
                ),
                name="chk_vle_one_side",
            ),
        ]

    def __str__(self):
        side = f"Dr {self.debit_amount}" if self.debit_amount else f"Cr {self.credit_amount}"
        return f"{self.voucher_id} | {self.ledger_id} | {side}"

    def clean(self):
        if self.is_reversal != bool(self.reverses_id):
            raise ValidationError("Reversal entries must reference the entry they reverse")

        if self.reverses_id:
            original = self.reverses
            if (
                original.ledger_id != self.ledger_id
                or original.debit_amount != self.credit_amount
                or original.credit_amount != self.debit_amount
            ):
                raise ValidationError("A reversal must mirror its original entry")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("VoucherLedgerEntry records are immutable")
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("VoucherLedgerEntry records are immutable and cannot be deleted")
