# vouchers/models/draft_line.py

"""
======================================================
PATH: vouchers/models/draft_line.py
======================================================
DRAFT CONTENT

Proposed ledger lines and stock lines of a draft voucher.

Guarantees:
- Zero accounting effect: nothing here touches ledgers or inventory
- Replaced wholesale when a draft is edited
- Locked once the voucher leaves draft (posting copies them into
  VoucherLedgerEntry / VoucherItem)
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from .voucher import Voucher


def _voucher_is_draft(voucher_id) -> bool:
    status = Voucher.objects.filter(pk=voucher_id).values_list("status", flat=True).first()
    return status == Voucher.Status.DRAFT


class VoucherDraftLine(models.Model):
    voucher = models.ForeignKey(
        Voucher,
        on_delete=models.CASCADE,
        related_name="draft_lines",
    )
    line_no = models.PositiveIntegerField()

    ledger = models.ForeignKey(
        "accounting.Ledger",
        on_delete=models.PROTECT,
        related_name="draft_lines",
    )

    debit_amount = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))
    credit_amount = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))

    narration = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "voucher_draft_lines"
        ordering = ["voucher", "line_no"]
        constraints = [
            models.UniqueConstraint(
                fields=["voucher", "line_no"],
                name="uniq_voucher_draft_line_no",
            ),
            models.CheckConstraint(
                condition=Q(debit_amount__gte=0) & Q(credit_amount__gte=0),
                name="chk_draft_line_non_negative",
            ),
            models.CheckConstraint(
                condition=(
                    (Q(debit_amount__gt=0) & Q(credit_amount=0))
                    | (Q(credit_amount__gt=0) & Q(debit_amount=0))
                ),
                name="chk_draft_line_one_side",
            ),
        ]

    def __str__(self):
        side = f"Dr {self.debit_amount}" if self.debit_amount else f"Cr {self.credit_amount}"
        return f"{self.voucher_id}#{self.line_no} {side}"

    def save(self, *args, **kwargs):
        if not _voucher_is_draft(self.voucher_id):
            raise ValidationError("Lines can only be written on draft vouchers")
        self.full_clean()
        return super().save(*args, **kwargs)


class VoucherDraftItem(models.Model):
    voucher = models.ForeignKey(
        Voucher,
        on_delete=models.CASCADE,
        related_name="draft_items",
    )
    line_no = models.PositiveIntegerField()

    item = models.ForeignKey(
        "inventory.InventoryItem",
        on_delete=models.PROTECT,
        related_name="draft_items",
    )

    quantity = models.DecimalField(max_digits=14, decimal_places=3)
    rate = models.DecimalField(max_digits=15, decimal_places=2)

    class Meta:
        db_table = "voucher_draft_items"
        ordering = ["voucher", "line_no"]
        constraints = [
            models.UniqueConstraint(
                fields=["voucher", "line_no"],
                name="uniq_voucher_draft_item_line_no",
            ),
            models.CheckConstraint(
                condition=Q(quantity__gt=0) & Q(rate__gte=0),
                name="chk_draft_item_qty_rate",
            ),
        ]

    def __str__(self):
        return f"{self.voucher_id}#{self.line_no} {self.quantity} @ {self.rate}"

    def save(self, *args, **kwargs):
        if not _voucher_is_draft(self.voucher_id):
            raise ValidationError("Items can only be written on draft vouchers")
        self.full_clean()
        return super().save(*args, **kwargs)
