# vouchers/models/sequence.py

"""
VOUCHER NUMBERING SERIES

One row per voucher type. next_number is read and bumped under
select_for_update (see vouchers.services.numbering).
"""

from django.db import models

from .voucher import Voucher


class VoucherSequence(models.Model):
    DEFAULT_PREFIXES = {
        Voucher.VoucherType.SALES_INVOICE: "SI",
        Voucher.VoucherType.PURCHASE_INVOICE: "PI",
        Voucher.VoucherType.PAYMENT: "PAY",
        Voucher.VoucherType.RECEIPT: "RCT",
        Voucher.VoucherType.JOURNAL: "JV",
        Voucher.VoucherType.CONTRA: "CTR",
    }

    voucher_type = models.CharField(
        max_length=20,
        choices=Voucher.VoucherType.choices,
        unique=True,
    )
    prefix = models.CharField(max_length=10)
    next_number = models.PositiveIntegerField(default=1)
    padding = models.PositiveSmallIntegerField(default=5)

    class Meta:
        db_table = "voucher_sequences"
        ordering = ["voucher_type"]

    def format_number(self, number: int) -> str:
        return f"{self.prefix}-{number:0{self.padding}d}"

    def __str__(self):
        return f"{self.voucher_type}: next {self.format_number(self.next_number)}"
