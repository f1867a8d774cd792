# vouchers/models/voucher_item.py

"""
VOUCHER ITEM (POSTED STOCK LINE)

Written by posting for sales / purchase invoices.

GUARANTEES:
- Append-only
- amount = quantity * rate (2dp)
- unit_cost / avg_cost_before / avg_cost_after snapshot the valuation at
  posting so cancellation can reverse it exactly
"""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from .voucher import Voucher


class VoucherItem(models.Model):
    voucher = models.ForeignKey(
        Voucher,
        on_delete=models.PROTECT,
        related_name="items",
    )
    item = models.ForeignKey(
        "inventory.InventoryItem",
        on_delete=models.PROTECT,
        related_name="voucher_items",
    )

    quantity = models.DecimalField(max_digits=14, decimal_places=3)
    rate = models.DecimalField(max_digits=15, decimal_places=2)
    amount = models.DecimalField(max_digits=15, decimal_places=2)

    unit_cost = models.DecimalField(
        max_digits=18,
        decimal_places=4,
        help_text="Cost basis per unit (avg_cost for sales, rate for purchases)",
    )
    avg_cost_before = models.DecimalField(max_digits=18, decimal_places=4)
    avg_cost_after = models.DecimalField(max_digits=18, decimal_places=4)

    stock_shortfall = models.DecimalField(
        max_digits=14,
        decimal_places=3,
        default=Decimal("0.000"),
        help_text="Quantity sold beyond stock on hand (only when negative stock is allowed)",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "voucher_items"
        ordering = ["voucher", "id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0) & Q(rate__gte=0) & Q(amount__gte=0),
                name="chk_voucher_item_amounts",
            ),
        ]

    @property
    def cost_amount(self) -> Decimal:
        return (self.unit_cost * self.quantity).quantize(Decimal("0.01"))

    def __str__(self):
        return f"{self.voucher_id} | {self.item_id} | {self.quantity} @ {self.rate}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("VoucherItem records are immutable")
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("VoucherItem records are immutable and cannot be deleted")
