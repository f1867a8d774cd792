# inventory/models/inventory_movement.py

"""
INVENTORY MOVEMENT LEDGER

Immutable record of every quantity / valuation change made by voucher
posting or cancellation.

GUARANTEES:
- Append-only (no updates, no deletes)
- Direction validated against reason
- quantity_after / avg_cost_after snapshot the item right after the change
"""

from django.core.exceptions import ValidationError
from django.db import models

from .inventory_item import InventoryItem


class InventoryMovement(models.Model):
    class Direction(models.TextChoices):
        IN = "IN", "Stock In"
        OUT = "OUT", "Stock Out"

    class Reason(models.TextChoices):
        PURCHASE = "PURCHASE", "Purchase"
        SALE = "SALE", "Sale"
        PURCHASE_REVERSAL = "PURCHASE_REVERSAL", "Purchase Cancelled"
        SALE_REVERSAL = "SALE_REVERSAL", "Sale Cancelled"

    REASON_TO_DIRECTION = {
        Reason.PURCHASE: Direction.IN,
        Reason.SALE_REVERSAL: Direction.IN,
        Reason.SALE: Direction.OUT,
        Reason.PURCHASE_REVERSAL: Direction.OUT,
    }

    item = models.ForeignKey(
        InventoryItem, on_delete=models.PROTECT, related_name="movements"
    )
    voucher = models.ForeignKey(
        "vouchers.Voucher",
        on_delete=models.PROTECT,
        related_name="inventory_movements",
    )

    direction = models.CharField(max_length=3, choices=Direction.choices)
    reason = models.CharField(max_length=20, choices=Reason.choices)

    quantity = models.DecimalField(max_digits=14, decimal_places=3)
    unit_cost = models.DecimalField(max_digits=18, decimal_places=4)

    quantity_after = models.DecimalField(max_digits=14, decimal_places=3)
    avg_cost_after = models.DecimalField(max_digits=18, decimal_places=4)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "inventory_movements"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["item", "created_at"], name="idx_inv_move_item_created"),
            models.Index(fields=["reason"], name="idx_inv_move_reason"),
        ]

    def clean(self):
        if self.quantity is None or self.quantity <= 0:
            raise ValidationError("quantity must be greater than zero")

        expected = self.REASON_TO_DIRECTION.get(self.reason)
        if expected and self.direction != expected:
            raise ValidationError(f"{self.reason} requires direction={expected}")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("InventoryMovement records are immutable")
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("InventoryMovement records are immutable and cannot be deleted")

    def __str__(self):
        return f"{self.item.item_name} | {self.reason} | {self.quantity}"
