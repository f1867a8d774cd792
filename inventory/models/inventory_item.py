# inventory/models/inventory_item.py

"""
======================================================
PATH: inventory/models/inventory_item.py
======================================================
INVENTORY ITEM MODEL

Stock item valued at weighted-average cost.

Guarantees:
- quantity_on_hand starts at opening_balance (opening quantity)
- quantity_on_hand / avg_cost are NEVER written by save() on an existing row;
  they only move through inventory.services.stock_valuation
- avg_cost is frozen after the first stock movement
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.db.models import Q


class InventoryItem(models.Model):
    item_name = models.CharField(max_length=150, unique=True)
    item_code = models.CharField(max_length=50, blank=True, default="")
    unit = models.CharField(max_length=20, default="nos")

    opening_balance = models.DecimalField(
        max_digits=14,
        decimal_places=3,
        default=Decimal("0.000"),
        help_text="Opening quantity",
    )
    quantity_on_hand = models.DecimalField(
        max_digits=14,
        decimal_places=3,
        default=Decimal("0.000"),
        editable=False,
    )
    avg_cost = models.DecimalField(
        max_digits=18,
        decimal_places=4,
        default=Decimal("0.0000"),
        help_text="Weighted-average unit cost",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "inventory_items"
        ordering = ["item_name"]
        verbose_name = "Inventory Item"
        verbose_name_plural = "Inventory Items"
        indexes = [
            models.Index(fields=["is_active"], name="idx_inventory_item_active"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(item_name=""),
                name="chk_inventory_item_name_not_blank",
            ),
            models.CheckConstraint(
                condition=Q(opening_balance__gte=0),
                name="chk_inventory_item_opening_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(avg_cost__gte=0),
                name="chk_inventory_item_avg_cost_non_negative",
            ),
        ]

    def __str__(self):
        return self.item_name

    @property
    def stock_value(self) -> Decimal:
        return (self.quantity_on_hand or Decimal("0")) * (self.avg_cost or Decimal("0"))

    def has_movements(self) -> bool:
        if not self.pk:
            return False
        return self.movements.exists()

    def clean(self):
        self.item_name = (self.item_name or "").strip()
        self.item_code = (self.item_code or "").strip()

        if not self.item_name:
            raise ValidationError("item_name is required")

        if self.pk and self.has_movements():
            previous = (
                type(self)
                .objects.filter(pk=self.pk)
                .values("opening_balance", "avg_cost")
                .first()
            )
            if previous and (
                previous["opening_balance"] != self.opening_balance
                or previous["avg_cost"] != self.avg_cost
            ):
                raise ValidationError(
                    f"'{self.item_name}' has stock movements; opening_balance and avg_cost are frozen"
                )

    def save(self, *args, **kwargs):
        if not self.pk:
            self.full_clean()
            self.quantity_on_hand = self.opening_balance
            return super().save(*args, **kwargs)

        # Row lock: valuation moves quantity_on_hand under the same lock.
        with transaction.atomic():
            previous = (
                type(self)
                .objects.select_for_update()
                .filter(pk=self.pk)
                .values_list("quantity_on_hand", flat=True)
                .first()
            )
            self.full_clean()

            if previous is None:
                self.quantity_on_hand = self.opening_balance
                return super().save(*args, **kwargs)

            update_fields = kwargs.get("update_fields")
            if update_fields is None:
                update_fields = [f.name for f in self._meta.concrete_fields if not f.primary_key]

            if self.has_movements():
                self.quantity_on_hand = previous
                update_fields = [f for f in update_fields if f != "quantity_on_hand"]
            else:
                self.quantity_on_hand = self.opening_balance
                if "opening_balance" in update_fields:
                    update_fields = set(update_fields) | {"quantity_on_hand"}

            kwargs["update_fields"] = update_fields
            return super().save(*args, **kwargs)
