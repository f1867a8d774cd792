# vouchers/models/voucher.py

"""
======================================================
PATH: vouchers/models/voucher.py
======================================================
VOUCHER MODEL (HEADER)

A transaction document (invoice, payment, journal, ...).

Lifecycle:
- draft -> posted -> cancelled

Guarantees:
- Only drafts can be edited through save() or deleted
- Status transitions are written by the posting / cancellation services
  (queryset updates under a row lock), never by save()
- total_amount stays 0.00 until posting sets it to the debit total
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Voucher(models.Model):
    class VoucherType(models.TextChoices):
        SALES_INVOICE = "sales_invoice", "Sales Invoice"
        PURCHASE_INVOICE = "purchase_invoice", "Purchase Invoice"
        PAYMENT = "payment", "Payment"
        RECEIPT = "receipt", "Receipt"
        JOURNAL = "journal", "Journal"
        CONTRA = "contra", "Contra"

    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        POSTED = "posted", "Posted"
        CANCELLED = "cancelled", "Cancelled"

    # Voucher types that move inventory when posted.
    STOCK_TYPES = frozenset({VoucherType.SALES_INVOICE, VoucherType.PURCHASE_INVOICE})

    voucher_number = models.CharField(max_length=30, unique=True)
    voucher_type = models.CharField(max_length=20, choices=VoucherType.choices)
    voucher_date = models.DateField()

    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.DRAFT,
    )

    total_amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Debit total, set at posting",
    )

    party_ledger = models.ForeignKey(
        "accounting.Ledger",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="party_vouchers",
    )

    narration = models.TextField(blank=True, default="")
    reference_number = models.CharField(max_length=100, blank=True, default="")

    version = models.PositiveIntegerField(
        default=1,
        help_text="Bumped on every draft edit and status change (optimistic concurrency)",
    )

    posted_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="vouchers_created",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "vouchers"
        ordering = ["-voucher_date", "-voucher_number"]
        indexes = [
            models.Index(fields=["voucher_type", "status"], name="idx_voucher_type_status"),
            models.Index(fields=["voucher_date"], name="idx_voucher_date"),
            models.Index(fields=["status"], name="idx_voucher_status"),
            models.Index(fields=["reference_number"], name="idx_voucher_reference"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(voucher_number=""),
                name="chk_voucher_number_not_blank",
            ),
            models.CheckConstraint(
                condition=Q(total_amount__gte=0),
                name="chk_voucher_total_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.voucher_number} ({self.get_voucher_type_display()}, {self.status})"

    @property
    def is_draft(self) -> bool:
        return self.status == self.Status.DRAFT

    @property
    def affects_stock(self) -> bool:
        return self.voucher_type in self.STOCK_TYPES

    def clean(self):
        self.voucher_number = (self.voucher_number or "").strip()
        self.narration = (self.narration or "").strip()
        self.reference_number = (self.reference_number or "").strip()

        if not self.voucher_number:
            raise ValidationError("voucher_number is required")

    def save(self, *args, **kwargs):
        if self.pk:
            stored = type(self).objects.filter(pk=self.pk).values_list("status", flat=True).first()
            if stored is not None and stored != self.Status.DRAFT:
                raise ValidationError(
                    f"Voucher {self.voucher_number} is {stored}; only drafts can be edited"
                )

        if self.status != self.Status.DRAFT:
            raise ValidationError("Voucher status changes only through posting or cancellation")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        stored = type(self).objects.filter(pk=self.pk).values_list("status", flat=True).first()
        if stored != self.Status.DRAFT:
            raise ValidationError("Only draft vouchers can be deleted")
        return super().delete(*args, **kwargs)
