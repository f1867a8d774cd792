# vouchers/admin.py

"""
Vouchers are read-only in admin: drafts are edited through the API and
transitions only happen through the posting / cancellation services.
"""

from django.contrib import admin

from vouchers.models import (
    Voucher,
    VoucherItem,
    VoucherLedgerEntry,
    VoucherSequence,
)


class ReadOnlyAdminMixin:
    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class VoucherLedgerEntryInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = VoucherLedgerEntry
    fk_name = "voucher"
    extra = 0
    fields = ("ledger", "debit_amount", "credit_amount", "entry_date", "is_reversal")
    readonly_fields = fields


class VoucherItemInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = VoucherItem
    extra = 0
    fields = ("item", "quantity", "rate", "amount", "unit_cost")
    readonly_fields = fields


@admin.register(Voucher)
class VoucherAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "voucher_number",
        "voucher_type",
        "voucher_date",
        "status",
        "total_amount",
        "party_ledger",
    )
    list_filter = ("voucher_type", "status")
    search_fields = ("voucher_number", "reference_number", "narration")
    ordering = ("-voucher_date", "-voucher_number")
    inlines = [VoucherLedgerEntryInline, VoucherItemInline]


@admin.register(VoucherLedgerEntry)
class VoucherLedgerEntryAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("voucher", "ledger", "debit_amount", "credit_amount", "entry_date", "is_reversal")
    list_filter = ("is_reversal",)
    search_fields = ("voucher__voucher_number", "ledger__ledger_name")


@admin.register(VoucherSequence)
class VoucherSequenceAdmin(admin.ModelAdmin):
    list_display = ("voucher_type", "prefix", "next_number", "padding")
