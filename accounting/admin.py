# accounting/admin.py

from django.contrib import admin

from accounting.models import AccountGroup, Ledger

# ============================================================
# ACCOUNT GROUP
# ============================================================


@admin.register(AccountGroup)
class AccountGroupAdmin(admin.ModelAdmin):
    list_display = (
        "group_code",
        "name",
        "nature",
        "parent",
        "affects_gross_profit",
        "is_active",
    )
    list_filter = ("nature", "affects_gross_profit", "is_active")
    search_fields = ("group_code", "name")
    ordering = ("group_code",)
    readonly_fields = ("created_at", "updated_at")


# ============================================================
# LEDGER (current_balance is read-only)
# ============================================================


@admin.register(Ledger)
class LedgerAdmin(admin.ModelAdmin):
    list_display = (
        "ledger_name",
        "ledger_code",
        "account_group",
        "balance_type",
        "opening_balance",
        "current_balance",
        "is_active",
    )
    list_filter = ("balance_type", "is_active", "account_group__nature")
    search_fields = ("ledger_name", "ledger_code")
    ordering = ("ledger_name",)
    readonly_fields = ("current_balance", "created_at", "updated_at")

    fieldsets = (
        (
            "Ledger Identity",
            {
                "fields": ("ledger_name", "ledger_code", "account_group"),
            },
        ),
        (
            "Balances",
            {
                "fields": ("balance_type", "opening_balance", "current_balance"),
            },
        ),
        (
            "Status",
            {
                "fields": ("is_active",),
            },
        ),
        (
            "System Fields",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )

    def delete_model(self, request, obj):
        # Ledger.delete() refuses ledgers with entries.
        obj.delete()
