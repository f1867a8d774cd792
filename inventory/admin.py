# inventory/admin.py

from django.contrib import admin

from inventory.models import InventoryItem, InventoryMovement


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ("item_name", "item_code", "unit", "quantity_on_hand", "avg_cost", "is_active")
    list_filter = ("is_active",)
    search_fields = ("item_name", "item_code")
    ordering = ("item_name",)
    readonly_fields = ("quantity_on_hand", "created_at", "updated_at")


# ============================================================
# INVENTORY MOVEMENT (READ-ONLY)
# ============================================================


@admin.register(InventoryMovement)
class InventoryMovementAdmin(admin.ModelAdmin):
    list_display = ("item", "reason", "direction", "quantity", "unit_cost", "voucher", "created_at")
    list_filter = ("reason", "direction")
    search_fields = ("item__item_name", "voucher__voucher_number")
    ordering = ("-created_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
