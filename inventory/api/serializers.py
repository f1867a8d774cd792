# inventory/api/serializers.py

from decimal import Decimal, ROUND_HALF_UP

from rest_framework import serializers

from inventory.models import InventoryItem, InventoryMovement


class InventoryItemSerializer(serializers.ModelSerializer):
    stock_value = serializers.SerializerMethodField()

    class Meta:
        model = InventoryItem
        fields = (
            "id",
            "item_name",
            "item_code",
            "unit",
            "opening_balance",
            "quantity_on_hand",
            "avg_cost",
            "stock_value",
            "is_active",
        )
        read_only_fields = fields

    def get_stock_value(self, obj) -> str:
        return str(obj.stock_value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class InventoryMovementSerializer(serializers.ModelSerializer):
    voucher_number = serializers.CharField(source="voucher.voucher_number", read_only=True)

    class Meta:
        model = InventoryMovement
        fields = (
            "id",
            "voucher",
            "voucher_number",
            "direction",
            "reason",
            "quantity",
            "unit_cost",
            "quantity_after",
            "avg_cost_after",
            "created_at",
        )
        read_only_fields = fields
