# vouchers/api/serializers.py

"""
VOUCHER SERIALIZERS

Output:
- VoucherSerializer: header + draft lines (draft) or posted entries / items
Input:
- VoucherDraftInputSerializer: create a draft
- VoucherDraftUpdateSerializer: edit a draft (partial)
- PostVoucherSerializer / CancelVoucherSerializer: transition payloads
"""

from rest_framework import serializers

from vouchers.models import (
    Voucher,
    VoucherDraftItem,
    VoucherDraftLine,
    VoucherItem,
    VoucherLedgerEntry,
)


# ==========================================================
# OUTPUT
# ==========================================================


class VoucherDraftLineSerializer(serializers.ModelSerializer):
    ledger_name = serializers.CharField(source="ledger.ledger_name", read_only=True)

    class Meta:
        model = VoucherDraftLine
        fields = ("line_no", "ledger", "ledger_name", "debit_amount", "credit_amount", "narration")
        read_only_fields = fields


class VoucherDraftItemSerializer(serializers.ModelSerializer):
    item_name = serializers.CharField(source="item.item_name", read_only=True)

    class Meta:
        model = VoucherDraftItem
        fields = ("line_no", "item", "item_name", "quantity", "rate")
        read_only_fields = fields


class VoucherLedgerEntrySerializer(serializers.ModelSerializer):
    ledger_name = serializers.CharField(source="ledger.ledger_name", read_only=True)

    class Meta:
        model = VoucherLedgerEntry
        fields = (
            "id",
            "ledger",
            "ledger_name",
            "debit_amount",
            "credit_amount",
            "entry_date",
            "is_reversal",
            "reverses",
            "narration",
            "created_at",
        )
        read_only_fields = fields


class VoucherItemSerializer(serializers.ModelSerializer):
    item_name = serializers.CharField(source="item.item_name", read_only=True)

    class Meta:
        model = VoucherItem
        fields = (
            "id",
            "item",
            "item_name",
            "quantity",
            "rate",
            "amount",
            "unit_cost",
            "avg_cost_before",
            "avg_cost_after",
            "stock_shortfall",
        )
        read_only_fields = fields


class VoucherListSerializer(serializers.ModelSerializer):
    party_ledger_name = serializers.CharField(
        source="party_ledger.ledger_name", read_only=True, default=None
    )

    class Meta:
        model = Voucher
        fields = (
            "id",
            "voucher_number",
            "voucher_type",
            "voucher_date",
            "status",
            "total_amount",
            "party_ledger",
            "party_ledger_name",
            "reference_number",
            "narration",
            "version",
        )
        read_only_fields = fields


class VoucherSerializer(VoucherListSerializer):
    draft_lines = VoucherDraftLineSerializer(many=True, read_only=True)
    draft_items = VoucherDraftItemSerializer(many=True, read_only=True)
    ledger_entries = VoucherLedgerEntrySerializer(many=True, read_only=True)
    items = VoucherItemSerializer(many=True, read_only=True)

    class Meta(VoucherListSerializer.Meta):
        fields = VoucherListSerializer.Meta.fields + (
            "posted_at",
            "cancelled_at",
            "cancellation_reason",
            "created_at",
            "updated_at",
            "draft_lines",
            "draft_items",
            "ledger_entries",
            "items",
        )
        read_only_fields = fields


# ==========================================================
# INPUT
# ==========================================================


class EntryInputSerializer(serializers.Serializer):
    ledger_id = serializers.IntegerField()
    debit = serializers.DecimalField(max_digits=15, decimal_places=2, required=False, min_value=0)
    credit = serializers.DecimalField(max_digits=15, decimal_places=2, required=False, min_value=0)
    narration = serializers.CharField(required=False, allow_blank=True, default="")


class ItemInputSerializer(serializers.Serializer):
    item_id = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=14, decimal_places=3)
    rate = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=0)


class VoucherDraftInputSerializer(serializers.Serializer):
    voucher_type = serializers.ChoiceField(choices=Voucher.VoucherType.choices)
    voucher_date = serializers.DateField()
    party_ledger_id = serializers.IntegerField(required=False, allow_null=True)
    entries = EntryInputSerializer(many=True)
    items = ItemInputSerializer(many=True, required=False)
    narration = serializers.CharField(required=False, allow_blank=True, default="")
    reference_number = serializers.CharField(required=False, allow_blank=True, default="")
    voucher_number = serializers.CharField(required=False, allow_blank=True, default="")


class VoucherDraftUpdateSerializer(serializers.Serializer):
    expected_version = serializers.IntegerField(required=False, min_value=1)
    voucher_date = serializers.DateField(required=False)
    party_ledger_id = serializers.IntegerField(required=False, allow_null=True)
    entries = EntryInputSerializer(many=True, required=False)
    items = ItemInputSerializer(many=True, required=False)
    narration = serializers.CharField(required=False, allow_blank=True)
    reference_number = serializers.CharField(required=False, allow_blank=True)


class PostVoucherSerializer(serializers.Serializer):
    expected_version = serializers.IntegerField(required=False, min_value=1)


class CancelVoucherSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
    expected_version = serializers.IntegerField(required=False, min_value=1)
