# accounting/api/serializers/chart.py

from rest_framework import serializers

from accounting.models import AccountGroup, Ledger


class AccountGroupSerializer(serializers.ModelSerializer):
    parent_code = serializers.CharField(source="parent.group_code", read_only=True, default=None)

    class Meta:
        model = AccountGroup
        fields = (
            "id",
            "group_code",
            "name",
            "nature",
            "affects_gross_profit",
            "parent",
            "parent_code",
            "is_active",
        )
        read_only_fields = fields


class LedgerSerializer(serializers.ModelSerializer):
    group_code = serializers.CharField(source="account_group.group_code", read_only=True)
    group_name = serializers.CharField(source="account_group.name", read_only=True)
    nature = serializers.CharField(source="account_group.nature", read_only=True)

    class Meta:
        model = Ledger
        fields = (
            "id",
            "ledger_name",
            "ledger_code",
            "account_group",
            "group_code",
            "group_name",
            "nature",
            "opening_balance",
            "current_balance",
            "balance_type",
            "is_active",
        )
        read_only_fields = fields


class AsOfQuerySerializer(serializers.Serializer):
    as_of = serializers.DateField()


class StatementQuerySerializer(serializers.Serializer):
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        d1 = attrs.get("date_from")
        d2 = attrs.get("date_to")
        if d1 and d2 and d1 > d2:
            raise serializers.ValidationError("date_from must be on or before date_to")
        return attrs


class StatementLineSerializer(serializers.Serializer):
    entry_id = serializers.IntegerField()
    entry_date = serializers.DateField()
    voucher_id = serializers.IntegerField()
    voucher_number = serializers.CharField()
    voucher_type = serializers.CharField()
    narration = serializers.CharField()
    debit = serializers.DecimalField(max_digits=15, decimal_places=2)
    credit = serializers.DecimalField(max_digits=15, decimal_places=2)
    balance = serializers.DecimalField(max_digits=15, decimal_places=2)
    is_reversal = serializers.BooleanField()


class LedgerStatementSerializer(serializers.Serializer):
    ledger = LedgerSerializer()
    date_from = serializers.DateField(allow_null=True)
    date_to = serializers.DateField(allow_null=True)
    opening_balance = serializers.DecimalField(max_digits=15, decimal_places=2)
    closing_balance = serializers.DecimalField(max_digits=15, decimal_places=2)
    total_debit = serializers.DecimalField(max_digits=15, decimal_places=2)
    total_credit = serializers.DecimalField(max_digits=15, decimal_places=2)
    lines = StatementLineSerializer(many=True)
