# vouchers/tests/helpers.py

from decimal import Decimal

from django.utils import timezone

from accounting.models import AccountGroup, Ledger
from inventory.models import InventoryItem
from vouchers.models import Voucher
from vouchers.services.draft_builder import create_draft


def build_chart():
    """Minimal chart: one group per nature and the ledgers the tests post to."""
    assets = AccountGroup.objects.create(group_code="1", name="Assets", nature=AccountGroup.ASSET)
    liabilities = AccountGroup.objects.create(
        group_code="2", name="Liabilities", nature=AccountGroup.LIABILITY
    )
    income = AccountGroup.objects.create(group_code="3", name="Income", nature=AccountGroup.INCOME)
    expenses = AccountGroup.objects.create(
        group_code="4", name="Expenses", nature=AccountGroup.EXPENSE
    )

    return {
        "cash": Ledger.objects.create(
            ledger_name="Cash", ledger_code="CASH", account_group=assets,
            opening_balance=Decimal("1000.00"),
        ),
        "bank": Ledger.objects.create(ledger_name="Bank", ledger_code="BANK", account_group=assets),
        "stock": Ledger.objects.create(ledger_name="Stock", ledger_code="STOCK", account_group=assets),
        "creditors": Ledger.objects.create(
            ledger_name="Creditors", ledger_code="CREDITORS", account_group=liabilities
        ),
        "sales": Ledger.objects.create(ledger_name="Sales", ledger_code="SALES", account_group=income),
        "rent": Ledger.objects.create(ledger_name="Rent", ledger_code="RENT", account_group=expenses),
    }


def make_item(name="Widget", quantity="10", avg_cost="5.00"):
    return InventoryItem.objects.create(
        item_name=name,
        opening_balance=Decimal(quantity),
        avg_cost=Decimal(avg_cost),
    )


def journal(debit_ledger, credit_ledger, amount, *, voucher_date=None, **kwargs):
    return create_draft(
        voucher_type=Voucher.VoucherType.JOURNAL,
        voucher_date=voucher_date or timezone.localdate(),
        entries=[
            {"ledger_id": debit_ledger.id, "debit": amount},
            {"ledger_id": credit_ledger.id, "credit": amount},
        ],
        **kwargs,
    )


def balance_of(ledger):
    return Ledger.objects.get(pk=ledger.pk).current_balance


def refresh(instance):
    return type(instance).objects.get(pk=instance.pk)
