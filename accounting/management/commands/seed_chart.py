# accounting/management/commands/seed_chart.py

"""
Seed the default chart of accounts (idempotent).

- Hierarchical account groups keyed by dotted group_code
- Default ledgers (Cash, Bank, Sales, Purchases, ...)
- Voucher numbering series for every voucher type

Re-running fixes names / flags but never touches balances.
"""

from django.core.management.base import BaseCommand
from django.db import transaction

from accounting.models import AccountGroup, Ledger
from vouchers.models import Voucher
from vouchers.services.numbering import get_or_create_sequence

A = AccountGroup.ASSET
L = AccountGroup.LIABILITY
I = AccountGroup.INCOME
E = AccountGroup.EXPENSE
EQ = AccountGroup.EQUITY

# (group_code, name, nature, affects_gross_profit)
GROUPS = [
    # ASSETS
    ("1", "Assets", A, False),
    ("1.1", "Non-Current Assets", A, False),
    ("1.1.1", "Fixed Assets", A, False),
    ("1.1.2", "Non-Current Investments", A, False),
    ("1.1.4", "Long-term Loans & Advances", A, False),
    ("1.2", "Current Assets", A, False),
    ("1.2.1", "Inventories", A, False),
    ("1.2.2", "Trade Receivables", A, False),
    ("1.2.3", "Cash & Cash Equivalents", A, False),
    ("1.2.3.1", "Cash-in-Hand", A, False),
    ("1.2.3.2", "Bank Accounts", A, False),
    ("1.2.4", "Short-term Loans & Advances", A, False),
    ("1.2.5", "Other Current Assets", A, False),
    # LIABILITIES
    ("2", "Liabilities", L, False),
    ("2.2", "Non-Current Liabilities", L, False),
    ("2.2.1", "Long-term Borrowings", L, False),
    ("2.3", "Current Liabilities", L, False),
    ("2.3.1", "Short-term Borrowings", L, False),
    ("2.3.2", "Trade Payables", L, False),
    ("2.3.3", "Duties & Taxes", L, False),
    ("2.3.4", "Short-term Provisions", L, False),
    # INCOME
    ("3", "Income", I, False),
    ("3.1", "Revenue from Operations", I, True),
    ("3.1.1", "Sales Accounts", I, True),
    ("3.1.2", "Service Income", I, True),
    ("3.2", "Other Income", I, False),
    ("3.2.1", "Interest Income", I, False),
    ("3.2.5", "Discount Received", I, False),
    # EXPENSES
    ("4", "Expenses", E, False),
    ("4.1", "Direct Expenses", E, True),
    ("4.1.1", "Purchase Accounts", E, True),
    ("4.1.5", "Freight & Forwarding", E, True),
    ("4.2", "Indirect Expenses", E, False),
    ("4.2.1", "Employee Benefits", E, False),
    ("4.2.2", "Administrative Expenses", E, False),
    ("4.2.4", "Financial Expenses", E, False),
    ("4.2.5", "Depreciation & Amortization", E, False),
    # EQUITY
    ("5", "Equity", EQ, False),
    ("5.1", "Share Capital", EQ, False),
    ("5.2", "Reserves & Surplus", EQ, False),
]

# (ledger_code, ledger_name, group_code)
LEDGERS = [
    ("CASH", "Cash", "1.2.3.1"),
    ("BANK", "Bank", "1.2.3.2"),
    ("STOCK", "Stock in Hand", "1.2.1"),
    ("DEBTORS", "Sundry Debtors", "1.2.2"),
    ("CREDITORS", "Sundry Creditors", "2.3.2"),
    ("GST-OUT", "Output GST", "2.3.3"),
    ("GST-IN", "Input GST", "1.2.5"),
    ("SALES", "Sales", "3.1.1"),
    ("PURCHASES", "Purchases", "4.1.1"),
    ("COGS", "Cost of Goods Sold", "4.1.1"),
    ("SALARY", "Salaries", "4.2.1"),
    ("RENT", "Rent", "4.2.2"),
    ("CAPITAL", "Capital Account", "5.1"),
    ("RETAINED", "Retained Earnings", "5.2"),
]


def _parent_code(code: str):
    return code.rsplit(".", 1)[0] if "." in code else None


class Command(BaseCommand):
    help = "Seed default account groups, ledgers and voucher numbering series"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding chart of accounts...")

        groups = {}
        created_groups = 0
        for code, name, nature, gross_profit in GROUPS:
            parent = groups.get(_parent_code(code))
            group = AccountGroup.objects.filter(group_code=code).first()

            if group is None:
                group = AccountGroup.objects.create(
                    group_code=code,
                    name=name,
                    nature=nature,
                    affects_gross_profit=gross_profit,
                    parent=parent,
                )
                created_groups += 1
            elif group.name != name or group.affects_gross_profit != gross_profit:
                group.name = name
                group.affects_gross_profit = gross_profit
                group.save()

            groups[code] = group

        created_ledgers = 0
        for ledger_code, ledger_name, group_code in LEDGERS:
            _, created = Ledger.objects.get_or_create(
                ledger_code=ledger_code,
                defaults={
                    "ledger_name": ledger_name,
                    "account_group": groups[group_code],
                },
            )
            created_ledgers += int(created)

        for voucher_type in Voucher.VoucherType.values:
            get_or_create_sequence(voucher_type)

        self.stdout.write(
            self.style.SUCCESS(
                f"✔ Chart seeded ({created_groups} new groups, {created_ledgers} new ledgers)."
            )
        )
