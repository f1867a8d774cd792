# accounting/tests/test_chart_registry.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import connection
from django.test import TestCase
from django.test.utils import CaptureQueriesContext

from accounting.models import AccountGroup, Ledger
from accounting.services.chart_registry import get_group, get_ledger, list_ledgers
from accounting.services.exceptions import RecordNotFoundError
from vouchers.services.posting_engine import post_voucher
from vouchers.tests.helpers import journal


class ChartRegistryTests(TestCase):
    def setUp(self):
        self.assets = AccountGroup.objects.create(group_code="1", name="Assets", nature=AccountGroup.ASSET)
        self.current = AccountGroup.objects.create(
            group_code="1.2", name="Current Assets", nature=AccountGroup.ASSET, parent=self.assets
        )
        self.income = AccountGroup.objects.create(group_code="3", name="Income", nature=AccountGroup.INCOME)

        self.zeta = Ledger.objects.create(ledger_name="Zeta Bank", account_group=self.current)
        self.cash = Ledger.objects.create(ledger_name="Cash", ledger_code="CASH", account_group=self.current)
        self.alpha = Ledger.objects.create(ledger_name="Alpha Sales", account_group=self.income)
        self.building = Ledger.objects.create(ledger_name="Building", account_group=self.assets)

    def test_get_group_by_code(self):
        self.assertEqual(get_group(" 1.2 "), self.current)

    def test_get_group_missing(self):
        with self.assertRaises(RecordNotFoundError):
            get_group("9")

    def test_get_ledger(self):
        ledger = get_ledger(self.cash.id)
        self.assertEqual(ledger.ledger_name, "Cash")
        self.assertEqual(ledger.account_group, self.current)

    def test_get_ledger_missing(self):
        with self.assertRaises(RecordNotFoundError):
            get_ledger(999999)
        with self.assertRaises(RecordNotFoundError):
            get_ledger("abc")

    def test_list_ledgers_ordered_by_name(self):
        names = [ledger.ledger_name for ledger in list_ledgers()]
        self.assertEqual(names, ["Alpha Sales", "Building", "Cash", "Zeta Bank"])

    def test_list_ledgers_group_includes_descendants(self):
        names = [ledger.ledger_name for ledger in list_ledgers(group_code="1")]
        self.assertEqual(names, ["Building", "Cash", "Zeta Bank"])

        names = [ledger.ledger_name for ledger in list_ledgers(group_code="1.2")]
        self.assertEqual(names, ["Cash", "Zeta Bank"])

    def test_list_ledgers_follows_parent_links_not_code_prefix(self):
        petty = AccountGroup.objects.create(
            group_code="CA", name="Petty Cash Floats", nature=AccountGroup.ASSET, parent=self.current
        )
        Ledger.objects.create(ledger_name="Petty Cash", account_group=petty)

        names = [ledger.ledger_name for ledger in list_ledgers(group_code="1")]
        self.assertEqual(names, ["Building", "Cash", "Petty Cash", "Zeta Bank"])

        names = [ledger.ledger_name for ledger in list_ledgers(group_code="1.2")]
        self.assertEqual(names, ["Cash", "Petty Cash", "Zeta Bank"])

    def test_list_ledgers_ignores_code_prefix_without_parent(self):
        # No parent link: a top-level group despite the dotted code.
        other = AccountGroup.objects.create(group_code="1.2.9", name="Other", nature=AccountGroup.ASSET)
        Ledger.objects.create(ledger_name="Deposits", account_group=other)

        names = [ledger.ledger_name for ledger in list_ledgers(group_code="1.2")]
        self.assertEqual(names, ["Cash", "Zeta Bank"])

    def test_list_ledgers_unknown_group(self):
        with self.assertRaises(RecordNotFoundError):
            list(list_ledgers(group_code="7"))

    def test_list_ledgers_filters(self):
        self.assertEqual(list(list_ledgers(nature=AccountGroup.INCOME)), [self.alpha])
        self.assertEqual(list(list_ledgers(balance_type=Ledger.CREDIT)), [self.alpha])
        self.assertEqual(list(list_ledgers(search="cash")), [self.cash])

        self.zeta.is_active = False
        self.zeta.save()
        self.assertNotIn(self.zeta, list(list_ledgers(is_active=True)))
        self.assertEqual(list(list_ledgers(is_active=False)), [self.zeta])


class LedgerModelTests(TestCase):
    """
    GUARANTEES:
    - balance_type defaults from the group nature
    - current_balance starts at opening_balance and is never written by save()
      once the ledger has entries
    """

    def setUp(self):
        self.assets = AccountGroup.objects.create(group_code="1", name="Assets", nature=AccountGroup.ASSET)
        self.liabilities = AccountGroup.objects.create(
            group_code="2", name="Liabilities", nature=AccountGroup.LIABILITY
        )
        self.cash = Ledger.objects.create(
            ledger_name="Cash", account_group=self.assets, opening_balance=Decimal("1000.00")
        )
        self.bank = Ledger.objects.create(ledger_name="Bank", account_group=self.assets)

    def test_balance_type_defaults_from_group(self):
        loan = Ledger.objects.create(ledger_name="Loan", account_group=self.liabilities)

        self.assertEqual(self.cash.balance_type, Ledger.DEBIT)
        self.assertTrue(self.cash.is_debit_normal)
        self.assertEqual(loan.balance_type, Ledger.CREDIT)

    def test_current_balance_starts_at_opening(self):
        self.assertEqual(self.cash.current_balance, Decimal("1000.00"))

    def test_opening_edit_without_entries_moves_current(self):
        self.cash.opening_balance = Decimal("1200.00")
        self.cash.save()

        self.assertEqual(Ledger.objects.get(pk=self.cash.pk).current_balance, Decimal("1200.00"))

    def test_save_never_overwrites_posted_balance(self):
        post_voucher(voucher_id=journal(self.cash, self.bank, "500.00").id)

        cash = Ledger.objects.get(pk=self.cash.pk)
        cash.ledger_name = "Cash in Hand"
        cash.current_balance = Decimal("0.00")
        cash.save()

        self.assertEqual(Ledger.objects.get(pk=self.cash.pk).current_balance, Decimal("1500.00"))

    def test_stale_instance_save_keeps_posted_balance(self):
        stale = Ledger.objects.get(pk=self.cash.pk)
        post_voucher(voucher_id=journal(self.cash, self.bank, "500.00").id)

        stale.ledger_name = "Cash in Hand"
        with CaptureQueriesContext(connection) as ctx:
            stale.save()

        updates = [q["sql"] for q in ctx.captured_queries if q["sql"].startswith('UPDATE "ledgers"')]
        self.assertEqual(len(updates), 1)
        self.assertNotIn('"current_balance"', updates[0])

        cash = Ledger.objects.get(pk=self.cash.pk)
        self.assertEqual(cash.ledger_name, "Cash in Hand")
        self.assertEqual(cash.current_balance, Decimal("1500.00"))
        self.assertEqual(stale.current_balance, Decimal("1500.00"))

    def test_opening_frozen_after_entries(self):
        post_voucher(voucher_id=journal(self.cash, self.bank, "500.00").id)

        cash = Ledger.objects.get(pk=self.cash.pk)
        cash.opening_balance = Decimal("1.00")
        with self.assertRaises(ValidationError):
            cash.save()

    def test_ledger_with_entries_cannot_be_deleted(self):
        post_voucher(voucher_id=journal(self.cash, self.bank, "500.00").id)

        with self.assertRaises(ValidationError):
            Ledger.objects.get(pk=self.cash.pk).delete()

    def test_blank_name_rejected(self):
        with self.assertRaises(ValidationError):
            Ledger.objects.create(ledger_name="  ", account_group=self.assets)

    def test_ledger_code_unique_when_set(self):
        Ledger.objects.create(ledger_name="Petty Cash", ledger_code="PETTY", account_group=self.assets)
        with self.assertRaises(ValidationError):
            Ledger.objects.create(ledger_name="Petty Cash 2", ledger_code="PETTY", account_group=self.assets)


class AccountGroupModelTests(TestCase):
    def setUp(self):
        self.assets = AccountGroup.objects.create(group_code="1", name="Assets", nature=AccountGroup.ASSET)

    def test_child_must_share_parent_nature(self):
        with self.assertRaises(ValidationError):
            AccountGroup.objects.create(
                group_code="1.9", name="Odd", nature=AccountGroup.INCOME, parent=self.assets
            )

    def test_group_with_ledgers_cannot_be_deleted(self):
        Ledger.objects.create(ledger_name="Cash", account_group=self.assets)
        with self.assertRaises(ValidationError):
            self.assets.delete()

    def test_nature_frozen_after_activity(self):
        cash = Ledger.objects.create(ledger_name="Cash", account_group=self.assets)
        bank = Ledger.objects.create(ledger_name="Bank", account_group=self.assets)
        post_voucher(voucher_id=journal(cash, bank, "5.00").id)

        self.assets.nature = AccountGroup.EXPENSE
        with self.assertRaises(ValidationError):
            self.assets.save()

    def test_default_balance_type(self):
        self.assertEqual(self.assets.default_balance_type, "debit")
        equity = AccountGroup.objects.create(group_code="5", name="Equity", nature=AccountGroup.EQUITY)
        self.assertEqual(equity.default_balance_type, "credit")
