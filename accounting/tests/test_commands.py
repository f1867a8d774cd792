# accounting/tests/test_commands.py

from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from accounting.models import AccountGroup, Ledger
from vouchers.models import VoucherSequence
from vouchers.services.posting_engine import post_voucher
from vouchers.tests.helpers import build_chart, journal


class SeedChartCommandTests(TestCase):
    def _seed(self):
        out = StringIO()
        call_command("seed_chart", stdout=out)
        return out.getvalue()

    def test_seed_creates_groups_ledgers_and_sequences(self):
        output = self._seed()

        self.assertIn("Chart seeded", output)
        cash = Ledger.objects.get(ledger_code="CASH")
        self.assertEqual(cash.account_group.group_code, "1.2.3.1")
        self.assertEqual(cash.account_group.parent.group_code, "1.2.3")
        self.assertEqual(cash.balance_type, Ledger.DEBIT)
        self.assertEqual(Ledger.objects.get(ledger_code="SALES").balance_type, Ledger.CREDIT)
        self.assertEqual(Ledger.objects.get(ledger_code="COGS").balance_type, Ledger.DEBIT)
        self.assertEqual(VoucherSequence.objects.count(), 6)
        self.assertEqual(VoucherSequence.objects.get(voucher_type="journal").prefix, "JV")

    def test_seed_is_idempotent(self):
        self._seed()
        groups = AccountGroup.objects.count()
        ledgers = Ledger.objects.count()

        self._seed()

        self.assertEqual(AccountGroup.objects.count(), groups)
        self.assertEqual(Ledger.objects.count(), ledgers)
        self.assertEqual(VoucherSequence.objects.count(), 6)


class RecalculateLedgerBalancesCommandTests(TestCase):
    def setUp(self):
        self.ledgers = build_chart()
        self.cash = self.ledgers["cash"]
        post_voucher(voucher_id=journal(self.cash, self.ledgers["bank"], "500.00").id)

    def _run(self, *args):
        out, err = StringIO(), StringIO()
        call_command("recalculate_ledger_balances", *args, stdout=out, stderr=err)
        return out.getvalue(), err.getvalue()

    def test_clean_books_pass(self):
        out, err = self._run("--strict")

        self.assertIn("All ledger balances reconcile", out)
        self.assertEqual(err, "")

    def test_drift_is_reported_and_strict_fails(self):
        Ledger.objects.filter(pk=self.cash.pk).update(current_balance=Decimal("42.00"))

        with self.assertRaises(SystemExit):
            self._run("--strict")

    def test_drift_without_strict_only_reports(self):
        Ledger.objects.filter(pk=self.cash.pk).update(current_balance=Decimal("42.00"))

        out, err = self._run()

        self.assertIn("Cash", err)
        self.assertEqual(Ledger.objects.get(pk=self.cash.pk).current_balance, Decimal("42.00"))

    def test_fix_rewrites_drifted_balance(self):
        Ledger.objects.filter(pk=self.cash.pk).update(current_balance=Decimal("42.00"))

        out, _ = self._run("--fix", "--strict")

        self.assertIn("[FIXED]", out)
        self.assertEqual(Ledger.objects.get(pk=self.cash.pk).current_balance, Decimal("1500.00"))
