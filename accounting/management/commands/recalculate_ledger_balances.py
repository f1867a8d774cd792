# accounting/management/commands/recalculate_ledger_balances.py

from __future__ import annotations

from django.core.management.base import BaseCommand
from django.db import transaction
from django.db.models import Sum

from accounting.models import Ledger
from accounting.services.ledger_balance import compute_ledger_balance
from vouchers.models import VoucherLedgerEntry


class Command(BaseCommand):
    help = (
        "Check every ledger's cached current_balance against opening_balance + "
        "posted entries, and every posted voucher for debit == credit."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--fix",
            action="store_true",
            help="Rewrite drifted current_balance values from the entries",
        )
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Exit non-zero if any (unfixed) issue is found",
        )

    def handle(self, *args, **options):
        fix = bool(options.get("fix"))
        strict = bool(options.get("strict"))

        self.stdout.write(self.style.MIGRATE_HEADING("Ledger balance check"))

        errors = self._check_ledgers(fix=fix)
        errors += self._check_vouchers()

        self.stdout.write("")
        if errors == 0:
            self.stdout.write(self.style.SUCCESS("✅ All ledger balances reconcile"))
        else:
            self.stderr.write(self.style.ERROR(f"❌ Found {errors} problem(s)"))

        return self._exit(strict and errors > 0)

    @transaction.atomic
    def _check_ledgers(self, *, fix: bool) -> int:
        errors = 0
        checked = 0

        for ledger in Ledger.objects.select_for_update().order_by("id"):
            checked += 1
            expected = compute_ledger_balance(ledger)
            if expected == ledger.current_balance:
                continue

            if fix:
                Ledger.objects.filter(pk=ledger.pk).update(current_balance=expected)
                self.stdout.write(
                    self.style.WARNING(
                        f"[FIXED] {ledger.ledger_name}: {ledger.current_balance} -> {expected}"
                    )
                )
            else:
                errors += 1
                self.stderr.write(
                    self.style.ERROR(
                        f"[FAIL] {ledger.ledger_name}: cached {ledger.current_balance}, "
                        f"expected {expected}"
                    )
                )

        self.stdout.write(f"Checked {checked} ledger(s)")
        return errors

    def _check_vouchers(self) -> int:
        rows = (
            VoucherLedgerEntry.objects.filter(is_reversal=False)
            .order_by()
            .values("voucher_id", "voucher__voucher_number")
            .annotate(debit=Sum("debit_amount"), credit=Sum("credit_amount"))
        )

        errors = 0
        for r in rows:
            if r["debit"] != r["credit"]:
                errors += 1
                self.stderr.write(
                    self.style.ERROR(
                        f"[FAIL] Voucher {r['voucher__voucher_number']} imbalanced: "
                        f"debit={r['debit']} credit={r['credit']}"
                    )
                )

        if errors == 0:
            self.stdout.write(self.style.SUCCESS("[OK] Every posted voucher balances"))
        return errors

    def _exit(self, fail: bool):
        if fail:
            raise SystemExit(1)
        return None
