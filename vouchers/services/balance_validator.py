# vouchers/services/balance_validator.py

"""
BALANCE VALIDATOR (DOUBLE ENTRY)

A voucher may leave draft only when sum(debits) == sum(credits).

Rules:
- Totals are rounded to 2dp (ROUND_HALF_UP) before comparison
- Drafts are checked against their draft lines; posted / cancelled
  vouchers against their original (non-reversal) ledger entries
- validate_balance() returns a result; assert_balanced() raises
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Tuple

from accounting.services.exceptions import ImbalancedVoucherError
from vouchers.models import Voucher

TWOPLACES = Decimal("0.01")


def _q2(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class BalanceCheck:
    debit_total: Decimal
    credit_total: Decimal

    @property
    def delta(self) -> Decimal:
        return self.debit_total - self.credit_total

    @property
    def is_balanced(self) -> bool:
        return self.delta == Decimal("0.00")

    def raise_if_imbalanced(self) -> "BalanceCheck":
        if not self.is_balanced:
            raise ImbalancedVoucherError(
                debit_total=self.debit_total,
                credit_total=self.credit_total,
            )
        return self


def check_amounts(pairs: Iterable[Tuple[Decimal, Decimal]]) -> BalanceCheck:
    """Balance check over (debit, credit) pairs."""
    debit_total = Decimal("0.00")
    credit_total = Decimal("0.00")
    for debit, credit in pairs:
        debit_total += Decimal(str(debit or "0"))
        credit_total += Decimal(str(credit or "0"))
    return BalanceCheck(debit_total=_q2(debit_total), credit_total=_q2(credit_total))


def validate_balance(voucher: Voucher) -> BalanceCheck:
    if voucher.status == Voucher.Status.DRAFT:
        rows = voucher.draft_lines.values_list("debit_amount", "credit_amount")
    else:
        rows = voucher.ledger_entries.filter(is_reversal=False).values_list(
            "debit_amount", "credit_amount"
        )
    return check_amounts(rows)


def assert_balanced(voucher: Voucher) -> BalanceCheck:
    return validate_balance(voucher).raise_if_imbalanced()
