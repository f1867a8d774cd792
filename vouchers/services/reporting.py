# vouchers/services/reporting.py

"""
VOUCHER REPORTING (READ-ONLY)

Aggregations consumed by list screens and ledger reports.

RULES:
- READ-ONLY: no writes, ever
- Drafts never contribute money: totals only count posted / cancelled
  vouchers, balances only count VoucherLedgerEntry rows (which exist only
  for posted and cancelled vouchers)
- Cancelled vouchers net to zero through their reversal entries
- entry_date is the accounting timeline (reversals dated at cancellation)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from django.db.models import Case, Count, DecimalField, Q, Sum, Value, When
from django.db.models.functions import Coalesce

from accounting.models import Ledger
from accounting.services.chart_registry import get_ledger
from accounting.services.ledger_balance import compute_ledger_balance, signed_amount
from vouchers.models import Voucher, VoucherLedgerEntry

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
MONEY = DecimalField(max_digits=15, decimal_places=2)


def _q2(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _financial_total():
    return Coalesce(
        Sum(
            Case(
                When(~Q(status=Voucher.Status.DRAFT), then="total_amount"),
                default=Value(ZERO),
                output_field=MONEY,
            )
        ),
        Value(ZERO),
        output_field=MONEY,
    )


# ============================================================
# VOUCHER SUMMARIES
# ============================================================


def sum_by_status() -> List[dict]:
    """
    One row per status (all statuses present, zero-filled):
    {"status", "count", "total_amount"}
    """
    rows = {
        r["status"]: r
        for r in Voucher.objects.order_by().values("status").annotate(
            count=Count("id"), total_amount=_financial_total()
        )
    }

    out = []
    for status in Voucher.Status.values:
        r = rows.get(status)
        out.append(
            {
                "status": status,
                "count": r["count"] if r else 0,
                "total_amount": _q2(r["total_amount"]) if r else ZERO,
            }
        )
    return out


def sum_by_type_and_status() -> List[dict]:
    """
    Rows for every (voucher_type, status) pair that has vouchers:
    {"voucher_type", "status", "count", "total_amount"}
    """
    rows = (
        Voucher.objects.order_by()
        .values("voucher_type", "status")
        .annotate(count=Count("id"), total_amount=_financial_total())
    )

    type_order = {t: i for i, t in enumerate(Voucher.VoucherType.values)}
    status_order = {s: i for i, s in enumerate(Voucher.Status.values)}

    out = [
        {
            "voucher_type": r["voucher_type"],
            "status": r["status"],
            "count": r["count"],
            "total_amount": _q2(r["total_amount"]),
        }
        for r in rows
    ]
    out.sort(key=lambda r: (type_order.get(r["voucher_type"], 99), status_order.get(r["status"], 99)))
    return out


# ============================================================
# LEDGER BALANCES
# ============================================================


def ledger_balance_as_of(ledger_id, as_of: date) -> Decimal:
    """opening_balance + signed sum of entries dated on or before as_of."""
    ledger = get_ledger(ledger_id)
    return compute_ledger_balance(ledger, as_of=as_of)


@dataclass
class StatementLine:
    entry_id: int
    entry_date: date
    voucher_id: int
    voucher_number: str
    voucher_type: str
    narration: str
    debit: Decimal
    credit: Decimal
    balance: Decimal
    is_reversal: bool


@dataclass
class LedgerStatement:
    ledger: Ledger
    date_from: Optional[date]
    date_to: Optional[date]
    opening_balance: Decimal
    closing_balance: Decimal
    total_debit: Decimal = ZERO
    total_credit: Decimal = ZERO
    lines: List[StatementLine] = field(default_factory=list)


def ledger_statement(
    ledger_id,
    *,
    date_from: date | None = None,
    date_to: date | None = None,
) -> LedgerStatement:
    """
    Entries for one ledger with a running balance.

    opening_balance is the balance at the end of the day before date_from
    (or the ledger's opening balance when date_from is omitted).
    """
    ledger = get_ledger(ledger_id)

    if date_from is not None:
        opening = compute_ledger_balance(ledger, as_of=date_from - timedelta(days=1))
    else:
        opening = _q2(ledger.opening_balance)

    qs = (
        VoucherLedgerEntry.objects.filter(ledger=ledger)
        .select_related("voucher")
        .order_by("entry_date", "id")
    )
    if date_from is not None:
        qs = qs.filter(entry_date__gte=date_from)
    if date_to is not None:
        qs = qs.filter(entry_date__lte=date_to)

    statement = LedgerStatement(
        ledger=ledger,
        date_from=date_from,
        date_to=date_to,
        opening_balance=opening,
        closing_balance=opening,
    )

    running = opening
    for e in qs:
        running += signed_amount(ledger.balance_type, e.debit_amount, e.credit_amount)
        statement.total_debit += e.debit_amount
        statement.total_credit += e.credit_amount
        statement.lines.append(
            StatementLine(
                entry_id=e.id,
                entry_date=e.entry_date,
                voucher_id=e.voucher_id,
                voucher_number=e.voucher.voucher_number,
                voucher_type=e.voucher.voucher_type,
                narration=e.narration or e.voucher.narration,
                debit=e.debit_amount,
                credit=e.credit_amount,
                balance=running,
                is_reversal=e.is_reversal,
            )
        )

    statement.closing_balance = running
    return statement


class TrialBalanceService:
    """
    Trial balance over every ledger with a non-zero position, active or not.

    Guarantees:
    - Each ledger lands in exactly one column (debit or credit) by the sign of
      its debit-minus-credit position, opening balances included
    - Aggregates entries in bulk (no N+1)
    - `balanced` compares column totals to the cent
    """

    def generate(self, *, as_of: date | None = None) -> dict:
        ledgers = list(
            Ledger.objects.select_related("account_group")
            .order_by("account_group__group_code", "ledger_name", "id")
        )

        entries = VoucherLedgerEntry.objects.all()
        if as_of is not None:
            entries = entries.filter(entry_date__lte=as_of)

        movement: Dict[int, tuple] = {
            r["ledger_id"]: (_q2(r["debit"]), _q2(r["credit"]))
            for r in entries.order_by()
            .values("ledger_id")
            .annotate(debit=Sum("debit_amount"), credit=Sum("credit_amount"))
        }

        rows = []
        total_debit = ZERO
        total_credit = ZERO

        for ledger in ledgers:
            debit, credit = movement.get(ledger.id, (ZERO, ZERO))
            opening = _q2(ledger.opening_balance)
            opening_dr = opening if ledger.is_debit_normal else -opening
            position = opening_dr + debit - credit

            if position == ZERO:
                continue

            row_debit = position if position > ZERO else ZERO
            row_credit = -position if position < ZERO else ZERO

            rows.append(
                {
                    "ledger_id": ledger.id,
                    "ledger_code": ledger.ledger_code,
                    "ledger_name": ledger.ledger_name,
                    "group_code": ledger.account_group.group_code,
                    "nature": ledger.account_group.nature,
                    "is_active": ledger.is_active,
                    "debit": row_debit,
                    "credit": row_credit,
                }
            )
            total_debit += row_debit
            total_credit += row_credit

        return {
            "as_of": as_of.isoformat() if as_of else None,
            "ledgers": rows,
            "totals": {
                "debit": _q2(total_debit),
                "credit": _q2(total_credit),
                "difference": _q2(total_debit - total_credit),
                "balanced": _q2(total_debit) == _q2(total_credit),
            },
        }


def trial_balance(as_of: date | None = None) -> dict:
    return TrialBalanceService().generate(as_of=as_of)
