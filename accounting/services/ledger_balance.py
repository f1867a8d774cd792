# accounting/services/ledger_balance.py

"""
LEDGER BALANCE ADJUSTMENT (WRITE PATH)

The only code allowed to move Ledger.current_balance.

Rules:
- Debit-normal ledgers move by (+debit - credit)
- Credit-normal ledgers move by (+credit - debit)
- Callers MUST be inside transaction.atomic
- Ledgers are locked in ascending id order (prevents lock-order deadlocks)
- The update itself is atomic (current_balance = current_balance + delta)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, Tuple

from django.db import DatabaseError, transaction
from django.db.models import DecimalField, F, Sum, Value
from django.db.models.functions import Coalesce

from accounting.models import Ledger
from accounting.services.exceptions import ConcurrentModificationError, RecordNotFoundError

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def _q2(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def signed_amount(balance_type: str, debit, credit) -> Decimal:
    debit = _q2(debit)
    credit = _q2(credit)
    if balance_type == Ledger.DEBIT:
        return debit - credit
    return credit - debit


def lock_ledgers(ledger_ids: Iterable[int]) -> Dict[int, Ledger]:
    """
    Row-lock every ledger in ledger_ids.

    Lock conflicts and lock timeouts surface as ConcurrentModificationError.
    """
    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError("lock_ledgers() must run inside transaction.atomic")

    ids = sorted({int(i) for i in ledger_ids})
    try:
        ledgers = {
            ledger.id: ledger
            for ledger in Ledger.objects.select_for_update().filter(id__in=ids).order_by("id")
        }
    except DatabaseError as exc:
        logger.warning("Ledger lock failed", extra={"ledger_ids": ids})
        raise ConcurrentModificationError(
            "Another posting is updating the same ledgers; retry the operation"
        ) from exc

    missing = [i for i in ids if i not in ledgers]
    if missing:
        raise RecordNotFoundError(f"Ledger(s) not found: {missing}")

    return ledgers


def accumulate_deltas(
    ledgers: Dict[int, Ledger],
    lines: Iterable[Tuple[int, Decimal, Decimal]],
) -> Dict[int, Decimal]:
    """Fold (ledger_id, debit, credit) lines into a net delta per ledger."""
    deltas: Dict[int, Decimal] = defaultdict(lambda: ZERO)
    for ledger_id, debit, credit in lines:
        ledger = ledgers[ledger_id]
        deltas[ledger_id] += signed_amount(ledger.balance_type, debit, credit)
    return dict(deltas)


def apply_ledger_deltas(deltas: Dict[int, Decimal]) -> None:
    for ledger_id in sorted(deltas):
        delta = _q2(deltas[ledger_id])
        if delta == ZERO:
            continue
        try:
            Ledger.objects.filter(pk=ledger_id).update(
                current_balance=F("current_balance") + delta
            )
        except DatabaseError as exc:
            raise ConcurrentModificationError(
                f"Ledger {ledger_id} balance update conflicted; retry the operation"
            ) from exc


def compute_ledger_balance(ledger: Ledger, *, as_of: date | None = None) -> Decimal:
    """
    opening_balance + signed sum of posted entries (reversals included).

    as_of filters on entry_date (inclusive).
    """
    qs = ledger.voucher_entries.all()
    if as_of is not None:
        qs = qs.filter(entry_date__lte=as_of)

    money = DecimalField(max_digits=15, decimal_places=2)
    totals = qs.aggregate(
        debit=Coalesce(Sum("debit_amount"), Value(ZERO), output_field=money),
        credit=Coalesce(Sum("credit_amount"), Value(ZERO), output_field=money),
    )

    return _q2(ledger.opening_balance) + signed_amount(
        ledger.balance_type, totals["debit"], totals["credit"]
    )
