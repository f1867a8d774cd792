# vouchers/services/posting_engine.py

"""
======================================================
PATH: vouchers/services/posting_engine.py
======================================================
VOUCHER POSTING ENGINE (AUTHORITATIVE)

draft -> posted, in ONE database transaction:

1. Lock the voucher row, check lifecycle + optional expected_version
2. Re-validate balance (debits == credits)
3. Lock referenced ledgers (ascending id), write VoucherLedgerEntry rows,
   move current_balance by the signed amount of each entry
4. Stock vouchers: lock items, apply weighted-average valuation,
   write VoucherItem rows with valuation snapshots.
   Sales invoices also book Dr COGS / Cr Stock at cost when
   INVENTORY_COGS_LEDGER_CODE and INVENTORY_STOCK_LEDGER_CODE are set
5. status=posted, total_amount=debit total, posted_at, version+1

Guarantees:
- All-or-nothing: any failure leaves the voucher in draft with no ledger
  or stock change
- A second post raises InvalidStateTransitionError and changes nothing
- Lock conflicts / timeouts surface as ConcurrentModificationError (retryable)
"""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import DatabaseError, OperationalError, transaction
from django.db.models import F
from django.utils import timezone

from accounting.models import Ledger
from accounting.services.exceptions import (
    ConcurrentModificationError,
    RecordNotFoundError,
    VoucherValidationError,
)
from accounting.services.ledger_balance import (
    accumulate_deltas,
    apply_ledger_deltas,
    lock_ledgers,
)
from inventory.services.stock_valuation import issue_stock, lock_items, receive_stock
from vouchers.models import Voucher, VoucherItem, VoucherLedgerEntry
from vouchers.services.balance_validator import check_amounts
from vouchers.services.voucher_lifecycle import validate_transition

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def lock_voucher(voucher_id) -> Voucher:
    """select_for_update the voucher; must run inside transaction.atomic."""
    try:
        return Voucher.objects.select_for_update().get(pk=voucher_id)
    except (Voucher.DoesNotExist, ValueError, TypeError) as exc:
        raise RecordNotFoundError(f"Voucher {voucher_id!r} not found") from exc
    except DatabaseError as exc:
        raise ConcurrentModificationError(
            f"Voucher {voucher_id} is locked by another operation; retry"
        ) from exc


def check_version(voucher: Voucher, expected_version) -> None:
    if expected_version is not None and int(expected_version) != voucher.version:
        raise ConcurrentModificationError(
            f"Voucher {voucher.voucher_number} changed (version {voucher.version}, "
            f"expected {expected_version}); reload and retry"
        )


def mark_status(voucher: Voucher, **changes) -> Voucher:
    """
    Write a status transition guarded by the version read under lock.
    Zero rows updated means someone else got there first.
    """
    now = timezone.now()
    updated = Voucher.objects.filter(pk=voucher.pk, version=voucher.version).update(
        version=F("version") + 1,
        updated_at=now,
        **changes,
    )
    if updated != 1:
        raise ConcurrentModificationError(
            f"Voucher {voucher.voucher_number} was modified concurrently; retry"
        )
    voucher.refresh_from_db()
    return voucher


def _write_entries(voucher: Voucher, lines, ledgers) -> None:
    for line in lines:
        ledger = ledgers[line.ledger_id]
        if not ledger.is_active:
            raise VoucherValidationError(f"Ledger '{ledger.ledger_name}' is inactive")

        VoucherLedgerEntry.objects.create(
            voucher=voucher,
            ledger=ledger,
            debit_amount=line.debit_amount,
            credit_amount=line.credit_amount,
            entry_date=voucher.voucher_date,
            narration=line.narration,
        )

    deltas = accumulate_deltas(
        ledgers,
        ((line.ledger_id, line.debit_amount, line.credit_amount) for line in lines),
    )
    apply_ledger_deltas(deltas)


def _cogs_ledger_ids(voucher: Voucher):
    """(cogs_id, stock_id) when a sales invoice should book its cost, else None."""
    if voucher.voucher_type != Voucher.VoucherType.SALES_INVOICE:
        return None

    cogs_code = getattr(settings, "INVENTORY_COGS_LEDGER_CODE", "")
    stock_code = getattr(settings, "INVENTORY_STOCK_LEDGER_CODE", "")
    if not (cogs_code and stock_code):
        return None

    ids = dict(
        Ledger.objects.filter(ledger_code__in=[cogs_code, stock_code]).values_list("ledger_code", "id")
    )
    missing = [code for code in (cogs_code, stock_code) if code not in ids]
    if missing:
        raise VoucherValidationError(f"Cost of goods sold ledger(s) not found: {missing}")
    return ids[cogs_code], ids[stock_code]


def _write_cogs(voucher: Voucher, cost: Decimal, cogs_pair, ledgers) -> None:
    cogs_id, stock_id = cogs_pair
    lines = [(cogs_id, cost, ZERO), (stock_id, ZERO, cost)]

    for ledger_id, debit, credit in lines:
        ledger = ledgers[ledger_id]
        if not ledger.is_active:
            raise VoucherValidationError(f"Ledger '{ledger.ledger_name}' is inactive")

        VoucherLedgerEntry.objects.create(
            voucher=voucher,
            ledger=ledger,
            debit_amount=debit,
            credit_amount=credit,
            entry_date=voucher.voucher_date,
            narration="Cost of goods sold",
        )

    apply_ledger_deltas(accumulate_deltas(ledgers, lines))


def _apply_stock(voucher: Voucher, draft_items) -> Decimal:
    """Move stock for every draft item; returns the summed cost basis (2dp)."""
    stock_items = lock_items(d.item_id for d in draft_items)
    is_purchase = voucher.voucher_type == Voucher.VoucherType.PURCHASE_INVOICE
    cost = Decimal("0")

    for draft in draft_items:
        item = stock_items[draft.item_id]
        if is_purchase:
            change = receive_stock(item=item, quantity=draft.quantity, rate=draft.rate, voucher=voucher)
        else:
            change = issue_stock(item=item, quantity=draft.quantity, voucher=voucher)

        VoucherItem.objects.create(
            voucher=voucher,
            item=item,
            quantity=draft.quantity,
            rate=draft.rate,
            amount=(draft.quantity * draft.rate).quantize(TWOPLACES, rounding=ROUND_HALF_UP),
            unit_cost=change.unit_cost,
            avg_cost_before=change.avg_cost_before,
            avg_cost_after=change.avg_cost_after,
            stock_shortfall=change.shortfall,
        )
        cost += change.unit_cost * draft.quantity

    return cost.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _post(voucher_id, *, expected_version, user) -> Voucher:
    voucher = lock_voucher(voucher_id)
    validate_transition(voucher=voucher, target_status=Voucher.Status.POSTED)
    check_version(voucher, expected_version)

    lines = list(voucher.draft_lines.order_by("line_no"))
    if not lines:
        raise VoucherValidationError(f"Voucher {voucher.voucher_number} has no ledger entries")

    check = check_amounts((line.debit_amount, line.credit_amount) for line in lines)
    if not check.is_balanced:
        logger.warning(
            "Posting rejected: voucher imbalanced",
            extra={
                "voucher_id": voucher.id,
                "debit_total": str(check.debit_total),
                "credit_total": str(check.credit_total),
            },
        )
    check.raise_if_imbalanced()

    draft_items = list(voucher.draft_items.order_by("line_no"))
    moves_stock = bool(draft_items) and voucher.affects_stock
    cogs_pair = _cogs_ledger_ids(voucher) if moves_stock else None

    ledgers = lock_ledgers([*(line.ledger_id for line in lines), *(cogs_pair or ())])
    _write_entries(voucher, lines, ledgers)

    if moves_stock:
        cost = _apply_stock(voucher, draft_items)
        if cogs_pair and cost > ZERO:
            _write_cogs(voucher, cost, cogs_pair, ledgers)

    voucher = mark_status(
        voucher,
        status=Voucher.Status.POSTED,
        total_amount=check.debit_total,
        posted_at=timezone.now(),
    )

    logger.info(
        "Voucher posted",
        extra={
            "voucher_id": voucher.id,
            "voucher_number": voucher.voucher_number,
            "total_amount": str(voucher.total_amount),
            "entries": len(lines),
            "items": len(draft_items),
            "user_id": getattr(user, "id", None),
        },
    )
    return voucher


def post_voucher(*, voucher_id, expected_version: int | None = None, user=None) -> Voucher:
    try:
        with transaction.atomic():
            return _post(voucher_id, expected_version=expected_version, user=user)
    except OperationalError as exc:
        # Deadlock, lock wait timeout, serialization failure, "database is locked".
        logger.warning("Posting aborted by database conflict", extra={"voucher_id": voucher_id})
        raise ConcurrentModificationError(
            f"Voucher {voucher_id} could not be posted due to a concurrent update; retry"
        ) from exc
