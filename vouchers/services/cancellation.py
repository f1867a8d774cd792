# vouchers/services/cancellation.py

"""
VOUCHER CANCELLATION (COMPENSATING ENTRIES)

posted -> cancelled, in ONE database transaction.

Rules:
- Original entries are never edited or deleted
- Every original entry gets exactly one mirror entry (debit <-> credit),
  linked through `reverses`, dated at the later of voucher_date and today
- Mirror entries move ledgers through the same balance adjustment as posting
- Stock effects are reversed per VoucherItem (purchase: remove quantity and
  restore avg_cost; sale: return quantity at its cost snapshot)
- Narration gets "Cancelled: <reason>" appended

Failures:
- AlreadyCancelledError / NotPostedError
- InsufficientStockError (purchased stock has since been sold)
- ConcurrentModificationError (retryable)
"""

from __future__ import annotations

import logging

from django.db import OperationalError, transaction
from django.utils import timezone

from accounting.services.exceptions import ConcurrentModificationError
from accounting.services.ledger_balance import (
    accumulate_deltas,
    apply_ledger_deltas,
    lock_ledgers,
)
from inventory.services.stock_valuation import lock_items, reverse_issue, reverse_receipt
from vouchers.models import Voucher, VoucherLedgerEntry
from vouchers.services.posting_engine import check_version, lock_voucher, mark_status
from vouchers.services.voucher_lifecycle import validate_transition

logger = logging.getLogger(__name__)


def _reverse_entries(voucher: Voucher) -> int:
    originals = list(voucher.ledger_entries.filter(is_reversal=False).order_by("id"))
    ledgers = lock_ledgers(e.ledger_id for e in originals)
    entry_date = max(voucher.voucher_date, timezone.localdate())

    for original in originals:
        VoucherLedgerEntry.objects.create(
            voucher=voucher,
            ledger=ledgers[original.ledger_id],
            debit_amount=original.credit_amount,
            credit_amount=original.debit_amount,
            entry_date=entry_date,
            is_reversal=True,
            reverses=original,
            narration=f"Reversal of {voucher.voucher_number}",
        )

    deltas = accumulate_deltas(
        ledgers,
        ((e.ledger_id, e.credit_amount, e.debit_amount) for e in originals),
    )
    apply_ledger_deltas(deltas)
    return len(originals)


def _reverse_stock(voucher: Voucher) -> None:
    posted_items = list(voucher.items.order_by("id"))
    if not posted_items:
        return

    stock_items = lock_items(vi.item_id for vi in posted_items)
    is_purchase = voucher.voucher_type == Voucher.VoucherType.PURCHASE_INVOICE

    # Undo in reverse order so repeated lines on one item unwind cleanly.
    for vi in reversed(posted_items):
        item = stock_items[vi.item_id]
        if is_purchase:
            reverse_receipt(
                item=item,
                quantity=vi.quantity,
                rate=vi.rate,
                avg_cost_before=vi.avg_cost_before,
                avg_cost_after=vi.avg_cost_after,
                voucher=voucher,
            )
        else:
            reverse_issue(item=item, quantity=vi.quantity, unit_cost=vi.unit_cost, voucher=voucher)


def _cancel(voucher_id, *, reason: str, expected_version, user) -> Voucher:
    voucher = lock_voucher(voucher_id)
    validate_transition(voucher=voucher, target_status=Voucher.Status.CANCELLED)
    check_version(voucher, expected_version)

    reversed_count = _reverse_entries(voucher)
    _reverse_stock(voucher)

    reason = (reason or "").strip()
    narration = voucher.narration
    if reason:
        narration = f"{narration}\nCancelled: {reason}".strip()

    voucher = mark_status(
        voucher,
        status=Voucher.Status.CANCELLED,
        cancelled_at=timezone.now(),
        cancellation_reason=reason[:255],
        narration=narration,
    )

    logger.info(
        "Voucher cancelled",
        extra={
            "voucher_id": voucher.id,
            "voucher_number": voucher.voucher_number,
            "reversal_entries": reversed_count,
            "reason": reason,
            "user_id": getattr(user, "id", None),
        },
    )
    return voucher


def cancel_voucher(
    *,
    voucher_id,
    reason: str = "",
    expected_version: int | None = None,
    user=None,
) -> Voucher:
    try:
        with transaction.atomic():
            return _cancel(voucher_id, reason=reason, expected_version=expected_version, user=user)
    except OperationalError as exc:
        logger.warning("Cancellation aborted by database conflict", extra={"voucher_id": voucher_id})
        raise ConcurrentModificationError(
            f"Voucher {voucher_id} could not be cancelled due to a concurrent update; retry"
        ) from exc
