# inventory/services/stock_valuation.py

"""
STOCK VALUATION (WEIGHTED AVERAGE)

The only code allowed to move InventoryItem.quantity_on_hand / avg_cost.

Rules:
- Purchases re-blend avg_cost:
    avg = (old_qty * old_avg + qty * rate) / (old_qty + qty)
- Sales decrement quantity only; cost basis = current avg_cost
- Reversals undo the original movement (see reverse_receipt / reverse_issue)
- Negative stock is rejected unless settings.INVENTORY_ALLOW_NEGATIVE_STOCK
- Every change writes an InventoryMovement row
- Callers MUST be inside transaction.atomic and hold the item row lock

Rounding:
- quantity 3dp, avg_cost 4dp, ROUND_HALF_UP
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable

from django.conf import settings
from django.db import DatabaseError, transaction

from accounting.services.exceptions import (
    ConcurrentModificationError,
    InsufficientStockError,
    RecordNotFoundError,
)
from inventory.models import InventoryItem, InventoryMovement

logger = logging.getLogger(__name__)

QTY_PLACES = Decimal("0.001")
COST_PLACES = Decimal("0.0001")
ZERO = Decimal("0")


def _qty(v) -> Decimal:
    return Decimal(str(v or "0")).quantize(QTY_PLACES, rounding=ROUND_HALF_UP)


def _cost(v) -> Decimal:
    return Decimal(str(v or "0")).quantize(COST_PLACES, rounding=ROUND_HALF_UP)


def negative_stock_allowed() -> bool:
    return bool(getattr(settings, "INVENTORY_ALLOW_NEGATIVE_STOCK", False))


@dataclass(frozen=True)
class StockChange:
    """Outcome of one valuation step, snapshotted onto VoucherItem."""

    unit_cost: Decimal
    avg_cost_before: Decimal
    avg_cost_after: Decimal
    quantity_after: Decimal
    shortfall: Decimal = Decimal("0.000")


def lock_items(item_ids: Iterable[int]) -> Dict[int, InventoryItem]:
    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError("lock_items() must run inside transaction.atomic")

    ids = sorted({int(i) for i in item_ids})
    try:
        items = {
            item.id: item
            for item in InventoryItem.objects.select_for_update().filter(id__in=ids).order_by("id")
        }
    except DatabaseError as exc:
        raise ConcurrentModificationError(
            "Another posting is updating the same inventory items; retry the operation"
        ) from exc

    missing = [i for i in ids if i not in items]
    if missing:
        raise RecordNotFoundError(f"Inventory item(s) not found: {missing}")
    return items


def _write(item: InventoryItem, *, quantity: Decimal, avg_cost: Decimal) -> None:
    InventoryItem.objects.filter(pk=item.pk).update(
        quantity_on_hand=quantity,
        avg_cost=avg_cost,
    )
    item.quantity_on_hand = quantity
    item.avg_cost = avg_cost


def _record(item, *, voucher, reason, quantity, unit_cost) -> None:
    InventoryMovement.objects.create(
        item=item,
        voucher=voucher,
        direction=InventoryMovement.REASON_TO_DIRECTION[reason],
        reason=reason,
        quantity=quantity,
        unit_cost=unit_cost,
        quantity_after=item.quantity_on_hand,
        avg_cost_after=item.avg_cost,
    )


def _blend(old_qty: Decimal, old_avg: Decimal, qty: Decimal, rate: Decimal) -> Decimal:
    if old_qty <= ZERO:
        return _cost(rate)
    return _cost((old_qty * old_avg + qty * rate) / (old_qty + qty))


def receive_stock(*, item: InventoryItem, quantity, rate, voucher) -> StockChange:
    qty = _qty(quantity)
    rate = Decimal(str(rate))

    old_qty = _qty(item.quantity_on_hand)
    old_avg = _cost(item.avg_cost)
    new_avg = _blend(old_qty, old_avg, qty, rate)

    _write(item, quantity=old_qty + qty, avg_cost=new_avg)
    _record(
        item,
        voucher=voucher,
        reason=InventoryMovement.Reason.PURCHASE,
        quantity=qty,
        unit_cost=_cost(rate),
    )

    logger.info(
        "Stock received",
        extra={
            "item_id": item.id,
            "voucher_id": voucher.id,
            "quantity": str(qty),
            "avg_cost": str(new_avg),
        },
    )
    return StockChange(
        unit_cost=_cost(rate),
        avg_cost_before=old_avg,
        avg_cost_after=new_avg,
        quantity_after=item.quantity_on_hand,
    )


def issue_stock(*, item: InventoryItem, quantity, voucher) -> StockChange:
    qty = _qty(quantity)
    available = _qty(item.quantity_on_hand)
    avg = _cost(item.avg_cost)

    shortfall = Decimal("0.000")
    if qty > available:
        if not negative_stock_allowed():
            logger.warning(
                "Sale rejected: insufficient stock",
                extra={"item_id": item.id, "requested": str(qty), "available": str(available)},
            )
            raise InsufficientStockError(
                item_name=item.item_name, requested=qty, available=available
            )
        shortfall = qty - max(available, Decimal("0.000"))
        logger.warning(
            "Stock driven negative",
            extra={"item_id": item.id, "voucher_id": voucher.id, "shortfall": str(shortfall)},
        )

    _write(item, quantity=available - qty, avg_cost=avg)
    _record(
        item,
        voucher=voucher,
        reason=InventoryMovement.Reason.SALE,
        quantity=qty,
        unit_cost=avg,
    )
    return StockChange(
        unit_cost=avg,
        avg_cost_before=avg,
        avg_cost_after=avg,
        quantity_after=item.quantity_on_hand,
        shortfall=shortfall,
    )


def reverse_receipt(
    *,
    item: InventoryItem,
    quantity,
    rate,
    avg_cost_before,
    avg_cost_after,
    voucher,
) -> StockChange:
    """
    Undo a purchase.

    - If no later purchase re-blended the item (avg_cost still equals the
      purchase's avg_cost_after) the pre-purchase avg_cost is restored exactly.
    - Otherwise the purchase is un-blended:
        avg = (qty_now * avg_now - qty * rate) / (qty_now - qty)
    - When no stock remains the pre-purchase avg_cost is restored.
    """
    qty = _qty(quantity)
    rate = Decimal(str(rate))
    cur_qty = _qty(item.quantity_on_hand)
    cur_avg = _cost(item.avg_cost)
    remaining = cur_qty - qty

    if remaining < ZERO and not negative_stock_allowed():
        raise InsufficientStockError(
            item_name=item.item_name, requested=qty, available=cur_qty
        )

    if remaining <= ZERO or cur_avg == _cost(avg_cost_after):
        new_avg = _cost(avg_cost_before)
    else:
        new_avg = max(_cost((cur_qty * cur_avg - qty * rate) / remaining), Decimal("0.0000"))

    _write(item, quantity=remaining, avg_cost=new_avg)
    _record(
        item,
        voucher=voucher,
        reason=InventoryMovement.Reason.PURCHASE_REVERSAL,
        quantity=qty,
        unit_cost=_cost(rate),
    )
    return StockChange(
        unit_cost=_cost(rate),
        avg_cost_before=cur_avg,
        avg_cost_after=new_avg,
        quantity_after=remaining,
    )


def reverse_issue(*, item: InventoryItem, quantity, unit_cost, voucher) -> StockChange:
    """Undo a sale: stock comes back at the cost it left with."""
    qty = _qty(quantity)
    unit_cost = _cost(unit_cost)
    cur_qty = _qty(item.quantity_on_hand)
    cur_avg = _cost(item.avg_cost)

    new_avg = _blend(cur_qty, cur_avg, qty, unit_cost)

    _write(item, quantity=cur_qty + qty, avg_cost=new_avg)
    _record(
        item,
        voucher=voucher,
        reason=InventoryMovement.Reason.SALE_REVERSAL,
        quantity=qty,
        unit_cost=unit_cost,
    )
    return StockChange(
        unit_cost=unit_cost,
        avg_cost_before=cur_avg,
        avg_cost_after=new_avg,
        quantity_after=item.quantity_on_hand,
    )
