# vouchers/services/draft_builder.py

"""
VOUCHER DRAFT BUILDER (APPLICATION SERVICE)

Creates, edits and discards draft vouchers.

Rules:
- entries: non-empty; each {ledger_id, debit | credit}
  - exactly one side non-zero
  - amounts >= 0 with at most 2 fractional digits
  - ledger must exist and be active
- items: only on sales / purchase invoices; each {item_id, quantity, rate}
  - quantity > 0 (3dp), rate >= 0 (2dp), item must exist and be active
- party_ledger_id, when given, must resolve
- A draft has ZERO accounting effect: no ledger or stock is touched here
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional, Sequence

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils.dateparse import parse_date

from accounting.models import Ledger
from accounting.services.exceptions import (
    ConcurrentModificationError,
    InvalidStateTransitionError,
    RecordNotFoundError,
    VoucherValidationError,
)
from inventory.models import InventoryItem
from vouchers.models import Voucher, VoucherDraftItem, VoucherDraftLine
from vouchers.services.numbering import next_voucher_number

logger = logging.getLogger(__name__)

MONEY_PLACES = Decimal("0.01")
QTY_PLACES = Decimal("0.001")
ZERO = Decimal("0.00")


# ============================================================
# INPUT NORMALIZATION
# ============================================================


def _decimal(value, *, label: str, places: Decimal) -> Decimal:
    if value is None or value == "":
        return ZERO
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise VoucherValidationError(f"{label}: invalid number {value!r}") from exc

    if not d.is_finite():
        raise VoucherValidationError(f"{label}: invalid number {value!r}")
    if d < 0:
        raise VoucherValidationError(f"{label}: must not be negative")
    if d != d.quantize(places):
        raise VoucherValidationError(
            f"{label}: at most {abs(places.as_tuple().exponent)} decimal places allowed"
        )
    return d.quantize(places)


def _pick(raw: dict, *keys):
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _parse_voucher_date(value) -> date:
    if isinstance(value, date):
        return value
    try:
        parsed = parse_date(str(value or "").strip()) if value else None
    except ValueError as exc:
        raise VoucherValidationError(f"voucher_date: invalid date {value!r}") from exc
    if parsed is None:
        raise VoucherValidationError(f"voucher_date: invalid date {value!r}")
    return parsed


def _normalize_entries(entries: Optional[Sequence[dict]]) -> List[dict]:
    if not entries:
        raise VoucherValidationError("A voucher needs at least one ledger entry")

    normalized = []
    for index, raw in enumerate(entries, start=1):
        if not isinstance(raw, dict):
            raise VoucherValidationError(f"Entry {index}: must be an object")

        ledger_id = _pick(raw, "ledger_id", "ledger")
        if ledger_id in (None, ""):
            raise VoucherValidationError(f"Entry {index}: ledger_id is required")

        debit = _decimal(_pick(raw, "debit", "debit_amount"), label=f"Entry {index} debit", places=MONEY_PLACES)
        credit = _decimal(_pick(raw, "credit", "credit_amount"), label=f"Entry {index} credit", places=MONEY_PLACES)

        if debit > ZERO and credit > ZERO:
            raise VoucherValidationError(f"Entry {index}: specify either debit or credit, not both")
        if debit == ZERO and credit == ZERO:
            raise VoucherValidationError(f"Entry {index}: a debit or credit amount is required")

        normalized.append(
            {
                "line_no": index,
                "ledger_id": ledger_id,
                "debit_amount": debit,
                "credit_amount": credit,
                "narration": str(raw.get("narration") or "").strip()[:255],
            }
        )
    return normalized


def _normalize_items(voucher_type: str, items: Optional[Iterable[dict]]) -> List[dict]:
    items = list(items or [])
    if not items:
        return []

    if voucher_type not in Voucher.STOCK_TYPES:
        raise VoucherValidationError(
            f"{voucher_type} vouchers cannot carry inventory items"
        )

    normalized = []
    for index, raw in enumerate(items, start=1):
        if not isinstance(raw, dict):
            raise VoucherValidationError(f"Item {index}: must be an object")

        item_id = _pick(raw, "item_id", "item")
        if item_id in (None, ""):
            raise VoucherValidationError(f"Item {index}: item_id is required")

        quantity = _decimal(raw.get("quantity"), label=f"Item {index} quantity", places=QTY_PLACES)
        if quantity <= 0:
            raise VoucherValidationError(f"Item {index}: quantity must be greater than zero")

        rate = _decimal(raw.get("rate"), label=f"Item {index} rate", places=MONEY_PLACES)

        normalized.append(
            {"line_no": index, "item_id": item_id, "quantity": quantity, "rate": rate}
        )
    return normalized


# ============================================================
# REFERENCE RESOLUTION
# ============================================================


def _resolve_ledgers(ledger_ids) -> None:
    ids = set()
    for raw in ledger_ids:
        try:
            ids.add(int(raw))
        except (TypeError, ValueError) as exc:
            raise VoucherValidationError(f"Ledger {raw!r} does not exist") from exc

    found = dict(Ledger.objects.filter(id__in=ids).values_list("id", "is_active"))
    missing = sorted(ids - set(found))
    if missing:
        raise VoucherValidationError(f"Ledger(s) not found: {missing}")

    inactive = sorted(i for i, active in found.items() if not active)
    if inactive:
        raise VoucherValidationError(f"Ledger(s) inactive: {inactive}")


def _resolve_items(item_ids) -> None:
    ids = set()
    for raw in item_ids:
        try:
            ids.add(int(raw))
        except (TypeError, ValueError) as exc:
            raise VoucherValidationError(f"Inventory item {raw!r} does not exist") from exc

    found = dict(InventoryItem.objects.filter(id__in=ids).values_list("id", "is_active"))
    missing = sorted(ids - set(found))
    if missing:
        raise VoucherValidationError(f"Inventory item(s) not found: {missing}")

    inactive = sorted(i for i, active in found.items() if not active)
    if inactive:
        raise VoucherValidationError(f"Inventory item(s) inactive: {inactive}")


def _resolve_party(party_ledger_id) -> Optional[int]:
    if party_ledger_id in (None, ""):
        return None
    try:
        party_id = int(party_ledger_id)
    except (TypeError, ValueError) as exc:
        raise VoucherValidationError(f"Party ledger {party_ledger_id!r} does not exist") from exc
    if not Ledger.objects.filter(id=party_id).exists():
        raise VoucherValidationError(f"Party ledger {party_ledger_id!r} does not exist")
    return party_id


def _write_lines(voucher: Voucher, entries: List[dict], items: List[dict]) -> None:
    for entry in entries:
        VoucherDraftLine.objects.create(voucher=voucher, **entry)
    for item in items:
        VoucherDraftItem.objects.create(voucher=voucher, **item)


def _lock_draft(voucher_id, *, expected_version: int | None) -> Voucher:
    try:
        voucher = Voucher.objects.select_for_update().get(pk=voucher_id)
    except (Voucher.DoesNotExist, ValueError, TypeError) as exc:
        raise RecordNotFoundError(f"Voucher {voucher_id!r} not found") from exc

    if voucher.status != Voucher.Status.DRAFT:
        raise InvalidStateTransitionError(
            f"Voucher {voucher.voucher_number} is {voucher.status}; only drafts can be changed"
        )
    if expected_version is not None and int(expected_version) != voucher.version:
        raise ConcurrentModificationError(
            f"Voucher {voucher.voucher_number} changed (version {voucher.version}, "
            f"expected {expected_version}); reload and retry"
        )
    return voucher


# ============================================================
# PUBLIC API
# ============================================================


@transaction.atomic
def create_draft(
    *,
    voucher_type: str,
    voucher_date,
    party_ledger_id=None,
    entries: Sequence[dict],
    items: Iterable[dict] = (),
    narration: str = "",
    reference_number: str | None = None,
    voucher_number: str | None = None,
    user=None,
) -> Voucher:
    if voucher_type not in Voucher.VoucherType.values:
        raise VoucherValidationError(f"Unknown voucher_type {voucher_type!r}")

    voucher_date = _parse_voucher_date(voucher_date)
    normalized_entries = _normalize_entries(entries)
    normalized_items = _normalize_items(voucher_type, items)

    _resolve_ledgers(e["ledger_id"] for e in normalized_entries)
    _resolve_items(i["item_id"] for i in normalized_items)
    party_id = _resolve_party(party_ledger_id)

    number = (voucher_number or "").strip() or next_voucher_number(voucher_type)

    try:
        with transaction.atomic():
            voucher = Voucher.objects.create(
                voucher_number=number,
                voucher_type=voucher_type,
                voucher_date=voucher_date,
                party_ledger_id=party_id,
                narration=narration or "",
                reference_number=reference_number or "",
                created_by=user if getattr(user, "is_authenticated", False) else None,
            )
    except DjangoValidationError as exc:
        raise VoucherValidationError("; ".join(exc.messages)) from exc
    except IntegrityError as exc:
        raise VoucherValidationError(f"Voucher number {number} is already in use") from exc

    _write_lines(voucher, normalized_entries, normalized_items)

    logger.info(
        "Draft voucher created",
        extra={
            "voucher_id": voucher.id,
            "voucher_number": voucher.voucher_number,
            "voucher_type": voucher_type,
            "entries": len(normalized_entries),
            "items": len(normalized_items),
        },
    )
    return voucher


@transaction.atomic
def update_draft(
    *,
    voucher_id,
    expected_version: int | None = None,
    voucher_date=None,
    party_ledger_id=...,
    entries: Sequence[dict] | None = None,
    items: Iterable[dict] | None = None,
    narration: str | None = None,
    reference_number: str | None = None,
) -> Voucher:
    """
    Edit a draft in place.

    Omitted arguments keep their current value; entries / items, when given,
    replace the draft's lines wholesale. party_ledger_id=None clears the party.
    """
    voucher = _lock_draft(voucher_id, expected_version=expected_version)

    if voucher_date is not None:
        voucher.voucher_date = _parse_voucher_date(voucher_date)
    if party_ledger_id is not ...:
        voucher.party_ledger_id = _resolve_party(party_ledger_id)
    if narration is not None:
        voucher.narration = narration
    if reference_number is not None:
        voucher.reference_number = reference_number

    if entries is not None:
        normalized_entries = _normalize_entries(entries)
        _resolve_ledgers(e["ledger_id"] for e in normalized_entries)
        voucher.draft_lines.all().delete()
        _write_lines(voucher, normalized_entries, [])

    if items is not None:
        normalized_items = _normalize_items(voucher.voucher_type, items)
        _resolve_items(i["item_id"] for i in normalized_items)
        voucher.draft_items.all().delete()
        _write_lines(voucher, [], normalized_items)

    voucher.version += 1
    voucher.save()

    logger.info(
        "Draft voucher updated",
        extra={"voucher_id": voucher.id, "version": voucher.version},
    )
    return voucher


@transaction.atomic
def delete_draft(*, voucher_id, expected_version: int | None = None) -> None:
    voucher = _lock_draft(voucher_id, expected_version=expected_version)
    number = voucher.voucher_number
    voucher.delete()
    logger.info("Draft voucher discarded", extra={"voucher_number": number})
