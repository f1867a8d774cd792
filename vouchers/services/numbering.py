# vouchers/services/numbering.py

"""
VOUCHER NUMBERING

Sequential voucher numbers per voucher type: <PREFIX>-<zero padded>.

Rules:
- The series row is locked (select_for_update) while a number is taken
- Series are created on first use with the default prefix
- Numbers are never reused (a discarded draft leaves a gap)
"""

from __future__ import annotations

from django.conf import settings
from django.db import transaction

from vouchers.models import Voucher, VoucherSequence


def _default_padding() -> int:
    return int(getattr(settings, "VOUCHER_NUMBER_PADDING", 5))


def get_or_create_sequence(voucher_type: str) -> VoucherSequence:
    sequence, _ = VoucherSequence.objects.get_or_create(
        voucher_type=voucher_type,
        defaults={
            "prefix": VoucherSequence.DEFAULT_PREFIXES[voucher_type],
            "padding": _default_padding(),
        },
    )
    return sequence


@transaction.atomic
def next_voucher_number(voucher_type: str) -> str:
    get_or_create_sequence(voucher_type)
    sequence = VoucherSequence.objects.select_for_update().get(voucher_type=voucher_type)

    number = sequence.next_number
    candidate = sequence.format_number(number)

    # Skip numbers taken by manually numbered vouchers.
    while Voucher.objects.filter(voucher_number=candidate).exists():
        number += 1
        candidate = sequence.format_number(number)

    sequence.next_number = number + 1
    sequence.save(update_fields=["next_number"])
    return candidate
