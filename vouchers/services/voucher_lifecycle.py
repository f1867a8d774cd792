"""
VOUCHER LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for Voucher entities.

    draft --post--> posted --cancel--> cancelled

DESIGN PRINCIPLES:
- No database writes
- No side effects
- Single source of truth
"""

from accounting.services.exceptions import (
    AlreadyCancelledError,
    InvalidStateTransitionError,
    NotPostedError,
)
from vouchers.models import Voucher

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Voucher.Status.CANCELLED,
}

ALLOWED_TRANSITIONS = {
    Voucher.Status.DRAFT: {
        Voucher.Status.POSTED,
    },
    Voucher.Status.POSTED: {
        Voucher.Status.CANCELLED,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, voucher: Voucher, target_status: str):
    if can_transition(from_status=voucher.status, to_status=target_status):
        return

    if target_status == Voucher.Status.CANCELLED:
        if voucher.status == Voucher.Status.CANCELLED:
            raise AlreadyCancelledError(f"Voucher {voucher.voucher_number} is already cancelled")
        raise NotPostedError(
            f"Voucher {voucher.voucher_number} is '{voucher.status}'; only posted vouchers can be cancelled"
        )

    raise InvalidStateTransitionError(
        f"Voucher {voucher.voucher_number} cannot transition from "
        f"'{voucher.status}' to '{target_status}'"
    )
