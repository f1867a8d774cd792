# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Centralized domain errors for the chart of accounts, voucher posting and
inventory valuation services.

Rules:
- Services raise these; the API layer maps them to HTTP responses
- Only ConcurrentModificationError is retryable
- Every error leaves balances and voucher status untouched (the raising
  service runs inside transaction.atomic)
"""

from __future__ import annotations

from decimal import Decimal


class AccountingServiceError(Exception):
    """Base exception for all accounting service failures."""

    code = "accounting_error"
    retryable = False

    def as_dict(self) -> dict:
        return {
            "detail": str(self),
            "code": self.code,
            "retryable": self.retryable,
        }


class VoucherValidationError(AccountingServiceError):
    """Raised when a voucher draft is malformed."""

    code = "validation_error"


class ImbalancedVoucherError(AccountingServiceError):
    """Raised when a voucher's debit total differs from its credit total."""

    code = "imbalanced"

    def __init__(self, *, debit_total: Decimal, credit_total: Decimal):
        self.debit_total = debit_total
        self.credit_total = credit_total
        self.delta = debit_total - credit_total
        super().__init__(
            f"Voucher is imbalanced: debit {debit_total} != credit {credit_total} "
            f"(delta {self.delta})"
        )

    def as_dict(self) -> dict:
        data = super().as_dict()
        data.update(
            {
                "debit_total": str(self.debit_total),
                "credit_total": str(self.credit_total),
                "delta": str(self.delta),
            }
        )
        return data


class RecordNotFoundError(AccountingServiceError):
    """Raised when a voucher, ledger, group or item id does not resolve."""

    code = "not_found"


class InvalidStateTransitionError(AccountingServiceError):
    """Raised on post of a non-draft or cancel of a non-posted voucher."""

    code = "invalid_state_transition"


class AlreadyCancelledError(InvalidStateTransitionError):
    code = "already_cancelled"


class NotPostedError(InvalidStateTransitionError):
    code = "not_posted"


class InsufficientStockError(AccountingServiceError):
    """Raised when a stock movement would drive quantity_on_hand negative."""

    code = "insufficient_stock"

    def __init__(self, *, item_name: str, requested: Decimal, available: Decimal):
        self.item_name = item_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for '{item_name}': requested {requested}, available {available}"
        )

    def as_dict(self) -> dict:
        data = super().as_dict()
        data.update(
            {
                "item": self.item_name,
                "requested": str(self.requested),
                "available": str(self.available),
            }
        )
        return data


class ConcurrentModificationError(AccountingServiceError):
    """Raised when another transaction touched the same voucher or ledger. Safe to retry."""

    code = "concurrent_modification"
    retryable = True
