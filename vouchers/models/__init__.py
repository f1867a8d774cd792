"""
Vouchers models export surface.
"""

from .voucher import Voucher
from .draft_line import VoucherDraftItem, VoucherDraftLine
from .ledger_entry import VoucherLedgerEntry
from .voucher_item import VoucherItem
from .sequence import VoucherSequence

__all__ = [
    "Voucher",
    "VoucherDraftLine",
    "VoucherDraftItem",
    "VoucherLedgerEntry",
    "VoucherItem",
    "VoucherSequence",
]
