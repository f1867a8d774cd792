# accounting/models/__init__.py

"""
ACCOUNTING MODELS PACKAGE EXPORTS

Note:
- Keep this file *imports-only* (no business logic).
- Do NOT import services from models anywhere (models must stay pure).
"""

from accounting.models.account_group import AccountGroup
from accounting.models.ledger import Ledger

__all__ = [
    "AccountGroup",
    "Ledger",
]
