# accounting/apps.py

"""
ACCOUNTING APP CONFIG

Chart of accounts:
- Account groups (hierarchical, by nature)
- Ledgers with opening + running balances
"""

from django.apps import AppConfig


class AccountingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "accounting"
    verbose_name = "Chart of Accounts"
