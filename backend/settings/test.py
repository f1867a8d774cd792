# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS (pytest-django / manage.py test)
- In-memory SQLite
- Throttling off
- Fast password hashing
- Posting policy pinned to defaults (reject negative stock, no COGS posting)
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import REST_FRAMEWORK

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": (),
}

INVENTORY_ALLOW_NEGATIVE_STOCK = False
VOUCHER_NUMBER_PADDING = 5
INVENTORY_COGS_LEDGER_CODE = ""
INVENTORY_STOCK_LEDGER_CODE = ""

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {"null": {"class": "logging.NullHandler"}},
    "root": {"handlers": ["null"], "level": "CRITICAL"},
}
