# backend/wsgi.py
"""
WSGI entrypoint for the voucher ledger service.
Falls back to dev settings when DJANGO_SETTINGS_MODULE is not set;
deployments set backend.settings.prod.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings.dev")

application = get_wsgi_application()
