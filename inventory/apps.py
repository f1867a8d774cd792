# inventory/apps.py

"""
INVENTORY APP CONFIG

Stock items valued at weighted-average cost, moved only by voucher posting.
"""

from django.apps import AppConfig


class InventoryConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "inventory"
    verbose_name = "Inventory"
