"""
Inventory models export surface.
"""

from .inventory_item import InventoryItem
from .inventory_movement import InventoryMovement

__all__ = [
    "InventoryItem",
    "InventoryMovement",
]
