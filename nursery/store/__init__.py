"""Store economy: inventory slots, funds, prices and rating."""

from nursery.store.inventory import Inventory, InventorySlot, NotFound
from nursery.store.store import Store

__all__ = ["Inventory", "InventorySlot", "NotFound", "Store"]
