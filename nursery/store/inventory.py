"""Inventory of produce keyed by item name."""

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

from nursery.exceptions import PreconditionError
from nursery.result import Err, Ok, Result

logger = logging.getLogger(__name__)


@dataclass
class InventorySlot:
    """Stock of one item. Quantity never goes negative."""

    quantity: int = 0
    unit_price: float = 0.0


@dataclass(frozen=True)
class NotFound:
    """Error value for lookups of items the inventory has never stocked."""

    item: str

    def __str__(self) -> str:
        return f"Item not found: {self.item}"


class Inventory:
    """Item slots with add/remove semantics.

    Slots survive reaching zero quantity so the item keeps its price.
    """

    def __init__(self) -> None:
        self._slots: Dict[str, InventorySlot] = {}

    def __contains__(self, item: object) -> bool:
        return item in self._slots

    def __iter__(self) -> Iterator[Tuple[str, InventorySlot]]:
        for item in sorted(self._slots):
            yield item, self._slots[item]

    def __len__(self) -> int:
        return len(self._slots)

    def add_stock(self, item: str, quantity: int, unit_price: Optional[float] = None) -> int:
        """Add ``quantity`` units, creating the slot on first use.

        Args:
            item: Inventory key
            quantity: Units to add (must be positive)
            unit_price: Price to set; required for a new item

        Returns:
            The item's new quantity

        Raises:
            PreconditionError: On a non-positive quantity, a negative price,
                or a new item without a price
        """
        if quantity <= 0:
            raise PreconditionError(f"quantity must be positive, got {quantity}")
        if unit_price is not None and unit_price < 0:
            raise PreconditionError(f"unit_price must be non-negative, got {unit_price}")
        slot = self._slots.get(item)
        if slot is None:
            if unit_price is None:
                raise PreconditionError(f"New item {item!r} needs a unit price")
            slot = self._slots[item] = InventorySlot(quantity=0, unit_price=unit_price)
        elif unit_price is not None:
            slot.unit_price = unit_price
        slot.quantity += quantity
        return slot.quantity

    def remove_stock(self, item: str, quantity: int) -> bool:
        """Remove exactly ``quantity`` units.

        Returns:
            True and decrements when enough stock exists; False with no
            change otherwise (including unknown items)

        Raises:
            PreconditionError: On a non-positive quantity
        """
        if quantity <= 0:
            raise PreconditionError(f"quantity must be positive, got {quantity}")
        slot = self._slots.get(item)
        if slot is None or slot.quantity < quantity:
            return False
        slot.quantity -= quantity
        return True

    def take_up_to(self, item: str, quantity: int) -> int:
        """Remove as many units as available, at most ``quantity``.

        Returns the number of units actually removed.
        """
        if quantity <= 0:
            raise PreconditionError(f"quantity must be positive, got {quantity}")
        slot = self._slots.get(item)
        if slot is None:
            return 0
        taken = min(slot.quantity, quantity)
        slot.quantity -= taken
        return taken

    def price_of(self, item: str) -> Result[float, NotFound]:
        slot = self._slots.get(item)
        if slot is None:
            return Err(NotFound(item))
        return Ok(slot.unit_price)

    def quantity_of(self, item: str) -> int:
        slot = self._slots.get(item)
        return slot.quantity if slot is not None else 0

    def in_stock(self) -> Dict[str, int]:
        """Items with at least one unit, by key."""
        return {item: slot.quantity for item, slot in self if slot.quantity > 0}

    def replace_slots(self, slots: Dict[str, InventorySlot]) -> None:
        """Swap in restored slots (snapshot load only)."""
        self._slots = {item: InventorySlot(slot.quantity, slot.unit_price) for item, slot in slots.items()}
