"""Result type for explicit success/failure handling.

Operations whose failure is part of normal play (a sale with too little
stock, an undo with no history, a harvest of a plant that already died)
return a Result instead of raising. Exceptions are reserved for broken
preconditions; see ``nursery.exceptions``.

Usage:
------
    result = store.inventory.price_of("tomato")
    if result.is_ok():
        price = result.unwrap()
    else:
        logger.debug(f"No price: {result.error}")

    # Pattern matching style
    match caretaker.undo(plant):
        case Ok(memento):
            ...
        case Err(reason):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")  # Success value type
E = TypeVar("E")  # Error type


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A successful outcome carrying ``value``."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Return the success value."""
        return self.value

    @property
    def error(self) -> None:
        """Ok has no error, returns None."""
        return None

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True)
class Err(Generic[E]):
    """A failed outcome carrying ``error``.

    Example:
        def find_plant(plant_id: int) -> Result[Plant, str]:
            if plant_id not in plants:
                return Err(f"Plant {plant_id} not in greenhouse")
            return Ok(plants[plant_id])
    """

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raises ValueError since Err has no success value."""
        raise ValueError(f"Called unwrap on Err: {self.error}")

    @property
    def value(self) -> None:
        """Err has no value, returns None."""
        return None

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Union[Ok[T], Err[E]]
