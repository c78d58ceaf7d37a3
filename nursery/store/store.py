"""The nursery store: funds, produce inventory, seed sales and rating."""

import logging
from typing import Optional, Union

from nursery.config.simulation_config import EconomyConfig
from nursery.exceptions import PreconditionError
from nursery.plants.plant import Plant
from nursery.plants.plant_factory import PlantFactory
from nursery.plants.species import Species, profile_for
from nursery.result import Err, Ok, Result
from nursery.store.inventory import Inventory

logger = logging.getLogger(__name__)


class Store:
    """Holds the business's money, stock and reputation.

    Attributes:
        funds: Cash on hand (never negative)
        rating: Customer rating from 0 to ``economy.max_rating``
        guard_remaining: Seconds of patrol protection left
        inventory: Produce slots keyed by species value
    """

    def __init__(self, economy: Optional[EconomyConfig] = None, inventory: Optional[Inventory] = None) -> None:
        self.economy = economy or EconomyConfig()
        self.inventory = inventory or Inventory()
        self.funds = self.economy.starting_funds
        self.rating = self.economy.starting_rating
        self.guard_remaining = 0.0

    # ------------------------------------------------------------------
    # Money
    # ------------------------------------------------------------------

    def credit(self, amount: float, reason: str = "") -> float:
        if amount < 0:
            raise PreconditionError(f"credit amount must be non-negative, got {amount}")
        self.funds += amount
        logger.debug(f"Credited ${amount:.2f} ({reason}); funds ${self.funds:.2f}")
        return self.funds

    def debit(self, amount: float, reason: str = "") -> Result[float, str]:
        """Withdraw ``amount``; Err if funds are insufficient."""
        if amount < 0:
            raise PreconditionError(f"debit amount must be non-negative, got {amount}")
        if amount > self.funds:
            return Err(f"Insufficient funds for {reason or 'debit'}: need ${amount:.2f}, have ${self.funds:.2f}")
        self.funds -= amount
        logger.debug(f"Debited ${amount:.2f} ({reason}); funds ${self.funds:.2f}")
        return Ok(self.funds)

    # ------------------------------------------------------------------
    # Produce
    # ------------------------------------------------------------------

    def stock_harvest(self, plant: Plant, units: Optional[int] = None) -> int:
        """Credit a harvested plant's produce at its species sell price.

        Returns the item's new quantity.
        """
        units = self.economy.harvest_yield if units is None else units
        return self.inventory.add_stock(plant.profile.item_key, units, plant.profile.sell_price)

    def sell(self, item: str, quantity: int, discount: float = 0.0) -> Result[float, str]:
        """Sell ``quantity`` units of ``item`` at list price less ``discount``.

        A sale that cannot be filled in full changes nothing.

        Returns:
            Ok(revenue) or Err(reason)
        """
        if not 0 <= discount < 1:
            raise PreconditionError(f"discount must be in [0, 1), got {discount}")
        price = self.inventory.price_of(item)
        if price.is_err():
            return Err(str(price.error))
        if not self.inventory.remove_stock(item, quantity):
            return Err(f"Only {self.inventory.quantity_of(item)} {item} in stock, wanted {quantity}")
        revenue = round(price.unwrap() * quantity * (1 - discount), 2)
        self.credit(revenue, reason=f"sale of {quantity} {item}")
        return Ok(revenue)

    def steal_stock(self, item: str, max_units: int) -> int:
        """Lose up to ``max_units`` of ``item`` without payment."""
        return self.inventory.take_up_to(item, max_units)

    def steal_cash(self, ratio: float, cap: float) -> float:
        """Lose ``ratio`` of funds, at most ``cap``. Returns the amount lost."""
        amount = round(min(self.funds * ratio, cap), 2)
        self.funds -= amount
        return amount

    # ------------------------------------------------------------------
    # Seeds
    # ------------------------------------------------------------------

    def seed_price(self, species: Union[Species, str]) -> float:
        return round(profile_for(species).sell_price * self.economy.seed_price_ratio, 2)

    def buy_seed(self, species: Union[Species, str], factory: PlantFactory) -> Result[Plant, str]:
        """Pay for a seed and have ``factory`` create it."""
        species = Species.parse(species)
        paid = self.debit(self.seed_price(species), reason=f"{species.value} seed")
        if paid.is_err():
            return Err(paid.error)
        return Ok(factory.create(species))

    # ------------------------------------------------------------------
    # Rating and security
    # ------------------------------------------------------------------

    def adjust_rating(self, delta: float) -> float:
        self.rating = min(self.economy.max_rating, max(0.0, round(self.rating + delta, 4)))
        return self.rating

    @property
    def is_guarded(self) -> bool:
        return self.guard_remaining > 0

    def guard(self, duration: float) -> None:
        """Keep the store guarded for at least ``duration`` seconds."""
        if duration <= 0:
            raise PreconditionError(f"guard duration must be positive, got {duration}")
        self.guard_remaining = max(self.guard_remaining, duration)

    def tick(self, elapsed: float) -> None:
        if self.guard_remaining > 0:
            self.guard_remaining = max(0.0, self.guard_remaining - elapsed)
            if self.guard_remaining == 0:
                logger.debug("Store patrol ended")

    def __repr__(self) -> str:
        return f"Store(funds={self.funds:.2f}, rating={self.rating:.1f}, items={len(self.inventory)})"
