"""Customer variants.

Every customer gets exactly one interaction with the store, once they have
spent their patience browsing. Regular and VIP customers buy (or fail to,
when stock is short); robbers steal unless the store is being patrolled.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from nursery.config.simulation_config import CustomerConfig
from nursery.store.store import Store

logger = logging.getLogger(__name__)


class CustomerType(Enum):
    REGULAR = "regular"
    VIP = "vip"
    ROBBER = "robber"


class Intent(Enum):
    BUY = "buy"
    BROWSE = "browse"
    STEAL = "steal"


@dataclass(frozen=True)
class Interaction:
    """What happened when a customer was served.

    Attributes:
        customer_id: Customer served
        customer_type: Their type value
        outcome: "sale", "sale_failed", "browse", "theft", "cash_theft" or "deterred"
        item: Item requested or targeted
        quantity: Units moved (0 if none)
        amount: Funds moved in either direction (0 if none)
        succeeded: Whether the customer achieved what they came for
        detail: Human-readable summary
    """

    customer_id: int
    customer_type: str
    outcome: str
    item: str
    quantity: int
    amount: float
    succeeded: bool
    detail: str


class Customer(ABC):
    """A shopper in the store.

    Attributes:
        id: Arrival-ordered customer id
        requested: Inventory key they want (or want to steal)
        quantity: Units they want
        patience: Seconds they browse before being served
        intent: What they came to do
        time_in_store: Seconds spent so far
    """

    customer_type: CustomerType
    # Lower is served first
    priority: int = 1

    def __init__(self, customer_id: int, requested: str, quantity: int, patience: float, intent: Intent) -> None:
        self.id = customer_id
        self.requested = requested
        self.quantity = quantity
        self.patience = patience
        self.intent = intent
        self.time_in_store = 0.0

    @property
    def is_ready(self) -> bool:
        return self.time_in_store >= self.patience

    def age(self, elapsed: float) -> None:
        self.time_in_store += elapsed

    @abstractmethod
    def interact(self, store: Store, config: CustomerConfig) -> Interaction:
        """Perform this customer's single interaction with ``store``."""

    def _interaction(self, outcome: str, quantity: int, amount: float, succeeded: bool, detail: str) -> Interaction:
        return Interaction(
            customer_id=self.id,
            customer_type=self.customer_type.value,
            outcome=outcome,
            item=self.requested,
            quantity=quantity,
            amount=amount,
            succeeded=succeeded,
            detail=detail,
        )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(id={self.id}, intent={self.intent.value}, "
            f"requested={self.requested!r}, quantity={self.quantity})"
        )


class _Shopper(Customer):
    """Shared buying behaviour for paying customers."""

    def _discount(self, config: CustomerConfig) -> float:
        return 0.0

    def _rating_gain(self, store: Store) -> float:
        return store.economy.rating_sale_gain

    def interact(self, store: Store, config: CustomerConfig) -> Interaction:
        if self.intent is Intent.BROWSE:
            return self._interaction("browse", 0, 0.0, True, f"customer {self.id} browsed and left")

        sale = store.sell(self.requested, self.quantity, discount=self._discount(config))
        if sale.is_err():
            store.adjust_rating(-store.economy.rating_failed_sale_loss)
            return self._interaction("sale_failed", 0, 0.0, False, sale.error)

        revenue = sale.unwrap()
        store.adjust_rating(self._rating_gain(store))
        logger.debug(f"{self.customer_type.value} {self.id} bought {self.quantity} {self.requested} for ${revenue:.2f}")
        return self._interaction(
            "sale", self.quantity, revenue, True, f"sold {self.quantity} {self.requested} for ${revenue:.2f}"
        )


class RegularCustomer(_Shopper):
    """Pays list price; some only browse."""

    customer_type = CustomerType.REGULAR


class VipCustomer(_Shopper):
    """Served ahead of everyone else and gets a discount."""

    customer_type = CustomerType.VIP
    priority = 0

    def _discount(self, config: CustomerConfig) -> float:
        return config.vip_discount

    def _rating_gain(self, store: Store) -> float:
        return store.economy.rating_vip_sale_gain


class RobberCustomer(Customer):
    """Takes stock without paying, or cash when the shelf is bare."""

    customer_type = CustomerType.ROBBER

    def interact(self, store: Store, config: CustomerConfig) -> Interaction:
        if store.is_guarded:
            logger.info(f"Robber {self.id} deterred by patrol")
            return self._interaction("deterred", 0, 0.0, False, f"robber {self.id} deterred by patrol")

        haul = min(self.quantity, config.robber_max_haul)
        taken = store.steal_stock(self.requested, haul) if self.requested in store.inventory else 0
        store.adjust_rating(-store.economy.rating_theft_loss)
        if taken > 0:
            logger.warning(f"Robber {self.id} stole {taken} {self.requested}")
            return self._interaction("theft", taken, 0.0, True, f"robber stole {taken} {self.requested}")

        cash = store.steal_cash(config.robber_cash_ratio, config.robber_cash_cap)
        logger.warning(f"Robber {self.id} found no {self.requested} and took ${cash:.2f}")
        return self._interaction("cash_theft", 0, cash, True, f"robber took ${cash:.2f}")
