"""Customer factories.

``create(kind, ...)`` builds a customer of any type. ``spawn(...)`` is what
the manager calls: fixed factories always spawn one type, the random
factory picks a type by configured weights.
"""

import random
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Union

from nursery.config.customers import RANDOM_CUSTOMER_FACTORY
from nursery.config.simulation_config import CustomerConfig
from nursery.customers.customer import (
    Customer,
    CustomerType,
    Intent,
    RegularCustomer,
    RobberCustomer,
    VipCustomer,
)


class CustomerFactory(ABC):
    """Builds customers with type-specific patience, quantity and intent."""

    def __init__(self, config: CustomerConfig, rng: random.Random) -> None:
        self.config = config
        self._rng = rng

    def create(self, kind: Union[CustomerType, str], customer_id: int, requested: str) -> Customer:
        kind = CustomerType(kind) if isinstance(kind, str) else kind
        config = self.config
        if kind is CustomerType.VIP:
            quantity = self._rng.randint(*config.vip_quantity)
            return VipCustomer(customer_id, requested, quantity, config.vip_patience, Intent.BUY)
        if kind is CustomerType.ROBBER:
            return RobberCustomer(customer_id, requested, config.robber_max_haul, config.robber_patience, Intent.STEAL)
        quantity = self._rng.randint(*config.regular_quantity)
        intent = Intent.BROWSE if self._rng.random() < config.regular_browse_chance else Intent.BUY
        return RegularCustomer(customer_id, requested, quantity, config.regular_patience, intent)

    @abstractmethod
    def next_kind(self) -> CustomerType:
        """Type of the next spawned customer."""

    def spawn(self, customer_id: int, requested: str) -> Customer:
        return self.create(self.next_kind(), customer_id, requested)

    @abstractmethod
    def settings(self) -> Dict[str, Any]:
        """Customer config overrides that rebuild this factory after a load."""


class FixedCustomerFactory(CustomerFactory):
    """Always spawns the same customer type."""

    def __init__(self, kind: CustomerType, config: CustomerConfig, rng: random.Random) -> None:
        super().__init__(config, rng)
        self.kind = kind

    def next_kind(self) -> CustomerType:
        return self.kind

    def settings(self) -> Dict[str, Any]:
        return {"factory": self.kind.value}


class RandomCustomerFactory(CustomerFactory):
    """Spawns a weighted-random customer type."""

    def __init__(
        self,
        config: CustomerConfig,
        rng: random.Random,
        weights: Optional[Dict[str, float]] = None,
    ) -> None:
        super().__init__(config, rng)
        weights = weights if weights is not None else config.spawn_weights
        # Fixed order keeps draws reproducible regardless of dict ordering
        self._kinds = [kind for kind in CustomerType if weights.get(kind.value, 0.0) > 0]
        self._weights = [weights[kind.value] for kind in self._kinds]

    def next_kind(self) -> CustomerType:
        return self._rng.choices(self._kinds, weights=self._weights, k=1)[0]

    def settings(self) -> Dict[str, Any]:
        weights = {kind.value: 0.0 for kind in CustomerType}
        weights.update({kind.value: weight for kind, weight in zip(self._kinds, self._weights)})
        return {"factory": RANDOM_CUSTOMER_FACTORY, "spawn_weights": weights}


def create_customer_factory(
    kind: Union[CustomerType, str], config: CustomerConfig, rng: random.Random
) -> CustomerFactory:
    """Factory for ``kind``: a customer type value, or "random"."""
    if kind == RANDOM_CUSTOMER_FACTORY:
        return RandomCustomerFactory(config, rng)
    return FixedCustomerFactory(CustomerType(kind) if isinstance(kind, str) else kind, config, rng)
