"""Customer scheduling and service.

Each tick the manager ages the customers already in the store, lets new
ones in on the spawn schedule, then serves everyone whose patience has run
out: VIPs first, the rest in arrival order. A served customer leaves
immediately.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Dict, List, Optional, Type

from nursery.commands import CommandInvoker, ServeCommand
from nursery.config.simulation_config import CustomerConfig
from nursery.customers.customer import (
    Customer,
    CustomerType,
    Intent,
    Interaction,
    RegularCustomer,
    RobberCustomer,
    VipCustomer,
)
from nursery.customers.factory import CustomerFactory, create_customer_factory
from nursery.events import (
    CustomerArrivedEvent,
    EventBus,
    SaleCompletedEvent,
    SaleFailedEvent,
    TheftCommittedEvent,
    TheftDeterredEvent,
)
from nursery.plants.species import Species
from nursery.result import Err, Ok, Result
from nursery.store.store import Store

logger = logging.getLogger(__name__)

CUSTOMER_CLASSES: Dict[CustomerType, Type[Customer]] = {
    CustomerType.REGULAR: RegularCustomer,
    CustomerType.VIP: VipCustomer,
    CustomerType.ROBBER: RobberCustomer,
}


class CustomerManager:
    """Owns the active customers and the arrival schedule.

    Attributes:
        spawn_timer: Seconds accumulated toward the next arrival
        next_customer_id: Id the next arrival will get
    """

    def __init__(
        self,
        store: Store,
        rng: random.Random,
        config: Optional[CustomerConfig] = None,
        factory: Optional[CustomerFactory] = None,
        invoker: Optional[CommandInvoker] = None,
        event_bus: Optional[EventBus] = None,
        tick_provider: Optional[Callable[[], int]] = None,
    ) -> None:
        self.store = store
        self.config = config or CustomerConfig()
        self._rng = rng
        self.factory = factory or create_customer_factory(self.config.factory, self.config, rng)
        self._invoker = invoker or CommandInvoker()
        self._event_bus = event_bus
        self._tick_provider = tick_provider or (lambda: 0)
        self._customers: List[Customer] = []
        self.spawn_timer = 0.0
        self.next_customer_id = 1

    @property
    def active(self) -> List[Customer]:
        """Customers in the store, in arrival order."""
        return list(self._customers)

    def __len__(self) -> int:
        return len(self._customers)

    def _pick_request(self) -> str:
        in_stock = sorted(self.store.inventory.in_stock())
        if in_stock:
            return self._rng.choice(in_stock)
        return self._rng.choice([species.value for species in Species])

    def spawn(self, requested: Optional[str] = None) -> Result[Customer, str]:
        """Let one customer in from the configured factory.

        Args:
            requested: Item they want; a random in-stock item when omitted

        Returns:
            Ok(customer), or Err when the store is already at capacity
        """
        if len(self._customers) >= self.config.max_customers:
            return Err(f"Store full ({self.config.max_customers} customers)")
        customer = self.factory.spawn(self.next_customer_id, requested or self._pick_request())
        return Ok(self._admit(customer))

    def admit(self, customer: Customer) -> Result[Customer, str]:
        """Let a specific, already-built customer in."""
        if len(self._customers) >= self.config.max_customers:
            return Err(f"Store full ({self.config.max_customers} customers)")
        if any(c.id == customer.id for c in self._customers):
            return Err(f"Customer {customer.id} already in store")
        return Ok(self._admit(customer))

    def _admit(self, customer: Customer) -> Customer:
        self._customers.append(customer)
        self.next_customer_id = max(self.next_customer_id, customer.id + 1)
        logger.debug(f"{customer.customer_type.value} customer {customer.id} arrived wanting {customer.requested}")
        if self._event_bus is not None:
            self._event_bus.emit(
                CustomerArrivedEvent(
                    customer_id=customer.id,
                    customer_type=customer.customer_type.value,
                    intent=customer.intent.value,
                    requested=customer.requested,
                    tick=self._tick_provider(),
                )
            )
        return customer

    def tick(self, elapsed: float, store_open: bool = True) -> List[Interaction]:
        """Age, admit and serve customers for one tick.

        Returns the interactions that happened, in service order.
        """
        for customer in self._customers:
            customer.age(elapsed)

        if store_open:
            self.spawn_timer += elapsed
            while self.spawn_timer >= self.config.spawn_interval:
                self.spawn_timer -= self.config.spawn_interval
                if len(self._customers) < self.config.max_customers:
                    self.spawn()

        return self.serve_ready()

    def serve_ready(self) -> List[Interaction]:
        """Serve every customer whose patience has elapsed, VIPs first."""
        ready = [c for c in self._customers if c.is_ready]
        ready.sort(key=lambda c: (c.priority, c.id))
        interactions = []
        for customer in ready:
            interactions.append(self.serve(customer))
        return interactions

    def serve(self, customer: Customer) -> Interaction:
        """Run ``customer``'s single interaction and send them home."""
        command = ServeCommand(customer, self.store, self.config)
        self._invoker.invoke(command)
        self._customers.remove(customer)
        interaction = command.interaction
        self._emit_interaction(interaction)
        return interaction

    def _emit_interaction(self, interaction: Interaction) -> None:
        if self._event_bus is None:
            return
        tick = self._tick_provider()
        if interaction.outcome == "sale":
            self._event_bus.emit(
                SaleCompletedEvent(
                    customer_id=interaction.customer_id,
                    item=interaction.item,
                    quantity=interaction.quantity,
                    revenue=interaction.amount,
                    tick=tick,
                )
            )
        elif interaction.outcome == "sale_failed":
            self._event_bus.emit(
                SaleFailedEvent(
                    customer_id=interaction.customer_id,
                    item=interaction.item,
                    quantity=interaction.quantity,
                    reason=interaction.detail,
                    tick=tick,
                )
            )
        elif interaction.outcome in ("theft", "cash_theft"):
            self._event_bus.emit(
                TheftCommittedEvent(
                    customer_id=interaction.customer_id,
                    item=interaction.item,
                    quantity=interaction.quantity,
                    cash=interaction.amount,
                    tick=tick,
                )
            )
        elif interaction.outcome == "deterred":
            self._event_bus.emit(TheftDeterredEvent(customer_id=interaction.customer_id, tick=tick))

    def replace_customers(self, customers: List[Customer], spawn_timer: float, next_customer_id: int) -> None:
        """Swap in restored customers (snapshot load only)."""
        self._customers = list(customers)
        self.spawn_timer = spawn_timer
        self.next_customer_id = next_customer_id


def build_customer(
    kind: CustomerType,
    customer_id: int,
    requested: str,
    quantity: int,
    patience: float,
    intent: Intent,
    time_in_store: float = 0.0,
) -> Customer:
    """Rebuild a customer from saved fields."""
    customer = CUSTOMER_CLASSES[kind](customer_id, requested, quantity, patience, intent)
    customer.time_in_store = time_in_store
    return customer
