"""Domain event definitions for nursery telemetry.

Events are frozen dataclasses describing something that already happened.
They carry plain values (ids, names, amounts) rather than live objects so
handlers never reach back into the domain.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PlantStageChangedEvent:
    """A plant moved to a new lifecycle stage.

    Attributes:
        plant_id: ID of the plant
        species: Species name ("carrot", "tomato", ...)
        old_stage: Stage value before the transition
        new_stage: Stage value after the transition
        reason: Why it happened ("growth", "drought", "starvation", ...)
        tick: Simulation tick when this occurred
    """

    plant_id: int
    species: str
    old_stage: str
    new_stage: str
    reason: str
    tick: int


@dataclass(frozen=True)
class PlantPlantedEvent:
    """A seed was planted in a greenhouse plot."""

    plant_id: int
    species: str
    greenhouse: str
    tick: int


@dataclass(frozen=True)
class PlantRemovedEvent:
    """A plant left its plot.

    Attributes:
        plant_id: ID of the removed plant
        species: Species name
        reason: "harvest", "expired" or "manual"
        tick: Simulation tick when this occurred
    """

    plant_id: int
    species: str
    reason: str
    tick: int


@dataclass(frozen=True)
class CommandExecutedEvent:
    """A queued command ran.

    Attributes:
        command: Command name ("water", "harvest", ...)
        target: Human-readable target description
        succeeded: Whether the command returned Ok
        detail: Outcome summary or failure reason
        tick: Simulation tick when this occurred
    """

    command: str
    target: str
    succeeded: bool
    detail: str
    tick: int


@dataclass(frozen=True)
class CustomerArrivedEvent:
    """A customer entered the store."""

    customer_id: int
    customer_type: str
    intent: str
    requested: str
    tick: int


@dataclass(frozen=True)
class SaleCompletedEvent:
    """Produce was sold to a customer.

    Attributes:
        customer_id: Buyer ID
        item: Inventory key sold
        quantity: Units sold
        revenue: Funds credited to the store
        tick: Simulation tick when this occurred
    """

    customer_id: int
    item: str
    quantity: int
    revenue: float
    tick: int


@dataclass(frozen=True)
class SaleFailedEvent:
    """A customer wanted to buy but the store could not serve them."""

    customer_id: int
    item: str
    quantity: int
    reason: str
    tick: int


@dataclass(frozen=True)
class TheftCommittedEvent:
    """A robber got away with stock or cash.

    Attributes:
        customer_id: Robber ID
        item: Inventory key targeted
        quantity: Units taken (0 when cash was taken instead)
        cash: Funds taken (0 when stock was taken)
        tick: Simulation tick when this occurred
    """

    customer_id: int
    item: str
    quantity: int
    cash: float
    tick: int


@dataclass(frozen=True)
class TheftDeterredEvent:
    """A robber found the store guarded and left empty-handed."""

    customer_id: int
    tick: int
