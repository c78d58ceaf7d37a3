"""Read-only views of the world for scenes and other UI consumers.

Views are frozen pydantic models built fresh from the live objects.
Holding one never keeps a reference into the simulation, and mutating it
is rejected by pydantic.
"""

from typing import Tuple

from pydantic import BaseModel, ConfigDict

from nursery.customers.customer import Customer
from nursery.plants.plant import Plant
from nursery.store.store import Store
from nursery.workers import Worker


class PlantView(BaseModel):
    """A plant as the renderer sees it."""

    model_config = ConfigDict(frozen=True)

    id: int
    greenhouse: str
    species: str
    stage: str
    progress: float
    threshold: float
    moisture: float
    nutrients: float
    cycle: str
    visual_key: str
    width: int
    height: int


class InventoryItemView(BaseModel):
    model_config = ConfigDict(frozen=True)

    item: str
    quantity: int
    unit_price: float


class CustomerView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    type: str
    intent: str
    requested: str
    quantity: int
    time_in_store: float


class WorkerView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    role: str
    level: int
    experience: int
    pending: int
    greenhouses: Tuple[str, ...]


class WorldView(BaseModel):
    """Everything a scene needs to draw one frame."""

    model_config = ConfigDict(frozen=True)

    tick: int
    elapsed: float
    day: int
    hour: int
    minute: int
    funds: float
    rating: float
    guarded: bool
    plants: Tuple[PlantView, ...] = ()
    inventory: Tuple[InventoryItemView, ...] = ()
    customers: Tuple[CustomerView, ...] = ()
    workers: Tuple[WorkerView, ...] = ()


def plant_view(plant: Plant, greenhouse: str) -> PlantView:
    width, height = plant.visual_strategy.size(plant.stage)
    threshold = plant.threshold
    return PlantView(
        id=plant.id,
        greenhouse=greenhouse,
        species=plant.species.value,
        stage=plant.stage.value,
        progress=plant.progress,
        # inf is not JSON-friendly; dead plants report 0
        threshold=threshold if threshold != float("inf") else 0.0,
        moisture=plant.moisture,
        nutrients=plant.nutrients,
        cycle=plant.growth_cycle.kind.value,
        visual_key=plant.visual_key,
        width=width,
        height=height,
    )


def inventory_view(store: Store) -> Tuple[InventoryItemView, ...]:
    return tuple(
        InventoryItemView(item=item, quantity=slot.quantity, unit_price=slot.unit_price)
        for item, slot in store.inventory
    )


def customer_view(customer: Customer) -> CustomerView:
    return CustomerView(
        id=customer.id,
        type=customer.customer_type.value,
        intent=customer.intent.value,
        requested=customer.requested,
        quantity=customer.quantity,
        time_in_store=customer.time_in_store,
    )


def worker_view(worker: Worker) -> WorkerView:
    return WorkerView(
        id=worker.id,
        role=worker.role.value,
        level=worker.level,
        experience=worker.experience,
        pending=worker.pending,
        greenhouses=tuple(worker.greenhouses),
    )
