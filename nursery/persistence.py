"""Save and load of complete nursery state.

A snapshot is a JSON document holding everything the next tick depends
on: the config, the RNG state, every greenhouse and plant, the store, the
customers and the workers' pending commands. Resuming from a snapshot
therefore replays exactly like the run that saved it.

Loading is all-or-nothing. The document is validated by the pydantic
models below and a complete replacement world is built from it before
the running simulation is touched; any problem raises SnapshotError and
leaves the caller's state as it was.

Schema Versioning:
    - Version 1.0: initial schema
"""

from __future__ import annotations

import logging
import random
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple, Union

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from nursery.clock import GameClock
from nursery.commands import CommandInvoker
from nursery.config.simulation_config import SimulationConfig
from nursery.customers.customer import CustomerType, Intent
from nursery.customers.factory import create_customer_factory
from nursery.customers.manager import CustomerManager, build_customer
from nursery.events import EventBus
from nursery.exceptions import ConfigurationError, PreconditionError, SnapshotError
from nursery.greenhouse import Greenhouse
from nursery.memento import Caretaker
from nursery.plants.growth_cycle import GrowthCycleKind
from nursery.plants.plant import Plant
from nursery.plants.plant_factory import RandomPlantFactory
from nursery.plants.species import Species
from nursery.state_machine import PlantStage
from nursery.store.inventory import InventorySlot
from nursery.store.store import Store
from nursery.workers import Worker, WorkerRole, command_from_dict, create_worker

if TYPE_CHECKING:
    from nursery.simulation.engine import NurserySimulation

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0"
SUPPORTED_SCHEMA_VERSIONS = frozenset({"1.0"})

# Mersenne Twister state: 624 words plus the index
RNG_STATE_WORDS = 625


# ============================================================================
# Snapshot schema
# ============================================================================


class PlantRecord(BaseModel):
    id: int = Field(ge=1)
    species: Species
    stage: PlantStage
    progress: float = Field(ge=0)
    cycle: GrowthCycleKind
    moisture: float = Field(ge=0, le=100)
    nutrients: float = Field(ge=0, le=100)
    boost_remaining: float = Field(ge=0)
    dead_for: float = Field(ge=0)


class GreenhouseRecord(BaseModel):
    name: str = Field(min_length=1)
    capacity: int = Field(gt=0)
    max_capacity: int = Field(gt=0)
    plants: List[PlantRecord] = []

    @model_validator(mode="after")
    def _check_plots(self) -> "GreenhouseRecord":
        if self.capacity > self.max_capacity:
            raise ValueError(f"greenhouse {self.name}: capacity exceeds max_capacity")
        if len(self.plants) > self.capacity:
            raise ValueError(f"greenhouse {self.name}: {len(self.plants)} plants in {self.capacity} plots")
        return self


class InventoryRecord(BaseModel):
    item: str = Field(min_length=1)
    quantity: int = Field(ge=0)
    unit_price: float = Field(ge=0)


class StoreRecord(BaseModel):
    funds: float = Field(ge=0)
    rating: float = Field(ge=0)
    guard_remaining: float = Field(ge=0)
    inventory: List[InventoryRecord] = []


class CustomerRecord(BaseModel):
    id: int = Field(ge=1)
    type: CustomerType
    intent: Intent
    requested: str = Field(min_length=1)
    quantity: int = Field(gt=0)
    patience: float = Field(ge=0)
    time_in_store: float = Field(ge=0)


class CustomerManagerRecord(BaseModel):
    spawn_timer: float = Field(ge=0)
    next_customer_id: int = Field(ge=1)
    customers: List[CustomerRecord] = []


class QueuedCommandRecord(BaseModel):
    command: str
    greenhouse: Optional[str] = None
    plant_id: Optional[int] = None
    duration: Optional[float] = Field(default=None, gt=0)


class WorkerRecord(BaseModel):
    id: int = Field(ge=1)
    role: WorkerRole
    experience: int = Field(default=0, ge=0)
    greenhouses: List[str] = []
    queue: List[QueuedCommandRecord] = []


class ClockRecord(BaseModel):
    day: int = Field(ge=1)
    hour: int = Field(ge=0, le=23)
    minute: int = Field(ge=0, le=59)
    accumulator: float = Field(ge=0)


class StatsRecord(BaseModel):
    """Counters of ``NurseryStats.to_dict``."""

    model_config = ConfigDict(extra="forbid")

    plants_planted: int = Field(default=0, ge=0)
    plants_harvested: int = Field(default=0, ge=0)
    plants_expired: int = Field(default=0, ge=0)
    deaths_by_cause: Dict[str, int] = {}
    commands_succeeded: int = Field(default=0, ge=0)
    commands_failed: int = Field(default=0, ge=0)
    arrivals_by_type: Dict[str, int] = {}
    sales: int = Field(default=0, ge=0)
    units_sold: int = Field(default=0, ge=0)
    revenue: float = Field(default=0.0, ge=0)
    failed_sales: int = Field(default=0, ge=0)
    thefts: int = Field(default=0, ge=0)
    units_stolen: int = Field(default=0, ge=0)
    cash_stolen: float = Field(default=0.0, ge=0)
    thefts_deterred: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_counters(self) -> "StatsRecord":
        for name in ("deaths_by_cause", "arrivals_by_type"):
            if any(count < 0 for count in getattr(self, name).values()):
                raise ValueError(f"stats.{name} counts must be non-negative")
        return self


class SaveSnapshot(BaseModel):
    """Top-level saved document."""

    schema_version: str
    saved_at: Optional[str] = None
    tick: int = Field(ge=0)
    elapsed: float = Field(ge=0)
    clock: ClockRecord
    store_open: bool = True
    config: Dict[str, Any]
    rng_state: Tuple[int, List[int], Optional[float]]
    next_plant_id: int = Field(ge=1)
    next_worker_id: int = Field(ge=1)
    greenhouses: List[GreenhouseRecord] = Field(min_length=1)
    store: StoreRecord
    customers: CustomerManagerRecord
    workers: List[WorkerRecord] = []
    stats: StatsRecord = StatsRecord()

    @model_validator(mode="after")
    def _check_references(self) -> "SaveSnapshot":
        if self.schema_version not in SUPPORTED_SCHEMA_VERSIONS:
            raise ValueError(f"unsupported schema_version {self.schema_version!r}")
        if len(self.rng_state[1]) != RNG_STATE_WORDS:
            raise ValueError(f"rng_state must hold {RNG_STATE_WORDS} words")

        names = [g.name for g in self.greenhouses]
        if len(set(names)) != len(names):
            raise ValueError("duplicate greenhouse names")
        plant_ids = [p.id for g in self.greenhouses for p in g.plants]
        if len(set(plant_ids)) != len(plant_ids):
            raise ValueError("duplicate plant ids")
        if plant_ids and max(plant_ids) >= self.next_plant_id:
            raise ValueError("next_plant_id must exceed every plant id")

        items = [record.item for record in self.store.inventory]
        if len(set(items)) != len(items):
            raise ValueError("duplicate inventory items")

        customer_ids = [c.id for c in self.customers.customers]
        if len(set(customer_ids)) != len(customer_ids):
            raise ValueError("duplicate customer ids")
        if customer_ids and max(customer_ids) >= self.customers.next_customer_id:
            raise ValueError("next_customer_id must exceed every customer id")

        worker_ids = [w.id for w in self.workers]
        if len(set(worker_ids)) != len(worker_ids):
            raise ValueError("duplicate worker ids")
        if worker_ids and max(worker_ids) >= self.next_worker_id:
            raise ValueError("next_worker_id must exceed every worker id")
        for worker in self.workers:
            for name in worker.greenhouses:
                if name not in names:
                    raise ValueError(f"worker {worker.id} observes unknown greenhouse {name!r}")
            for queued in worker.queue:
                _check_queued_command(worker, queued, names)
        return self


def _check_queued_command(worker: WorkerRecord, queued: QueuedCommandRecord, names: List[str]) -> None:
    if queued.command == "patrol":
        if queued.duration is None:
            raise ValueError(f"worker {worker.id}: patrol without duration")
        return
    if queued.command != worker.role.value:
        raise ValueError(f"worker {worker.id} ({worker.role.value}) cannot have a queued {queued.command}")
    if queued.greenhouse not in names or queued.plant_id is None:
        raise ValueError(f"worker {worker.id}: queued {queued.command} has no valid target")


# ============================================================================
# Capture
# ============================================================================


def capture_state(sim: "NurserySimulation") -> Dict[str, Any]:
    """Capture ``sim`` as a JSON-compatible dict. Pure: ``sim`` is unchanged."""
    version, internal, gauss_next = sim.rng.getstate()
    config = asdict(sim.config)
    config["customers"].update(sim.customers.factory.settings())
    snapshot = SaveSnapshot(
        schema_version=SCHEMA_VERSION,
        tick=sim.tick,
        elapsed=sim.elapsed,
        clock=ClockRecord(
            day=sim.clock.day,
            hour=sim.clock.hour,
            minute=sim.clock.minute,
            accumulator=sim.clock.accumulator,
        ),
        store_open=sim.store_open,
        config=config,
        rng_state=(version, list(internal), gauss_next),
        next_plant_id=sim.plant_factory.next_id,
        next_worker_id=sim.next_worker_id,
        greenhouses=[_greenhouse_record(g) for _, g in sorted(sim.greenhouses.items())],
        store=StoreRecord(
            funds=sim.store.funds,
            rating=sim.store.rating,
            guard_remaining=sim.store.guard_remaining,
            inventory=[
                InventoryRecord(item=item, quantity=slot.quantity, unit_price=slot.unit_price)
                for item, slot in sim.store.inventory
            ],
        ),
        customers=CustomerManagerRecord(
            spawn_timer=sim.customers.spawn_timer,
            next_customer_id=sim.customers.next_customer_id,
            customers=[
                CustomerRecord(
                    id=c.id,
                    type=c.customer_type,
                    intent=c.intent,
                    requested=c.requested,
                    quantity=c.quantity,
                    patience=c.patience,
                    time_in_store=c.time_in_store,
                )
                for c in sim.customers.active
            ],
        ),
        workers=[
            WorkerRecord(
                id=w.id,
                role=w.role,
                experience=w.experience,
                greenhouses=w.greenhouses,
                queue=[QueuedCommandRecord(**c.to_dict()) for c in w.pending_commands() if c.to_dict()],
            )
            for w in sim.workers
        ],
        stats=sim.stats.to_dict(),
    )
    return snapshot.model_dump(mode="json")


def _greenhouse_record(greenhouse: Greenhouse) -> GreenhouseRecord:
    return GreenhouseRecord(
        name=greenhouse.name,
        capacity=greenhouse.capacity,
        max_capacity=greenhouse.max_capacity,
        plants=[
            PlantRecord(
                id=p.id,
                species=p.species,
                stage=p.stage,
                progress=p.progress,
                cycle=p.growth_cycle.kind,
                moisture=p.moisture,
                nutrients=p.nutrients,
                boost_remaining=p.boost_remaining,
                dead_for=p.dead_for,
            )
            for p in greenhouse.plants()
        ],
    )


# ============================================================================
# Restore
# ============================================================================


@dataclass
class RestoredWorld:
    """A fully built replacement world, ready to be installed."""

    config: SimulationConfig
    rng: random.Random
    tick: int
    elapsed: float
    clock: GameClock
    store_open: bool
    greenhouses: Dict[str, Greenhouse]
    plant_factory: RandomPlantFactory
    store: Store
    customers: CustomerManager
    workers: List[Worker]
    next_worker_id: int
    stats: Dict[str, Any]  # validated counters for NurseryStats.from_dict


def parse_snapshot(data: Any) -> SaveSnapshot:
    """Validate raw snapshot data.

    Raises:
        SnapshotError: If the data does not match the schema
    """
    if not isinstance(data, dict):
        raise SnapshotError(f"Snapshot must be a JSON object, got {type(data).__name__}")
    try:
        return SaveSnapshot.model_validate(data)
    except ValidationError as e:
        raise SnapshotError(f"Invalid snapshot: {e}") from e


def build_world(
    data: Any,
    event_bus: EventBus,
    tick_provider: Callable[[], int],
    caretaker: Caretaker,
    invoker: CommandInvoker,
) -> RestoredWorld:
    """Validate ``data`` and build every component it describes.

    Nothing outside the returned object is modified.

    Raises:
        SnapshotError: On any schema, consistency or construction problem
    """
    snapshot = parse_snapshot(data)
    try:
        config = SimulationConfig.from_overrides(snapshot.config)
    except (ConfigurationError, TypeError, ValueError) as e:
        raise SnapshotError(f"Invalid snapshot config: {e}") from e

    try:
        return _build(snapshot, config, event_bus, tick_provider, caretaker, invoker)
    except (PreconditionError, KeyError, ValueError) as e:
        raise SnapshotError(f"Inconsistent snapshot: {e}") from e


def _build(
    snapshot: SaveSnapshot,
    config: SimulationConfig,
    event_bus: EventBus,
    tick_provider: Callable[[], int],
    caretaker: Caretaker,
    invoker: CommandInvoker,
) -> RestoredWorld:
    rng = random.Random()
    version, internal, gauss_next = snapshot.rng_state
    rng.setstate((version, tuple(internal), gauss_next))

    clock = GameClock(config.clock)
    clock.set_time(snapshot.clock.day, snapshot.clock.hour, snapshot.clock.minute, snapshot.clock.accumulator)

    greenhouses: Dict[str, Greenhouse] = {}
    for record in snapshot.greenhouses:
        greenhouse = Greenhouse(
            name=record.name,
            capacity=record.capacity,
            max_capacity=record.max_capacity,
            growth_config=config.growth,
            event_bus=event_bus,
            tick_provider=tick_provider,
        )
        greenhouse.replace_plants([_build_plant(p, config) for p in record.plants], record.capacity)
        greenhouses[record.name] = greenhouse

    store = Store(config.economy)
    store.funds = snapshot.store.funds
    store.rating = min(snapshot.store.rating, config.economy.max_rating)
    store.guard_remaining = snapshot.store.guard_remaining
    store.inventory.replace_slots(
        {r.item: InventorySlot(quantity=r.quantity, unit_price=r.unit_price) for r in snapshot.store.inventory}
    )

    manager = CustomerManager(
        store,
        rng,
        config=config.customers,
        factory=create_customer_factory(config.customers.factory, config.customers, rng),
        invoker=invoker,
        event_bus=event_bus,
        tick_provider=tick_provider,
    )
    manager.replace_customers(
        [
            build_customer(c.type, c.id, c.requested, c.quantity, c.patience, c.intent, c.time_in_store)
            for c in snapshot.customers.customers
        ],
        spawn_timer=snapshot.customers.spawn_timer,
        next_customer_id=snapshot.customers.next_customer_id,
    )

    workers: List[Worker] = []
    for record in snapshot.workers:
        worker = create_worker(record.role, record.id, caretaker, store, config.growth)
        worker.experience = record.experience
        for queued in record.queue:
            worker.enqueue(command_from_dict(queued.model_dump(), worker, greenhouses))
        workers.append(worker)

    # Subscriptions go last: attaching is the only step that touches shared
    # objects, and every check above has passed by now.
    for worker, record in zip(workers, snapshot.workers):
        for name in record.greenhouses:
            worker.subscribe(greenhouses[name])

    return RestoredWorld(
        config=config,
        rng=rng,
        tick=snapshot.tick,
        elapsed=snapshot.elapsed,
        clock=clock,
        store_open=snapshot.store_open,
        greenhouses=greenhouses,
        plant_factory=RandomPlantFactory(rng, growth_config=config.growth, next_id=snapshot.next_plant_id),
        store=store,
        customers=manager,
        workers=workers,
        next_worker_id=snapshot.next_worker_id,
        stats=snapshot.stats.model_dump(),
    )


def _build_plant(record: PlantRecord, config: SimulationConfig) -> Plant:
    plant = Plant(record.id, record.species, growth_config=config.growth)
    plant.restore_fields(
        stage=record.stage,
        progress=record.progress,
        cycle_kind=record.cycle,
        moisture=record.moisture,
        nutrients=record.nutrients,
        boost_remaining=record.boost_remaining,
        dead_for=record.dead_for,
    )
    if not plant.is_dead and plant.progress >= plant.threshold:
        raise PreconditionError(
            f"plant {record.id} progress {record.progress} is past its {record.stage.value} threshold"
        )
    return plant


# ============================================================================
# Files
# ============================================================================


def save_snapshot(snapshot: Dict[str, Any], path: Union[str, Path]) -> Path:
    """Write ``snapshot`` to ``path`` as JSON.

    Raises:
        PersistenceError: If the file cannot be written
    """
    path = Path(path)
    document = dict(snapshot)
    if not document.get("saved_at"):
        document["saved_at"] = datetime.now(timezone.utc).isoformat()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(orjson.dumps(document, option=orjson.OPT_INDENT_2))
    except OSError as e:
        raise SnapshotError(f"Failed to write snapshot {path}: {e}") from e
    logger.info(f"Saved snapshot tick {snapshot.get('tick')} to {path}")
    return path


def load_snapshot(path: Union[str, Path]) -> Dict[str, Any]:
    """Read raw snapshot data from ``path``.

    Raises:
        SnapshotError: If the file is missing or not valid JSON
    """
    path = Path(path)
    try:
        data = orjson.loads(path.read_bytes())
    except OSError as e:
        raise SnapshotError(f"Cannot read snapshot {path}: {e}") from e
    except orjson.JSONDecodeError as e:
        raise SnapshotError(f"Snapshot {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise SnapshotError(f"Snapshot {path} must contain a JSON object")
    return data
