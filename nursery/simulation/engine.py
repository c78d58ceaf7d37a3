"""Nursery simulation engine.

One ``step()`` advances the world by ``config.tick_seconds`` in fixed
phases. Within a tick, growth (and every worker notification it causes)
finishes before workers run their commands, and harvest credits land in
the inventory before any customer is served.
"""

from __future__ import annotations

import logging
import random
from enum import Enum, auto
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from nursery.clock import GameClock
from nursery.commands import (
    CommandInvoker,
    FertilizeCommand,
    HarvestCommand,
    PatrolCommand,
    WaterCommand,
)
from nursery.config.simulation_config import SimulationConfig
from nursery.customers.customer import CustomerType
from nursery.customers.factory import create_customer_factory
from nursery.customers.manager import CustomerManager
from nursery.events import EventBus
from nursery.exceptions import PreconditionError
from nursery.fingerprint import fingerprint_snapshot
from nursery.greenhouse import Greenhouse
from nursery.memento import Caretaker
from nursery.persistence import (
    RestoredWorld,
    build_world,
    capture_state,
    load_snapshot,
    save_snapshot,
)
from nursery.plants.plant import Plant
from nursery.plants.plant_factory import RandomPlantFactory
from nursery.plants.species import Species
from nursery.result import Err, Ok, Result
from nursery.scenes import SceneManager
from nursery.simulation.stats import NurseryStats
from nursery.store.store import Store
from nursery.views import WorldView, customer_view, inventory_view, plant_view, worker_view
from nursery.workers import Worker, WorkerRole, create_worker

logger = logging.getLogger(__name__)

DEFAULT_GREENHOUSE = "main"


class UpdatePhase(Enum):
    """Phases of one simulation tick, in execution order.

    1. FRAME_START: advance the tick counter, elapsed time and game clock
    2. GROWTH: plants drink, feed and grow; workers are notified
    3. WORK: workers execute their queued commands (harvest credits here)
    4. STORE: patrol timer counts down
    5. CUSTOMERS: arrivals and service (sales debit stock here)
    6. FRAME_END: hand the active scene a fresh view
    """

    FRAME_START = auto()
    GROWTH = auto()
    WORK = auto()
    STORE = auto()
    CUSTOMERS = auto()
    FRAME_END = auto()


class NurserySimulation:
    """Headless nursery simulation.

    Attributes:
        config: Run configuration
        tick: Number of completed steps
        elapsed: Simulated seconds so far
        clock: In-game day/hour/minute
        rng: The single source of randomness for the run
        store_open: Whether customers are admitted
    """

    def __init__(self, config: Optional[SimulationConfig] = None, scenes: Optional[SceneManager] = None) -> None:
        self.config = config or SimulationConfig()
        self.config.validate()
        self.rng = random.Random(self.config.seed)
        self.tick = 0
        self.elapsed = 0.0
        self.clock = GameClock(self.config.clock)
        self.store_open = True
        self.scenes = scenes or SceneManager()
        self._current_phase: Optional[UpdatePhase] = None

        self.event_bus = EventBus()
        self.stats = NurseryStats()
        self.stats.attach(self.event_bus)
        self.caretaker = Caretaker(self.config.economy.max_undo_history)
        self.invoker = CommandInvoker(
            max_records=self.config.economy.command_log_size,
            event_bus=self.event_bus,
            tick_provider=self._tick_now,
        )

        self.greenhouses: Dict[str, Greenhouse] = {}
        self.plant_factory = RandomPlantFactory(self.rng, growth_config=self.config.growth)
        self.store = Store(self.config.economy)
        self.customers = CustomerManager(
            self.store,
            self.rng,
            config=self.config.customers,
            factory=create_customer_factory(self.config.customers.factory, self.config.customers, self.rng),
            invoker=self.invoker,
            event_bus=self.event_bus,
            tick_provider=self._tick_now,
        )
        self.workers: List[Worker] = []
        self.next_worker_id = 1
        self.add_greenhouse(DEFAULT_GREENHOUSE)

    def _tick_now(self) -> int:
        return self.tick

    @property
    def current_phase(self) -> Optional[UpdatePhase]:
        return self._current_phase

    # =========================================================================
    # World setup
    # =========================================================================

    @property
    def greenhouse(self) -> Greenhouse:
        """The default greenhouse."""
        return self.greenhouses[DEFAULT_GREENHOUSE]

    def get_greenhouse(self, name: str = DEFAULT_GREENHOUSE) -> Greenhouse:
        greenhouse = self.greenhouses.get(name)
        if greenhouse is None:
            raise PreconditionError(f"No greenhouse named {name!r}")
        return greenhouse

    def add_greenhouse(self, name: str, capacity: Optional[int] = None) -> Greenhouse:
        if name in self.greenhouses:
            raise PreconditionError(f"Greenhouse {name!r} already exists")
        greenhouse = Greenhouse(
            name=name,
            capacity=capacity or self.config.greenhouse.capacity,
            max_capacity=self.config.greenhouse.max_capacity,
            growth_config=self.config.growth,
            event_bus=self.event_bus,
            tick_provider=self._tick_now,
        )
        self.greenhouses[name] = greenhouse
        return greenhouse

    def plant_seed(self, species: Union[Species, str, None] = None, greenhouse: str = DEFAULT_GREENHOUSE) -> Result[Plant, str]:
        """Buy a seed and plant it. A random species when ``species`` is None."""
        target = self.get_greenhouse(greenhouse)
        if target.free_plots <= 0:
            return Err(f"Greenhouse {greenhouse} is full")
        if species is None:
            species = self.rng.choice(list(Species))
        bought = self.store.buy_seed(species, self.plant_factory)
        if bought.is_err():
            return bought
        return target.add_plant(bought.unwrap())

    def hire_worker(
        self,
        role: Union[WorkerRole, str],
        greenhouses: Optional[Iterable[str]] = None,
        pay: bool = True,
    ) -> Result[Worker, str]:
        """Hire a worker and subscribe them to ``greenhouses`` (default: all)."""
        role = WorkerRole(role) if isinstance(role, str) else role
        names = sorted(self.greenhouses) if greenhouses is None else list(greenhouses)
        targets = [self.get_greenhouse(name) for name in names]
        if pay:
            cost = self.config.economy.worker_hire_costs.get(role.value, 0.0)
            paid = self.store.debit(cost, reason=f"hiring {role.value} worker")
            if paid.is_err():
                return Err(paid.error)
        worker = create_worker(role, self.next_worker_id, self.caretaker, self.store, self.config.growth)
        self.next_worker_id += 1
        for greenhouse in targets:
            worker.subscribe(greenhouse)
        self.workers.append(worker)
        logger.info(f"Hired {role.value} worker {worker.id} for {', '.join(names)}")
        return Ok(worker)

    def fire_worker(self, worker_id: int) -> bool:
        for worker in self.workers:
            if worker.id == worker_id:
                worker.unsubscribe_all()
                self.workers.remove(worker)
                return True
        return False

    # =========================================================================
    # Player actions
    # =========================================================================

    def water(self, plant_id: int, greenhouse: str = DEFAULT_GREENHOUSE) -> Result[str, str]:
        command = WaterCommand(self.get_greenhouse(greenhouse), plant_id, self.caretaker, self.config.growth.water_amount)
        return self.invoker.invoke(command)

    def fertilize(self, plant_id: int, greenhouse: str = DEFAULT_GREENHOUSE) -> Result[str, str]:
        command = FertilizeCommand(
            self.get_greenhouse(greenhouse),
            plant_id,
            self.caretaker,
            self.config.growth.fertilize_amount,
            self.config.growth.boost_duration,
        )
        return self.invoker.invoke(command)

    def harvest(self, plant_id: int, greenhouse: str = DEFAULT_GREENHOUSE) -> Result[str, str]:
        command = HarvestCommand(self.get_greenhouse(greenhouse), plant_id, self.caretaker, self.store)
        return self.invoker.invoke(command)

    def request_patrol(self, duration: Optional[float] = None) -> Result[PatrolCommand, str]:
        """Ask the least busy worker to patrol the store next work phase."""
        if not self.workers:
            return Err("No workers to patrol the store")
        worker = min(self.workers, key=lambda w: (w.pending, w.id))
        return Ok(worker.request_patrol(duration))

    def undo_last(self) -> Result[str, str]:
        return self.invoker.undo_last()

    def checkpoint_greenhouse(self, greenhouse: str = DEFAULT_GREENHOUSE) -> None:
        """Save the plot set of ``greenhouse`` for ``rollback_greenhouse``."""
        self.caretaker.checkpoint(self.get_greenhouse(greenhouse))

    def rollback_greenhouse(self, greenhouse: str = DEFAULT_GREENHOUSE) -> Result[str, str]:
        """Return ``greenhouse`` to its latest checkpoint.

        Plants planted since the checkpoint are removed and seed costs are
        not refunded; store stock and funds are left alone.
        """
        restored = self.caretaker.undo(self.get_greenhouse(greenhouse))
        if restored.is_err():
            return Err(restored.error)
        return Ok(f"rolled back {greenhouse} to {len(restored.unwrap().plants)} plants")

    def set_store_open(self, is_open: bool) -> None:
        self.store_open = is_open

    def set_customer_factory(self, kind: Union[CustomerType, str]) -> None:
        """Spawn customers from ``kind``: a customer type, or "random".

        Raises:
            ValueError: If ``kind`` names no customer type
        """
        factory = create_customer_factory(kind, self.config.customers, self.rng)
        self.config.customers.factory = factory.settings()["factory"]
        self.customers.factory = factory

    # =========================================================================
    # Core Update Loop
    # =========================================================================

    def step(self) -> None:
        """Advance the world by one tick (see UpdatePhase for the order)."""
        dt = self.config.tick_seconds
        self._phase_frame_start(dt)
        self._phase_growth(dt)
        self._phase_work()
        self._phase_store(dt)
        self._phase_customers(dt)
        self._phase_frame_end()

    def run(self, ticks: int) -> None:
        if ticks < 0:
            raise PreconditionError(f"ticks must be non-negative, got {ticks}")
        for _ in range(ticks):
            self.step()

    def _phase_frame_start(self, dt: float) -> None:
        self._current_phase = UpdatePhase.FRAME_START
        self.tick += 1
        self.elapsed += dt
        self.clock.advance(dt)

    def _phase_growth(self, dt: float) -> None:
        self._current_phase = UpdatePhase.GROWTH
        for name in sorted(self.greenhouses):
            self.greenhouses[name].tick(dt)

    def _phase_work(self) -> None:
        """WORK: drain worker queues in hiring order."""
        self._current_phase = UpdatePhase.WORK
        for worker in self.workers:
            worker.drain(self.invoker)

    def _phase_store(self, dt: float) -> None:
        self._current_phase = UpdatePhase.STORE
        self.store.tick(dt)

    def _phase_customers(self, dt: float) -> None:
        self._current_phase = UpdatePhase.CUSTOMERS
        self.customers.tick(dt, store_open=self.store_open)

    def _phase_frame_end(self) -> None:
        self._current_phase = UpdatePhase.FRAME_END
        if self.scenes.active is not None:
            self.scenes.update(self.world_view())
        self._current_phase = None

    # =========================================================================
    # Views
    # =========================================================================

    def world_view(self) -> WorldView:
        return WorldView(
            tick=self.tick,
            elapsed=self.elapsed,
            day=self.clock.day,
            hour=self.clock.hour,
            minute=self.clock.minute,
            funds=self.store.funds,
            rating=self.store.rating,
            guarded=self.store.is_guarded,
            plants=tuple(
                plant_view(plant, name)
                for name in sorted(self.greenhouses)
                for plant in self.greenhouses[name].plants()
            ),
            inventory=inventory_view(self.store),
            customers=tuple(customer_view(c) for c in self.customers.active),
            workers=tuple(worker_view(w) for w in self.workers),
        )

    # =========================================================================
    # Persistence
    # =========================================================================

    def capture_state(self) -> Dict[str, Any]:
        return capture_state(self)

    def fingerprint(self) -> str:
        return fingerprint_snapshot(self.capture_state())

    def restore_state(self, data: Dict[str, Any]) -> None:
        """Replace the whole world with the one described by ``data``.

        Undo history and the command log are cleared: they refer to objects
        that no longer exist.

        Raises:
            SnapshotError: If ``data`` is invalid; the current world is kept
        """
        world = build_world(data, self.event_bus, self._tick_now, self.caretaker, self.invoker)
        stats = NurseryStats.from_dict(world.stats)
        self._install(world, stats)

    def _install(self, world: RestoredWorld, stats: NurseryStats) -> None:
        for worker in self.workers:
            worker.unsubscribe_all()
        self.config = world.config
        self.rng = world.rng
        self.tick = world.tick
        self.elapsed = world.elapsed
        self.clock = world.clock
        self.store_open = world.store_open
        self.greenhouses = world.greenhouses
        self.plant_factory = world.plant_factory
        self.store = world.store
        self.customers = world.customers
        self.workers = world.workers
        self.next_worker_id = world.next_worker_id
        self.stats.detach(self.event_bus)
        self.stats = stats
        self.stats.attach(self.event_bus)
        self.caretaker.clear()
        self.invoker.clear()
        logger.info(f"Restored world at tick {self.tick}")

    def save(self, path: Union[str, Path]) -> Path:
        return save_snapshot(self.capture_state(), path)

    def load(self, path: Union[str, Path]) -> None:
        self.restore_state(load_snapshot(path))

    @classmethod
    def from_snapshot(cls, data: Dict[str, Any], scenes: Optional[SceneManager] = None) -> "NurserySimulation":
        sim = cls(scenes=scenes)
        sim.restore_state(data)
        return sim
