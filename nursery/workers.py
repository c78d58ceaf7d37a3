"""Workers: greenhouse observers that turn stage changes into commands.

Workers never touch plants directly. When a greenhouse notifies them of a
transition they care about they queue a command; the engine drains the
queues in the work phase of the same tick.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional

from nursery.commands import (
    Command,
    CommandInvoker,
    FertilizeCommand,
    HarvestCommand,
    PatrolCommand,
    WaterCommand,
)
from nursery.config.simulation_config import GrowthConfig
from nursery.greenhouse import Greenhouse
from nursery.memento import Caretaker
from nursery.plants.growth_cycle import GrowthCycleKind
from nursery.plants.plant import Plant
from nursery.result import Result
from nursery.state_machine import PlantStage
from nursery.store.store import Store

logger = logging.getLogger(__name__)


class WorkerRole(Enum):
    WATER = "water"
    FERTILIZE = "fertilize"
    HARVEST = "harvest"


class Worker(ABC):
    """Base observer with a FIFO command queue.

    Workers gain experience for every command that succeeds and level up
    every ``economy.worker_level_up_commands`` successes, up to
    ``economy.worker_max_level``. Each level above the first adds
    ``economy.worker_level_bonus`` to the amount of water or fertilizer
    they apply.

    Attributes:
        id: Worker id
        role: What the worker reacts to
        experience: Successful commands so far
    """

    role: WorkerRole

    def __init__(
        self,
        worker_id: int,
        caretaker: Caretaker,
        store: Store,
        growth_config: Optional[GrowthConfig] = None,
    ) -> None:
        self.id = worker_id
        self._caretaker = caretaker
        self._store = store
        self.growth_config = growth_config or GrowthConfig()
        self._queue: Deque[Command] = deque()
        self._subscriptions: Dict[str, Callable[[], bool]] = {}
        self.experience = 0

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, greenhouse: Greenhouse) -> None:
        if greenhouse.name not in self._subscriptions:
            self._subscriptions[greenhouse.name] = greenhouse.attach(self)

    def unsubscribe(self, greenhouse: Greenhouse) -> bool:
        detach = self._subscriptions.pop(greenhouse.name, None)
        return detach() if detach is not None else False

    def unsubscribe_all(self) -> None:
        for detach in self._subscriptions.values():
            detach()
        self._subscriptions.clear()

    @property
    def store(self) -> Store:
        return self._store

    @property
    def greenhouses(self) -> List[str]:
        return sorted(self._subscriptions)

    # ------------------------------------------------------------------
    # Experience
    # ------------------------------------------------------------------

    @property
    def level(self) -> int:
        economy = self._store.economy
        return min(economy.worker_max_level, 1 + self.experience // economy.worker_level_up_commands)

    @property
    def skill(self) -> float:
        """Multiplier on the amounts this worker applies."""
        return 1.0 + self._store.economy.worker_level_bonus * (self.level - 1)

    def _gain_experience(self) -> None:
        level = self.level
        self.experience += 1
        if self.level > level:
            logger.info(f"Worker {self.id} ({self.role.value}) reached level {self.level}")

    # ------------------------------------------------------------------
    # Observer
    # ------------------------------------------------------------------

    def on_notify(self, plant: Plant, old_stage: PlantStage, new_stage: PlantStage, greenhouse: Greenhouse) -> None:
        if self.wants(plant, old_stage, new_stage):
            command = self.make_command(plant.id, greenhouse)
            self._queue.append(command)
            logger.debug(f"Worker {self.id} ({self.role.value}) queued {command.name} for plant {plant.id}")

    @abstractmethod
    def wants(self, plant: Plant, old_stage: PlantStage, new_stage: PlantStage) -> bool:
        """Whether this transition calls for action."""

    @abstractmethod
    def make_command(self, plant_id: int, greenhouse: Greenhouse) -> Command:
        """Build the command this worker issues for ``plant_id``."""

    # ------------------------------------------------------------------
    # Queue
    # ------------------------------------------------------------------

    @property
    def pending(self) -> int:
        return len(self._queue)

    def pending_commands(self) -> List[Command]:
        return list(self._queue)

    def enqueue(self, command: Command) -> None:
        self._queue.append(command)

    def request_patrol(self, duration: Optional[float] = None) -> PatrolCommand:
        """Queue a patrol of the store."""
        duration = self._store.economy.patrol_duration if duration is None else duration
        command = PatrolCommand(self._store, duration, worker_id=self.id)
        self._queue.append(command)
        return command

    def drain(self, invoker: CommandInvoker) -> List[Result[str, str]]:
        """Execute every queued command in FIFO order."""
        results = []
        while self._queue:
            result = invoker.invoke(self._queue.popleft())
            if result.is_ok():
                self._gain_experience()
            results.append(result)
        return results

    def clear_queue(self) -> None:
        self._queue.clear()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id}, level={self.level}, pending={len(self._queue)})"


class WaterWorker(Worker):
    """Waters seedlings as they start growing, unless already soaked."""

    role = WorkerRole.WATER

    def wants(self, plant: Plant, old_stage: PlantStage, new_stage: PlantStage) -> bool:
        return new_stage is PlantStage.GROWING and plant.moisture < self.growth_config.water_worker_ceiling

    def make_command(self, plant_id: int, greenhouse: Greenhouse) -> Command:
        return WaterCommand(greenhouse, plant_id, self._caretaker, self.growth_config.water_amount * self.skill)


class FertilizeWorker(Worker):
    """Fertilizes plants entering Growing that are not already boosted."""

    role = WorkerRole.FERTILIZE

    def wants(self, plant: Plant, old_stage: PlantStage, new_stage: PlantStage) -> bool:
        return new_stage is PlantStage.GROWING and plant.growth_cycle.kind is GrowthCycleKind.NORMAL

    def make_command(self, plant_id: int, greenhouse: Greenhouse) -> Command:
        return FertilizeCommand(
            greenhouse,
            plant_id,
            self._caretaker,
            self.growth_config.fertilize_amount * self.skill,
            self.growth_config.boost_duration,
        )


class HarvestWorker(Worker):
    role = WorkerRole.HARVEST

    def wants(self, plant: Plant, old_stage: PlantStage, new_stage: PlantStage) -> bool:
        return new_stage is PlantStage.RIPE

    def make_command(self, plant_id: int, greenhouse: Greenhouse) -> Command:
        return HarvestCommand(greenhouse, plant_id, self._caretaker, self._store)


WORKER_CLASSES = {
    WorkerRole.WATER: WaterWorker,
    WorkerRole.FERTILIZE: FertilizeWorker,
    WorkerRole.HARVEST: HarvestWorker,
}


def create_worker(
    role: WorkerRole,
    worker_id: int,
    caretaker: Caretaker,
    store: Store,
    growth_config: Optional[GrowthConfig] = None,
) -> Worker:
    return WORKER_CLASSES[role](worker_id, caretaker, store, growth_config)


def command_from_dict(
    data: Dict[str, Any],
    worker: Worker,
    greenhouses: Dict[str, Greenhouse],
) -> Command:
    """Rebuild a queued command saved with ``Command.to_dict``."""
    if data["command"] == PatrolCommand.name:
        return PatrolCommand(worker.store, float(data["duration"]), worker_id=worker.id)
    greenhouse = greenhouses[data["greenhouse"]]
    return worker.make_command(int(data["plant_id"]), greenhouse)
