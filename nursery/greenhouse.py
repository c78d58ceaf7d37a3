"""Greenhouse: plot management and stage-change notification.

The greenhouse is the subject workers observe. Whenever one of its plants
changes stage it calls ``on_notify(plant, old_stage, new_stage, greenhouse)``
on every attached observer, synchronously and in attach order, before the
plant's ``advance`` returns.

Observers may attach or detach while a notification is in flight. Those
requests are queued and applied, in request order, once the outermost
notification pass has finished; the pass itself always runs over the
observer list as it stood when it began.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterator, List, Optional, Protocol, Tuple

from nursery.config.plants import GREENHOUSE_CAPACITY, GREENHOUSE_MAX_CAPACITY
from nursery.config.simulation_config import GrowthConfig
from nursery.events import EventBus, PlantPlantedEvent, PlantRemovedEvent, PlantStageChangedEvent
from nursery.exceptions import PreconditionError
from nursery.plants.plant import Plant
from nursery.result import Err, Ok, Result
from nursery.state_machine import PlantStage

logger = logging.getLogger(__name__)


class GreenhouseObserver(Protocol):
    def on_notify(
        self, plant: Plant, old_stage: PlantStage, new_stage: PlantStage, greenhouse: "Greenhouse"
    ) -> None: ...


class Greenhouse:
    """A set of plots holding plants, observed by workers.

    Attributes:
        name: Identifier used in logs, mementos and snapshots
        capacity: Number of plots currently available
        max_capacity: Upper bound for ``increase_capacity``
    """

    def __init__(
        self,
        name: str = "main",
        capacity: int = GREENHOUSE_CAPACITY,
        max_capacity: int = GREENHOUSE_MAX_CAPACITY,
        growth_config: Optional[GrowthConfig] = None,
        event_bus: Optional[EventBus] = None,
        tick_provider: Optional[Callable[[], int]] = None,
    ) -> None:
        if capacity <= 0 or capacity > max_capacity:
            raise PreconditionError(f"capacity must be in 1..{max_capacity}, got {capacity}")
        self.name = name
        self.capacity = capacity
        self.max_capacity = max_capacity
        self.growth_config = growth_config or GrowthConfig()
        self._event_bus = event_bus
        self._tick_provider = tick_provider or (lambda: 0)

        self._plants: Dict[int, Plant] = {}
        self._observers: List[GreenhouseObserver] = []
        self._notify_depth = 0
        self._pending: List[Tuple[str, GreenhouseObserver]] = []

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def attach(self, observer: GreenhouseObserver) -> Callable[[], bool]:
        """Register ``observer``; attaching twice has no further effect.

        Returns:
            A handle that detaches the observer when called
        """
        if self._notify_depth > 0:
            self._pending.append(("attach", observer))
        else:
            self._attach_now(observer)
        return lambda: self.detach(observer)

    def detach(self, observer: GreenhouseObserver) -> bool:
        """Unregister ``observer``; detaching an unknown observer is a no-op.

        Returns:
            True if the observer was (or, mid-notification, will be) removed
        """
        if self._notify_depth > 0:
            self._pending.append(("detach", observer))
            return observer in self._observers
        return self._detach_now(observer)

    @property
    def observers(self) -> Tuple[GreenhouseObserver, ...]:
        return tuple(self._observers)

    def _attach_now(self, observer: GreenhouseObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def _detach_now(self, observer: GreenhouseObserver) -> bool:
        if observer in self._observers:
            self._observers.remove(observer)
            return True
        return False

    def notify(self, plant: Plant, old_stage: PlantStage, new_stage: PlantStage) -> None:
        """Deliver one stage change to every attached observer."""
        self._notify_depth += 1
        try:
            for observer in tuple(self._observers):
                observer.on_notify(plant, old_stage, new_stage, self)
        finally:
            self._notify_depth -= 1
            if self._notify_depth == 0 and self._pending:
                pending, self._pending = self._pending, []
                for op, observer in pending:
                    if op == "attach":
                        self._attach_now(observer)
                    else:
                        self._detach_now(observer)

    def _on_plant_transition(self, plant: Plant, old_stage: PlantStage, new_stage: PlantStage, reason: str) -> None:
        if self._event_bus is not None:
            self._event_bus.emit(
                PlantStageChangedEvent(
                    plant_id=plant.id,
                    species=plant.species.value,
                    old_stage=old_stage.value,
                    new_stage=new_stage.value,
                    reason=reason,
                    tick=self._tick_provider(),
                )
            )
        self.notify(plant, old_stage, new_stage)

    # ------------------------------------------------------------------
    # Plots
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._plants)

    def __contains__(self, plant_id: object) -> bool:
        return plant_id in self._plants

    def __iter__(self) -> Iterator[Plant]:
        return iter(self.plants())

    @property
    def free_plots(self) -> int:
        return self.capacity - len(self._plants)

    def plants(self) -> List[Plant]:
        """Plants in ascending id order."""
        return [self._plants[pid] for pid in sorted(self._plants)]

    def get_plant(self, plant_id: int) -> Optional[Plant]:
        return self._plants.get(plant_id)

    def add_plant(self, plant: Plant) -> Result[Plant, str]:
        """Plant ``plant`` in a free plot.

        Returns Err when every plot is taken.

        Raises:
            PreconditionError: If a plant with the same id is already here
        """
        if plant.id in self._plants:
            raise PreconditionError(f"Plant {plant.id} already in greenhouse {self.name}")
        if self.free_plots <= 0:
            return Err(f"Greenhouse {self.name} is full ({self.capacity} plots)")
        self._install(plant)
        if self._event_bus is not None:
            self._event_bus.emit(
                PlantPlantedEvent(
                    plant_id=plant.id, species=plant.species.value, greenhouse=self.name, tick=self._tick_provider()
                )
            )
        logger.debug(f"Planted {plant.species.value} #{plant.id} in {self.name}")
        return Ok(plant)

    def remove_plant(self, plant_id: int, reason: str = "manual") -> Optional[Plant]:
        """Take a plant off its plot. Returns None if it is not here."""
        plant = self._plants.pop(plant_id, None)
        if plant is None:
            return None
        plant.set_transition_listener(None)
        if self._event_bus is not None:
            self._event_bus.emit(
                PlantRemovedEvent(plant_id=plant.id, species=plant.species.value, reason=reason, tick=self._tick_provider())
            )
        logger.debug(f"Removed plant {plant_id} from {self.name} ({reason})")
        return plant

    def harvest(self, plant_id: int) -> Result[Plant, str]:
        """Remove a Ripe plant and hand it back for crediting."""
        plant = self._plants.get(plant_id)
        if plant is None:
            return Err(f"Plant {plant_id} is not in greenhouse {self.name}")
        if not plant.is_ripe:
            return Err(f"Plant {plant_id} is {plant.stage.value}, not ripe")
        self.remove_plant(plant_id, reason="harvest")
        return Ok(plant)

    def reinstate(self, plant: Plant) -> Result[Plant, str]:
        """Put a removed plant back on a free plot without events.

        Raises:
            PreconditionError: If a plant with the same id is already here
        """
        if plant.id in self._plants:
            raise PreconditionError(f"Plant {plant.id} already in greenhouse {self.name}")
        if self.free_plots <= 0:
            return Err(f"Greenhouse {self.name} is full ({self.capacity} plots)")
        self._install(plant)
        logger.debug(f"Reinstated plant {plant.id} in {self.name}")
        return Ok(plant)

    def increase_capacity(self, amount: int) -> Result[int, str]:
        """Add plots, up to ``max_capacity``. Returns the new capacity."""
        if amount <= 0:
            raise PreconditionError(f"amount must be positive, got {amount}")
        if self.capacity + amount > self.max_capacity:
            return Err(f"Capacity cannot exceed {self.max_capacity}")
        self.capacity += amount
        logger.info(f"Greenhouse {self.name} expanded to {self.capacity} plots")
        return Ok(self.capacity)

    def replace_plants(self, plants: List[Plant], capacity: int) -> None:
        """Swap in a restored plant set without events or notifications."""
        for plant in self._plants.values():
            plant.set_transition_listener(None)
        self._plants = {}
        self.capacity = capacity
        for plant in plants:
            self._install(plant)

    def _install(self, plant: Plant) -> None:
        self._plants[plant.id] = plant
        plant.set_transition_listener(self._on_plant_transition)

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def tick(self, elapsed: float) -> None:
        """Grow every plant by ``elapsed`` seconds, in plant-id order.

        Dead plants are cleared once they have been dead for the configured
        expiry; living plants drink and feed first, then advance.
        """
        expiry = self.growth_config.dead_plant_expiry
        for plant_id in sorted(self._plants):
            plant = self._plants.get(plant_id)
            if plant is None:
                continue
            if plant.is_dead:
                plant.dead_for += elapsed
                if plant.dead_for >= expiry:
                    self.remove_plant(plant_id, reason="expired")
                continue
            plant.consume_resources(elapsed)
            if not plant.is_dead:
                plant.advance(elapsed)

    def __repr__(self) -> str:
        return f"Greenhouse(name={self.name!r}, plants={len(self._plants)}/{self.capacity})"
