"""Mementos and the caretaker that keeps them.

A memento is a frozen copy of everything mutable about a plant or a
greenhouse. ``restore`` writes it back without firing notifications, and
restoring the same memento twice leaves the entity exactly as restoring
it once did.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Optional, Tuple, Union

from nursery.config.economy import MAX_UNDO_HISTORY
from nursery.exceptions import MementoMismatchError, PreconditionError
from nursery.greenhouse import Greenhouse
from nursery.plants.growth_cycle import GrowthCycleKind
from nursery.plants.plant import Plant
from nursery.plants.species import Species
from nursery.result import Err, Ok, Result
from nursery.state_machine import PlantStage

logger = logging.getLogger(__name__)

EntityKey = Tuple[str, Union[int, str]]


@dataclass(frozen=True)
class PlantMemento:
    """Snapshot of one plant's mutable state."""

    plant_id: int
    species: Species
    stage: PlantStage
    progress: float
    cycle_kind: GrowthCycleKind
    moisture: float
    nutrients: float
    boost_remaining: float
    dead_for: float

    @property
    def key(self) -> EntityKey:
        return ("plant", self.plant_id)


@dataclass(frozen=True)
class GreenhouseMemento:
    """Snapshot of a greenhouse: its capacity and every plant on it."""

    name: str
    capacity: int
    plants: Tuple[PlantMemento, ...]

    @property
    def key(self) -> EntityKey:
        return ("greenhouse", self.name)


Memento = Union[PlantMemento, GreenhouseMemento]
Snapshotable = Union[Plant, Greenhouse]


def entity_key(entity: Snapshotable) -> EntityKey:
    if isinstance(entity, Plant):
        return ("plant", entity.id)
    if isinstance(entity, Greenhouse):
        return ("greenhouse", entity.name)
    raise PreconditionError(f"Cannot snapshot {type(entity).__name__}")


def save(entity: Snapshotable) -> Memento:
    """Capture ``entity``'s current state. Never mutates the entity."""
    if isinstance(entity, Plant):
        return PlantMemento(
            plant_id=entity.id,
            species=entity.species,
            stage=entity.stage,
            progress=entity.progress,
            cycle_kind=entity.growth_cycle.kind,
            moisture=entity.moisture,
            nutrients=entity.nutrients,
            boost_remaining=entity.boost_remaining,
            dead_for=entity.dead_for,
        )
    if isinstance(entity, Greenhouse):
        return GreenhouseMemento(
            name=entity.name,
            capacity=entity.capacity,
            plants=tuple(save(plant) for plant in entity.plants()),
        )
    raise PreconditionError(f"Cannot snapshot {type(entity).__name__}")


def restore(memento: Memento, entity: Snapshotable) -> None:
    """Write ``memento`` back onto ``entity``.

    Raises:
        MementoMismatchError: If the memento was taken from a different
            kind of entity or a different instance
    """
    if entity_key(entity) != memento.key:
        raise MementoMismatchError(f"Memento {memento.key} cannot be restored onto {entity_key(entity)}")

    if isinstance(memento, PlantMemento):
        _restore_plant(memento, entity)
        return

    greenhouse = entity
    plants = []
    for plant_memento in memento.plants:
        plant = greenhouse.get_plant(plant_memento.plant_id)
        if plant is None:
            plant = Plant(plant_memento.plant_id, plant_memento.species, growth_config=greenhouse.growth_config)
        _restore_plant(plant_memento, plant)
        plants.append(plant)
    greenhouse.replace_plants(plants, memento.capacity)


def _restore_plant(memento: PlantMemento, plant: Plant) -> None:
    if plant.species is not memento.species:
        raise MementoMismatchError(
            f"Memento for {memento.species.value} #{memento.plant_id} cannot restore a {plant.species.value}"
        )
    plant.restore_fields(
        stage=memento.stage,
        progress=memento.progress,
        cycle_kind=memento.cycle_kind,
        moisture=memento.moisture,
        nutrients=memento.nutrients,
        boost_remaining=memento.boost_remaining,
        dead_for=memento.dead_for,
    )


class Caretaker:
    """Bounded per-entity undo history.

    Each entity keeps at most ``max_history`` mementos; pushing beyond the
    bound evicts that entity's oldest memento.
    """

    def __init__(self, max_history: int = MAX_UNDO_HISTORY) -> None:
        if max_history <= 0:
            raise PreconditionError(f"max_history must be positive, got {max_history}")
        self.max_history = max_history
        self._history: Dict[EntityKey, Deque[Memento]] = {}

    def push(self, memento: Memento) -> None:
        stack = self._history.get(memento.key)
        if stack is None:
            stack = self._history[memento.key] = deque(maxlen=self.max_history)
        stack.append(memento)

    def checkpoint(self, entity: Snapshotable) -> Memento:
        """Save ``entity`` and push the memento. Returns the memento."""
        memento = save(entity)
        self.push(memento)
        return memento

    def undo(self, entity: Snapshotable) -> Result[Memento, str]:
        """Restore ``entity`` to its most recent memento and drop it.

        Returns:
            Ok(memento) on success, Err when the entity has no history
        """
        key = entity_key(entity)
        stack = self._history.get(key)
        if not stack:
            return Err(f"No history for {key[0]} {key[1]}")
        memento = stack.pop()
        restore(memento, entity)
        logger.debug(f"Undo restored {key[0]} {key[1]} ({len(stack)} left)")
        return Ok(memento)

    def history_size(self, entity: Snapshotable) -> int:
        return len(self._history.get(entity_key(entity), ()))

    def clear(self, entity: Optional[Snapshotable] = None) -> None:
        """Drop one entity's history, or everything when ``entity`` is None."""
        if entity is None:
            self._history.clear()
        else:
            self._history.pop(entity_key(entity), None)
