"""Commands: the only way workers and customers change the world.

A command captures its target when it is built and runs at most once.
``execute()`` returns Ok(summary) when the action happened and
Err(reason) when it legitimately could not (the plant was harvested by
someone else, died, or the shelf was empty). Running a command a second
time is a programming error and raises CommandAlreadyExecutedError.

Plant-touching commands push a memento to the caretaker before they
mutate anything, so they can be undone.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Deque, Dict, List, Optional

from nursery.events import CommandExecutedEvent, EventBus
from nursery.exceptions import CommandAlreadyExecutedError
from nursery.result import Err, Ok, Result

if TYPE_CHECKING:
    from nursery.config.simulation_config import CustomerConfig
    from nursery.customers.customer import Customer, Interaction
    from nursery.greenhouse import Greenhouse
    from nursery.memento import Caretaker
    from nursery.plants.plant import Plant
    from nursery.store.store import Store

logger = logging.getLogger(__name__)


class Command(ABC):
    """Base class for one-shot actions."""

    name: str = "command"

    def __init__(self) -> None:
        self._executed = False
        self._result: Optional[Result[str, str]] = None

    @property
    def executed(self) -> bool:
        return self._executed

    @property
    def result(self) -> Optional[Result[str, str]]:
        """Outcome of the single execution, None before it runs."""
        return self._result

    @property
    @abstractmethod
    def target(self) -> str:
        """Human-readable description of what the command acts on."""

    def execute(self) -> Result[str, str]:
        """Run the command.

        Raises:
            CommandAlreadyExecutedError: If called a second time
        """
        if self._executed:
            raise CommandAlreadyExecutedError(f"{self.name} on {self.target} already executed")
        self._executed = True
        self._result = self._run()
        return self._result

    @abstractmethod
    def _run(self) -> Result[str, str]: ...

    @property
    def undoable(self) -> bool:
        return False

    def undo(self) -> Result[str, str]:
        return Err(f"{self.name} cannot be undone")

    def to_dict(self) -> Optional[Dict[str, Any]]:
        """Description used to re-create a still-queued command after a load.

        None for commands that are never left queued between ticks.
        """
        return None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(target={self.target!r}, executed={self._executed})"


class PlantCommand(Command):
    """A command aimed at one plant in one greenhouse."""

    def __init__(self, greenhouse: "Greenhouse", plant_id: int, caretaker: "Caretaker") -> None:
        super().__init__()
        self._greenhouse = greenhouse
        self._plant_id = plant_id
        self._caretaker = caretaker
        self._undone = False

    @property
    def plant_id(self) -> int:
        return self._plant_id

    @property
    def greenhouse(self) -> "Greenhouse":
        return self._greenhouse

    @property
    def target(self) -> str:
        return f"plant {self._plant_id} in {self._greenhouse.name}"

    @property
    def undoable(self) -> bool:
        return self._result is not None and self._result.is_ok() and not self._undone

    def _living_plant(self) -> Result["Plant", str]:
        plant = self._greenhouse.get_plant(self._plant_id)
        if plant is None:
            return Err(f"Plant {self._plant_id} is no longer in {self._greenhouse.name}")
        if plant.is_dead:
            return Err(f"Plant {self._plant_id} is dead")
        return Ok(plant)

    def undo(self) -> Result[str, str]:
        if not self.undoable:
            return Err(f"{self.name} on {self.target} did not run successfully")
        plant = self._greenhouse.get_plant(self._plant_id)
        if plant is None:
            return Err(f"Plant {self._plant_id} is no longer in {self._greenhouse.name}")
        undone = self._caretaker.undo(plant)
        if undone.is_err():
            return Err(undone.error)
        self._undone = True
        return Ok(f"undid {self.name} on plant {self._plant_id}")

    def to_dict(self) -> Dict[str, Any]:
        return {"command": self.name, "greenhouse": self._greenhouse.name, "plant_id": self._plant_id}


class WaterCommand(PlantCommand):
    name = "water"

    def __init__(self, greenhouse: "Greenhouse", plant_id: int, caretaker: "Caretaker", amount: float) -> None:
        super().__init__(greenhouse, plant_id, caretaker)
        self.amount = amount

    def _run(self) -> Result[str, str]:
        found = self._living_plant()
        if found.is_err():
            return Err(found.error)
        plant = found.unwrap()
        self._caretaker.checkpoint(plant)
        moisture = plant.water(self.amount)
        return Ok(f"watered plant {plant.id} to {moisture:.1f}")


class FertilizeCommand(PlantCommand):
    """Feed a plant and put it on the Boosted cycle for a while."""

    name = "fertilize"

    def __init__(
        self,
        greenhouse: "Greenhouse",
        plant_id: int,
        caretaker: "Caretaker",
        amount: float,
        boost_duration: float,
    ) -> None:
        super().__init__(greenhouse, plant_id, caretaker)
        self.amount = amount
        self.boost_duration = boost_duration

    def _run(self) -> Result[str, str]:
        found = self._living_plant()
        if found.is_err():
            return Err(found.error)
        plant = found.unwrap()
        self._caretaker.checkpoint(plant)
        nutrients = plant.fertilize(self.amount, self.boost_duration)
        return Ok(f"fertilized plant {plant.id} to {nutrients:.1f}, boosted {self.boost_duration:.0f}s")


class HarvestCommand(PlantCommand):
    """Remove a ripe plant and credit its produce to the store."""

    name = "harvest"

    def __init__(self, greenhouse: "Greenhouse", plant_id: int, caretaker: "Caretaker", store: "Store") -> None:
        super().__init__(greenhouse, plant_id, caretaker)
        self._store = store
        self._harvested: Optional["Plant"] = None
        self._credited: Optional[tuple] = None

    def _run(self) -> Result[str, str]:
        plant = self._greenhouse.get_plant(self._plant_id)
        if plant is None:
            return Err(f"Plant {self._plant_id} is no longer in {self._greenhouse.name}")
        if not plant.is_ripe:
            return Err(f"Plant {self._plant_id} is {plant.stage.value}, not ripe")
        self._caretaker.checkpoint(plant)
        harvested = self._greenhouse.harvest(self._plant_id).unwrap()
        self._harvested = harvested
        units = self._store.economy.harvest_yield
        self._store.stock_harvest(harvested, units)
        self._credited = (harvested.profile.item_key, units)
        logger.info(f"Harvested {harvested.species.value} #{harvested.id} (+{units})")
        return Ok(f"harvested {units} {harvested.profile.item_key}")

    def undo(self) -> Result[str, str]:
        """Put the plant back on a free plot and withdraw its produce.

        Only the harvested plant is touched; plants planted since stay.
        Fails without changing anything when the produce has been sold or
        every plot is taken.
        """
        if not self.undoable or self._credited is None or self._harvested is None:
            return Err(f"{self.name} on {self.target} did not run successfully")
        if self._greenhouse.free_plots <= 0:
            return Err(f"Cannot undo harvest of plant {self._plant_id}: greenhouse {self._greenhouse.name} is full")
        item, units = self._credited
        if not self._store.inventory.remove_stock(item, units):
            return Err(f"Cannot undo harvest of plant {self._plant_id}: {item} already sold")
        restored = self._caretaker.undo(self._harvested)
        if restored.is_err():
            self._store.inventory.add_stock(item, units)
            return Err(restored.error)
        self._greenhouse.reinstate(self._harvested)
        self._harvested = None
        self._credited = None
        self._undone = True
        return Ok(f"undid harvest of plant {self._plant_id}")


class PatrolCommand(Command):
    """Guard the store for ``duration`` seconds; robbers are turned away."""

    name = "patrol"

    def __init__(self, store: "Store", duration: float, worker_id: Optional[int] = None) -> None:
        super().__init__()
        self._store = store
        self.duration = duration
        self.worker_id = worker_id

    @property
    def target(self) -> str:
        return "store"

    def _run(self) -> Result[str, str]:
        self._store.guard(self.duration)
        return Ok(f"store guarded for {self.duration:.0f}s")

    def to_dict(self) -> Dict[str, Any]:
        return {"command": self.name, "duration": self.duration}


class ServeCommand(Command):
    """Run one customer's single interaction with the store."""

    name = "serve"

    def __init__(self, customer: "Customer", store: "Store", config: "CustomerConfig") -> None:
        super().__init__()
        self._customer = customer
        self._store = store
        self._config = config
        self.interaction: Optional["Interaction"] = None

    @property
    def target(self) -> str:
        return f"{self._customer.customer_type.value} customer {self._customer.id}"

    def _run(self) -> Result[str, str]:
        self.interaction = self._customer.interact(self._store, self._config)
        if self.interaction.succeeded:
            return Ok(self.interaction.detail)
        return Err(self.interaction.detail)


@dataclass(frozen=True)
class CommandRecord:
    """Log entry for one executed command."""

    tick: int
    command: str
    target: str
    succeeded: bool
    detail: str


class CommandInvoker:
    """Executes commands, logs their outcomes and remembers what can be undone."""

    def __init__(
        self,
        max_records: int = 200,
        event_bus: Optional[EventBus] = None,
        tick_provider: Optional[Callable[[], int]] = None,
    ) -> None:
        self._records: Deque[CommandRecord] = deque(maxlen=max_records)
        self._undoable: Deque[Command] = deque(maxlen=max_records)
        self._event_bus = event_bus
        self._tick_provider = tick_provider or (lambda: 0)

    def invoke(self, command: Command) -> Result[str, str]:
        result = command.execute()
        detail = result.unwrap() if result.is_ok() else str(result.error)
        record = CommandRecord(
            tick=self._tick_provider(),
            command=command.name,
            target=command.target,
            succeeded=result.is_ok(),
            detail=detail,
        )
        self._records.append(record)
        if command.undoable:
            self._undoable.append(command)
        if result.is_err():
            logger.debug(f"{command.name} on {command.target} failed: {detail}")
        if self._event_bus is not None:
            self._event_bus.emit(
                CommandExecutedEvent(
                    command=record.command,
                    target=record.target,
                    succeeded=record.succeeded,
                    detail=record.detail,
                    tick=record.tick,
                )
            )
        return result

    def undo_last(self) -> Result[str, str]:
        """Undo the most recent undoable command."""
        if not self._undoable:
            return Err("No command history to undo")
        return self._undoable.pop().undo()

    @property
    def records(self) -> List[CommandRecord]:
        return list(self._records)

    def clear(self) -> None:
        self._records.clear()
        self._undoable.clear()
