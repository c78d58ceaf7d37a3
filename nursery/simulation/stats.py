"""Running business statistics fed by domain events."""

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Mapping, Tuple

from nursery.events import (
    CommandExecutedEvent,
    CustomerArrivedEvent,
    EventBus,
    PlantPlantedEvent,
    PlantRemovedEvent,
    PlantStageChangedEvent,
    SaleCompletedEvent,
    SaleFailedEvent,
    TheftCommittedEvent,
    TheftDeterredEvent,
)
from nursery.state_machine import PlantStage

logger = logging.getLogger(__name__)


class NurseryStats:
    """Counters for plants, commands and customers.

    Subscribe it to a bus with ``attach``; everything else happens in the
    event handlers.
    """

    def __init__(self) -> None:
        self.plants_planted = 0
        self.plants_harvested = 0
        self.plants_expired = 0
        self.deaths_by_cause: Dict[str, int] = defaultdict(int)
        self.commands_succeeded = 0
        self.commands_failed = 0
        self.arrivals_by_type: Dict[str, int] = defaultdict(int)
        self.sales = 0
        self.units_sold = 0
        self.revenue = 0.0
        self.failed_sales = 0
        self.thefts = 0
        self.units_stolen = 0
        self.cash_stolen = 0.0
        self.thefts_deterred = 0

    def _handlers(self) -> List[Tuple[type, Callable[[Any], None]]]:
        return [
            (PlantPlantedEvent, self._on_planted),
            (PlantStageChangedEvent, self._on_stage_changed),
            (PlantRemovedEvent, self._on_removed),
            (CommandExecutedEvent, self._on_command),
            (CustomerArrivedEvent, self._on_arrival),
            (SaleCompletedEvent, self._on_sale),
            (SaleFailedEvent, self._on_failed_sale),
            (TheftCommittedEvent, self._on_theft),
            (TheftDeterredEvent, self._on_deterred),
        ]

    def attach(self, bus: EventBus) -> None:
        for event_type, handler in self._handlers():
            bus.subscribe(event_type, handler)

    def detach(self, bus: EventBus) -> None:
        for event_type, handler in self._handlers():
            bus.unsubscribe(event_type, handler)

    def _on_planted(self, event: PlantPlantedEvent) -> None:
        self.plants_planted += 1

    def _on_stage_changed(self, event: PlantStageChangedEvent) -> None:
        if event.new_stage == PlantStage.DEAD.value:
            self.deaths_by_cause[event.reason] += 1

    def _on_removed(self, event: PlantRemovedEvent) -> None:
        if event.reason == "harvest":
            self.plants_harvested += 1
        elif event.reason == "expired":
            self.plants_expired += 1

    def _on_command(self, event: CommandExecutedEvent) -> None:
        if event.succeeded:
            self.commands_succeeded += 1
        else:
            self.commands_failed += 1

    def _on_arrival(self, event: CustomerArrivedEvent) -> None:
        self.arrivals_by_type[event.customer_type] += 1

    def _on_sale(self, event: SaleCompletedEvent) -> None:
        self.sales += 1
        self.units_sold += event.quantity
        self.revenue += event.revenue

    def _on_failed_sale(self, event: SaleFailedEvent) -> None:
        self.failed_sales += 1

    def _on_theft(self, event: TheftCommittedEvent) -> None:
        self.thefts += 1
        self.units_stolen += event.quantity
        self.cash_stolen += event.cash

    def _on_deterred(self, event: TheftDeterredEvent) -> None:
        self.thefts_deterred += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plants_planted": self.plants_planted,
            "plants_harvested": self.plants_harvested,
            "plants_expired": self.plants_expired,
            "deaths_by_cause": dict(sorted(self.deaths_by_cause.items())),
            "commands_succeeded": self.commands_succeeded,
            "commands_failed": self.commands_failed,
            "arrivals_by_type": dict(sorted(self.arrivals_by_type.items())),
            "sales": self.sales,
            "units_sold": self.units_sold,
            "revenue": self.revenue,
            "failed_sales": self.failed_sales,
            "thefts": self.thefts,
            "units_stolen": self.units_stolen,
            "cash_stolen": self.cash_stolen,
            "thefts_deterred": self.thefts_deterred,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NurseryStats":
        """Rebuild counters from validated ``to_dict`` output."""
        stats = cls()
        for key, value in data.items():
            if key in ("deaths_by_cause", "arrivals_by_type"):
                getattr(stats, key).update(value)
            else:
                setattr(stats, key, value)
        return stats
