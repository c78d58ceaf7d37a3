"""Events module for domain event dispatch.

Provides the EventBus used to decouple the simulation from statistics
recording, plus the typed domain events it carries.
"""

from nursery.events.domain_events import (
    CommandExecutedEvent,
    CustomerArrivedEvent,
    PlantPlantedEvent,
    PlantRemovedEvent,
    PlantStageChangedEvent,
    SaleCompletedEvent,
    SaleFailedEvent,
    TheftCommittedEvent,
    TheftDeterredEvent,
)
from nursery.events.event_bus import EventBus

__all__ = [
    "CommandExecutedEvent",
    "CustomerArrivedEvent",
    "EventBus",
    "PlantPlantedEvent",
    "PlantRemovedEvent",
    "PlantStageChangedEvent",
    "SaleCompletedEvent",
    "SaleFailedEvent",
    "TheftCommittedEvent",
    "TheftDeterredEvent",
]
