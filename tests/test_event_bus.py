"""Tests for the EventBus domain event dispatch system."""

from nursery.events import (
    CommandExecutedEvent,
    EventBus,
    PlantRemovedEvent,
    PlantStageChangedEvent,
    SaleCompletedEvent,
)
from nursery.simulation import NurseryStats


class TestEventBus:
    """Test suite for EventBus functionality."""

    def test_emit_reaches_subscriber(self) -> None:
        """Verify events are delivered to subscribed handlers."""
        bus = EventBus()
        received_events: list = []

        def handler(event: PlantRemovedEvent) -> None:
            received_events.append(event)

        bus.subscribe(PlantRemovedEvent, handler)

        event = PlantRemovedEvent(plant_id=42, species="corn", reason="harvest", tick=100)
        bus.emit(event)

        assert len(received_events) == 1
        assert received_events[0] is event
        assert received_events[0].plant_id == 42

    def test_no_subscribers_no_crash(self) -> None:
        """Verify emitting with no subscribers is a no-op."""
        bus = EventBus()

        bus.emit(PlantRemovedEvent(plant_id=1, species="corn", reason="expired", tick=50))

        assert bus.unsubscribe(PlantRemovedEvent, print) is False

    def test_multiple_handlers_same_type(self) -> None:
        """Verify multiple handlers for the same event type all receive it, in order."""
        bus = EventBus()
        results: list = []

        bus.subscribe(SaleCompletedEvent, lambda e: results.append(("h1", e.customer_id)))
        bus.subscribe(SaleCompletedEvent, lambda e: results.append(("h2", e.customer_id)))

        bus.emit(SaleCompletedEvent(customer_id=99, item="tomato", quantity=1, revenue=55.0, tick=3))

        assert results == [("h1", 99), ("h2", 99)]

    def test_handler_receives_correct_type_only(self) -> None:
        """Verify handlers only receive events of their subscribed type."""
        bus = EventBus()
        removed: list = []
        sales: list = []

        bus.subscribe(PlantRemovedEvent, removed.append)
        bus.subscribe(SaleCompletedEvent, sales.append)

        bus.emit(PlantRemovedEvent(plant_id=1, species="corn", reason="harvest", tick=1))

        assert len(removed) == 1
        assert sales == []

    def test_unsubscribe_removes_handler(self) -> None:
        """Verify unsubscribe removes the handler from receiving events."""
        bus = EventBus()
        received: list = []

        def handler(event: PlantRemovedEvent) -> None:
            received.append(event)

        bus.subscribe(PlantRemovedEvent, handler)
        bus.emit(PlantRemovedEvent(plant_id=1, species="corn", reason="harvest", tick=1))
        assert len(received) == 1

        assert bus.unsubscribe(PlantRemovedEvent, handler) is True
        assert bus.unsubscribe(PlantRemovedEvent, handler) is False

        bus.emit(PlantRemovedEvent(plant_id=2, species="corn", reason="harvest", tick=2))
        assert len(received) == 1

    def test_handler_may_unsubscribe_during_emit(self) -> None:
        """A handler removing itself mid-dispatch does not skip the others."""
        bus = EventBus()
        calls: list = []

        def once(event: PlantRemovedEvent) -> None:
            calls.append("once")
            bus.unsubscribe(PlantRemovedEvent, once)

        bus.subscribe(PlantRemovedEvent, once)
        bus.subscribe(PlantRemovedEvent, lambda e: calls.append("always"))

        bus.emit(PlantRemovedEvent(plant_id=1, species="corn", reason="harvest", tick=1))
        bus.emit(PlantRemovedEvent(plant_id=2, species="corn", reason="harvest", tick=2))

        assert calls == ["once", "always", "always"]

class TestStatsIntegration:
    """NurseryStats counts what it hears on the bus."""

    def test_stats_receive_events_via_bus(self) -> None:
        bus = EventBus()
        stats = NurseryStats()
        stats.attach(bus)

        bus.emit(PlantStageChangedEvent(1, "corn", "seed", "dead", "drought", 4))
        bus.emit(PlantRemovedEvent(plant_id=2, species="corn", reason="harvest", tick=5))
        bus.emit(SaleCompletedEvent(customer_id=1, item="corn", quantity=2, revenue=240.0, tick=5))
        bus.emit(CommandExecutedEvent("water", "plant 1 in main", False, "dead", 5))

        assert stats.deaths_by_cause == {"drought": 1}
        assert stats.plants_harvested == 1
        assert (stats.sales, stats.units_sold, stats.revenue) == (1, 2, 240.0)
        assert stats.commands_failed == 1

    def test_detach_stops_counting(self) -> None:
        bus = EventBus()
        stats = NurseryStats()
        stats.attach(bus)
        bus.emit(PlantRemovedEvent(plant_id=1, species="corn", reason="harvest", tick=1))

        stats.detach(bus)
        bus.emit(PlantRemovedEvent(plant_id=2, species="corn", reason="harvest", tick=2))

        assert stats.plants_harvested == 1

    def test_stats_round_trip(self) -> None:
        stats = NurseryStats()
        stats.sales = 3
        stats.arrivals_by_type["vip"] = 2
        restored = NurseryStats.from_dict(stats.to_dict())
        assert restored.to_dict() == stats.to_dict()
        assert restored.arrivals_by_type["robber"] == 0
