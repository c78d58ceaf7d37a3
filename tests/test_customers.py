"""Tests for customers, their factories and the customer manager."""

import random

import pytest

from nursery.config.simulation_config import CustomerConfig
from nursery.customers import (
    CustomerType,
    FixedCustomerFactory,
    Intent,
    RandomCustomerFactory,
    RegularCustomer,
    RobberCustomer,
    VipCustomer,
)
from nursery.customers.factory import create_customer_factory
from nursery.customers.manager import CustomerManager
from nursery.events import (
    CustomerArrivedEvent,
    EventBus,
    SaleCompletedEvent,
    SaleFailedEvent,
    TheftCommittedEvent,
    TheftDeterredEvent,
)


@pytest.fixture
def manager(store, seeded_rng):
    return CustomerManager(store, seeded_rng, config=CustomerConfig())


class TestRobbers:
    def test_robber_takes_everything_on_the_shelf(self, store, manager) -> None:
        """Five tomatoes, a robber wanting ten: shelf emptied, funds untouched."""
        store.inventory.add_stock("tomato", 5, 55.0)
        funds = store.funds
        manager.admit(RobberCustomer(1, "tomato", 10, 0.5, Intent.STEAL))

        interactions = manager.tick(1.0, store_open=False)

        assert store.inventory.quantity_of("tomato") == 0
        assert store.funds == funds
        assert len(manager) == 0
        assert [(i.outcome, i.quantity) for i in interactions] == [("theft", 5)]

    def test_patrol_deters_robber(self, store, manager) -> None:
        store.inventory.add_stock("tomato", 5, 55.0)
        store.guard(10.0)
        funds, rating = store.funds, store.rating
        manager.admit(RobberCustomer(1, "tomato", 10, 0.0, Intent.STEAL))

        interactions = manager.serve_ready()

        assert interactions[0].outcome == "deterred"
        assert store.inventory.quantity_of("tomato") == 5
        assert (store.funds, store.rating) == (funds, rating)
        assert len(manager) == 0

    def test_robber_takes_cash_when_shelf_is_bare(self, store, manager) -> None:
        store.funds = 200.0
        manager.admit(RobberCustomer(1, "corn", 10, 0.0, Intent.STEAL))

        interaction = manager.serve_ready()[0]

        assert interaction.outcome == "cash_theft"
        assert interaction.amount == 20.0
        assert store.funds == 180.0

    def test_theft_hurts_rating(self, store, manager) -> None:
        store.inventory.add_stock("tomato", 1, 55.0)
        rating = store.rating
        manager.admit(RobberCustomer(1, "tomato", 10, 0.0, Intent.STEAL))
        manager.serve_ready()
        assert store.rating == pytest.approx(rating - store.economy.rating_theft_loss)


class TestShoppers:
    def test_vip_served_first_with_discount(self, store, manager) -> None:
        store.inventory.add_stock("tomato", 1, 55.0)
        manager.admit(RegularCustomer(1, "tomato", 1, 0.0, Intent.BUY))
        manager.admit(VipCustomer(2, "tomato", 1, 0.0, Intent.BUY))

        interactions = manager.serve_ready()

        assert [(i.customer_id, i.outcome) for i in interactions] == [(2, "sale"), (1, "sale_failed")]
        assert interactions[0].amount == 49.5
        assert store.funds == 549.5
        assert len(manager) == 0

    def test_short_stock_sale_is_a_no_op(self, store, manager) -> None:
        store.inventory.add_stock("tomato", 1, 55.0)
        manager.admit(RegularCustomer(1, "tomato", 2, 0.0, Intent.BUY))

        interaction = manager.serve_ready()[0]

        assert interaction.outcome == "sale_failed"
        assert not interaction.succeeded
        assert store.inventory.quantity_of("tomato") == 1
        assert store.funds == 500.0

    def test_sale_improves_rating(self, store, manager) -> None:
        store.inventory.add_stock("tomato", 1, 55.0)
        manager.admit(RegularCustomer(1, "tomato", 1, 0.0, Intent.BUY))
        manager.serve_ready()
        assert store.rating == pytest.approx(store.economy.starting_rating + store.economy.rating_sale_gain)

    def test_browser_buys_nothing(self, store, manager) -> None:
        store.inventory.add_stock("tomato", 1, 55.0)
        manager.admit(RegularCustomer(1, "tomato", 1, 0.0, Intent.BROWSE))

        interaction = manager.serve_ready()[0]

        assert interaction.outcome == "browse"
        assert store.inventory.quantity_of("tomato") == 1

    def test_customers_wait_out_their_patience(self, store, manager) -> None:
        store.inventory.add_stock("tomato", 1, 55.0)
        manager.admit(RegularCustomer(1, "tomato", 1, 2.0, Intent.BUY))

        assert manager.tick(1.0, store_open=False) == []
        assert len(manager) == 1
        assert len(manager.tick(1.0, store_open=False)) == 1
        assert len(manager) == 0


class TestArrivals:
    def test_spawn_schedule_and_capacity(self, store, seeded_rng) -> None:
        config = CustomerConfig(
            spawn_interval=5.0,
            max_customers=2,
            spawn_weights={"regular": 1.0},
            regular_patience=1000.0,
        )
        manager = CustomerManager(store, seeded_rng, config=config)

        for _ in range(4):
            manager.tick(1.0)
        assert len(manager) == 0
        manager.tick(1.0)
        assert len(manager) == 1
        for _ in range(10):
            manager.tick(1.0)
        assert len(manager) == 2
        assert [c.id for c in manager.active] == [1, 2]

    def test_closed_store_admits_nobody(self, store, seeded_rng) -> None:
        manager = CustomerManager(store, seeded_rng, config=CustomerConfig(spawn_interval=1.0))
        for _ in range(10):
            manager.tick(1.0, store_open=False)
        assert len(manager) == 0
        assert manager.spawn_timer == 0.0

    def test_spawn_when_full_is_err(self, store, seeded_rng) -> None:
        manager = CustomerManager(store, seeded_rng, config=CustomerConfig(max_customers=1))
        assert manager.spawn("corn").is_ok()
        assert manager.spawn("corn").is_err()

    def test_spawn_requests_stocked_item(self, store, manager) -> None:
        store.inventory.add_stock("pepper", 3, 65.0)
        customer = manager.spawn().unwrap()
        assert customer.requested == "pepper"

    def test_admit_duplicate_id_is_err(self, manager) -> None:
        manager.admit(RegularCustomer(1, "corn", 1, 5.0, Intent.BUY))
        assert manager.admit(VipCustomer(1, "corn", 1, 5.0, Intent.BUY)).is_err()

    def test_events(self, store, seeded_rng) -> None:
        bus = EventBus()
        seen = []
        for event_type in (
            CustomerArrivedEvent,
            SaleCompletedEvent,
            SaleFailedEvent,
            TheftCommittedEvent,
            TheftDeterredEvent,
        ):
            bus.subscribe(event_type, seen.append)
        manager = CustomerManager(store, seeded_rng, config=CustomerConfig(), event_bus=bus)
        store.inventory.add_stock("tomato", 1, 55.0)

        manager.admit(VipCustomer(1, "tomato", 1, 0.0, Intent.BUY))
        manager.admit(RegularCustomer(2, "tomato", 1, 0.0, Intent.BUY))
        manager.admit(RobberCustomer(3, "tomato", 10, 0.0, Intent.STEAL))
        manager.serve_ready()

        assert [type(e) for e in seen] == [
            CustomerArrivedEvent,
            CustomerArrivedEvent,
            CustomerArrivedEvent,
            SaleCompletedEvent,
            SaleFailedEvent,
            TheftCommittedEvent,
        ]


class TestFactories:
    def test_fixed_factory(self, seeded_rng) -> None:
        factory = FixedCustomerFactory(CustomerType.VIP, CustomerConfig(), seeded_rng)
        customer = factory.spawn(1, "corn")
        assert isinstance(customer, VipCustomer)
        assert customer.intent is Intent.BUY
        low, high = CustomerConfig().vip_quantity
        assert low <= customer.quantity <= high

    def test_robber_factory(self, seeded_rng) -> None:
        config = CustomerConfig()
        customer = create_customer_factory("robber", config, seeded_rng).spawn(4, "corn")
        assert isinstance(customer, RobberCustomer)
        assert customer.quantity == config.robber_max_haul
        assert customer.patience == config.robber_patience

    def test_random_factory_respects_weights(self, seeded_rng) -> None:
        factory = RandomCustomerFactory(CustomerConfig(), seeded_rng, weights={"robber": 1.0})
        assert {factory.next_kind() for _ in range(50)} == {CustomerType.ROBBER}

    def test_random_factory_mixes_types(self, seeded_rng) -> None:
        factory = create_customer_factory("random", CustomerConfig(), seeded_rng)
        kinds = [factory.next_kind() for _ in range(500)]
        assert set(kinds) == set(CustomerType)
        assert kinds.count(CustomerType.REGULAR) > kinds.count(CustomerType.ROBBER)

    def test_random_factory_is_reproducible(self) -> None:
        a = RandomCustomerFactory(CustomerConfig(), random.Random(3))
        b = RandomCustomerFactory(CustomerConfig(), random.Random(3))
        assert [a.next_kind() for _ in range(30)] == [b.next_kind() for _ in range(30)]

    def test_settings_describe_the_factory(self, seeded_rng) -> None:
        fixed = create_customer_factory("vip", CustomerConfig(), seeded_rng)
        assert fixed.settings() == {"factory": "vip"}

        weighted = RandomCustomerFactory(CustomerConfig(), seeded_rng, weights={"robber": 1.0})
        assert weighted.settings() == {
            "factory": "random",
            "spawn_weights": {"regular": 0.0, "vip": 0.0, "robber": 1.0},
        }

    def test_browse_chance(self, seeded_rng) -> None:
        factory = FixedCustomerFactory(
            CustomerType.REGULAR, CustomerConfig(regular_browse_chance=1.0), seeded_rng
        )
        assert factory.spawn(1, "corn").intent is Intent.BROWSE
