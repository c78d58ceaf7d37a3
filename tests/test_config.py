"""Tests for simulation configuration and overrides."""

import pytest

from nursery.config.simulation_config import (
    CustomerConfig,
    EconomyConfig,
    GrowthConfig,
    SimulationConfig,
)
from nursery.exceptions import ConfigurationError


class TestDefaults:
    def test_defaults_are_valid(self) -> None:
        SimulationConfig().validate()

    def test_default_thresholds(self) -> None:
        growth = GrowthConfig()
        assert (growth.seed_threshold, growth.growing_threshold, growth.ripe_threshold) == (25.0, 75.0, 50.0)

    def test_default_spawn_weights_cover_every_type(self) -> None:
        assert set(CustomerConfig().spawn_weights) == {"regular", "vip", "robber"}

    def test_sections_are_independent(self) -> None:
        a = EconomyConfig()
        b = EconomyConfig()
        a.worker_hire_costs["water"] = 1.0
        assert b.worker_hire_costs["water"] != 1.0


class TestOverrides:
    def test_nested_override(self) -> None:
        config = SimulationConfig.from_overrides(
            {"seed": 3, "growth": {"seed_threshold": 10.0}, "customers": {"max_customers": 2}}
        )
        assert config.seed == 3
        assert config.growth.seed_threshold == 10.0
        assert config.growth.growing_threshold == 75.0
        assert config.customers.max_customers == 2

    def test_list_becomes_tuple(self) -> None:
        config = SimulationConfig.from_overrides({"customers": {"vip_quantity": [1, 1]}})
        assert config.customers.vip_quantity == (1, 1)

    def test_empty_overrides(self) -> None:
        assert SimulationConfig.from_overrides(None) == SimulationConfig()

    def test_clock_and_factory_sections(self) -> None:
        config = SimulationConfig.from_overrides({"clock": {"start_hour": 9}, "customers": {"factory": "robber"}})
        assert config.clock.start_hour == 9
        assert config.customers.factory == "robber"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"colour": "green"},
            {"growth": {"speed": 2}},
            {"growth": 5},
        ],
    )
    def test_bad_keys_rejected(self, overrides) -> None:
        with pytest.raises(ConfigurationError):
            SimulationConfig.from_overrides(overrides)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"tick_seconds": 0},
            {"growth": {"seed_threshold": 0}},
            {"growth": {"boost_multiplier": 0.5}},
            {"greenhouse": {"capacity": 200}},
            {"economy": {"starting_funds": -1}},
            {"customers": {"spawn_weights": {"ghost": 1.0}}},
            {"customers": {"spawn_weights": {"regular": 0.0}}},
            {"customers": {"vip_discount": 1.0}},
            {"customers": {"regular_quantity": [3, 1]}},
            {"customers": {"factory": "wizard"}},
            {"economy": {"worker_level_up_commands": 0}},
            {"economy": {"worker_level_bonus": -0.1}},
            {"clock": {"start_hour": 24}},
            {"clock": {"night_speedup": 0}},
        ],
    )
    def test_invalid_values_rejected(self, overrides) -> None:
        with pytest.raises(ConfigurationError):
            SimulationConfig.from_overrides(overrides)

    def test_simulation_validates_config(self) -> None:
        from nursery.simulation import NurserySimulation

        with pytest.raises(ConfigurationError):
            NurserySimulation(SimulationConfig(tick_seconds=-1.0))
