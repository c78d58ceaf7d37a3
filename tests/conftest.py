"""Pytest configuration and fixtures for nursery tests."""

import random

import pytest

from nursery.config.simulation_config import GrowthConfig, SimulationConfig


class RecordingObserver:
    """Greenhouse observer that remembers every notification."""

    def __init__(self, name: str = "observer", log: list = None) -> None:
        self.name = name
        self.calls = []
        self._log = log

    def on_notify(self, plant, old_stage, new_stage, greenhouse) -> None:
        self.calls.append((plant.id, old_stage, new_stage))
        if self._log is not None:
            self._log.append(self.name)


@pytest.fixture
def seeded_rng():
    """Provide a deterministic RNG for tests."""
    return random.Random(42)


@pytest.fixture
def growth_config():
    """Growth config with resource drain off so plants only grow."""
    return GrowthConfig(consume_resources=False)


@pytest.fixture
def greenhouse(growth_config):
    from nursery.greenhouse import Greenhouse

    return Greenhouse(name="main", growth_config=growth_config)


@pytest.fixture
def caretaker():
    from nursery.memento import Caretaker

    return Caretaker()


@pytest.fixture
def store():
    from nursery.store.store import Store

    return Store()


@pytest.fixture
def plant_factory(growth_config):
    from nursery.plants.plant_factory import PlantFactory

    return PlantFactory(growth_config=growth_config)


@pytest.fixture
def quiet_config():
    """Seeded config with no customer arrivals and no resource drain."""
    return SimulationConfig.from_overrides(
        {
            "seed": 42,
            "growth": {"consume_resources": False},
            "customers": {"max_customers": 0},
        }
    )


@pytest.fixture
def simulation():
    """A seeded simulation with default tuning."""
    from nursery.simulation import NurserySimulation

    return NurserySimulation(SimulationConfig.from_overrides({"seed": 42}))


@pytest.fixture
def make_observer():
    """Factory for recording observers."""
    return RecordingObserver
