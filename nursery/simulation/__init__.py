"""Simulation engine and run statistics."""

from nursery.simulation.engine import NurserySimulation, UpdatePhase
from nursery.simulation.stats import NurseryStats

__all__ = ["NurserySimulation", "NurseryStats", "UpdatePhase"]
