"""Plant lifecycle states: Seed -> Growing -> Ripe -> Dead.

Each state object is stateless and shared by every plant. It knows its
progress threshold, how fast it grows relative to the species rate and
how quickly it drinks and feeds. The plant's own StateMachine remains
the single source of truth for which stage is active.

Leftover progress is discarded on a transition: progress resets to zero
and a single ``advance`` call moves at most one stage, however large
``elapsed`` is.
"""

from __future__ import annotations

import logging
from abc import ABC
from typing import TYPE_CHECKING, Dict, Optional, Tuple

from nursery.config.plants import (
    DEAD_GROWTH_FACTOR,
    GROWING_CONSUMPTION,
    GROWING_GROWTH_FACTOR,
    RIPE_CONSUMPTION,
    RIPE_GROWTH_FACTOR,
    SEED_CONSUMPTION,
    SEED_GROWTH_FACTOR,
)
from nursery.exceptions import InvalidTransitionError, PreconditionError
from nursery.state_machine import PLANT_STAGE_TRANSITIONS, PlantStage

if TYPE_CHECKING:
    from nursery.config.simulation_config import GrowthConfig
    from nursery.plants.plant import Plant

logger = logging.getLogger(__name__)


class PlantState(ABC):
    """Behaviour of one lifecycle stage.

    Attributes:
        stage: The stage this object implements
        next_stage: Where reaching the threshold leads (None if terminal)
        growth_factor: Multiplier on the cycle-scaled species rate
        consumption: (moisture, nutrients) drained per simulated second
    """

    stage: PlantStage
    next_stage: Optional[PlantStage] = None
    growth_factor: float = 0.0
    consumption: Tuple[float, float] = (0.0, 0.0)
    transition_reason: str = "growth"

    def threshold(self, config: "GrowthConfig") -> float:
        return float("inf")

    def advance(self, plant: "Plant", elapsed: float) -> PlantStage:
        """Accumulate progress and transition once the threshold is reached."""
        plant.add_progress(elapsed * plant.growth_rate)
        plant.tick_boost(elapsed)
        if self.next_stage is not None and plant.progress >= self.threshold(plant.growth_config):
            plant.enter_stage(self.next_stage, self.transition_reason)
        return plant.stage

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class SeedState(PlantState):
    stage = PlantStage.SEED
    next_stage = PlantStage.GROWING
    growth_factor = SEED_GROWTH_FACTOR
    consumption = SEED_CONSUMPTION
    transition_reason = "germinated"

    def threshold(self, config: "GrowthConfig") -> float:
        return config.seed_threshold


class GrowingState(PlantState):
    stage = PlantStage.GROWING
    next_stage = PlantStage.RIPE
    growth_factor = GROWING_GROWTH_FACTOR
    consumption = GROWING_CONSUMPTION
    transition_reason = "ripened"

    def threshold(self, config: "GrowthConfig") -> float:
        return config.growing_threshold


class RipeState(PlantState):
    """Ripe produce keeps ageing slowly and rots if left unharvested."""

    stage = PlantStage.RIPE
    next_stage = PlantStage.DEAD
    growth_factor = RIPE_GROWTH_FACTOR
    consumption = RIPE_CONSUMPTION
    transition_reason = "over-ripened"

    def threshold(self, config: "GrowthConfig") -> float:
        return config.ripe_threshold


class DeadState(PlantState):
    """Absorbing state: advancing a dead plant changes nothing."""

    stage = PlantStage.DEAD
    growth_factor = DEAD_GROWTH_FACTOR

    def advance(self, plant: "Plant", elapsed: float) -> PlantStage:
        return PlantStage.DEAD


_STATES: Dict[PlantStage, PlantState] = {
    PlantStage.SEED: SeedState(),
    PlantStage.GROWING: GrowingState(),
    PlantStage.RIPE: RipeState(),
    PlantStage.DEAD: DeadState(),
}


def state_for(stage: PlantStage) -> PlantState:
    return _STATES[stage]


def advance(plant: "Plant", elapsed: float) -> PlantStage:
    """Advance ``plant`` by ``elapsed`` simulated seconds.

    Returns the plant's stage after the call. Observers attached to the
    plant's greenhouse have already been notified of any transition by the
    time this returns.

    Raises:
        PreconditionError: If ``elapsed`` is negative
    """
    if elapsed < 0:
        raise PreconditionError(f"elapsed must be non-negative, got {elapsed}")
    return state_for(plant.stage).advance(plant, elapsed)


def force_transition(plant: "Plant", target: PlantStage, reason: str = "forced") -> PlantStage:
    """Move ``plant`` to ``target`` outside normal growth (death, mostly).

    Raises:
        InvalidTransitionError: If ``target`` is not reachable from the current stage
    """
    current = plant.stage
    if target not in PLANT_STAGE_TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"Plant {plant.id} cannot go {current.name} -> {target.name}"
        )
    plant.enter_stage(target, reason)
    return target
