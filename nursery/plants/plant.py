"""Plant entity.

A plant owns its lifecycle StateMachine, its current GrowthCycle, its
progress within the current stage and its moisture/nutrient levels. It
reports every stage change to a single non-owning transition listener,
which its greenhouse installs when the plant is planted.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Union

from nursery.config.plants import MAX_RESOURCE_LEVEL
from nursery.config.simulation_config import GrowthConfig
from nursery.exceptions import PreconditionError
from nursery.plants import plant_state
from nursery.plants.growth_cycle import (
    BoostedGrowthCycle,
    GrowthCycle,
    GrowthCycleKind,
    NormalGrowthCycle,
)
from nursery.plants.species import Species, SpeciesProfile, profile_for
from nursery.plants.visual_strategy import PlantVisualStrategy, visual_strategy_for
from nursery.state_machine import PlantStage, create_plant_state_machine

logger = logging.getLogger(__name__)

# (plant, old_stage, new_stage, reason)
TransitionListener = Callable[["Plant", PlantStage, PlantStage, str], None]


class Plant:
    """A single plant on a greenhouse plot.

    Attributes:
        id: Unique plant id within a simulation
        species: The plant's species
        profile: Static species traits (rate, price, size)
        growth_config: Thresholds and resource tuning shared across plants
    """

    def __init__(
        self,
        plant_id: int,
        species: Union[Species, str],
        growth_config: Optional[GrowthConfig] = None,
        growth_cycle: Optional[GrowthCycle] = None,
        visual_strategy: Optional[PlantVisualStrategy] = None,
    ) -> None:
        self.id = plant_id
        self.species = Species.parse(species)
        self.profile: SpeciesProfile = profile_for(self.species)
        self.growth_config = growth_config or GrowthConfig()
        self.visual_strategy = visual_strategy or visual_strategy_for(self.species)

        self._machine = create_plant_state_machine()
        self._cycle: GrowthCycle = growth_cycle or NormalGrowthCycle()
        self._progress = 0.0
        self.moisture = self.growth_config.initial_moisture
        self.nutrients = self.growth_config.initial_nutrients
        self.boost_remaining = 0.0
        self.dead_for = 0.0
        self._on_transition: Optional[TransitionListener] = None

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def stage(self) -> PlantStage:
        return self._machine.state

    @property
    def state(self) -> plant_state.PlantState:
        return plant_state.state_for(self._machine.state)

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def threshold(self) -> float:
        """Progress needed to leave the current stage (inf when Dead)."""
        return self.state.threshold(self.growth_config)

    @property
    def growth_cycle(self) -> GrowthCycle:
        return self._cycle

    @property
    def vigor(self) -> float:
        """Growth penalty applied while moisture or nutrients run low."""
        low = self.growth_config.low_resource_level
        if self.moisture < low or self.nutrients < low:
            return self.growth_config.low_resource_vigor
        return 1.0

    @property
    def growth_rate(self) -> float:
        """Effective progress units per simulated second right now."""
        base = self._cycle.scale(self.profile.base_growth_rate)
        return base * self.state.growth_factor * self.vigor

    @property
    def is_ripe(self) -> bool:
        return self.stage is PlantStage.RIPE

    @property
    def is_dead(self) -> bool:
        return self.stage is PlantStage.DEAD

    @property
    def is_thirsty(self) -> bool:
        return not self.is_dead and self.moisture < self.growth_config.low_resource_level

    @property
    def is_hungry(self) -> bool:
        return not self.is_dead and self.nutrients < self.growth_config.low_resource_level

    @property
    def visual_key(self) -> str:
        return self.visual_strategy.visual_key(self.stage)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def set_transition_listener(self, listener: Optional[TransitionListener]) -> None:
        """Install (or clear) the callback fired on every stage change."""
        self._on_transition = listener

    def advance(self, elapsed: float) -> PlantStage:
        """Grow for ``elapsed`` simulated seconds; see ``plant_state.advance``."""
        return plant_state.advance(self, elapsed)

    def force_transition(self, target: PlantStage, reason: str = "forced") -> PlantStage:
        return plant_state.force_transition(self, target, reason)

    def add_progress(self, amount: float) -> None:
        """Used by lifecycle states while advancing."""
        self._progress += amount

    def enter_stage(self, target: PlantStage, reason: str) -> None:
        """Validated stage change with progress reset and notification.

        Used by lifecycle states; everyone else goes through ``advance`` or
        ``force_transition``.
        """
        old_stage = self._machine.state
        self._machine.transition(target)
        self._progress = 0.0
        if target is PlantStage.DEAD:
            self.boost_remaining = 0.0
            self._cycle = NormalGrowthCycle()
            logger.info(f"Plant {self.id} ({self.species.value}) died: {reason}")
        else:
            logger.debug(f"Plant {self.id} ({self.species.value}) {old_stage.value} -> {target.value} ({reason})")

        if self._on_transition is not None:
            self._on_transition(self, old_stage, target, reason)

    def tick_boost(self, elapsed: float) -> None:
        """Count the boost down; revert to the Normal cycle when it runs out."""
        if self.boost_remaining <= 0:
            return
        self.boost_remaining -= elapsed
        if self.boost_remaining <= 0:
            self.boost_remaining = 0.0
            self._cycle = NormalGrowthCycle()
            logger.debug(f"Plant {self.id} boost expired")

    def consume_resources(self, elapsed: float) -> PlantStage:
        """Drain moisture and nutrients for ``elapsed`` seconds.

        A plant whose moisture or nutrients reach zero dies (drought or
        starvation). Returns the stage after consumption.
        """
        if self.is_dead or not self.growth_config.consume_resources:
            return self.stage
        moisture_rate, nutrient_rate = self.state.consumption
        self.moisture = max(0.0, self.moisture - moisture_rate * elapsed)
        self.nutrients = max(0.0, self.nutrients - nutrient_rate * elapsed)
        if self.moisture <= 0:
            self.force_transition(PlantStage.DEAD, "drought")
        elif self.nutrients <= 0:
            self.force_transition(PlantStage.DEAD, "starvation")
        return self.stage

    # ------------------------------------------------------------------
    # Care
    # ------------------------------------------------------------------

    def water(self, amount: float) -> float:
        """Add moisture (capped at 100). Returns the new moisture level."""
        self._require_alive("water")
        if amount <= 0:
            raise PreconditionError(f"water amount must be positive, got {amount}")
        self.moisture = min(MAX_RESOURCE_LEVEL, self.moisture + amount)
        return self.moisture

    def fertilize(self, amount: float, boost_duration: float) -> float:
        """Add nutrients and switch to the Boosted cycle for ``boost_duration``."""
        self._require_alive("fertilize")
        if amount <= 0:
            raise PreconditionError(f"fertilize amount must be positive, got {amount}")
        self.nutrients = min(MAX_RESOURCE_LEVEL, self.nutrients + amount)
        self.set_growth_cycle(BoostedGrowthCycle(self.growth_config.boost_multiplier))
        self.boost_remaining = boost_duration
        return self.nutrients

    def set_growth_cycle(self, cycle: GrowthCycle) -> None:
        """Swap the rate strategy; stage and progress are untouched."""
        self._cycle = cycle

    def _require_alive(self, action: str) -> None:
        if self.is_dead:
            raise PreconditionError(f"Cannot {action} dead plant {self.id}")

    # ------------------------------------------------------------------
    # Restore (mementos and snapshots only)
    # ------------------------------------------------------------------

    def restore_fields(
        self,
        stage: PlantStage,
        progress: float,
        cycle_kind: GrowthCycleKind,
        moisture: float,
        nutrients: float,
        boost_remaining: float,
        dead_for: float,
    ) -> None:
        """Overwrite mutable state without validation or notification."""
        self._machine.force_state(stage)
        self._progress = progress
        if cycle_kind is GrowthCycleKind.BOOSTED:
            self._cycle = BoostedGrowthCycle(self.growth_config.boost_multiplier)
        else:
            self._cycle = NormalGrowthCycle()
        self.moisture = moisture
        self.nutrients = nutrients
        self.boost_remaining = boost_remaining
        self.dead_for = dead_for

    def __repr__(self) -> str:
        return (
            f"Plant(id={self.id}, species={self.species.value}, stage={self.stage.value}, "
            f"progress={self._progress:.2f})"
        )
