"""Per-species visual descriptions handed to the rendering side.

The simulation never draws anything. A visual strategy only answers
"which sprite, at what size" for a plant in a given stage, so scenes can
render from read-only views.
"""

from abc import ABC, abstractmethod
from typing import Dict, Tuple

from nursery.plants.species import SPECIES_PROFILES, Species, SpeciesProfile
from nursery.state_machine import PlantStage

# Sprite scale relative to the mature footprint
STAGE_SCALE: Dict[PlantStage, float] = {
    PlantStage.SEED: 0.3,
    PlantStage.GROWING: 0.7,
    PlantStage.RIPE: 1.0,
    PlantStage.DEAD: 0.8,
}


class PlantVisualStrategy(ABC):
    @abstractmethod
    def visual_key(self, stage: PlantStage) -> str:
        """Sprite identifier for ``stage``."""

    @abstractmethod
    def size(self, stage: PlantStage) -> Tuple[int, int]:
        """Sprite (width, height) in pixels for ``stage``."""


class SpeciesVisualStrategy(PlantVisualStrategy):
    """Sprite keys of the form ``"<species>/<stage>"`` scaled by stage."""

    def __init__(self, profile: SpeciesProfile) -> None:
        self._profile = profile

    def visual_key(self, stage: PlantStage) -> str:
        if stage is PlantStage.SEED:
            # All seedlings share one sprite
            return "seedling"
        return f"{self._profile.species.value}/{stage.value}"

    def size(self, stage: PlantStage) -> Tuple[int, int]:
        width, height = self._profile.size
        scale = STAGE_SCALE[stage]
        return max(1, round(width * scale)), max(1, round(height * scale))


_STRATEGIES: Dict[Species, PlantVisualStrategy] = {
    species: SpeciesVisualStrategy(profile) for species, profile in SPECIES_PROFILES.items()
}


def visual_strategy_for(species: Species) -> PlantVisualStrategy:
    """Shared, stateless strategy instance for ``species``."""
    return _STRATEGIES[species]
