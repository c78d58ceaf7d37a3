"""Plant creation with simulation-wide id allocation."""

import logging
import random
from typing import Optional, Union

from nursery.config.simulation_config import GrowthConfig
from nursery.plants.plant import Plant
from nursery.plants.species import SPECIES_PROFILES, Species

logger = logging.getLogger(__name__)


class PlantFactory:
    """Creates seeds of a requested species.

    Ids are allocated sequentially and never reused, so a plant id stays a
    stable key for mementos and saved snapshots.
    """

    def __init__(self, growth_config: Optional[GrowthConfig] = None, next_id: int = 1) -> None:
        self.growth_config = growth_config or GrowthConfig()
        self.next_id = next_id

    def create(self, kind: Union[Species, str]) -> Plant:
        """Create a fresh Seed-stage plant of species ``kind``."""
        species = Species.parse(kind)
        plant = Plant(self.next_id, species, growth_config=self.growth_config)
        self.next_id += 1
        logger.debug(f"Created plant {plant.id} ({species.value})")
        return plant


class RandomPlantFactory(PlantFactory):
    """Picks a uniformly random species when none is requested."""

    def __init__(
        self,
        rng: random.Random,
        growth_config: Optional[GrowthConfig] = None,
        next_id: int = 1,
    ) -> None:
        super().__init__(growth_config=growth_config, next_id=next_id)
        self._rng = rng

    def create(self, kind: Union[Species, str, None] = None) -> Plant:
        if kind is None:
            kind = self._rng.choice(list(SPECIES_PROFILES))
        return super().create(kind)
