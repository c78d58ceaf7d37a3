"""Plant domain: species, lifecycle stages, growth cycles and factories."""

from nursery.plants.growth_cycle import (
    BoostedGrowthCycle,
    GrowthCycle,
    GrowthCycleKind,
    NormalGrowthCycle,
    create_growth_cycle,
)
from nursery.plants.plant import Plant
from nursery.plants.plant_factory import PlantFactory, RandomPlantFactory
from nursery.plants.species import SPECIES_PROFILES, Species, SpeciesProfile

__all__ = [
    "BoostedGrowthCycle",
    "GrowthCycle",
    "GrowthCycleKind",
    "NormalGrowthCycle",
    "Plant",
    "PlantFactory",
    "RandomPlantFactory",
    "SPECIES_PROFILES",
    "Species",
    "SpeciesProfile",
    "create_growth_cycle",
]
