"""Species catalogue.

Each species has a base growth rate (progress units per simulated second
before stage and cycle scaling), the price its produce sells for, and the
footprint of its mature sprite.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple, Union


class Species(Enum):
    """The ten plant species the nursery can grow.

    Values double as inventory keys for harvested produce.
    """

    LETTUCE = "lettuce"
    CARROT = "carrot"
    POTATO = "potato"
    CUCUMBER = "cucumber"
    TOMATO = "tomato"
    PEPPER = "pepper"
    SUNFLOWER = "sunflower"
    STRAWBERRY = "strawberry"
    CORN = "corn"
    PUMPKIN = "pumpkin"

    @classmethod
    def parse(cls, value: Union["Species", str]) -> "Species":
        """Accept a Species or its (case-insensitive) name/value."""
        if isinstance(value, Species):
            return value
        try:
            return cls(value.lower())
        except ValueError:
            raise ValueError(f"Unknown species: {value!r}") from None


@dataclass(frozen=True)
class SpeciesProfile:
    """Static traits of a species.

    Attributes:
        species: The species described
        base_growth_rate: Progress units per second on the Normal cycle
        sell_price: Price of one unit of produce
        size: Mature sprite footprint (width, height) in pixels
    """

    species: Species
    base_growth_rate: float
    sell_price: float
    size: Tuple[int, int]

    @property
    def item_key(self) -> str:
        """Inventory key for this species' produce."""
        return self.species.value


# Faster growers sell for less; pumpkins take longest and pay best.
SPECIES_PROFILES: Dict[Species, SpeciesProfile] = {
    Species.LETTUCE: SpeciesProfile(Species.LETTUCE, 1.6, 15.0, (20, 15)),
    Species.CARROT: SpeciesProfile(Species.CARROT, 1.4, 25.0, (15, 30)),
    Species.POTATO: SpeciesProfile(Species.POTATO, 1.2, 35.0, (18, 20)),
    Species.CUCUMBER: SpeciesProfile(Species.CUCUMBER, 1.1, 45.0, (20, 35)),
    Species.TOMATO: SpeciesProfile(Species.TOMATO, 1.0, 55.0, (25, 25)),
    Species.PEPPER: SpeciesProfile(Species.PEPPER, 0.9, 65.0, (25, 30)),
    Species.SUNFLOWER: SpeciesProfile(Species.SUNFLOWER, 0.8, 80.0, (25, 50)),
    Species.STRAWBERRY: SpeciesProfile(Species.STRAWBERRY, 0.7, 100.0, (25, 15)),
    Species.CORN: SpeciesProfile(Species.CORN, 0.6, 120.0, (20, 55)),
    Species.PUMPKIN: SpeciesProfile(Species.PUMPKIN, 0.5, 200.0, (40, 30)),
}


def profile_for(species: Union[Species, str]) -> SpeciesProfile:
    return SPECIES_PROFILES[Species.parse(species)]
