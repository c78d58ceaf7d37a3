"""Growth-rate strategies.

A GrowthCycle only scales a plant's base rate. It holds no per-plant
state, so swapping cycles never touches the plant's stage or progress.
"""

from abc import ABC, abstractmethod
from enum import Enum

from nursery.config.plants import BOOST_MULTIPLIER, NORMAL_MULTIPLIER


class GrowthCycleKind(Enum):
    NORMAL = "normal"
    BOOSTED = "boosted"


class GrowthCycle(ABC):
    """Policy that turns a species base rate into an effective rate."""

    kind: GrowthCycleKind

    @property
    @abstractmethod
    def multiplier(self) -> float:
        """Factor applied to the species base rate."""

    def scale(self, base_rate: float) -> float:
        return base_rate * self.multiplier

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GrowthCycle):
            return NotImplemented
        return self.kind == other.kind and self.multiplier == other.multiplier

    def __hash__(self) -> int:
        return hash((self.kind, self.multiplier))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(multiplier={self.multiplier})"


class NormalGrowthCycle(GrowthCycle):
    kind = GrowthCycleKind.NORMAL

    @property
    def multiplier(self) -> float:
        return NORMAL_MULTIPLIER


class BoostedGrowthCycle(GrowthCycle):
    """Fertilized growth: the base rate scaled by ``boost_multiplier``."""

    kind = GrowthCycleKind.BOOSTED

    def __init__(self, boost_multiplier: float = BOOST_MULTIPLIER) -> None:
        self._multiplier = boost_multiplier

    @property
    def multiplier(self) -> float:
        return self._multiplier


def create_growth_cycle(kind: GrowthCycleKind, boost_multiplier: float = BOOST_MULTIPLIER) -> GrowthCycle:
    """Build the cycle for ``kind`` (used when restoring saved plants)."""
    if kind is GrowthCycleKind.BOOSTED:
        return BoostedGrowthCycle(boost_multiplier)
    return NormalGrowthCycle()
