"""Tests for growth cycles, species profiles and plant factories."""

import random

import pytest

from nursery.plants import (
    SPECIES_PROFILES,
    BoostedGrowthCycle,
    GrowthCycleKind,
    NormalGrowthCycle,
    PlantFactory,
    RandomPlantFactory,
    Species,
)
from nursery.plants.growth_cycle import create_growth_cycle
from nursery.plants.species import profile_for
from nursery.plants.visual_strategy import visual_strategy_for
from nursery.state_machine import PlantStage


class TestGrowthCycles:
    def test_normal_keeps_base_rate(self) -> None:
        assert NormalGrowthCycle().scale(1.4) == pytest.approx(1.4)

    def test_boosted_scales_base_rate(self) -> None:
        assert BoostedGrowthCycle(2.0).scale(1.4) == pytest.approx(2.8)
        assert BoostedGrowthCycle(3.0).multiplier == 3.0

    def test_equality_by_kind_and_multiplier(self) -> None:
        assert NormalGrowthCycle() == NormalGrowthCycle()
        assert BoostedGrowthCycle(2.0) == BoostedGrowthCycle(2.0)
        assert BoostedGrowthCycle(2.0) != BoostedGrowthCycle(3.0)
        assert NormalGrowthCycle() != BoostedGrowthCycle(1.0)

    def test_create_growth_cycle(self) -> None:
        assert create_growth_cycle(GrowthCycleKind.NORMAL).kind is GrowthCycleKind.NORMAL
        assert create_growth_cycle(GrowthCycleKind.BOOSTED, 2.5) == BoostedGrowthCycle(2.5)


class TestSpecies:
    def test_ten_species_with_profiles(self) -> None:
        assert len(Species) == 10
        assert set(SPECIES_PROFILES) == set(Species)

    def test_parse_accepts_names_and_values(self) -> None:
        assert Species.parse("Tomato") is Species.TOMATO
        assert Species.parse(Species.CORN) is Species.CORN

    def test_item_key_is_species_value(self) -> None:
        assert profile_for("pumpkin").item_key == "pumpkin"

    def test_seedlings_share_a_sprite(self) -> None:
        assert visual_strategy_for(Species.CORN).visual_key(PlantStage.SEED) == "seedling"
        assert visual_strategy_for(Species.CORN).visual_key(PlantStage.RIPE) == "corn/ripe"

    def test_sprite_grows_with_stage(self) -> None:
        strategy = visual_strategy_for(Species.TOMATO)
        assert strategy.size(PlantStage.RIPE) == (25, 25)
        seed_w, seed_h = strategy.size(PlantStage.SEED)
        assert seed_w < 25 and seed_h < 25


class TestPlantFactories:
    def test_sequential_ids(self, plant_factory) -> None:
        first = plant_factory.create(Species.CARROT)
        second = plant_factory.create("tomato")
        assert (first.id, second.id) == (1, 2)
        assert second.species is Species.TOMATO
        assert first.stage is PlantStage.SEED

    def test_next_id_is_respected(self) -> None:
        factory = PlantFactory(next_id=40)
        assert factory.create(Species.CORN).id == 40
        assert factory.next_id == 41

    def test_random_factory_is_seeded(self) -> None:
        a = RandomPlantFactory(random.Random(7))
        b = RandomPlantFactory(random.Random(7))
        assert [a.create().species for _ in range(8)] == [b.create().species for _ in range(8)]

    def test_random_factory_honours_requested_species(self, seeded_rng) -> None:
        factory = RandomPlantFactory(seeded_rng)
        assert factory.create(Species.PEPPER).species is Species.PEPPER
