"""Tests for snapshot capture, validation and replay."""

import copy

import orjson
import pytest

from nursery.config.simulation_config import SimulationConfig
from nursery.exceptions import SnapshotError
from nursery.persistence import SCHEMA_VERSION, load_snapshot, parse_snapshot
from nursery.simulation import NurserySimulation
from nursery.workers import WorkerRole


def _busy(seed: int = 42) -> NurserySimulation:
    sim = NurserySimulation(SimulationConfig.from_overrides({"seed": seed}))
    for role in WorkerRole:
        sim.hire_worker(role, pay=False)
    for _ in range(6):
        sim.plant_seed()
    return sim


class TestReplay:
    def test_capture_is_pure(self) -> None:
        sim = _busy()
        sim.run(10)
        assert sim.capture_state() == sim.capture_state()

    def test_resume_replays_identically(self) -> None:
        original = _busy()
        original.run(30)
        resumed = NurserySimulation.from_snapshot(original.capture_state())
        assert resumed.fingerprint() == original.fingerprint()

        original.run(120)
        resumed.run(120)

        assert resumed.fingerprint() == original.fingerprint()
        assert resumed.stats.to_dict() == original.stats.to_dict()

    def test_file_round_trip(self, tmp_path) -> None:
        sim = _busy()
        sim.run(20)
        path = sim.save(tmp_path / "saves" / "run.json")

        raw = load_snapshot(path)
        assert raw["schema_version"] == SCHEMA_VERSION
        assert raw["saved_at"]

        loaded = NurserySimulation()
        loaded.load(path)
        assert loaded.fingerprint() == sim.fingerprint()
        assert len(loaded.greenhouse.observers) == 3

    def test_queued_patrol_survives(self) -> None:
        sim = _busy()
        sim.request_patrol(7.0)
        resumed = NurserySimulation.from_snapshot(sim.capture_state())
        assert sum(worker.pending for worker in resumed.workers) == 1
        resumed.step()
        assert resumed.store.is_guarded

    def test_clock_and_experience_survive(self) -> None:
        sim = _busy()
        sim.run(40)
        sim.workers[0].experience = 12
        resumed = NurserySimulation.from_snapshot(sim.capture_state())
        assert str(resumed.clock) == str(sim.clock)
        assert resumed.clock.accumulator == sim.clock.accumulator
        assert resumed.workers[0].experience == 12
        assert resumed.workers[0].level == 2

    def test_fixed_customer_factory_survives(self) -> None:
        sim = _busy()
        sim.set_customer_factory("vip")
        resumed = NurserySimulation.from_snapshot(sim.capture_state())
        assert resumed.config.customers.factory == "vip"
        assert resumed.customers.factory.settings() == {"factory": "vip"}
        assert resumed.fingerprint() == sim.fingerprint()

        sim.run(60)
        resumed.run(60)
        assert resumed.fingerprint() == sim.fingerprint()
        assert set(resumed.stats.arrivals_by_type) <= {"vip"}

    def test_restore_clears_undo_history(self) -> None:
        sim = _busy()
        plant = sim.greenhouse.plants()[0]
        sim.water(plant.id)
        sim.restore_state(sim.capture_state())
        assert sim.undo_last().is_err()


class TestValidation:
    """A bad snapshot raises SnapshotError and leaves the world untouched."""

    @pytest.fixture
    def sim(self):
        sim = _busy()
        sim.run(5)
        return sim

    def _assert_rejected(self, sim: NurserySimulation, data: dict) -> None:
        before = sim.fingerprint()
        with pytest.raises(SnapshotError):
            sim.restore_state(data)
        assert sim.fingerprint() == before

    def test_out_of_range_moisture(self, sim) -> None:
        data = sim.capture_state()
        data["greenhouses"][0]["plants"][0]["moisture"] = 150.0
        self._assert_rejected(sim, data)

    def test_duplicate_plant_ids(self, sim) -> None:
        data = sim.capture_state()
        plants = data["greenhouses"][0]["plants"]
        plants.append(copy.deepcopy(plants[0]))
        self._assert_rejected(sim, data)

    def test_unsupported_schema_version(self, sim) -> None:
        data = sim.capture_state()
        data["schema_version"] = "9.9"
        self._assert_rejected(sim, data)

    def test_progress_past_threshold(self, sim) -> None:
        data = sim.capture_state()
        data["greenhouses"][0]["plants"][0]["progress"] = 1_000_000.0
        self._assert_rejected(sim, data)

    def test_unknown_species(self, sim) -> None:
        data = sim.capture_state()
        data["greenhouses"][0]["plants"][0]["species"] = "cactus"
        self._assert_rejected(sim, data)

    def test_worker_in_unknown_greenhouse(self, sim) -> None:
        data = sim.capture_state()
        data["workers"][0]["greenhouses"] = ["annex"]
        self._assert_rejected(sim, data)

    def test_invalid_config(self, sim) -> None:
        data = sim.capture_state()
        data["config"]["growth"]["seed_threshold"] = -1
        self._assert_rejected(sim, data)

    def test_unknown_config_key(self, sim) -> None:
        data = sim.capture_state()
        data["config"]["weather"] = "rain"
        self._assert_rejected(sim, data)

    def test_truncated_rng_state(self, sim) -> None:
        data = sim.capture_state()
        data["rng_state"][1] = data["rng_state"][1][:10]
        self._assert_rejected(sim, data)

    def test_missing_section(self, sim) -> None:
        data = sim.capture_state()
        del data["store"]
        self._assert_rejected(sim, data)

    def test_stats_of_wrong_shape(self, sim) -> None:
        data = sim.capture_state()
        data["tick"] = 999
        data["stats"] = {"deaths_by_cause": 5}
        self._assert_rejected(sim, data)
        assert sim.tick == 5

    @pytest.mark.parametrize(
        "stats",
        [{"commands_succeeded": "lots"}, {"sales": -1}, {"arrivals_by_type": {"vip": -2}}, {"bribes": 3}],
    )
    def test_corrupt_stats(self, sim, stats) -> None:
        data = sim.capture_state()
        data["stats"] = stats
        counters = sim.stats.to_dict()
        self._assert_rejected(sim, data)
        assert sim.stats.to_dict() == counters

    def test_corrupt_clock(self, sim) -> None:
        data = sim.capture_state()
        data["clock"]["hour"] = 24
        self._assert_rejected(sim, data)

    def test_not_an_object(self) -> None:
        with pytest.raises(SnapshotError):
            parse_snapshot([1, 2, 3])


class TestFiles:
    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(SnapshotError):
            load_snapshot(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(SnapshotError):
            load_snapshot(path)

    def test_top_level_must_be_object(self, tmp_path) -> None:
        path = tmp_path / "list.json"
        path.write_bytes(orjson.dumps([1, 2]))
        with pytest.raises(SnapshotError):
            load_snapshot(path)

    def test_failed_load_keeps_world(self, tmp_path) -> None:
        sim = _busy()
        before = sim.fingerprint()
        path = tmp_path / "broken.json"
        path.write_text("{}")
        with pytest.raises(SnapshotError):
            sim.load(path)
        assert sim.fingerprint() == before
