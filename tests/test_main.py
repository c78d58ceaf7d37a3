"""Tests for the headless command-line entry point."""

import orjson

import main
from nursery.simulation import NurserySimulation


class TestMain:
    def test_short_run(self) -> None:
        assert main.main(["--ticks", "5", "--seed", "1", "--log-level", "WARNING"]) == 0

    def test_save_and_export(self, tmp_path) -> None:
        save_path = tmp_path / "run.json"
        stats_path = tmp_path / "stats.json"
        code = main.main(
            [
                "--ticks", "30",
                "--seed", "2",
                "--auto-plant",
                "--save", str(save_path),
                "--export-stats", str(stats_path),
                "--log-level", "WARNING",
            ]
        )
        assert code == 0
        assert orjson.loads(stats_path.read_bytes())["plants_planted"] >= 1

        resumed = NurserySimulation()
        resumed.load(save_path)
        assert resumed.tick == 30

    def test_bad_snapshot_exits_nonzero(self, tmp_path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("[]")
        assert main.main(["--load", str(path), "--ticks", "1", "--log-level", "WARNING"]) == 1

    def test_replant_keeps_reserve(self) -> None:
        sim = NurserySimulation()
        main.replant(sim, reserve=450.0)
        assert sim.store.funds <= 500.0
        assert sim.store.funds > 450.0 - 80.0
