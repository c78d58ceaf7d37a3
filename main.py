"""Main entry point for the nursery simulation.

Runs the simulation headless: no rendering, just logged summaries and an
optional stats export or snapshot save.
"""

import argparse
import logging
import sys
from typing import List, Optional

import orjson

from nursery.config.simulation_config import SimulationConfig
from nursery.exceptions import NurseryError
from nursery.logging_config import configure_logging
from nursery.scenes import LogSummaryScene
from nursery.simulation import NurserySimulation

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = ("water", "fertilize", "harvest")


def build_simulation(args: argparse.Namespace) -> NurserySimulation:
    """Create a fresh world, or resume one from ``args.load``."""
    if args.load:
        sim = NurserySimulation()
        sim.load(args.load)
        logger.info(f"Resumed from {args.load} at tick {sim.tick}")
    else:
        config = SimulationConfig.from_overrides({"seed": args.seed, "tick_seconds": args.tick_seconds})
        sim = NurserySimulation(config)
        for role in args.workers:
            hired = sim.hire_worker(role, pay=False)
            if hired.is_err():
                logger.warning(f"Could not hire {role} worker: {hired.error}")
        for _ in range(args.plants):
            planted = sim.plant_seed()
            if planted.is_err():
                logger.warning(f"Stopped planting: {planted.error}")
                break

    sim.scenes.register(LogSummaryScene(every=args.stats_interval))
    sim.scenes.switch_to(LogSummaryScene.name)
    return sim


def replant(sim: NurserySimulation, reserve: float) -> None:
    """Fill free plots with random seeds while funds stay above ``reserve``."""
    greenhouse = sim.greenhouse
    while greenhouse.free_plots > 0 and sim.store.funds > reserve:
        if sim.plant_seed().is_err():
            break


def run_headless(sim: NurserySimulation, ticks: int, auto_plant: bool, reserve: float) -> None:
    for _ in range(ticks):
        sim.step()
        if auto_plant:
            replant(sim, reserve)


def main(argv: Optional[List[str]] = None) -> int:
    """Parse command-line arguments and run the simulation."""
    parser = argparse.ArgumentParser(
        description="Plant Nursery Simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Quick deterministic run
  python main.py --ticks 600 --seed 42

  # Keep the plots full and save the result
  python main.py --ticks 3600 --seed 7 --auto-plant --save runs/day1.json

  # Resume a saved run
  python main.py --load runs/day1.json --ticks 3600
        """,
    )
    parser.add_argument("--ticks", type=int, default=600, help="Ticks to simulate (default: 600)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for deterministic behavior")
    parser.add_argument(
        "--tick-seconds", type=float, default=1.0, help="Simulated seconds per tick (default: 1.0)"
    )
    parser.add_argument("--plants", type=int, default=8, help="Seeds to plant at start (default: 8)")
    parser.add_argument(
        "--workers",
        nargs="*",
        default=list(DEFAULT_WORKERS),
        choices=DEFAULT_WORKERS,
        help="Worker roles hired at start (default: one of each)",
    )
    parser.add_argument("--auto-plant", action="store_true", help="Replant free plots every tick")
    parser.add_argument(
        "--reserve", type=float, default=100.0, help="Funds kept back when auto-planting (default: 100)"
    )
    parser.add_argument(
        "--stats-interval", type=int, default=60, help="Log a summary every N ticks (default: 60)"
    )
    parser.add_argument("--save", metavar="FILENAME", default=None, help="Save a snapshot when done")
    parser.add_argument("--load", metavar="FILENAME", default=None, help="Resume from a snapshot")
    parser.add_argument(
        "--export-stats", metavar="FILENAME", default=None, help="Write run statistics to a JSON file"
    )
    parser.add_argument("--log-level", default=None, help="Log level (default: NURSERY_LOG_LEVEL or INFO)")
    args = parser.parse_args(argv)

    configure_logging(level=args.log_level)

    try:
        sim = build_simulation(args)
        run_headless(sim, args.ticks, args.auto_plant, args.reserve)
        logger.info(f"Finished at tick {sim.tick}, fingerprint {sim.fingerprint()}")
        if args.save:
            sim.save(args.save)
        if args.export_stats:
            with open(args.export_stats, "wb") as f:
                f.write(orjson.dumps(sim.stats.to_dict(), option=orjson.OPT_INDENT_2))
            logger.info(f"Stats exported to {args.export_stats}")
    except NurseryError as e:
        logger.error(f"Simulation failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
