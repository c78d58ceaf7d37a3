"""Simulation configuration dataclasses.

Defaults come from the constant modules in this package. Callers tweak a
run through ``SimulationConfig.from_overrides`` with a nested mapping:

    config = SimulationConfig.from_overrides({
        "seed": 7,
        "growth": {"seed_threshold": 10.0},
        "customers": {"spawn_weights": {"regular": 1.0, "vip": 0.0, "robber": 0.0}},
    })
"""

from dataclasses import dataclass, field, fields, is_dataclass, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from nursery.config.clock import (
    NIGHT_END_HOUR,
    NIGHT_SPEEDUP,
    NIGHT_START_HOUR,
    SECONDS_PER_GAME_MINUTE,
    START_DAY,
    START_HOUR,
)
from nursery.config.customers import (
    CUSTOMER_FACTORY,
    MAX_CUSTOMERS,
    RANDOM_CUSTOMER_FACTORY,
    REGULAR_BROWSE_CHANCE,
    REGULAR_PATIENCE,
    REGULAR_QUANTITY,
    ROBBER_CASH_CAP,
    ROBBER_CASH_RATIO,
    ROBBER_MAX_HAUL,
    ROBBER_PATIENCE,
    SPAWN_INTERVAL,
    SPAWN_WEIGHTS,
    VIP_DISCOUNT,
    VIP_PATIENCE,
    VIP_QUANTITY,
)
from nursery.config.economy import (
    COMMAND_LOG_SIZE,
    HARVEST_YIELD,
    MAX_RATING,
    MAX_UNDO_HISTORY,
    PATROL_DURATION,
    RATING_FAILED_SALE_LOSS,
    RATING_SALE_GAIN,
    RATING_THEFT_LOSS,
    RATING_VIP_SALE_GAIN,
    SEED_PRICE_RATIO,
    STARTING_FUNDS,
    STARTING_RATING,
    WORKER_HIRE_COSTS,
    WORKER_LEVEL_BONUS,
    WORKER_LEVEL_UP_COMMANDS,
    WORKER_MAX_LEVEL,
)
from nursery.config.plants import (
    BOOST_DURATION,
    BOOST_MULTIPLIER,
    DEAD_PLANT_EXPIRY,
    FERTILIZE_AMOUNT,
    GREENHOUSE_CAPACITY,
    GREENHOUSE_MAX_CAPACITY,
    GROWING_STAGE_THRESHOLD,
    INITIAL_MOISTURE,
    INITIAL_NUTRIENTS,
    LOW_RESOURCE_LEVEL,
    LOW_RESOURCE_VIGOR,
    RIPE_STAGE_THRESHOLD,
    SEED_STAGE_THRESHOLD,
    WATER_AMOUNT,
    WATER_WORKER_MOISTURE_CEILING,
)
from nursery.exceptions import ConfigurationError


@dataclass
class GrowthConfig:
    """Plant growth and resource tuning."""

    seed_threshold: float = SEED_STAGE_THRESHOLD
    growing_threshold: float = GROWING_STAGE_THRESHOLD
    ripe_threshold: float = RIPE_STAGE_THRESHOLD
    boost_multiplier: float = BOOST_MULTIPLIER
    boost_duration: float = BOOST_DURATION
    initial_moisture: float = INITIAL_MOISTURE
    initial_nutrients: float = INITIAL_NUTRIENTS
    low_resource_level: float = LOW_RESOURCE_LEVEL
    low_resource_vigor: float = LOW_RESOURCE_VIGOR
    consume_resources: bool = True
    dead_plant_expiry: float = DEAD_PLANT_EXPIRY
    water_amount: float = WATER_AMOUNT
    fertilize_amount: float = FERTILIZE_AMOUNT
    water_worker_ceiling: float = WATER_WORKER_MOISTURE_CEILING

    def validate(self) -> None:
        for name in ("seed_threshold", "growing_threshold", "ripe_threshold"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"growth.{name} must be positive")
        if self.boost_multiplier < 1.0:
            raise ConfigurationError("growth.boost_multiplier must be >= 1.0")
        if self.boost_duration < 0 or self.dead_plant_expiry < 0:
            raise ConfigurationError("growth durations must be non-negative")
        for name in ("initial_moisture", "initial_nutrients"):
            if not 0 < getattr(self, name) <= 100:
                raise ConfigurationError(f"growth.{name} must be in (0, 100]")


@dataclass
class GreenhouseConfig:
    """Plot capacity of a greenhouse."""

    capacity: int = GREENHOUSE_CAPACITY
    max_capacity: int = GREENHOUSE_MAX_CAPACITY

    def validate(self) -> None:
        if self.capacity <= 0:
            raise ConfigurationError("greenhouse.capacity must be positive")
        if self.capacity > self.max_capacity:
            raise ConfigurationError("greenhouse.capacity exceeds max_capacity")


@dataclass
class EconomyConfig:
    """Store funds, pricing and rating tuning."""

    starting_funds: float = STARTING_FUNDS
    seed_price_ratio: float = SEED_PRICE_RATIO
    harvest_yield: int = HARVEST_YIELD
    starting_rating: float = STARTING_RATING
    max_rating: float = MAX_RATING
    rating_sale_gain: float = RATING_SALE_GAIN
    rating_vip_sale_gain: float = RATING_VIP_SALE_GAIN
    rating_failed_sale_loss: float = RATING_FAILED_SALE_LOSS
    rating_theft_loss: float = RATING_THEFT_LOSS
    patrol_duration: float = PATROL_DURATION
    worker_hire_costs: Dict[str, float] = field(default_factory=lambda: dict(WORKER_HIRE_COSTS))
    command_log_size: int = COMMAND_LOG_SIZE
    max_undo_history: int = MAX_UNDO_HISTORY
    worker_level_up_commands: int = WORKER_LEVEL_UP_COMMANDS
    worker_max_level: int = WORKER_MAX_LEVEL
    worker_level_bonus: float = WORKER_LEVEL_BONUS

    def validate(self) -> None:
        if self.starting_funds < 0:
            raise ConfigurationError("economy.starting_funds must be non-negative")
        if self.harvest_yield <= 0:
            raise ConfigurationError("economy.harvest_yield must be positive")
        if not 0 <= self.starting_rating <= self.max_rating:
            raise ConfigurationError("economy.starting_rating must be within [0, max_rating]")
        if self.max_undo_history <= 0 or self.command_log_size <= 0:
            raise ConfigurationError("history sizes must be positive")
        if self.worker_level_up_commands <= 0 or self.worker_max_level < 1:
            raise ConfigurationError("worker levelling settings must be positive")
        if self.worker_level_bonus < 0:
            raise ConfigurationError("economy.worker_level_bonus must be non-negative")


@dataclass
class CustomerConfig:
    """Customer arrival and behaviour tuning."""

    spawn_interval: float = SPAWN_INTERVAL
    max_customers: int = MAX_CUSTOMERS
    factory: str = CUSTOMER_FACTORY
    spawn_weights: Dict[str, float] = field(default_factory=lambda: dict(SPAWN_WEIGHTS))
    regular_patience: float = REGULAR_PATIENCE
    vip_patience: float = VIP_PATIENCE
    robber_patience: float = ROBBER_PATIENCE
    regular_quantity: Tuple[int, int] = REGULAR_QUANTITY
    vip_quantity: Tuple[int, int] = VIP_QUANTITY
    regular_browse_chance: float = REGULAR_BROWSE_CHANCE
    vip_discount: float = VIP_DISCOUNT
    robber_max_haul: int = ROBBER_MAX_HAUL
    robber_cash_ratio: float = ROBBER_CASH_RATIO
    robber_cash_cap: float = ROBBER_CASH_CAP

    def validate(self) -> None:
        if self.spawn_interval <= 0:
            raise ConfigurationError("customers.spawn_interval must be positive")
        if self.max_customers < 0:
            raise ConfigurationError("customers.max_customers must be non-negative")
        if self.factory != RANDOM_CUSTOMER_FACTORY and self.factory not in SPAWN_WEIGHTS:
            raise ConfigurationError(f"Unknown customer factory: {self.factory!r}")
        unknown = set(self.spawn_weights) - set(SPAWN_WEIGHTS)
        if unknown:
            raise ConfigurationError(f"Unknown customer types in spawn_weights: {sorted(unknown)}")
        if any(w < 0 for w in self.spawn_weights.values()) or sum(self.spawn_weights.values()) <= 0:
            raise ConfigurationError("customers.spawn_weights must be non-negative with a positive total")
        if not 0 <= self.vip_discount < 1:
            raise ConfigurationError("customers.vip_discount must be in [0, 1)")
        if not 0 <= self.regular_browse_chance <= 1:
            raise ConfigurationError("customers.regular_browse_chance must be in [0, 1]")
        for name in ("regular_quantity", "vip_quantity"):
            low, high = getattr(self, name)
            if low <= 0 or high < low:
                raise ConfigurationError(f"customers.{name} must be a positive (low, high) range")
        if self.robber_max_haul <= 0:
            raise ConfigurationError("customers.robber_max_haul must be positive")


@dataclass
class ClockConfig:
    """In-game day/hour/minute clock."""

    start_day: int = START_DAY
    start_hour: int = START_HOUR
    seconds_per_minute: float = SECONDS_PER_GAME_MINUTE
    night_start_hour: int = NIGHT_START_HOUR
    night_end_hour: int = NIGHT_END_HOUR
    night_speedup: int = NIGHT_SPEEDUP

    def validate(self) -> None:
        if self.start_day < 1:
            raise ConfigurationError("clock.start_day must be at least 1")
        for name in ("start_hour", "night_start_hour", "night_end_hour"):
            if not 0 <= getattr(self, name) < 24:
                raise ConfigurationError(f"clock.{name} must be in [0, 24)")
        if self.seconds_per_minute <= 0:
            raise ConfigurationError("clock.seconds_per_minute must be positive")
        if self.night_speedup < 1:
            raise ConfigurationError("clock.night_speedup must be at least 1")


@dataclass
class SimulationConfig:
    """Top-level configuration for a nursery run.

    Attributes:
        tick_seconds: Simulated seconds per ``step()``.
        seed: Seed for the simulation RNG (None for nondeterministic runs).
    """

    tick_seconds: float = 1.0
    seed: Optional[int] = None
    growth: GrowthConfig = field(default_factory=GrowthConfig)
    greenhouse: GreenhouseConfig = field(default_factory=GreenhouseConfig)
    economy: EconomyConfig = field(default_factory=EconomyConfig)
    customers: CustomerConfig = field(default_factory=CustomerConfig)
    clock: ClockConfig = field(default_factory=ClockConfig)

    def validate(self) -> None:
        if self.tick_seconds <= 0:
            raise ConfigurationError("tick_seconds must be positive")
        self.growth.validate()
        self.greenhouse.validate()
        self.economy.validate()
        self.customers.validate()
        self.clock.validate()

    @classmethod
    def from_overrides(cls, overrides: Optional[Mapping[str, Any]] = None) -> "SimulationConfig":
        """Build a validated config from defaults plus ``overrides``.

        Raises:
            ConfigurationError: On unknown keys or invalid values
        """
        config = _apply_overrides(cls(), overrides or {}, path="")
        config.validate()
        return config


def _apply_overrides(target: Any, overrides: Mapping[str, Any], path: str) -> Any:
    known = {f.name: f for f in fields(target)}
    changes: Dict[str, Any] = {}
    for key, value in overrides.items():
        if key not in known:
            raise ConfigurationError(f"Unknown config key: {path}{key}")
        current = getattr(target, key)
        if is_dataclass(current):
            if not isinstance(value, Mapping):
                raise ConfigurationError(f"Config section {path}{key} expects a mapping")
            changes[key] = _apply_overrides(current, value, path=f"{path}{key}.")
        elif isinstance(current, tuple):
            changes[key] = tuple(value)
        elif isinstance(current, dict):
            changes[key] = dict(value)
        else:
            changes[key] = value
    return replace(target, **changes)
