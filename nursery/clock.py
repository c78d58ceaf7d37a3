"""In-game day/hour/minute clock.

Simulated seconds are converted to in-game minutes; nights run
``night_speedup`` times faster than days.
"""

import logging
from typing import Optional

from nursery.config.simulation_config import ClockConfig
from nursery.exceptions import PreconditionError

logger = logging.getLogger(__name__)

MINUTES_PER_HOUR = 60
HOURS_PER_DAY = 24


class GameClock:
    """Calendar time of the nursery.

    Attributes:
        day: Day number, starting at 1
        hour: Hour of the day (0-23)
        minute: Minute of the hour (0-59)
        accumulator: Scaled seconds not yet turned into a whole minute
    """

    def __init__(self, config: Optional[ClockConfig] = None) -> None:
        self.config = config or ClockConfig()
        self.day = self.config.start_day
        self.hour = self.config.start_hour
        self.minute = 0
        self.accumulator = 0.0

    @property
    def is_night(self) -> bool:
        start, end = self.config.night_start_hour, self.config.night_end_hour
        if start > end:
            return self.hour >= start or self.hour < end
        return start <= self.hour < end

    def advance(self, elapsed: float) -> int:
        """Move the clock forward by ``elapsed`` simulated seconds.

        Returns the number of whole in-game minutes that passed.
        """
        if elapsed < 0:
            raise PreconditionError(f"elapsed must be non-negative, got {elapsed}")
        speed = self.config.night_speedup if self.is_night else 1
        self.accumulator += elapsed * speed
        minutes = int(self.accumulator // self.config.seconds_per_minute)
        if minutes > 0:
            self.accumulator -= minutes * self.config.seconds_per_minute
            self.add_minutes(minutes)
        return minutes

    def add_minutes(self, minutes: int) -> None:
        day = self.day
        self.minute += minutes
        self.hour += self.minute // MINUTES_PER_HOUR
        self.minute %= MINUTES_PER_HOUR
        self.day += self.hour // HOURS_PER_DAY
        self.hour %= HOURS_PER_DAY
        if self.day != day:
            logger.info(f"Day {self.day} begins")

    def set_time(self, day: int, hour: int, minute: int, accumulator: float = 0.0) -> None:
        """Set the clock directly (snapshot load only)."""
        if day < 1 or not 0 <= hour < HOURS_PER_DAY or not 0 <= minute < MINUTES_PER_HOUR:
            raise PreconditionError(f"Invalid clock time: day {day} {hour:02d}:{minute:02d}")
        if accumulator < 0:
            raise PreconditionError(f"accumulator must be non-negative, got {accumulator}")
        self.day = day
        self.hour = hour
        self.minute = minute
        self.accumulator = accumulator

    def __str__(self) -> str:
        return f"Day {self.day} {self.hour:02d}:{self.minute:02d}"

    def __repr__(self) -> str:
        return f"GameClock(day={self.day}, hour={self.hour}, minute={self.minute})"
