"""Scenes: consumers of world views.

The simulation hands the active scene a fresh WorldView at the end of
every tick. Scenes never get the simulation itself, so nothing they do
can change the world. Rendering scenes live outside this package; the
ones here serve headless runs and tests.
"""

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, Dict, List, Optional

from nursery.exceptions import PreconditionError
from nursery.result import Err, Ok, Result
from nursery.views import WorldView

logger = logging.getLogger(__name__)


class Scene(ABC):
    name: str = "scene"

    def on_enter(self) -> None:
        pass

    def on_exit(self) -> None:
        pass

    @abstractmethod
    def update(self, view: WorldView) -> None:
        """Consume the view for the tick that just finished."""


class HeadlessScene(Scene):
    """Keeps the most recent views in memory."""

    name = "headless"

    def __init__(self, keep: int = 1) -> None:
        self._views: Deque[WorldView] = deque(maxlen=keep)
        self.updates = 0

    @property
    def last_view(self) -> Optional[WorldView]:
        return self._views[-1] if self._views else None

    @property
    def views(self) -> List[WorldView]:
        return list(self._views)

    def update(self, view: WorldView) -> None:
        self._views.append(view)
        self.updates += 1


class LogSummaryScene(Scene):
    """Logs a one-line summary every ``every`` ticks."""

    name = "log_summary"

    def __init__(self, every: int = 60) -> None:
        if every <= 0:
            raise PreconditionError(f"every must be positive, got {every}")
        self.every = every

    def update(self, view: WorldView) -> None:
        if view.tick % self.every:
            return
        stages: Dict[str, int] = {}
        for plant in view.plants:
            stages[plant.stage] = stages.get(plant.stage, 0) + 1
        stock = sum(item.quantity for item in view.inventory)
        logger.info(
            f"tick {view.tick} (day {view.day} {view.hour:02d}:{view.minute:02d}): "
            f"funds ${view.funds:.2f}, rating {view.rating:.1f}, "
            f"plants {stages or '{}'}, stock {stock}, customers {len(view.customers)}"
        )


class SceneManager:
    """Registry of scenes with one active at a time."""

    def __init__(self) -> None:
        self._scenes: Dict[str, Scene] = {}
        self._active: Optional[Scene] = None

    def register(self, scene: Scene) -> None:
        if scene.name in self._scenes:
            raise PreconditionError(f"Scene {scene.name!r} already registered")
        self._scenes[scene.name] = scene

    @property
    def active(self) -> Optional[Scene]:
        return self._active

    @property
    def names(self) -> List[str]:
        return sorted(self._scenes)

    def switch_to(self, name: str) -> Result[Scene, str]:
        scene = self._scenes.get(name)
        if scene is None:
            return Err(f"No scene named {name!r}")
        if self._active is not None:
            self._active.on_exit()
        self._active = scene
        scene.on_enter()
        logger.debug(f"Switched to scene {name}")
        return Ok(scene)

    def update(self, view: WorldView) -> None:
        if self._active is not None:
            self._active.update(view)
