"""Tests for scenes and the scene manager."""

import logging

import pytest

from nursery.exceptions import PreconditionError
from nursery.scenes import HeadlessScene, LogSummaryScene, SceneManager
from nursery.views import WorldView


def _view(tick: int) -> WorldView:
    return WorldView(tick=tick, elapsed=float(tick), day=1, hour=6, minute=0, funds=500.0, rating=3.0, guarded=False)


class TestSceneManager:
    def test_no_active_scene_by_default(self) -> None:
        manager = SceneManager()
        assert manager.active is None
        manager.update(_view(1))

    def test_switch_to(self) -> None:
        manager = SceneManager()
        headless = HeadlessScene()
        manager.register(headless)
        manager.register(LogSummaryScene())

        assert manager.switch_to("headless").unwrap() is headless
        assert manager.active is headless
        assert manager.names == ["headless", "log_summary"]

    def test_switch_to_unknown(self) -> None:
        result = SceneManager().switch_to("menu")
        assert result.is_err()

    def test_duplicate_registration(self) -> None:
        manager = SceneManager()
        manager.register(HeadlessScene())
        with pytest.raises(PreconditionError):
            manager.register(HeadlessScene())

    def test_enter_and_exit_hooks(self) -> None:
        events = []

        class Tracking(HeadlessScene):
            def __init__(self, name: str) -> None:
                super().__init__()
                self.name = name

            def on_enter(self) -> None:
                events.append(("enter", self.name))

            def on_exit(self) -> None:
                events.append(("exit", self.name))

        manager = SceneManager()
        manager.register(Tracking("a"))
        manager.register(Tracking("b"))
        manager.switch_to("a")
        manager.switch_to("b")
        assert events == [("enter", "a"), ("exit", "a"), ("enter", "b")]


class TestScenes:
    def test_headless_keeps_recent_views(self) -> None:
        scene = HeadlessScene(keep=2)
        for tick in range(1, 5):
            scene.update(_view(tick))
        assert [v.tick for v in scene.views] == [3, 4]
        assert scene.updates == 4

    def test_log_summary_interval(self, caplog) -> None:
        scene = LogSummaryScene(every=2)
        with caplog.at_level(logging.INFO, logger="nursery.scenes"):
            for tick in range(1, 5):
                scene.update(_view(tick))
        summaries = [r.getMessage() for r in caplog.records if r.name == "nursery.scenes"]
        assert len(summaries) == 2
        assert summaries[0].startswith("tick 2 (day 1 06:00):")

    def test_log_summary_needs_positive_interval(self) -> None:
        with pytest.raises(PreconditionError):
            LogSummaryScene(every=0)
