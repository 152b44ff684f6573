"""
Tests for manual and sensor position sources and mode switching.
"""

import pytest

from geocache.cache_core.config_loader import load_config
from geocache.cache_core.game import CoreGame
from geocache.cache_core.grid import CellCoord
from geocache.cache_core.persistence import InMemoryStore
from geocache.cache_core.position_source import (
    ManualPositionSource,
    SensorPositionSource,
    direction_delta,
)


class FakeWatcher:
    """Stands in for a geolocation watch API."""

    def __init__(self, fail_on_start=False, report_error_on_start=False):
        self.fail_on_start = fail_on_start
        self.report_error_on_start = report_error_on_start
        self.on_position = None
        self.on_error = None
        self.subscriptions = 0
        self.cancelled = 0

    def __call__(self, on_position, on_error):
        if self.fail_on_start:
            raise RuntimeError("permission denied")
        self.on_position = on_position
        self.on_error = on_error
        self.subscriptions += 1
        if self.report_error_on_start:
            on_error(RuntimeError("no fix available"))
        return self._cancel

    def _cancel(self):
        self.cancelled += 1

    def emit(self, lat, lng):
        self.on_position(lat, lng)

    def fail(self, error):
        self.on_error(error)


class RecordingSink:
    def __init__(self):
        self.moves = []
        self.failures = []

    def move_by(self, dlat, dlng):
        self.moves.append(("by", dlat, dlng))

    def move_to(self, lat, lng):
        self.moves.append(("to", lat, lng))

    def position_source_failed(self, error):
        self.failures.append(error)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def watcher():
    return FakeWatcher()


@pytest.fixture
def game(config, watcher):
    game = CoreGame(config, store=InMemoryStore(), watch=watcher)
    yield game
    game.close()


class TestManualSource:
    """Test step delivery and lifecycle."""

    def test_step_delivers_tile_delta(self):
        source = ManualPositionSource(0.5)
        sink = RecordingSink()
        source.start(sink)

        assert source.step("north")
        assert source.step("west")
        assert sink.moves == [("by", 0.5, 0.0), ("by", 0.0, -0.5)]

    def test_stopped_source_ignores_steps(self):
        source = ManualPositionSource(1.0)
        sink = RecordingSink()
        source.start(sink)
        source.stop()

        assert not source.step("east")
        assert sink.moves == []
        assert not source.is_active

    def test_unknown_direction(self):
        with pytest.raises(ValueError):
            direction_delta("up", 1.0)


class TestSensorSource:
    """Test subscription teardown and error reporting."""

    def test_forwards_fixes(self, watcher):
        source = SensorPositionSource(watcher)
        sink = RecordingSink()
        source.start(sink)

        watcher.emit(1.0, 2.0)
        assert sink.moves == [("to", 1.0, 2.0)]

    def test_stop_cancels_and_drops_late_fixes(self, watcher):
        source = SensorPositionSource(watcher)
        sink = RecordingSink()
        source.start(sink)
        source.stop()

        watcher.emit(1.0, 2.0)
        assert watcher.cancelled == 1
        assert sink.moves == []

    def test_errors_reported_not_raised(self, watcher):
        source = SensorPositionSource(watcher)
        sink = RecordingSink()
        source.start(sink)

        watcher.fail(RuntimeError("signal lost"))
        assert len(sink.failures) == 1

    def test_start_failure_reported(self):
        source = SensorPositionSource(FakeWatcher(fail_on_start=True))
        sink = RecordingSink()
        source.start(sink)
        assert len(sink.failures) == 1

    def test_error_during_subscription_cancels_handle(self):
        watcher = FakeWatcher(report_error_on_start=True)
        source = SensorPositionSource(watcher)
        sink = RecordingSink()

        # Sink reacts to the failure by stopping the source, as a session does
        sink.position_source_failed = lambda error: source.stop()
        source.start(sink)

        assert watcher.subscriptions == 1
        assert watcher.cancelled == 1
        assert not source.is_active


class TestGameModes:
    """Test mode switching inside a session."""

    def test_default_manual(self, game):
        assert game.position_mode == "manual"
        assert game.step("north")
        assert game.player.cell == CellCoord(1, 0)

    def test_sensor_moves_player(self, game, watcher):
        game.set_position_mode("sensor")
        target = game.grid.cell_center(CellCoord(5, -2))
        watcher.emit(*target)

        assert game.position_mode == "sensor"
        assert game.player.cell == CellCoord(5, -2)
        assert game.generator.center == CellCoord(5, -2)

    def test_manual_steps_ignored_in_sensor_mode(self, game):
        game.set_position_mode("sensor")
        assert not game.step("north")
        assert game.player.cell == CellCoord(0, 0)

    def test_sensor_failure_falls_back_to_manual(self, game, watcher):
        game.set_position_mode("sensor")
        watcher.fail(RuntimeError("signal lost"))

        assert game.position_mode == "manual"
        assert watcher.cancelled == 1
        assert game.step("east")
        assert game.player.cell == CellCoord(0, 1)

    def test_no_updates_after_switching_away(self, game, watcher):
        game.set_position_mode("sensor")
        game.set_position_mode("manual")
        position = game.player.position

        watcher.emit(*game.grid.cell_center(CellCoord(40, 40)))

        assert watcher.cancelled == 1
        assert game.player.position == position

    def test_subscription_failure_falls_back(self, config):
        game = CoreGame(config, store=InMemoryStore(), watch=FakeWatcher(fail_on_start=True))
        game.set_position_mode("sensor")
        assert game.position_mode == "manual"
        assert game.step("north")

    def test_error_during_subscription_releases_watch(self, config):
        watcher = FakeWatcher(report_error_on_start=True)
        game = CoreGame(config, store=InMemoryStore(), watch=watcher)
        game.set_position_mode("sensor")
        game.close()

        assert watcher.subscriptions == 1
        assert watcher.cancelled == 1

        watcher.emit(*game.grid.cell_center(CellCoord(9, 9)))
        assert game.player.cell == CellCoord(0, 0)

    def test_sensor_without_watcher_uses_manual(self, config):
        game = CoreGame(config, store=InMemoryStore())
        game.set_position_mode("sensor")
        assert game.position_mode == "manual"

    def test_unknown_mode(self, game):
        with pytest.raises(ValueError):
            game.set_position_mode("teleport")

    def test_switch_resubscribes(self, game, watcher):
        game.set_position_mode("sensor")
        game.set_position_mode("manual")
        game.set_position_mode("sensor")
        assert watcher.subscriptions == 2
        assert watcher.cancelled == 1
