"""
Position Sources
================

Input adapters that move the player.

- ManualPositionSource: discrete one-tile steps from buttons or keys.
- SensorPositionSource: absolute fixes from a geolocation-like watcher.

Only one source is active per session. Sources deliver into a sink (the
session) and must stop delivering once stop() returns.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)

# (di, dj) per direction; i follows latitude, j follows longitude
DIRECTIONS: Dict[str, Tuple[int, int]] = {
    "north": (1, 0),
    "south": (-1, 0),
    "east": (0, 1),
    "west": (0, -1),
}

PositionCallback = Callable[[float, float], None]
ErrorCallback = Callable[[Exception], None]
CancelWatch = Callable[[], None]
# watch(on_position, on_error) subscribes and returns a cancel function
WatchFn = Callable[[PositionCallback, ErrorCallback], CancelWatch]


class PositionSink(Protocol):
    def move_by(self, dlat: float, dlng: float) -> None: ...

    def move_to(self, lat: float, lng: float) -> None: ...

    def position_source_failed(self, error: Exception) -> None: ...


def direction_delta(direction: str, tile_degrees: float) -> Tuple[float, float]:
    """
    Map-coordinate offset for one step.

    Raises:
        ValueError: For an unknown direction name.
    """
    try:
        di, dj = DIRECTIONS[direction]
    except KeyError:
        raise ValueError(
            f"Unknown direction '{direction}', expected one of {sorted(DIRECTIONS)}"
        ) from None
    return (di * tile_degrees, dj * tile_degrees)


class PositionSource(ABC):
    """Start/stop lifecycle shared by all sources."""

    mode: str = ""

    def __init__(self):
        self._sink: Optional[PositionSink] = None

    @property
    def is_active(self) -> bool:
        return self._sink is not None

    @abstractmethod
    def start(self, sink: PositionSink) -> None:
        """Begin delivering updates to the sink."""

    @abstractmethod
    def stop(self) -> None:
        """Stop delivering updates. Safe to call when already stopped."""


class ManualPositionSource(PositionSource):
    """Moves the player one tile per step while active."""

    mode = "manual"

    def __init__(self, tile_degrees: float):
        super().__init__()
        self._tile = tile_degrees

    def start(self, sink: PositionSink) -> None:
        self._sink = sink

    def stop(self) -> None:
        self._sink = None

    def step(self, direction: str) -> bool:
        """
        Move one tile in a direction.

        Returns:
            True if the step was delivered, False if the source is stopped.
        """
        dlat, dlng = direction_delta(direction, self._tile)
        if self._sink is None:
            return False
        self._sink.move_by(dlat, dlng)
        return True


class SensorPositionSource(PositionSource):
    """
    Follows a position watcher.

    Errors raised while subscribing, or reported through the watcher's
    error callback, are handed to the sink's position_source_failed()
    and never propagate.
    """

    mode = "sensor"

    def __init__(self, watch: WatchFn):
        super().__init__()
        self._watch = watch
        self._cancel: Optional[CancelWatch] = None

    def start(self, sink: PositionSink) -> None:
        self._sink = sink
        try:
            cancel = self._watch(self._on_position, self._on_error)
        except Exception as e:
            self._on_error(e)
            return
        if self._sink is None:
            # Stopped by an error reported during subscription
            if cancel is not None:
                cancel()
            return
        self._cancel = cancel

    def stop(self) -> None:
        cancel = self._cancel
        self._cancel = None
        self._sink = None
        if cancel is not None:
            cancel()

    def _on_position(self, lat: float, lng: float) -> None:
        # Late callbacks after stop() are dropped
        if self._sink is None:
            return
        self._sink.move_to(lat, lng)

    def _on_error(self, error: Exception) -> None:
        sink = self._sink
        if sink is None:
            return
        logger.warning("Position sensor failed: %s", error)
        sink.position_source_failed(error)
