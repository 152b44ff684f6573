"""
Status Tracking
===============

Tracks the player-facing status line and interaction counters.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from geocache.cache_core.config_loader import GameConfig, get_config

NO_POINTS_MESSAGE = "No points yet..."
MERGED_MESSAGE = "Merged!"


def carrying_message(value: int) -> str:
    return f"You are carrying: {value}"


def win_message(value: int) -> str:
    return f"You win! Reached {value}"


@dataclass
class StatusEvent:
    """Record of a status change."""
    text: str
    value: int
    is_win: bool = False

    def __repr__(self) -> str:
        if self.is_win:
            return f"StatusEvent(win={self.value})"
        return f"StatusEvent({self.text!r})"


class ScoreTracker:
    """
    Counts pick-ups, merges and wins and keeps the current status text.

    A win is recorded once per qualifying merge; recording it never touches
    inventory or the grid store.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize tracker.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._status: str = NO_POINTS_MESSAGE
        self._pickups: int = 0
        self._merges: int = 0
        self._wins: int = 0
        self._best_value: int = 0

    @property
    def status(self) -> str:
        """Current status line."""
        return self._status

    @property
    def pickups(self) -> int:
        return self._pickups

    @property
    def merges(self) -> int:
        return self._merges

    @property
    def wins(self) -> int:
        """Number of merges that reached the score goal."""
        return self._wins

    @property
    def has_won(self) -> bool:
        return self._wins > 0

    @property
    def best_value(self) -> int:
        """Largest value produced by a merge."""
        return self._best_value

    def apply_pickup(self, value: int) -> StatusEvent:
        self._pickups += 1
        self._status = carrying_message(value)
        return StatusEvent(self._status, value)

    def apply_merge(self, merged_value: int) -> StatusEvent:
        self._merges += 1
        self._best_value = max(self._best_value, merged_value)
        self._status = MERGED_MESSAGE
        return StatusEvent(self._status, merged_value)

    def apply_win(self, merged_value: int) -> StatusEvent:
        self._wins += 1
        self._status = win_message(merged_value)
        return StatusEvent(self._status, merged_value, is_win=True)

    def apply_restore(self, inventory: int) -> Optional[StatusEvent]:
        """Reflect a restored inventory in the status line."""
        if inventory == 0:
            return None
        self._status = carrying_message(inventory)
        return StatusEvent(self._status, inventory)

    def reset(self) -> None:
        self._status = NO_POINTS_MESSAGE
        self._pickups = 0
        self._merges = 0
        self._wins = 0
        self._best_value = 0
