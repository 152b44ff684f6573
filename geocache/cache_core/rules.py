"""
Game Rules
==========

Handles interaction range gating and the score goal.
"""

from __future__ import annotations

from typing import Optional

from geocache.cache_core.config_loader import GameConfig, get_config
from geocache.cache_core.grid import CellCoord
from geocache.cache_core.player import PlayerState


class RangeRules:
    """
    Decides whether the player can reach a cell.

    Reach is strict: a cell exactly RANGE cells away is out of range.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._range = config.interaction.range

    @property
    def range(self) -> float:
        return self._range

    def in_range(self, player: PlayerState, cell: CellCoord) -> bool:
        return player.distance_to(cell) < self._range


class GoalRules:
    """
    Win condition. Reaching the goal is a status change, not a terminal state.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._score_goal = config.interaction.score_goal

    @property
    def score_goal(self) -> int:
        return self._score_goal

    def is_winning_value(self, value: int) -> bool:
        return value >= self._score_goal


class GameRules:
    """
    Combined interface for all game rules.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize game rules.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self.reach = RangeRules(config)
        self.goal = GoalRules(config)
