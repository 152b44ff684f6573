"""
State Snapshot
==============

Packs session state into plain data and a fixed-size numpy grid for map
renderers and tools.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import numpy as np

from geocache.cache_core.config_loader import GameConfig, get_config
from geocache.cache_core.grid import CellCoord, LatLng
from geocache.cache_core.viewport import VisibleCache


@dataclass
class GameSnapshot:
    """
    Session state at one moment.

    value_grid is (2r, 2r) int32, indexed [i - (ci - r), j - (cj - r)] around
    the viewport center (ci, cj); 0 where no cache is visible.
    """
    player_position: LatLng
    player_cell: CellCoord
    inventory: int
    status: str
    wins: int
    position_mode: str

    center: CellCoord
    radius: int
    visible: Dict[CellCoord, int]
    value_grid: np.ndarray

    @property
    def has_won(self) -> bool:
        return self.wins > 0

    def grid_index(self, cell: CellCoord) -> Optional[tuple]:
        """Row/column of a cell in value_grid, or None if outside the viewport."""
        row = cell.i - (self.center.i - self.radius)
        col = cell.j - (self.center.j - self.radius)
        size = 2 * self.radius
        if 0 <= row < size and 0 <= col < size:
            return (row, col)
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-friendly data."""
        return {
            "player_position": list(self.player_position),
            "player_cell": [self.player_cell.i, self.player_cell.j],
            "inventory": self.inventory,
            "status": self.status,
            "wins": self.wins,
            "position_mode": self.position_mode,
            "center": [self.center.i, self.center.j],
            "radius": self.radius,
            "visible": {cell.key(): value for cell, value in sorted(self.visible.items())},
        }


class SnapshotBuilder:
    """Builds GameSnapshot instances."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config

    def build_grid(
        self,
        center: CellCoord,
        radius: int,
        visible: Mapping[CellCoord, VisibleCache]
    ) -> np.ndarray:
        size = 2 * radius
        grid = np.zeros((size, size), dtype=np.int32)
        row0 = center.i - radius
        col0 = center.j - radius
        for cell, cache in visible.items():
            row = cell.i - row0
            col = cell.j - col0
            if 0 <= row < size and 0 <= col < size:
                grid[row, col] = cache.value
        return grid

    def build(
        self,
        player_position: LatLng,
        player_cell: CellCoord,
        inventory: int,
        status: str,
        wins: int,
        position_mode: str,
        center: CellCoord,
        radius: int,
        visible: Mapping[CellCoord, VisibleCache]
    ) -> GameSnapshot:
        return GameSnapshot(
            player_position=player_position,
            player_cell=player_cell,
            inventory=inventory,
            status=status,
            wins=wins,
            position_mode=position_mode,
            center=center,
            radius=radius,
            visible={cell: cache.value for cell, cache in visible.items()},
            value_grid=self.build_grid(center, radius, visible)
        )
