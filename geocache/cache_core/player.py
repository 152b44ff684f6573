"""
Player State
============

Continuous map position plus a single-slot inventory.
"""

from __future__ import annotations

from typing import Optional

from geocache.cache_core.config_loader import GameConfig, get_config
from geocache.cache_core.grid import CellCoord, CellGrid, LatLng


class PlayerState:
    """
    Player position and carried cache value.

    Proximity is measured on the cell lattice, not in meters. The inventory
    is changed only by the interaction machine (via hold/release) and by
    restoring saved state at session start.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        grid: Optional[CellGrid] = None,
        position: Optional[LatLng] = None
    ):
        """
        Initialize player.

        Args:
            config: Game configuration. Uses default if None.
            grid: Lattice converter. Built from config if None.
            position: Starting (lat, lng). Defaults to the origin cell.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._grid = grid if grid is not None else CellGrid(config)

        if position is None:
            if config.player.start_at_cell_center:
                position = self._grid.cell_center(CellCoord(0, 0))
            else:
                position = self._grid.origin

        self._lat, self._lng = float(position[0]), float(position[1])
        self._inventory: int = 0

    @property
    def position(self) -> LatLng:
        return (self._lat, self._lng)

    @property
    def cell(self) -> CellCoord:
        """Cell containing the player."""
        return self._grid.cell_for(self._lat, self._lng)

    @property
    def inventory(self) -> int:
        """Carried value; 0 means empty-handed."""
        return self._inventory

    @property
    def is_carrying(self) -> bool:
        return self._inventory != 0

    def move(self, dlat: float, dlng: float) -> LatLng:
        """Shift position by a map-coordinate offset. No bounds checking."""
        self._lat += dlat
        self._lng += dlng
        return self.position

    def move_to(self, lat: float, lng: float) -> LatLng:
        """Jump to an absolute position (sensor updates)."""
        self._lat = float(lat)
        self._lng = float(lng)
        return self.position

    def distance_to(self, cell: CellCoord) -> float:
        """Euclidean distance in cells from the player's cell to a cell."""
        return self.cell.distance_to(CellCoord(*cell))

    def hold(self, value: int) -> None:
        """Put a value in the inventory slot."""
        if value < 0:
            raise ValueError(f"Inventory must be non-negative, got {value}")
        self._inventory = int(value)

    def release(self) -> int:
        """Empty the inventory slot and return what was carried."""
        value = self._inventory
        self._inventory = 0
        return value

    def __repr__(self) -> str:
        return f"PlayerState(cell={self.cell}, inventory={self._inventory})"
