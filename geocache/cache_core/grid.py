"""
Cell Lattice
============

Maps continuous map coordinates onto the integer cell lattice.

The lattice is anchored at the configured origin: the tile whose south-west
corner is the origin is cell (0, 0). Conversion is a floor division, so it is
only reversible in the cell -> world-bounds direction.
"""

from __future__ import annotations

import math
from typing import Iterator, NamedTuple, Optional, Tuple

from geocache.cache_core.config_loader import GameConfig, get_config


class CellCoord(NamedTuple):
    """Integer lattice coordinate. Hashes and compares by value."""
    i: int
    j: int

    def offset(self, di: int, dj: int) -> "CellCoord":
        return CellCoord(self.i + di, self.j + dj)

    def distance_to(self, other: "CellCoord") -> float:
        """Euclidean distance in cell units."""
        return math.hypot(self.i - other.i, self.j - other.j)

    def key(self) -> str:
        """String form used for persistence and luck keys."""
        return f"{self.i},{self.j}"

    @staticmethod
    def parse(text: str) -> "CellCoord":
        i, j = text.split(",")
        return CellCoord(int(i), int(j))

    def __repr__(self) -> str:
        return f"CellCoord({self.i}, {self.j})"


LatLng = Tuple[float, float]


class CellGrid:
    """
    Converts between map coordinates and cells.

    Rows (i) follow latitude, columns (j) follow longitude.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._origin_lat = config.world.origin_lat
        self._origin_lng = config.world.origin_lng
        self._tile = config.world.tile_degrees

    @property
    def tile_degrees(self) -> float:
        return self._tile

    @property
    def origin(self) -> LatLng:
        return (self._origin_lat, self._origin_lng)

    def cell_for(self, lat: float, lng: float) -> CellCoord:
        """Cell containing the given map coordinate."""
        i = math.floor((lat - self._origin_lat) / self._tile)
        j = math.floor((lng - self._origin_lng) / self._tile)
        return CellCoord(int(i), int(j))

    def cell_bounds(self, cell: CellCoord) -> Tuple[LatLng, LatLng]:
        """
        World bounds of a cell.

        Returns:
            ((south, west), (north, east)) corners.
        """
        south = self._origin_lat + cell.i * self._tile
        west = self._origin_lng + cell.j * self._tile
        return (
            (south, west),
            (south + self._tile, west + self._tile)
        )

    def cell_center(self, cell: CellCoord) -> LatLng:
        """Midpoint of a cell."""
        return (
            self._origin_lat + (cell.i + 0.5) * self._tile,
            self._origin_lng + (cell.j + 0.5) * self._tile
        )


def neighborhood(center: CellCoord, radius: int) -> Iterator[CellCoord]:
    """
    Cells in the half-open square [c - r, c + r) on both axes, row-major.
    """
    for i in range(center.i - radius, center.i + radius):
        for j in range(center.j - radius, center.j + radius):
            yield CellCoord(i, j)
