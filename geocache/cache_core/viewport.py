"""
Viewport Cache Generator
========================

Materializes the caches visible around a center cell by combining the
deterministic luck field with the sparse grid store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from geocache.cache_core.config_loader import GameConfig, get_config
from geocache.cache_core.grid import CellCoord, neighborhood
from geocache.cache_core.grid_store import SparseGridStore
from geocache.cache_core.rng import LuckField

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VisibleCache:
    """One cache currently shown on the map."""
    cell: CellCoord
    value: int


class ViewportCacheGenerator:
    """
    Recomputes the visible cache set.

    Every regenerate() call replaces the previous set outright; there is
    no incremental diff, so arbitrary jumps need no special handling.
    """

    def __init__(
        self,
        store: SparseGridStore,
        field: Optional[LuckField] = None,
        config: Optional[GameConfig] = None
    ):
        """
        Initialize generator.

        Args:
            store: Override store consulted before the luck field.
            field: Luck field. Built from config if None.
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._store = store
        self._field = field if field is not None else LuckField(config)
        self._visible: Dict[CellCoord, VisibleCache] = {}
        self._center: Optional[CellCoord] = None
        self._radius: int = config.viewport.neighborhood_size

    @property
    def visible(self) -> Dict[CellCoord, VisibleCache]:
        """Current visible set, keyed by cell."""
        return dict(self._visible)

    @property
    def center(self) -> Optional[CellCoord]:
        """Center of the last regeneration, or None before the first."""
        return self._center

    @property
    def radius(self) -> int:
        return self._radius

    def value_at(self, cell: CellCoord) -> int:
        """
        Current cache value at a cell: store override first, then default.

        Returns:
            Cache value, or 0 if no cache is present.
        """
        override = self._store.get(cell)
        if override is not None:
            return override
        return self._field.default_value(cell)

    def regenerate(
        self,
        center: CellCoord,
        radius: Optional[int] = None
    ) -> Dict[CellCoord, VisibleCache]:
        """
        Rebuild the visible set around a center cell.

        Args:
            center: Center of the square neighborhood.
            radius: Half-width in cells. Uses the configured size if None.

        Returns:
            New visible set, keyed by cell.
        """
        if radius is None:
            radius = self._config.viewport.neighborhood_size
        center = CellCoord(*center)

        visible: Dict[CellCoord, VisibleCache] = {}
        for cell in neighborhood(center, radius):
            value = self.value_at(cell)
            if value > 0:
                visible[cell] = VisibleCache(cell, value)

        self._visible = visible
        self._center = center
        self._radius = radius
        logger.debug("Regenerated %d caches around %s (radius %d)", len(visible), center, radius)
        return dict(visible)
