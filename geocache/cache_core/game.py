"""
Core Game
=========

Per-session controller owning every piece of mutable game state.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Callable, Deque, Dict, Optional, Tuple

from geocache.cache_core.config_loader import POSITION_MODES, GameConfig, get_config
from geocache.cache_core.grid import CellCoord, CellGrid, LatLng
from geocache.cache_core.grid_store import SparseGridStore
from geocache.cache_core.merge_system import CacheInteractionMachine, InteractionResult
from geocache.cache_core.persistence import (
    KeyValueStore,
    load_inventory,
    make_store,
    save_inventory,
)
from geocache.cache_core.player import PlayerState
from geocache.cache_core.position_source import (
    ManualPositionSource,
    PositionSource,
    SensorPositionSource,
    WatchFn,
)
from geocache.cache_core.rng import LuckField
from geocache.cache_core.scoring import ScoreTracker, StatusEvent
from geocache.cache_core.state_snapshot import GameSnapshot, SnapshotBuilder
from geocache.cache_core.viewport import ViewportCacheGenerator, VisibleCache

logger = logging.getLogger(__name__)

# Queued event: (kind, payload)
_Event = Tuple[str, Tuple[Any, ...]]


class CoreGame:
    """
    Main game session.

    Orchestrates:
    - Player position and inventory
    - Sparse grid store and deterministic luck field
    - Visible cache regeneration
    - Cache interactions and win status
    - Inventory persistence
    - Position input sources

    Events are processed one at a time. Moves and interactions that arrive
    while a regeneration pass is notifying the renderer are queued and run
    after the pass completes, so regeneration never nests inside itself.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        store: Optional[KeyValueStore] = None,
        watch: Optional[WatchFn] = None,
        render_callback: Optional[Callable[[GameSnapshot], None]] = None,
        status_callback: Optional[Callable[[str], None]] = None
    ):
        """
        Initialize a session.

        Args:
            config: Game configuration. Uses default if None.
            store: Persistence backend. Built from config if None.
            watch: Position watcher for sensor mode. Sensor mode falls back
                to manual when this is None.
            render_callback: Called with a snapshot after every regeneration.
            status_callback: Called with the status text when it changes.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._render_callback = render_callback
        self._status_callback = status_callback

        # Initialize subsystems
        self._grid = CellGrid(config)
        self._field = LuckField(config)
        self._grid_store = SparseGridStore()
        self._player = PlayerState(config, self._grid)
        self._generator = ViewportCacheGenerator(self._grid_store, self._field, config)
        self._scorer = ScoreTracker(config)
        self._persistence = store if store is not None else make_store(config.persistence.path)
        self._machine = CacheInteractionMachine(
            player=self._player,
            store=self._grid_store,
            generator=self._generator,
            scorer=self._scorer,
            config=config,
            on_inventory_change=self._save_inventory
        )
        self._snapshot_builder = SnapshotBuilder(config)

        # Event sequencing
        self._pending: Deque[_Event] = deque()
        self._regenerating: bool = False
        self._draining: bool = False
        self._zoom: int = config.viewport.zoom_level

        # Position input
        self._watch = watch
        self._manual = ManualPositionSource(config.tile_degrees)
        self._source: Optional[PositionSource] = None

        self._restore_inventory()
        self.regenerate()
        self.set_position_mode(config.position.mode)

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def grid(self) -> CellGrid:
        return self._grid

    @property
    def field(self) -> LuckField:
        return self._field

    @property
    def grid_store(self) -> SparseGridStore:
        return self._grid_store

    @property
    def player(self) -> PlayerState:
        return self._player

    @property
    def generator(self) -> ViewportCacheGenerator:
        return self._generator

    @property
    def persistence(self) -> KeyValueStore:
        return self._persistence

    @property
    def visible_caches(self) -> Dict[CellCoord, VisibleCache]:
        """Caches currently on the map."""
        return self._generator.visible

    @property
    def inventory(self) -> int:
        return self._player.inventory

    @property
    def status(self) -> str:
        return self._scorer.status

    @property
    def wins(self) -> int:
        """Number of merges that reached the score goal."""
        return self._scorer.wins

    @property
    def has_won(self) -> bool:
        return self._scorer.has_won

    @property
    def zoom(self) -> int:
        return self._zoom

    @property
    def position_mode(self) -> str:
        return self._source.mode if self._source is not None else ""

    # ------------------------------------------------------------------
    # Movement and viewport
    # ------------------------------------------------------------------

    def move_by(self, dlat: float, dlng: float) -> None:
        """Shift the player by a map-coordinate offset, then regenerate."""
        self._submit(("move_by", (dlat, dlng)))

    def move_to(self, lat: float, lng: float) -> None:
        """Place the player at an absolute position, then regenerate."""
        self._submit(("move_to", (lat, lng)))

    def step(self, direction: str) -> bool:
        """
        Move one tile in a direction using the manual source.

        Returns:
            False if manual input is not the active source.
        """
        if self._source is not self._manual:
            return False
        return self._manual.step(direction)

    def on_viewport_changed(
        self,
        lat: float,
        lng: float,
        zoom: Optional[int] = None
    ) -> Dict[CellCoord, VisibleCache]:
        """
        Map adapter notification: the viewport moved.

        Args:
            lat, lng: New viewport center.
            zoom: New zoom level (recorded only; the neighborhood is fixed).

        Returns:
            The regenerated visible set.
        """
        if zoom is not None:
            self._zoom = int(zoom)
        return self.regenerate(self._grid.cell_for(lat, lng))

    def regenerate(self, center: Optional[CellCoord] = None) -> Dict[CellCoord, VisibleCache]:
        """
        Rebuild the visible set.

        Args:
            center: Center cell. Uses the player's cell if None.

        Returns:
            Visible set after this pass and any events it queued.
        """
        center = CellCoord(*center) if center is not None else self._player.cell

        if self._regenerating or self._draining:
            # Nested request from a callback; queue it unless it matches the current center
            if center != self._generator.center:
                self._pending.append(("regenerate", (center,)))
            return self._generator.visible

        self._regenerate_pass(center)
        self._drain()
        return self._generator.visible

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def interact(self, cell: CellCoord) -> Optional[InteractionResult]:
        """
        Click adapter notification: the cache at a cell was activated.

        Returns:
            InteractionResult, or None if the interaction was queued behind
            a running regeneration pass.
        """
        cell = CellCoord(*cell)
        if self._regenerating or self._draining:
            self._pending.append(("interact", (cell,)))
            return None
        return self._interact_now(cell)

    def _interact_now(self, cell: CellCoord) -> InteractionResult:
        # Calls made from the status or render callbacks queue behind this one
        self._draining = True
        try:
            result = self._apply_interaction(cell)
        finally:
            self._draining = False
        self._drain()
        return result

    def _apply_interaction(self, cell: CellCoord) -> InteractionResult:
        result = self._machine.interact(cell)
        if result.mutated:
            self._emit_status(result.status_event)
            self._regenerate_pass(self._view_center())
        return result

    # ------------------------------------------------------------------
    # Position sources
    # ------------------------------------------------------------------

    def set_position_mode(self, mode: str) -> None:
        """
        Switch position input. The old source is stopped before the new one starts.

        Raises:
            ValueError: For an unknown mode name.
        """
        if mode not in POSITION_MODES:
            raise ValueError(f"Unknown position mode '{mode}', expected one of {POSITION_MODES}")

        if self._source is not None:
            self._source.stop()

        if mode == "sensor" and self._watch is None:
            logger.warning("No position sensor available, using manual movement")
            mode = "manual"

        if mode == "sensor":
            source: PositionSource = SensorPositionSource(self._watch)
        else:
            source = self._manual

        self._source = source
        logger.info("Position mode: %s", source.mode)
        source.start(self)

    def position_source_failed(self, error: Exception) -> None:
        """Sensor failure: fall back to manual movement."""
        if self._source is self._manual:
            return
        if self._source is not None:
            self._source.stop()
        self._source = self._manual
        self._manual.start(self)
        logger.info("Falling back to manual movement after sensor error: %s", error)

    def close(self) -> None:
        """Stop the active position source."""
        if self._source is not None:
            self._source.stop()
            self._source = None

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    def snapshot(self) -> GameSnapshot:
        """Build current state snapshot."""
        return self._snapshot_builder.build(
            player_position=self._player.position,
            player_cell=self._player.cell,
            inventory=self._player.inventory,
            status=self._scorer.status,
            wins=self._scorer.wins,
            position_mode=self.position_mode,
            center=self._view_center(),
            radius=self._generator.radius,
            visible=self._generator.visible
        )

    def get_info(self) -> Dict[str, Any]:
        """Summary counters."""
        return {
            "inventory": self._player.inventory,
            "status": self._scorer.status,
            "pickups": self._scorer.pickups,
            "merges": self._scorer.merges,
            "wins": self._scorer.wins,
            "best_value": self._scorer.best_value,
            "visible_caches": len(self._generator.visible),
            "mutated_cells": len(self._grid_store),
            "player_cell": tuple(self._player.cell),
            "position_mode": self.position_mode,
        }

    def cache_value(self, cell: CellCoord) -> int:
        """Current value at any cell, visible or not."""
        return self._generator.value_at(CellCoord(*cell))

    def distance_to(self, cell: CellCoord) -> float:
        return self._player.distance_to(cell)

    def cell_bounds(self, cell: CellCoord) -> Tuple[LatLng, LatLng]:
        return self._grid.cell_bounds(CellCoord(*cell))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _submit(self, event: _Event) -> None:
        self._pending.append(event)
        if not (self._regenerating or self._draining):
            self._drain()

    def _drain(self) -> None:
        if self._draining:
            return
        self._draining = True
        try:
            while self._pending:
                kind, payload = self._pending.popleft()
                if kind == "move_by":
                    self._player.move(*payload)
                    self._regenerate_pass(self._player.cell)
                elif kind == "move_to":
                    self._player.move_to(*payload)
                    self._regenerate_pass(self._player.cell)
                elif kind == "regenerate":
                    self._regenerate_pass(*payload)
                elif kind == "interact":
                    self._apply_interaction(*payload)
        finally:
            self._draining = False

    def _view_center(self) -> CellCoord:
        center = self._generator.center
        return center if center is not None else self._player.cell

    def _regenerate_pass(self, center: CellCoord) -> None:
        self._regenerating = True
        try:
            self._generator.regenerate(center)
            if self._render_callback is not None:
                self._render_callback(self.snapshot())
        finally:
            self._regenerating = False

    def _restore_inventory(self) -> None:
        inventory = load_inventory(self._persistence, self._config.persistence.inventory_key)
        if inventory == 0:
            return
        self._player.hold(inventory)
        logger.info("Restored inventory %d", inventory)
        self._emit_status(self._scorer.apply_restore(inventory))

    def _save_inventory(self, value: int) -> None:
        save_inventory(self._persistence, self._config.persistence.inventory_key, value)

    def _emit_status(self, event: Optional[StatusEvent]) -> None:
        if event is not None and self._status_callback is not None:
            self._status_callback(event.text)
