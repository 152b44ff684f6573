"""
Cache Interaction
=================

State machine for player interactions with caches: pick-up, merge and
rejection, plus the win signal.

Per cell the machine sees one of two states, Present(value) or Empty.
Out-of-range, rejected-merge and empty-cell interactions are no-ops that
leave player, store and status untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from geocache.cache_core.config_loader import GameConfig, get_config
from geocache.cache_core.grid import CellCoord
from geocache.cache_core.grid_store import SparseGridStore
from geocache.cache_core.player import PlayerState
from geocache.cache_core.rules import GameRules
from geocache.cache_core.scoring import ScoreTracker, StatusEvent
from geocache.cache_core.viewport import ViewportCacheGenerator

logger = logging.getLogger(__name__)


class InteractionOutcome(Enum):
    PICKED_UP = "picked_up"
    MERGED = "merged"
    OUT_OF_RANGE = "out_of_range"
    REJECTED = "rejected"
    EMPTY = "empty"


@dataclass(frozen=True)
class CacheState:
    """Present(value) when value > 0, otherwise Empty."""
    value: int

    @property
    def present(self) -> bool:
        return self.value > 0

    def __repr__(self) -> str:
        return f"Present({self.value})" if self.present else "Empty"


@dataclass
class InteractionResult:
    """Result of a single interaction."""
    outcome: InteractionOutcome
    cell: CellCoord
    cache_before: int
    cache_after: int
    inventory: int
    status_event: Optional[StatusEvent] = None
    won: bool = False

    @property
    def mutated(self) -> bool:
        """True if the interaction changed player or store state."""
        return self.outcome in (InteractionOutcome.PICKED_UP, InteractionOutcome.MERGED)


class CacheInteractionMachine:
    """
    Applies pick-up and merge transitions.

    Reads cache values through the viewport generator (store override, then
    luck default) and writes results back to the store only.
    """

    def __init__(
        self,
        player: PlayerState,
        store: SparseGridStore,
        generator: ViewportCacheGenerator,
        scorer: ScoreTracker,
        config: Optional[GameConfig] = None,
        on_inventory_change: Optional[Callable[[int], None]] = None
    ):
        """
        Initialize interaction machine.

        Args:
            player: Player whose inventory is read and written.
            store: Override store receiving results.
            generator: Source of current cache values.
            scorer: Status tracker.
            config: Game configuration. Uses default if None.
            on_inventory_change: Called with the new inventory after every
                pick-up or merge (persistence hook).
        """
        if config is None:
            config = get_config()

        self._config = config
        self._player = player
        self._store = store
        self._generator = generator
        self._scorer = scorer
        self._rules = GameRules(config)
        self._on_inventory_change = on_inventory_change

    @property
    def rules(self) -> GameRules:
        return self._rules

    def state_of(self, cell: CellCoord) -> CacheState:
        return CacheState(self._generator.value_at(CellCoord(*cell)))

    def interact(self, cell: CellCoord) -> InteractionResult:
        """
        Handle a player activating the cache at a cell.

        Args:
            cell: Cell of the activated cache.

        Returns:
            InteractionResult describing the transition (or no-op).
        """
        cell = CellCoord(*cell)
        state = self.state_of(cell)
        inventory = self._player.inventory

        if not self._rules.reach.in_range(self._player, cell):
            return self._noop(InteractionOutcome.OUT_OF_RANGE, cell, state)

        if not state.present:
            return self._noop(InteractionOutcome.EMPTY, cell, state)

        if inventory == 0:
            return self._pick_up(cell, state.value)

        if inventory == state.value:
            return self._merge(cell, state.value)

        logger.debug("Rejected merge at %s: carrying %d, cache holds %d", cell, inventory, state.value)
        return self._noop(InteractionOutcome.REJECTED, cell, state)

    def _noop(
        self,
        outcome: InteractionOutcome,
        cell: CellCoord,
        state: CacheState
    ) -> InteractionResult:
        return InteractionResult(
            outcome=outcome,
            cell=cell,
            cache_before=state.value,
            cache_after=state.value,
            inventory=self._player.inventory
        )

    def _pick_up(self, cell: CellCoord, value: int) -> InteractionResult:
        self._store.set(cell, 0)
        self._player.hold(value)
        event = self._scorer.apply_pickup(value)
        logger.info("Picked up %d at %s", value, cell)
        self._notify_inventory()

        return InteractionResult(
            outcome=InteractionOutcome.PICKED_UP,
            cell=cell,
            cache_before=value,
            cache_after=0,
            inventory=self._player.inventory,
            status_event=event
        )

    def _merge(self, cell: CellCoord, value: int) -> InteractionResult:
        merged = value * 2
        self._store.set(cell, merged)
        self._player.release()
        event = self._scorer.apply_merge(merged)
        logger.info("Merged %d into %d at %s", value, merged, cell)
        self._notify_inventory()

        won = self._rules.goal.is_winning_value(merged)
        if won:
            event = self._scorer.apply_win(merged)
            logger.info("Score goal %d reached with %d", self._rules.goal.score_goal, merged)

        return InteractionResult(
            outcome=InteractionOutcome.MERGED,
            cell=cell,
            cache_before=value,
            cache_after=merged,
            inventory=self._player.inventory,
            status_event=event,
            won=won
        )

    def _notify_inventory(self) -> None:
        if self._on_inventory_change is not None:
            self._on_inventory_change(self._player.inventory)
