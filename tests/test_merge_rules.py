"""
Tests for cache pick-up, merge and rejection rules.
"""

import pytest
from dataclasses import replace

from geocache.cache_core.config_loader import load_config
from geocache.cache_core.grid import CellCoord, CellGrid
from geocache.cache_core.grid_store import SparseGridStore
from geocache.cache_core.merge_system import (
    CacheInteractionMachine,
    InteractionOutcome,
)
from geocache.cache_core.player import PlayerState
from geocache.cache_core.scoring import MERGED_MESSAGE, NO_POINTS_MESSAGE, ScoreTracker
from geocache.cache_core.viewport import ViewportCacheGenerator


ORIGIN = CellCoord(0, 0)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def store():
    return SparseGridStore()


@pytest.fixture
def player(config):
    return PlayerState(config, CellGrid(config))


@pytest.fixture
def scorer(config):
    return ScoreTracker(config)


@pytest.fixture
def saved():
    return []


@pytest.fixture
def machine(player, store, scorer, config, saved):
    generator = ViewportCacheGenerator(store, config=config)
    return CacheInteractionMachine(
        player, store, generator, scorer, config, on_inventory_change=saved.append
    )


def build_machine(config, saved=None):
    store = SparseGridStore()
    player = PlayerState(config, CellGrid(config))
    scorer = ScoreTracker(config)
    generator = ViewportCacheGenerator(store, config=config)
    hook = saved.append if saved is not None else None
    machine = CacheInteractionMachine(player, store, generator, scorer, config, on_inventory_change=hook)
    return machine, player, store, scorer


class TestPickUp:
    """Test Present(v) with an empty inventory."""

    def test_pick_up_generated_cache(self, machine, player, store, saved):
        result = machine.interact(ORIGIN)

        assert result.outcome == InteractionOutcome.PICKED_UP
        assert result.cache_before == 4
        assert result.cache_after == 0
        assert player.inventory == 4
        assert store.get(ORIGIN) == 0
        assert saved == [4]

    def test_picked_cell_becomes_empty(self, machine):
        machine.interact(ORIGIN)
        assert not machine.state_of(ORIGIN).present

    def test_status_shows_carried_value(self, machine, scorer):
        assert scorer.status == NO_POINTS_MESSAGE
        machine.interact(ORIGIN)
        assert scorer.status == "You are carrying: 4"


class TestMerge:
    """Test Present(v) with inventory == v."""

    @pytest.mark.parametrize("value", [1, 2, 4, 8, 16, 64, 1024])
    def test_merge_doubles_and_clears(self, config, value):
        saved = []
        machine, player, store, scorer = build_machine(config, saved)
        store.set(CellCoord(1, 0), value)
        store.set(CellCoord(0, 1), value)

        machine.interact(CellCoord(1, 0))
        result = machine.interact(CellCoord(0, 1))

        assert result.outcome == InteractionOutcome.MERGED
        assert store.get(CellCoord(0, 1)) == 2 * value
        assert player.inventory == 0
        assert saved == [value, 0]

    def test_merge_status(self, machine, store, scorer):
        store.set(CellCoord(1, 1), 4)
        machine.interact(ORIGIN)
        machine.interact(CellCoord(1, 1))
        assert scorer.status == MERGED_MESSAGE
        assert scorer.merges == 1
        assert scorer.best_value == 8

    def test_merged_cache_stays_present(self, machine, store):
        store.set(CellCoord(1, 1), 4)
        machine.interact(ORIGIN)
        machine.interact(CellCoord(1, 1))
        assert machine.state_of(CellCoord(1, 1)).value == 8


class TestNoOps:
    """Out-of-range, rejected and empty interactions change nothing."""

    def _state(self, player, store, scorer):
        return (player.inventory, store.to_dict(), scorer.status, scorer.merges, scorer.pickups)

    def test_rejected_merge(self, machine, player, store, scorer, saved):
        store.set(CellCoord(1, 1), 2)
        machine.interact(ORIGIN)  # carrying 4
        before = self._state(player, store, scorer)

        result = machine.interact(CellCoord(1, 1))

        assert result.outcome == InteractionOutcome.REJECTED
        assert self._state(player, store, scorer) == before
        assert saved == [4]

    def test_out_of_range_boundary(self, machine, player, store, scorer, config):
        """Distance exactly RANGE is out of range."""
        far = CellCoord(int(config.interaction.range), 0)
        store.set(far, 4)
        before = self._state(player, store, scorer)

        result = machine.interact(far)

        assert result.outcome == InteractionOutcome.OUT_OF_RANGE
        assert self._state(player, store, scorer) == before

    def test_just_inside_range(self, machine, store):
        cell = CellCoord(2, 2)  # distance 2.83 < 3
        store.set(cell, 2)
        assert machine.interact(cell).outcome == InteractionOutcome.PICKED_UP

    def test_out_of_range_generated_cache(self, machine, player, store, scorer):
        before = self._state(player, store, scorer)
        result = machine.interact(CellCoord(0, 3))
        assert result.outcome == InteractionOutcome.OUT_OF_RANGE
        assert result.cache_before == 8
        assert self._state(player, store, scorer) == before

    def test_empty_cell(self, machine, player, store, scorer):
        before = self._state(player, store, scorer)
        result = machine.interact(CellCoord(1, 1))
        assert result.outcome == InteractionOutcome.EMPTY
        assert self._state(player, store, scorer) == before

    def test_emptied_cell_stays_empty(self, machine, player):
        machine.interact(ORIGIN)
        player.release()
        result = machine.interact(ORIGIN)
        assert result.outcome == InteractionOutcome.EMPTY

    def test_noops_are_repeatable(self, machine, player, store, scorer):
        store.set(CellCoord(1, 1), 2)
        machine.interact(ORIGIN)
        before = self._state(player, store, scorer)
        for _ in range(5):
            machine.interact(CellCoord(1, 1))
            machine.interact(CellCoord(9, 9))
        assert self._state(player, store, scorer) == before


class TestWinCondition:
    """Test score goal signaling."""

    def _merge_pair(self, machine, store, value, first, second):
        store.set(first, value)
        store.set(second, value)
        machine.interact(first)
        return machine.interact(second)

    def test_merge_to_goal_wins(self, config):
        goal_config = replace(config, interaction=replace(config.interaction, score_goal=32))
        machine, player, store, scorer = build_machine(goal_config)

        result = self._merge_pair(machine, store, 16, CellCoord(1, 0), CellCoord(0, 1))

        assert result.won
        assert scorer.wins == 1
        assert scorer.has_won
        assert scorer.status == "You win! Reached 32"

    def test_below_goal_does_not_win(self, config):
        goal_config = replace(config, interaction=replace(config.interaction, score_goal=32))
        machine, player, store, scorer = build_machine(goal_config)

        result = self._merge_pair(machine, store, 8, CellCoord(1, 0), CellCoord(0, 1))

        assert not result.won
        assert scorer.wins == 0

    def test_win_signaled_once_per_qualifying_merge(self, config):
        goal_config = replace(config, interaction=replace(config.interaction, score_goal=32))
        machine, player, store, scorer = build_machine(goal_config)

        self._merge_pair(machine, store, 16, CellCoord(1, 0), CellCoord(0, 1))
        assert scorer.wins == 1
        self._merge_pair(machine, store, 32, CellCoord(-1, 0), CellCoord(0, -1))
        assert scorer.wins == 2

    def test_win_does_not_touch_play_state(self, config):
        """Play state after a winning merge matches a run with an unreachable goal."""
        outcomes = []
        for goal in (32, 1 << 20):
            goal_config = replace(config, interaction=replace(config.interaction, score_goal=goal))
            machine, player, store, scorer = build_machine(goal_config)
            self._merge_pair(machine, store, 16, CellCoord(1, 0), CellCoord(0, 1))
            outcomes.append((player.inventory, store.to_dict()))

        assert outcomes[0] == outcomes[1]

    def test_play_continues_after_win(self, config):
        goal_config = replace(config, interaction=replace(config.interaction, score_goal=32))
        machine, player, store, scorer = build_machine(goal_config)
        self._merge_pair(machine, store, 16, CellCoord(1, 0), CellCoord(0, 1))

        result = machine.interact(CellCoord(0, 1))

        assert result.outcome == InteractionOutcome.PICKED_UP
        assert player.inventory == 32
