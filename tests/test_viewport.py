"""
Tests for visible cache regeneration.
"""

import pytest

from geocache.cache_core.config_loader import load_config
from geocache.cache_core.grid import CellCoord
from geocache.cache_core.grid_store import SparseGridStore
from geocache.cache_core.rng import LuckField
from geocache.cache_core.viewport import ViewportCacheGenerator, VisibleCache


ORIGIN = CellCoord(0, 0)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def store():
    return SparseGridStore()


@pytest.fixture
def generator(store, config):
    return ViewportCacheGenerator(store, LuckField(config), config)


def values(visible):
    return {cell: cache.value for cell, cache in visible.items()}


class TestRegenerate:
    """Test store-or-default materialization."""

    def test_golden_neighborhood(self, generator):
        """Radius 3 around the origin under world seed 3."""
        visible = generator.regenerate(ORIGIN, 3)
        assert values(visible) == {
            CellCoord(-3, -2): 1,
            CellCoord(0, 0): 4,
            CellCoord(0, 2): 8,
        }

    def test_visible_entries(self, generator):
        visible = generator.regenerate(ORIGIN, 3)
        assert visible[ORIGIN] == VisibleCache(ORIGIN, 4)

    def test_idempotent(self, generator):
        first = generator.regenerate(CellCoord(12, -7), 10)
        second = generator.regenerate(CellCoord(12, -7), 10)
        assert first == second

    def test_square_is_half_open(self, generator):
        """(0, 3) spawns but lies on the excluded edge at radius 3."""
        assert CellCoord(0, 3) not in generator.regenerate(ORIGIN, 3)
        assert CellCoord(0, 3) in generator.regenerate(ORIGIN, 4)

    def test_full_replacement(self, generator):
        """A jump discards every cache from the previous view."""
        generator.regenerate(ORIGIN, 3)
        far = CellCoord(10000, 10000)
        visible = generator.regenerate(far, 3)
        for cell in visible:
            assert abs(cell.i - far.i) <= 3
            assert abs(cell.j - far.j) <= 3
        assert ORIGIN not in generator.visible

    def test_default_radius_from_config(self, generator, config):
        generator.regenerate(ORIGIN)
        assert generator.radius == config.viewport.neighborhood_size
        assert generator.center == ORIGIN


class TestOverrides:
    """Test store precedence over the luck field."""

    def test_emptied_cell_never_regenerates(self, generator, store):
        store.set(ORIGIN, 0)
        for center in (ORIGIN, CellCoord(2, 2), CellCoord(-1, 1), ORIGIN):
            assert ORIGIN not in generator.regenerate(center, 3)

    def test_nonzero_override_replaces_default(self, generator, store):
        store.set(ORIGIN, 16)
        assert values(generator.regenerate(ORIGIN, 3))[ORIGIN] == 16

    def test_override_on_non_spawning_cell(self, generator, store):
        """Overrides show even where the field spawns nothing."""
        cell = CellCoord(1, 1)
        assert cell not in generator.regenerate(ORIGIN, 3)
        store.set(cell, 4)
        assert values(generator.regenerate(ORIGIN, 3))[cell] == 4

    def test_value_at(self, generator, store):
        assert generator.value_at(ORIGIN) == 4
        assert generator.value_at(CellCoord(1, 1)) == 0
        store.set(ORIGIN, 0)
        assert generator.value_at(ORIGIN) == 0

    def test_regenerate_does_not_write_store(self, generator, store):
        generator.regenerate(ORIGIN, 10)
        assert len(store) == 0
