"""
Grid Viewer
===========

Print the caches around a cell as a text grid. Useful for checking what the
deterministic field generates for a given configuration.

Usage:
    python -m tools.view_grid [--center I J] [--radius R] [--config PATH]

Legend:
    @  player cell (when it holds no cache)
    .  no cache
    N  cache value
"""

from __future__ import annotations

import argparse
import sys

from geocache.cache_core.config_loader import load_config
from geocache.cache_core.grid import CellCoord
from geocache.cache_core.grid_store import SparseGridStore
from geocache.cache_core.state_snapshot import SnapshotBuilder
from geocache.cache_core.viewport import ViewportCacheGenerator


def render_text(grid, center: CellCoord, radius: int, marker: CellCoord) -> str:
    """
    Format a value grid with north at the top.

    Args:
        grid: (2r, 2r) array from SnapshotBuilder.build_grid.
        center: Viewport center cell.
        radius: Viewport radius.
        marker: Cell to mark with '@' when empty.
    """
    width = max(2, len(str(int(grid.max()))) if grid.size else 1)
    lines = []
    for row in range(grid.shape[0] - 1, -1, -1):
        i = center.i - radius + row
        cells = []
        for col in range(grid.shape[1]):
            j = center.j - radius + col
            value = int(grid[row, col])
            if value:
                cells.append(str(value).rjust(width))
            elif (i, j) == marker:
                cells.append("@".rjust(width))
            else:
                cells.append(".".rjust(width))
        lines.append(f"{i:>5} " + " ".join(cells))
    return "\n".join(lines)


def main():
    parser = argparse.ArgumentParser(description="Print generated caches around a cell")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument("--center", type=int, nargs=2, default=(0, 0), metavar=("I", "J"))
    parser.add_argument("--radius", type=int, default=8, help="Half-width in cells (default: 8)")

    args = parser.parse_args()

    config = load_config(args.config)
    center = CellCoord(*args.center)

    generator = ViewportCacheGenerator(SparseGridStore(), config=config)
    visible = generator.regenerate(center, args.radius)
    grid = SnapshotBuilder(config).build_grid(center, args.radius, visible)

    print(f"Center {center}, radius {args.radius}, {len(visible)} caches")
    print(render_text(grid, center, args.radius, center))
    return 0


if __name__ == "__main__":
    sys.exit(main())
