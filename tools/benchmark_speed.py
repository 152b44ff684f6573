"""
Performance Benchmark
=====================

Measures regeneration throughput as the player walks across the map.

Usage:
    python -m tools.benchmark_speed [--steps S] [--radius R ...]
"""

from __future__ import annotations

import argparse
import sys
import time
from dataclasses import replace
from typing import List

import numpy as np

from geocache.cache_core.config_loader import load_config
from geocache.cache_core.game import CoreGame
from geocache.cache_core.persistence import InMemoryStore
from geocache.cache_core.position_source import DIRECTIONS


def benchmark_walk(
    radius: int,
    num_steps: int = 200,
    seed: int = 42
) -> dict:
    """
    Random walk with interactions at every step.

    Args:
        radius: Visible neighborhood half-width.
        num_steps: Number of one-tile moves.
        seed: Seed for the walk directions.

    Returns:
        Dict with timing results.
    """
    base = load_config()
    config = replace(base, viewport=replace(base.viewport, neighborhood_size=radius))
    game = CoreGame(config, store=InMemoryStore())
    rng = np.random.default_rng(seed)
    directions = sorted(DIRECTIONS)

    start = time.perf_counter()

    for _ in range(num_steps):
        game.step(directions[int(rng.integers(len(directions)))])
        game.interact(game.player.cell)

    elapsed = time.perf_counter() - start
    cells = num_steps * (2 * radius) ** 2

    return {
        "radius": radius,
        "num_steps": num_steps,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "cells_per_second": cells / elapsed,
        "mutated_cells": len(game.grid_store),
    }


def run_all_benchmarks(radii: List[int], steps: int) -> List[dict]:
    print("=" * 60)
    print("GEOCACHE REGENERATION BENCHMARK")
    print("=" * 60)
    print()

    results = []
    for radius in radii:
        print(f"Benchmarking walk (radius={radius})...")
        result = benchmark_walk(radius, num_steps=steps)
        results.append(result)
        print(f"  Steps/sec: {result['steps_per_second']:.1f}")
        print()

    print(f"{'Radius':>6} {'Steps/s':>12} {'Cells/s':>14} {'Mutated':>9}")
    print("-" * 45)
    for r in results:
        print(
            f"{r['radius']:>6} {r['steps_per_second']:>12.1f} "
            f"{r['cells_per_second']:>14.0f} {r['mutated_cells']:>9}"
        )

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark cache regeneration")
    parser.add_argument("--steps", type=int, default=200, help="Moves per benchmark")
    parser.add_argument("--radius", type=int, nargs="+", default=[5, 10, 25, 50],
                        help="Neighborhood radii to test")
    parser.add_argument("--quick", action="store_true", help="Quick benchmark (fewer steps)")

    args = parser.parse_args()

    steps = 20 if args.quick else args.steps
    run_all_benchmarks(args.radius, steps)
    return 0


if __name__ == "__main__":
    sys.exit(main())
