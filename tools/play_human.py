"""
Human Play Mode
================

Play the geocache merge game interactively on a flat cell map.

Controls:
    - Arrow keys / WASD: Move one tile
    - Click a cache: Pick up or merge
    - ESC: Quit

Usage:
    python -m tools.play_human [--store PATH] [--cell-size PX] [--radius R]
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from typing import Optional, Tuple

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from geocache.cache_core.config_loader import load_config, GameConfig
from geocache.cache_core.game import CoreGame
from geocache.cache_core.grid import CellCoord
from geocache.cache_core.persistence import make_store
from geocache.cache_core.state_snapshot import GameSnapshot


# Cache colors by value, cycling for larger merges
VALUE_COLORS = [
    (255, 236, 179),
    (255, 213, 128),
    (255, 183, 77),
    (255, 152, 0),
    (245, 124, 0),
    (230, 81, 0),
    (191, 54, 12),
]


def value_color(value: int) -> Tuple[int, int, int]:
    exponent = max(0, value.bit_length() - 1)
    return VALUE_COLORS[exponent % len(VALUE_COLORS)]


class MapRenderer:
    """
    Draws the visible neighborhood as a square of cells.

    Row 0 on screen is the northern edge of the viewport.
    """

    def __init__(self, config: GameConfig, cell_size: int, radius: int):
        self._config = config
        self._cell_size = cell_size
        self._radius = radius
        self._status_height = 40

        self._bg = (235, 240, 230)
        self._grid_line = (210, 215, 205)
        self._range_fill = (200, 230, 255)
        self._player_color = (40, 90, 200)
        self._text_dark = (60, 50, 40)

        pygame.font.init()
        self._font_small = pygame.font.Font(None, max(14, cell_size - 4))
        self._font_status = pygame.font.Font(None, 28)

    @property
    def window_size(self) -> Tuple[int, int]:
        side = 2 * self._radius * self._cell_size
        return (side, side + self._status_height)

    def cell_rect(self, snapshot: GameSnapshot, cell: CellCoord) -> "pygame.Rect":
        col = cell.j - (snapshot.center.j - self._radius)
        row = (snapshot.center.i + self._radius - 1) - cell.i
        return pygame.Rect(
            col * self._cell_size,
            self._status_height + row * self._cell_size,
            self._cell_size,
            self._cell_size
        )

    def screen_to_cell(self, snapshot: GameSnapshot, x: int, y: int) -> Optional[CellCoord]:
        if y < self._status_height:
            return None
        col = x // self._cell_size
        row = (y - self._status_height) // self._cell_size
        return CellCoord(
            snapshot.center.i + self._radius - 1 - row,
            snapshot.center.j - self._radius + col
        )

    def render(self, screen: "pygame.Surface", snapshot: GameSnapshot) -> None:
        screen.fill(self._bg)
        self._draw_range(screen, snapshot)
        self._draw_caches(screen, snapshot)
        self._draw_player(screen, snapshot)
        self._draw_status(screen, snapshot)

    def _draw_range(self, screen: "pygame.Surface", snapshot: GameSnapshot) -> None:
        reach = self._config.interaction.range
        span = int(reach) + 1
        pc = snapshot.player_cell
        for di in range(-span, span + 1):
            for dj in range(-span, span + 1):
                cell = pc.offset(di, dj)
                if pc.distance_to(cell) < reach:
                    pygame.draw.rect(screen, self._range_fill, self.cell_rect(snapshot, cell))

    def _draw_caches(self, screen: "pygame.Surface", snapshot: GameSnapshot) -> None:
        for cell, value in snapshot.visible.items():
            rect = self.cell_rect(snapshot, cell)
            pygame.draw.rect(screen, value_color(value), rect.inflate(-2, -2))
            pygame.draw.rect(screen, self._grid_line, rect, 1)
            label = self._font_small.render(str(value), True, self._text_dark)
            screen.blit(label, label.get_rect(center=rect.center))

    def _draw_player(self, screen: "pygame.Surface", snapshot: GameSnapshot) -> None:
        rect = self.cell_rect(snapshot, snapshot.player_cell)
        pygame.draw.circle(screen, self._player_color, rect.center, max(3, self._cell_size // 3))

    def _draw_status(self, screen: "pygame.Surface", snapshot: GameSnapshot) -> None:
        text = f"{snapshot.status}    cell ({snapshot.player_cell.i}, {snapshot.player_cell.j})"
        surface = self._font_status.render(text, True, self._text_dark)
        screen.blit(surface, (10, (self._status_height - surface.get_height()) // 2))


KEY_DIRECTIONS = {}
if PYGAME_AVAILABLE:
    KEY_DIRECTIONS = {
        pygame.K_UP: "north",
        pygame.K_w: "north",
        pygame.K_DOWN: "south",
        pygame.K_s: "south",
        pygame.K_RIGHT: "east",
        pygame.K_d: "east",
        pygame.K_LEFT: "west",
        pygame.K_a: "west",
    }


class HumanPlayer:
    """Keyboard and mouse front end for a CoreGame session."""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        store_path: Optional[str] = None,
        cell_size: int = 14,
        target_fps: int = 30
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        if config is None:
            config = load_config()

        self._config = config
        self._target_fps = target_fps
        self._snapshot: Optional[GameSnapshot] = None

        self._game = CoreGame(
            config=config,
            store=make_store(store_path or config.persistence.path),
            render_callback=self._on_render,
            status_callback=self._on_status
        )

        self._renderer = MapRenderer(config, cell_size, config.viewport.neighborhood_size)

        pygame.init()
        self._screen = pygame.display.set_mode(self._renderer.window_size)
        pygame.display.set_caption("Geocache Merge")
        self._clock = pygame.time.Clock()
        self._running = True

    def _on_render(self, snapshot: GameSnapshot) -> None:
        self._snapshot = snapshot

    def _on_status(self, text: str) -> None:
        print(f"  {text}")

    def run(self) -> int:
        """Run the game loop. Returns the number of wins."""
        print("=== Geocache Merge ===")
        print("Arrows/WASD to move, click a cache to pick up or merge, ESC to quit")
        print()

        self._snapshot = self._game.snapshot()
        while self._running:
            self._handle_events()
            self._renderer.render(self._screen, self._snapshot)
            pygame.display.flip()
            self._clock.tick(self._target_fps)

        self._game.close()
        pygame.quit()
        return self._game.wins

    def _handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key in KEY_DIRECTIONS:
                    self._game.step(KEY_DIRECTIONS[event.key])

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                cell = self._renderer.screen_to_cell(self._snapshot, *event.pos)
                if cell is not None:
                    self._game.interact(cell)


def main():
    parser = argparse.ArgumentParser(description="Play the geocache merge game interactively")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument("--store", type=str, default=None, help="JSON file for saved inventory")
    parser.add_argument("--cell-size", type=int, default=14, help="Cell size in pixels (default: 14)")
    parser.add_argument("--radius", type=int, default=None, help="Visible radius in cells")
    parser.add_argument("--fps", type=int, default=30, help="Target FPS")

    args = parser.parse_args()

    try:
        config = load_config(args.config)
        if args.radius is not None:
            config = replace(config, viewport=replace(config.viewport, neighborhood_size=args.radius))
        player = HumanPlayer(
            config=config,
            store_path=args.store,
            cell_size=args.cell_size,
            target_fps=args.fps
        )
        wins = player.run()
        print(f"\nWins: {wins}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
