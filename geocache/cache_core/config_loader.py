"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml


POSITION_MODES = ("manual", "sensor")


@dataclass(frozen=True)
class WorldConfig:
    """Lattice anchor and tile geometry."""
    origin_lat: float
    origin_lng: float
    tile_degrees: float   # Tile edge length in coordinate units
    world_seed: str       # Salt for luck keys ("" disables it)


@dataclass(frozen=True)
class SpawnConfig:
    """Procedural cache spawning parameters."""
    probability: float
    value_exponents: int  # Default values are 2**0 .. 2**(value_exponents - 1)
    init_tag: str


@dataclass(frozen=True)
class ViewportConfig:
    """Visible neighborhood settings."""
    neighborhood_size: int
    zoom_level: int


@dataclass(frozen=True)
class InteractionConfig:
    """Cache interaction limits."""
    range: float          # Grid cells
    score_goal: int


@dataclass(frozen=True)
class PlayerConfig:
    """Player start settings."""
    start_at_cell_center: bool


@dataclass(frozen=True)
class PersistenceConfig:
    """Key-value persistence settings."""
    inventory_key: str
    path: Optional[str]


@dataclass(frozen=True)
class PositionConfig:
    """Position input settings."""
    mode: str


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    world: WorldConfig
    spawn: SpawnConfig
    viewport: ViewportConfig
    interaction: InteractionConfig
    player: PlayerConfig
    persistence: PersistenceConfig
    position: PositionConfig

    @property
    def tile_degrees(self) -> float:
        return self.world.tile_degrees

    @property
    def origin(self) -> tuple:
        """(lat, lng) of the lattice anchor."""
        return (self.world.origin_lat, self.world.origin_lng)

    @property
    def max_default_value(self) -> int:
        """Largest value the deterministic field can produce."""
        return 2 ** (self.spawn.value_exponents - 1)


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    if config.world.tile_degrees <= 0:
        raise ValueError(f"tile_degrees must be positive, got {config.world.tile_degrees}")

    if not 0.0 <= config.spawn.probability <= 1.0:
        raise ValueError(f"spawn probability must be in [0, 1], got {config.spawn.probability}")

    if config.spawn.value_exponents < 1:
        raise ValueError(f"value_exponents must be at least 1, got {config.spawn.value_exponents}")

    if config.viewport.neighborhood_size < 0:
        raise ValueError(
            f"neighborhood_size must be non-negative, got {config.viewport.neighborhood_size}"
        )

    if config.interaction.range <= 0:
        raise ValueError(f"interaction range must be positive, got {config.interaction.range}")

    if config.interaction.score_goal <= 0:
        raise ValueError(f"score_goal must be positive, got {config.interaction.score_goal}")

    if not config.persistence.inventory_key:
        raise ValueError("inventory_key must not be empty")

    if config.position.mode not in POSITION_MODES:
        raise ValueError(f"position mode must be one of {POSITION_MODES}, got '{config.position.mode}'")


def _parse_seed(value) -> str:
    """World seed is stringified; null means no salt."""
    if value is None:
        return ""
    return str(value)


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f) or {}

    return config_from_dict(raw)


def config_from_dict(raw: dict) -> GameConfig:
    """
    Build a validated GameConfig from an already-parsed mapping.

    Missing optional keys fall back to the packaged defaults.
    """
    world_data = raw["world"]
    world = WorldConfig(
        origin_lat=float(world_data["origin_lat"]),
        origin_lng=float(world_data["origin_lng"]),
        tile_degrees=float(world_data["tile_degrees"]),
        world_seed=_parse_seed(world_data.get("world_seed"))
    )

    spawn_data = raw.get("spawn", {})
    spawn = SpawnConfig(
        probability=float(spawn_data.get("probability", 0.1)),
        value_exponents=int(spawn_data.get("value_exponents", 4)),
        init_tag=str(spawn_data.get("init_tag", "init"))
    )

    viewport_data = raw.get("viewport", {})
    viewport = ViewportConfig(
        neighborhood_size=int(viewport_data.get("neighborhood_size", 25)),
        zoom_level=int(viewport_data.get("zoom_level", 19))
    )

    interaction_data = raw.get("interaction", {})
    interaction = InteractionConfig(
        range=float(interaction_data.get("range", 3)),
        score_goal=int(interaction_data.get("score_goal", 32))
    )

    player_data = raw.get("player", {})
    player = PlayerConfig(
        start_at_cell_center=bool(player_data.get("start_at_cell_center", True))
    )

    persistence_data = raw.get("persistence", {})
    path = persistence_data.get("path")
    persistence = PersistenceConfig(
        inventory_key=str(persistence_data.get("inventory_key", "playerInventory")),
        path=str(path) if path is not None else None
    )

    position_data = raw.get("position", {})
    position = PositionConfig(
        mode=str(position_data.get("mode", "manual"))
    )

    config = GameConfig(
        world=world,
        spawn=spawn,
        viewport=viewport,
        interaction=interaction,
        player=player,
        persistence=persistence,
        position=position
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
