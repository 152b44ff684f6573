"""
Cache Core - The deterministic sparse-grid simulation.

Main exports:
- CoreGame: Per-session controller owning player, store and visible caches
- GameConfig: Configuration loaded from game_config.yaml
- LuckField: Deterministic spawn and default-value queries
- SparseGridStore: Overrides for cells mutated by play
- ViewportCacheGenerator: Visible cache regeneration
- CacheInteractionMachine: Pick-up / merge state machine
- ReplayRecorder: Event recording and deterministic replay
"""

from geocache.cache_core.config_loader import GameConfig, load_config
from geocache.cache_core.grid import CellCoord, CellGrid
from geocache.cache_core.rng import LuckField, luck
from geocache.cache_core.grid_store import SparseGridStore
from geocache.cache_core.viewport import ViewportCacheGenerator, VisibleCache
from geocache.cache_core.player import PlayerState
from geocache.cache_core.merge_system import (
    CacheInteractionMachine,
    InteractionOutcome,
    InteractionResult,
)
from geocache.cache_core.persistence import InMemoryStore, JsonFileStore, KeyValueStore
from geocache.cache_core.position_source import (
    ManualPositionSource,
    PositionSource,
    SensorPositionSource,
)
from geocache.cache_core.state_snapshot import GameSnapshot
from geocache.cache_core.game import CoreGame
from geocache.cache_core.replay_recorder import (
    ReplayRecorder,
    generate_replay_filename,
    replay,
)

__all__ = [
    "GameConfig",
    "load_config",
    "CellCoord",
    "CellGrid",
    "LuckField",
    "luck",
    "SparseGridStore",
    "ViewportCacheGenerator",
    "VisibleCache",
    "PlayerState",
    "CacheInteractionMachine",
    "InteractionOutcome",
    "InteractionResult",
    "KeyValueStore",
    "InMemoryStore",
    "JsonFileStore",
    "PositionSource",
    "ManualPositionSource",
    "SensorPositionSource",
    "GameSnapshot",
    "CoreGame",
    "ReplayRecorder",
    "generate_replay_filename",
    "replay",
]
