"""
Replay Recorder
===============

Records session events so a play-through can be saved and replayed.

Usage:
    from geocache.cache_core import CoreGame, ReplayRecorder

    game = CoreGame()
    recorder = ReplayRecorder(game, player_name="me")

    recorder.step("north")
    recorder.interact((0, 0))

    recorder.save("my_replay.json")

Replaying rebuilds a fresh session with in-memory persistence. Because cache
generation is deterministic, the same events always rebuild the same grid
store and inventory.
"""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from geocache.cache_core.config_loader import GameConfig, get_config
from geocache.cache_core.game import CoreGame
from geocache.cache_core.grid import CellCoord
from geocache.cache_core.merge_system import InteractionResult
from geocache.cache_core.persistence import InMemoryStore

logger = logging.getLogger(__name__)

REPLAY_VERSION = 1


def generate_replay_filename(
    player_name: str = "replay",
    directory: Optional[Union[str, Path]] = None
) -> Path:
    """
    Generate a timestamped replay filename.

    Format: {player_name}_{YYYYMMDD_HHMMSS}.json
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filename = f"{player_name}_{timestamp}.json"
    if directory:
        return Path(directory) / filename
    return Path(filename)


def compute_config_hash(config: Optional[GameConfig] = None) -> str:
    """Hash every parameter that changes what a replay produces."""
    if config is None:
        config = get_config()
    hash_data = {
        "world": {
            "origin_lat": config.world.origin_lat,
            "origin_lng": config.world.origin_lng,
            "tile_degrees": config.world.tile_degrees,
            "world_seed": config.world.world_seed,
        },
        "spawn": {
            "probability": config.spawn.probability,
            "value_exponents": config.spawn.value_exponents,
            "init_tag": config.spawn.init_tag,
        },
        "viewport": {
            "neighborhood_size": config.viewport.neighborhood_size,
        },
        "interaction": {
            "range": config.interaction.range,
            "score_goal": config.interaction.score_goal,
        },
        "player": {
            "start_at_cell_center": config.player.start_at_cell_center,
        },
    }
    return hashlib.md5(json.dumps(hash_data, sort_keys=True).encode()).hexdigest()[:8]


class ReplayRecorder:
    """
    Wrapper that forwards calls to a CoreGame and records them.

    Only events that change session state are recorded: moves, viewport
    changes and interactions.
    """

    def __init__(self, game: CoreGame, player_name: str = "unknown"):
        """
        Initialize the recorder.

        Args:
            game: Session to wrap.
            player_name: Stored in replay metadata.
        """
        self.game = game
        self.player_name = player_name
        self._config_hash = compute_config_hash(game.config)
        self._start_inventory = game.inventory
        self._events: List[Dict[str, Any]] = []

    @property
    def events(self) -> List[Dict[str, Any]]:
        return [dict(e) for e in self._events]

    def move_by(self, dlat: float, dlng: float) -> None:
        self._events.append({"type": "move_by", "dlat": dlat, "dlng": dlng})
        self.game.move_by(dlat, dlng)

    def move_to(self, lat: float, lng: float) -> None:
        self._events.append({"type": "move_to", "lat": lat, "lng": lng})
        self.game.move_to(lat, lng)

    def step(self, direction: str) -> bool:
        """Record a manual step by direction. Ignored steps are not recorded."""
        moved = self.game.step(direction)
        if moved:
            self._events.append({"type": "step", "direction": direction})
        return moved

    def on_viewport_changed(self, lat: float, lng: float, zoom: Optional[int] = None):
        self._events.append({"type": "viewport", "lat": lat, "lng": lng, "zoom": zoom})
        return self.game.on_viewport_changed(lat, lng, zoom)

    def interact(self, cell: CellCoord) -> Optional[InteractionResult]:
        cell = CellCoord(*cell)
        self._events.append({"type": "interact", "i": cell.i, "j": cell.j})
        return self.game.interact(cell)

    def get_replay_data(self) -> Dict[str, Any]:
        """
        Get the current replay data as a dictionary.
        """
        return {
            "version": REPLAY_VERSION,
            "player": self.player_name,
            "config_hash": self._config_hash,
            "start_inventory": self._start_inventory,
            "events": self.events,
            "final_inventory": self.game.inventory,
            "grid_store": self.game.grid_store.to_dict(),
            "wins": self.game.wins,
        }

    def save(
        self,
        path: Optional[Union[str, Path]] = None,
        overwrite: bool = True,
        directory: Optional[Union[str, Path]] = None
    ) -> Path:
        """
        Save the replay to a JSON file.

        Args:
            path: Path to save the replay. If None, auto-generates a timestamped name.
            overwrite: If True, overwrite existing file.
            directory: Directory for auto-generated filename (only used if path is None).

        Returns:
            Path where the replay was saved.
        """
        if path is None:
            path = generate_replay_filename(self.player_name, directory)
        else:
            path = Path(path)

        if path.exists() and not overwrite:
            raise FileExistsError(f"Replay file already exists: {path}")

        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.get_replay_data(), f, indent=2)

        logger.info("Replay saved: %s (%d events)", path, len(self._events))
        return path


def load_replay(path: Union[str, Path]) -> Dict[str, Any]:
    with open(path, "r") as f:
        return json.load(f)


def replay(data: Dict[str, Any], config: Optional[GameConfig] = None) -> CoreGame:
    """
    Rebuild a session from replay data.

    Args:
        data: Output of ReplayRecorder.get_replay_data() or load_replay().
        config: Game configuration. Uses default if None.

    Returns:
        A fresh CoreGame with every event applied.

    Raises:
        ValueError: If the replay was recorded under a different configuration,
            or the rebuilt session does not end in the recorded state.
    """
    if config is None:
        config = get_config()

    expected = compute_config_hash(config)
    if data.get("config_hash") != expected:
        raise ValueError(
            f"Replay config hash {data.get('config_hash')} does not match current config {expected}"
        )

    store = InMemoryStore()
    start_inventory = int(data.get("start_inventory", 0))
    if start_inventory:
        store.set(config.persistence.inventory_key, str(start_inventory))

    game = CoreGame(config, store=store)
    for event in data.get("events", []):
        kind = event["type"]
        if kind == "move_by":
            game.move_by(event["dlat"], event["dlng"])
        elif kind == "step":
            game.step(event["direction"])
        elif kind == "move_to":
            game.move_to(event["lat"], event["lng"])
        elif kind == "viewport":
            game.on_viewport_changed(event["lat"], event["lng"], event.get("zoom"))
        elif kind == "interact":
            game.interact(CellCoord(event["i"], event["j"]))
        else:
            raise ValueError(f"Unknown replay event type: {kind}")

    _check_outcome(data, game)
    return game


def _check_outcome(data: Dict[str, Any], game: CoreGame) -> None:
    """Compare the recorded final state, when present, with the rebuilt session."""
    if "final_inventory" in data and int(data["final_inventory"]) != game.inventory:
        raise ValueError(
            f"Replay diverged: final inventory {game.inventory}, recorded {data['final_inventory']}"
        )
    if "grid_store" in data and dict(data["grid_store"]) != game.grid_store.to_dict():
        raise ValueError("Replay diverged: grid store does not match the recording")
