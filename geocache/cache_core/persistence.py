"""
Persistence
===========

Key-value storage for the player's inventory.

Two backends:
- InMemoryStore: dict-backed, lost when the session ends (default, tests).
- JsonFileStore: a single JSON object on disk, rewritten on every set.

Saved state is never trusted: a missing, corrupt or out-of-range value
restores as "no saved state".
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """String key -> string value storage."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Stored value, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""


class InMemoryStore(KeyValueStore):
    """Dict-backed store for a single process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class JsonFileStore(KeyValueStore):
    """
    File-backed store holding one JSON object.

    An unreadable or malformed file is treated as empty; the next set()
    overwrites it.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self._data: Dict[str, str] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable store %s: %s", self._path, e)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring store %s: expected a JSON object", self._path)
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w") as f:
            json.dump(self._data, f, indent=2, sort_keys=True)


def parse_inventory(raw: Optional[str]) -> int:
    """
    Parse a saved inventory string.

    Returns:
        The value if it is a non-negative integer, otherwise 0.
    """
    if raw is None:
        return 0
    text = str(raw).strip()
    if not (text.isascii() and text.isdigit()):
        logger.warning("Discarding malformed saved inventory %r", raw)
        return 0
    return int(text)


def load_inventory(store: KeyValueStore, key: str) -> int:
    """Restore the inventory value, defaulting to 0."""
    return parse_inventory(store.get(key))


def save_inventory(store: KeyValueStore, key: str, value: int) -> None:
    store.set(key, str(int(value)))


def make_store(path: Optional[str] = None) -> KeyValueStore:
    """Build the configured backend: JSON file if a path is given, else memory."""
    if path:
        return JsonFileStore(path)
    return InMemoryStore()
