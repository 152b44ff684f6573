"""
Deterministic Luck Field
========================

Maps a sequence of discriminators (cell coordinates plus an optional tag)
to a reproducible value in [0, 1).

The function is fixed: the key is the comma-joined string form of the
discriminators, optionally prefixed with "<world_seed>:", hashed with SHA-256.
The first 13 hex digits (52 bits) of the digest are scaled into [0, 1), which
keeps the result exact in a float. Python's built-in hash() is salted per
process and must never be used here.
"""

from __future__ import annotations

import hashlib
from typing import Optional, Sequence, Union

from geocache.cache_core.config_loader import GameConfig, get_config
from geocache.cache_core.grid import CellCoord

Discriminator = Union[int, str]

_HEX_DIGITS = 13
_SCALE = float(1 << (4 * _HEX_DIGITS))


def luck_key(parts: Sequence[Discriminator], world_seed: str = "") -> str:
    """Stringify discriminators the same way for every caller."""
    key = ",".join(str(p) for p in parts)
    if world_seed:
        return f"{world_seed}:{key}"
    return key


def luck(key: str) -> float:
    """
    Pure hash of a string key into [0, 1).

    Args:
        key: Already-stringified discriminators.

    Returns:
        Uniform-looking float, identical across calls and processes.
    """
    digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
    return int(digest[:_HEX_DIGITS], 16) / _SCALE


class LuckField:
    """
    Spawn and default-value queries over the luck function.

    Stateless apart from its configuration; two instances built from the
    same config always agree.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize the field.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = config.world.world_seed
        self._probability = config.spawn.probability
        self._exponents = config.spawn.value_exponents
        self._init_tag = config.spawn.init_tag

    def value(self, parts: Sequence[Discriminator]) -> float:
        """Field value for arbitrary discriminators."""
        return luck(luck_key(parts, self._seed))

    def spawns(self, cell: CellCoord) -> bool:
        """True if a cache is generated at this cell."""
        return self.value((cell.i, cell.j)) < self._probability

    def initial_value(self, cell: CellCoord) -> int:
        """
        Default cache value for a spawning cell.

        Uniform over the exponents: 2 ** floor(u * value_exponents), so
        {1, 2, 4, 8} each with probability 1/4 under the default config.
        """
        u = self.value((cell.i, cell.j, self._init_tag))
        return 2 ** int(u * self._exponents)

    def default_value(self, cell: CellCoord) -> int:
        """Generated value at a cell, or 0 if nothing spawns there."""
        if not self.spawns(cell):
            return 0
        return self.initial_value(cell)
